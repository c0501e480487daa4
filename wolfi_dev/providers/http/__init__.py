"""HTTP probing."""

from wolfi_dev.providers.http.base import UrlProber
from wolfi_dev.providers.http.urllib_prober import UrllibProber

__all__ = ["UrlProber", "UrllibProber"]
