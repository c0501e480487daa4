"""Version control clients."""

from wolfi_dev.providers.scm.base import GitClient
from wolfi_dev.providers.scm.git import GitCli

__all__ = ["GitCli", "GitClient"]
