"""URL probing interface."""

from __future__ import annotations

from typing import Protocol


class UrlProber(Protocol):
    def exists(self, url: str) -> bool:
        ...
