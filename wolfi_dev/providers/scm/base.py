"""Version control interface."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Protocol

from wolfi_dev.models.command import CommandResult


class GitClient(Protocol):
    def clone(self, url: str, target: Path) -> None:
        ...

    def switch(self, path: Path, branch: str, create: bool = False) -> bool:
        ...

    def push(
        self,
        path: Path,
        remote: str | None = None,
        branch: str | None = None,
        set_upstream: bool = False,
    ) -> None:
        ...

    def add_remote(self, path: Path, name: str, url: str) -> None:
        ...

    def set_remote_url(self, path: Path, name: str, url: str) -> None:
        ...

    def fetch(self, path: Path, remote: str) -> None:
        ...

    def merge(self, path: Path, ref: str) -> CommandResult:
        ...

    def current_branch(self, path: Path) -> str:
        ...

    def last_commit_before(self, path: Path, day: date, branch: str) -> str | None:
        ...

    def checkout_detached(self, path: Path, revision: str) -> None:
        ...

    def commit_count(self, path: Path) -> int:
        ...

    def has_head(self, path: Path) -> bool:
        ...

    def set_global_config(self, key: str, value: str) -> None:
        ...
