"""Data models for sandboxes, checkouts and the workspace context."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional


@dataclass(frozen=True)
class SandboxDirectory:
    path: Path
    created_at: datetime
    label: str


@dataclass(frozen=True)
class RepositoryCheckout:
    name: str
    path: Path
    remote_url: str
    branch: Optional[str] = None


@dataclass(frozen=True)
class WorkspaceContext:
    """Where the next command runs, and what has been checked out so far.

    Components never change the process working directory; they return a new
    context instead.
    """

    cwd: Path
    sandbox: Optional[SandboxDirectory] = None
    checkouts: Mapping[str, RepositoryCheckout] = field(
        default_factory=lambda: MappingProxyType({})
    )

    @classmethod
    def from_cwd(cls, cwd: str | Path | None = None) -> "WorkspaceContext":
        return cls(cwd=Path(cwd) if cwd else Path.cwd())

    def with_cwd(self, cwd: Path) -> "WorkspaceContext":
        return replace(self, cwd=cwd)

    def with_sandbox(self, sandbox: SandboxDirectory) -> "WorkspaceContext":
        return replace(self, sandbox=sandbox, cwd=sandbox.path)

    def with_checkout(self, checkout: RepositoryCheckout) -> "WorkspaceContext":
        checkouts = dict(self.checkouts)
        checkouts[checkout.name] = checkout
        return replace(
            self, cwd=checkout.path, checkouts=MappingProxyType(checkouts)
        )

    def checkout(self, name: str) -> RepositoryCheckout:
        if name not in self.checkouts:
            raise KeyError(f"Unknown checkout: {name}")
        return self.checkouts[name]
