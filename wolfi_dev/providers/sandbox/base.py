"""Sandbox allocator interface."""

from __future__ import annotations

from typing import Protocol

from wolfi_dev.models.workspace import SandboxDirectory, WorkspaceContext


class SandboxAllocator(Protocol):
    def allocate(
        self, context: WorkspaceContext, label: str | None = None
    ) -> tuple[SandboxDirectory, WorkspaceContext]:
        ...
