"""Sandbox directories under the local temporary root."""

from __future__ import annotations

from datetime import datetime
import logging
from pathlib import Path
import re
from typing import Callable
from uuid import uuid4

from wolfi_dev.errors import SandboxError
from wolfi_dev.models.workspace import SandboxDirectory, WorkspaceContext
from wolfi_dev.providers.sandbox.base import SandboxAllocator

logger = logging.getLogger(__name__)

_UNSAFE_LABEL = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize_label(label: str | None) -> str:
    cleaned = _UNSAFE_LABEL.sub("-", (label or "").strip()).strip("-.")
    return cleaned or "sandbox"


class LocalSandboxAllocator(SandboxAllocator):
    def __init__(
        self,
        root: str | Path,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._root = Path(root)
        self._clock = clock

    def allocate(
        self, context: WorkspaceContext, label: str | None = None
    ) -> tuple[SandboxDirectory, WorkspaceContext]:
        created_at = self._clock()
        safe_label = sanitize_label(label)
        name = (
            f"wolfi-{created_at:%Y%m%d}-{created_at:%H%M%S}-"
            f"{safe_label}-{uuid4().hex[:8]}"
        )
        path = self._root / name
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            path.mkdir(exist_ok=False)
        except OSError as exc:
            raise SandboxError(f"Cannot create sandbox {path}: {exc}") from exc
        sandbox = SandboxDirectory(
            path=path.resolve(), created_at=created_at, label=safe_label
        )
        logger.info("sandbox: %s", sandbox.path)
        return sandbox, context.with_sandbox(sandbox)
