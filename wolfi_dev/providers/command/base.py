"""External command runner interface."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, Sequence

from wolfi_dev.models.command import CommandResult


class CommandRunner(Protocol):
    def run(
        self,
        command: Sequence[str],
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
        check: bool = True,
        timeout_s: int | None = None,
    ) -> CommandResult:
        ...

    def run_interactive(
        self,
        command: Sequence[str],
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> int:
        ...

    def which(self, name: str) -> str | None:
        ...
