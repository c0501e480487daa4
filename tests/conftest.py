from __future__ import annotations

from pathlib import Path
from typing import Callable, Sequence

import pytest

from wolfi_dev.config import Settings
from wolfi_dev.errors import ExternalCommandError
from wolfi_dev.models.command import CommandResult
from wolfi_dev.models.workspace import WorkspaceContext

Handler = Callable[[tuple, "Path | None"], "CommandResult | None"]


class FakeRunner:
    """Records every command and answers from registered handlers."""

    def __init__(self, missing: Sequence[str] = ()) -> None:
        self.calls: list[tuple[tuple[str, ...], Path | None]] = []
        self.interactive: list[tuple[str, ...]] = []
        self.missing = set(missing)
        self._handlers: list[tuple[tuple[str, ...], Handler]] = []

    def on(self, prefix: Sequence[str], handler: Handler | CommandResult | int) -> None:
        key = tuple(prefix)
        if isinstance(handler, int):
            code = handler
            handler = lambda argv, cwd: CommandResult(argv, code, "", "boom", 0)
        elif isinstance(handler, CommandResult):
            fixed = handler
            handler = lambda argv, cwd: fixed
        self._handlers.insert(0, (key, handler))

    def run(self, command, cwd=None, env=None, check=True, timeout_s=None) -> CommandResult:
        argv = tuple(str(arg) for arg in command)
        self.calls.append((argv, cwd))
        result = None
        for prefix, handler in self._handlers:
            if argv[: len(prefix)] == prefix:
                result = handler(argv, cwd)
                break
        if result is None:
            result = CommandResult(argv, 0, "", "", 0)
        if check and result.exit_code != 0:
            raise ExternalCommandError(result)
        return result

    def run_interactive(self, command, cwd=None, env=None) -> int:
        argv = tuple(str(arg) for arg in command)
        self.interactive.append(argv)
        return 0

    def which(self, name: str) -> str | None:
        return None if name in self.missing else f"/usr/bin/{name}"

    def commands(self) -> list[tuple[str, ...]]:
        return [argv for argv, _ in self.calls]

    def ran(self, *prefix: str) -> bool:
        return any(argv[: len(prefix)] == prefix for argv in self.commands())


class FakeProber:
    def __init__(self, existing: Sequence[str] = ()) -> None:
        self.existing = set(existing)
        self.probed: list[str] = []

    def exists(self, url: str) -> bool:
        self.probed.append(url)
        return url in self.existing


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(github_user="octocat", temp_root=tmp_path / "sandboxes")


@pytest.fixture
def context(tmp_path: Path) -> WorkspaceContext:
    return WorkspaceContext.from_cwd(tmp_path)


def clone_creates_directory(argv: tuple, cwd: Path | None) -> CommandResult:
    target = Path(argv[-1])
    (target / ".git").mkdir(parents=True, exist_ok=True)
    return CommandResult(argv, 0, "", "", 0)
