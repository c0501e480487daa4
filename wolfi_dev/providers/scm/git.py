"""Git client backed by the git command line."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Sequence

from wolfi_dev.errors import CloneError
from wolfi_dev.models.command import CommandResult
from wolfi_dev.providers.command.base import CommandRunner
from wolfi_dev.providers.scm.base import GitClient


class GitCli(GitClient):
    def __init__(self, runner: CommandRunner) -> None:
        self._runner = runner

    def clone(self, url: str, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        result = self._runner.run(["git", "clone", url, str(target)], check=False)
        if not result.ok:
            raise CloneError(
                result,
                f"Could not clone {url}; check that the repository or fork exists.",
            )

    def switch(self, path: Path, branch: str, create: bool = False) -> bool:
        command = ["git", "switch"]
        if create:
            command.append("-c")
        command.append(branch)
        result = self._run_git(command, cwd=path, check=create)
        return result.ok

    def push(
        self,
        path: Path,
        remote: str | None = None,
        branch: str | None = None,
        set_upstream: bool = False,
    ) -> None:
        command = ["git", "push"]
        if set_upstream:
            command.append("--set-upstream")
        if remote:
            command.append(remote)
        if branch:
            command.append(branch)
        self._run_git(command, cwd=path)

    def add_remote(self, path: Path, name: str, url: str) -> None:
        self._run_git(["git", "remote", "add", name, url], cwd=path)

    def set_remote_url(self, path: Path, name: str, url: str) -> None:
        self._run_git(["git", "remote", "set-url", name, url], cwd=path)

    def fetch(self, path: Path, remote: str) -> None:
        self._run_git(["git", "fetch", remote], cwd=path)

    def merge(self, path: Path, ref: str) -> CommandResult:
        return self._run_git(["git", "merge", "--no-edit", ref], cwd=path, check=False)

    def current_branch(self, path: Path) -> str:
        output = self._run_git(["git", "branch", "--show-current"], cwd=path)
        return output.stdout.strip()

    def last_commit_before(self, path: Path, day: date, branch: str) -> str | None:
        output = self._run_git(
            ["git", "rev-list", "-n", "1", f"--before={day.isoformat()}T00:00:00", branch],
            cwd=path,
        )
        sha = output.stdout.strip()
        return sha or None

    def checkout_detached(self, path: Path, revision: str) -> None:
        self._run_git(["git", "checkout", "--quiet", "--detach", revision], cwd=path)

    def commit_count(self, path: Path) -> int:
        output = self._run_git(["git", "rev-list", "--count", "HEAD"], cwd=path)
        return int(output.stdout.strip() or 0)

    def has_head(self, path: Path) -> bool:
        result = self._run_git(
            ["git", "rev-parse", "--verify", "--quiet", "HEAD"], cwd=path, check=False
        )
        return result.ok

    def set_global_config(self, key: str, value: str) -> None:
        self._run_git(["git", "config", "--global", key, value])

    def _run_git(
        self, command: Sequence[str], cwd: Path | None = None, check: bool = True
    ) -> CommandResult:
        return self._runner.run(command, cwd=cwd, check=check)
