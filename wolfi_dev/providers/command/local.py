"""Subprocess-backed command runner."""

from __future__ import annotations

import logging
import os
from pathlib import Path
import shutil
import subprocess
import time
from typing import Sequence

from wolfi_dev.errors import ExternalCommandError
from wolfi_dev.models.command import CommandResult
from wolfi_dev.providers.command.base import CommandRunner

logger = logging.getLogger(__name__)


class LocalRunner(CommandRunner):
    def run(
        self,
        command: Sequence[str],
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
        check: bool = True,
        timeout_s: int | None = None,
    ) -> CommandResult:
        argv = tuple(str(arg) for arg in command)
        logger.debug("running %s (in %s)", " ".join(argv), cwd or os.getcwd())
        start = time.monotonic()
        try:
            process = subprocess.run(
                list(argv),
                cwd=cwd,
                env=self._merge_env(env),
                capture_output=True,
                text=True,
                timeout=timeout_s,
                check=False,
            )
            exit_code, stdout, stderr = process.returncode, process.stdout, process.stderr
        except FileNotFoundError as exc:
            exit_code, stdout, stderr = 127, "", str(exc)
        duration_ms = int((time.monotonic() - start) * 1000)
        result = CommandResult(
            command=argv,
            exit_code=exit_code,
            stdout=stdout,
            stderr=stderr,
            duration_ms=duration_ms,
        )
        logger.debug("exit %d after %dms", result.exit_code, duration_ms)
        if check and not result.ok:
            raise ExternalCommandError(result)
        return result

    def run_interactive(
        self,
        command: Sequence[str],
        cwd: Path | None = None,
        env: dict[str, str] | None = None,
    ) -> int:
        argv = [str(arg) for arg in command]
        logger.debug("running %s interactively", " ".join(argv))
        process = subprocess.run(argv, cwd=cwd, env=self._merge_env(env), check=False)
        return process.returncode

    def which(self, name: str) -> str | None:
        return shutil.which(name)

    def _merge_env(self, env: dict[str, str] | None) -> dict[str, str]:
        merged = os.environ.copy()
        if env:
            merged.update(env)
        return merged
