"""Interactive build containers with the current directory mounted."""

from __future__ import annotations

import logging
from typing import Sequence

from wolfi_dev.models.workspace import WorkspaceContext
from wolfi_dev.providers.command.base import CommandRunner
from wolfi_dev.services.tools import ToolBootstrapper

logger = logging.getLogger(__name__)

WORKDIR = "/work"


class ContainerLauncher:
    def __init__(self, runner: CommandRunner, tools: ToolBootstrapper) -> None:
        self._runner = runner
        self._tools = tools

    def run_command(
        self,
        context: WorkspaceContext,
        image: str,
        run_options: Sequence[str] = (),
        command: Sequence[str] = (),
    ) -> list[str]:
        return [
            "docker",
            "run",
            "--rm",
            "-it",
            "-v",
            f"{context.cwd}:{WORKDIR}",
            "-w",
            WORKDIR,
            *run_options,
            image,
            *command,
        ]

    def launch(
        self,
        context: WorkspaceContext,
        image: str,
        run_options: Sequence[str] = (),
        command: Sequence[str] = (),
    ) -> int:
        self._tools.ensure("docker")
        logger.info("pulling %s", image)
        self._runner.run(["docker", "pull", image])
        exit_code = self._runner.run_interactive(
            self.run_command(context, image, run_options, command), cwd=context.cwd
        )
        if exit_code != 0:
            logger.warning("container exited with status %d", exit_code)
        return exit_code
