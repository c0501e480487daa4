"""Builds packages in an os checkout through its Makefile."""

from __future__ import annotations

import logging
from typing import Sequence

from wolfi_dev.errors import ValidationError
from wolfi_dev.models.workspace import WorkspaceContext
from wolfi_dev.providers.command.base import CommandRunner
from wolfi_dev.services.tools import ToolBootstrapper

logger = logging.getLogger(__name__)

SIGNING_KEY = "local-melange.rsa"


def make_target(target: str) -> str:
    return target if "/" in target else f"package/{target}"


class PackageBuilder:
    def __init__(self, runner: CommandRunner, tools: ToolBootstrapper) -> None:
        self._runner = runner
        self._tools = tools

    def build(self, context: WorkspaceContext, targets: Sequence[str]) -> None:
        targets = [target.strip() for target in targets if target.strip()]
        if not targets:
            raise ValidationError("At least one package or make target is required.")
        self._tools.ensure("make", "melange")
        if not (context.cwd / SIGNING_KEY).exists():
            logger.info("generating %s", SIGNING_KEY)
            self._runner.run(["make", SIGNING_KEY], cwd=context.cwd)
        for target in targets:
            logger.info("building %s", make_target(target))
            self._runner.run(["make", make_target(target)], cwd=context.cwd)
