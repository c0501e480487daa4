"""Installs missing developer tools on first use."""

from __future__ import annotations

import logging
from typing import Mapping, Sequence

from wolfi_dev.errors import ConfigurationError
from wolfi_dev.providers.command.base import CommandRunner

logger = logging.getLogger(__name__)


class ToolBootstrapper:
    def __init__(
        self, runner: CommandRunner, recipes: Mapping[str, Sequence[str]]
    ) -> None:
        self._runner = runner
        self._recipes = recipes
        self._checked: set[str] = set()

    def ensure(self, *names: str) -> None:
        for name in names:
            if name in self._checked:
                continue
            if not self._runner.which(name):
                self._install(name)
            self._checked.add(name)

    def _install(self, name: str) -> None:
        recipe = self._recipes.get(name)
        if not recipe:
            raise ConfigurationError(f"{name} is not installed and has no install recipe.")
        logger.info("%s not found, installing with: %s", name, " ".join(recipe))
        self._runner.run(recipe)
        if not self._runner.which(name):
            raise ConfigurationError(
                f"{name} was installed but is still not on PATH "
                "(is $(go env GOPATH)/bin on PATH?)."
            )
