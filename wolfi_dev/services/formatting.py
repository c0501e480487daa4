"""In-place normalization of descriptor files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

import yaml

from wolfi_dev.config import Settings
from wolfi_dev.errors import ConversionError
from wolfi_dev.providers.command.base import CommandRunner
from wolfi_dev.services.tools import ToolBootstrapper

logger = logging.getLogger(__name__)


class Formatter(Protocol):
    def format_file(self, path: Path) -> None:
        ...


class YamFormatter(Formatter):
    """Runs yam, which rewrites the file with the repository's .yam.yaml rules."""

    def __init__(self, runner: CommandRunner, tools: ToolBootstrapper) -> None:
        self._runner = runner
        self._tools = tools

    def format_file(self, path: Path) -> None:
        self._tools.ensure("yam")
        self._runner.run(["yam", path.name], cwd=path.parent)


class PyYamlFormatter(Formatter):
    def format_file(self, path: Path) -> None:
        text = path.read_text(encoding="utf-8")
        formatted = normalize_yaml(text, source=str(path))
        if formatted != text:
            path.write_text(formatted, encoding="utf-8")
            logger.debug("reformatted %s", path)


def normalize_yaml(text: str, source: str = "<memory>") -> str:
    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConversionError(f"Cannot normalize {source}: {exc}") from exc
    if data is None:
        return ""
    return yaml.safe_dump(
        data,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        indent=2,
        width=4096,
    )


def make_formatter(
    settings: Settings, runner: CommandRunner, tools: ToolBootstrapper
) -> Formatter:
    if settings.formatter == "pyyaml":
        return PyYamlFormatter()
    return YamFormatter(runner, tools)
