"""External command runners."""

from wolfi_dev.providers.command.base import CommandRunner
from wolfi_dev.providers.command.local import LocalRunner

__all__ = ["CommandRunner", "LocalRunner"]
