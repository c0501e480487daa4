"""Exceptions raised by the wolfi-dev helpers."""

from __future__ import annotations

from wolfi_dev.models.command import CommandResult


class WolfiDevError(Exception):
    """Base class for every error reported to the user."""


class ConfigurationError(WolfiDevError):
    pass


class ValidationError(WolfiDevError):
    pass


class ConflictError(WolfiDevError):
    pass


class NotFoundError(WolfiDevError):
    pass


class SandboxError(WolfiDevError):
    pass


class ExternalCommandError(WolfiDevError):
    def __init__(self, result: CommandResult, message: str | None = None) -> None:
        self.result = result
        detail = result.stderr.strip() or result.stdout.strip()
        text = message or f"Command failed ({result.exit_code}): {result.command_line}"
        if detail:
            text = f"{text}\n{detail}"
        super().__init__(text)


class CloneError(ExternalCommandError):
    """Clone failed; usually a missing or misnamed fork."""


class ConversionError(WolfiDevError):
    pass
