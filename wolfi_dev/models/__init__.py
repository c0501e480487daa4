"""Shared data models for the wolfi-dev helpers."""

from wolfi_dev.models.command import CommandResult
from wolfi_dev.models.descriptor import ConversionResult, PackageDescriptor
from wolfi_dev.models.metrics import MonthlyMeasurement
from wolfi_dev.models.workspace import (
    RepositoryCheckout,
    SandboxDirectory,
    WorkspaceContext,
)

__all__ = [
    "CommandResult",
    "ConversionResult",
    "MonthlyMeasurement",
    "PackageDescriptor",
    "RepositoryCheckout",
    "SandboxDirectory",
    "WorkspaceContext",
]
