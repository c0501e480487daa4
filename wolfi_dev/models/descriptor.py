"""Data models for melange package descriptors."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class PackageDescriptor:
    path: Path
    name: Optional[str]
    package_declarations: int
    subpackage_names: Tuple[str, ...]
    patches: Tuple[str, ...]
    tests: int
    line_count: int


@dataclass(frozen=True)
class ConversionResult:
    package: str
    source_url: str
    destination: Path
    contents: str
    checklist: Tuple[str, ...]
