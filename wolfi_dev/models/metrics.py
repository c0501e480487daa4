"""Data models for the monthly statistics report."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Tuple

COLUMNS = (
    "date",
    "packages",
    "subpackages",
    "patches",
    "lines",
    "commits",
    "tests",
    "images",
)


@dataclass(frozen=True)
class MonthlyMeasurement:
    boundary: date
    source_packages: int = 0
    binary_packages: int = 0
    patches: int = 0
    definition_lines: int = 0
    commits: int = 0
    tests: int = 0
    images: int = 0
    problems: Tuple[str, ...] = ()

    @property
    def partial(self) -> bool:
        return bool(self.problems)

    def as_row(self) -> str:
        fields = [
            self.boundary.isoformat(),
            str(self.source_packages),
            str(self.binary_packages),
            str(self.patches),
            str(self.definition_lines),
            str(self.commits),
            str(self.tests),
            str(self.images),
        ]
        if self.partial:
            fields.append("partial")
        return "\t".join(fields)
