"""Monthly package and image statistics over repository history.

For each month the sibling checkouts (os, images, images-private) are moved
to the last commit before the first of that month and measured. A checkout
that cannot be moved or measured contributes zeros and marks the row as
partial, so a real zero can be told apart from a failed measurement. Each
checkout is returned to the branch it was on when the run started.
"""

from __future__ import annotations

from datetime import date
import logging
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

from wolfi_dev.config import Settings
from wolfi_dev.errors import ExternalCommandError, NotFoundError
from wolfi_dev.models.metrics import COLUMNS, MonthlyMeasurement
from wolfi_dev.models.workspace import RepositoryCheckout, WorkspaceContext
from wolfi_dev.providers.scm.base import GitClient
from wolfi_dev.services import extractors
from wolfi_dev.services.descriptors import load_descriptors

logger = logging.getLogger(__name__)


def next_month(day: date) -> date:
    if day.month == 12:
        return date(day.year + 1, 1, 1)
    return date(day.year, day.month + 1, 1)


def month_boundaries(start: date, today: date) -> Iterator[date]:
    boundary = start.replace(day=1)
    while boundary <= today:
        yield boundary
        boundary = next_month(boundary)


def header() -> str:
    return "\t".join(COLUMNS)


class StatisticsDriver:
    def __init__(self, settings: Settings, git: GitClient, strict: bool = False) -> None:
        self._settings = settings
        self._git = git
        self._strict = strict

    def attach(self, context: WorkspaceContext, parent: Path) -> WorkspaceContext:
        """Record the sibling checkouts under ``parent`` on the context."""
        for name in self._settings.stats_repos:
            context = context.with_checkout(
                RepositoryCheckout(name=name, path=parent / name, remote_url="")
            )
        return context.with_cwd(parent)

    def run(
        self,
        context: WorkspaceContext,
        today: Optional[date] = None,
        start: Optional[date] = None,
    ) -> Iterator[MonthlyMeasurement]:
        today = today or date.today()
        checkouts = [context.checkout(name) for name in self._settings.stats_repos]
        branches = {checkout.name: self._starting_branch(checkout) for checkout in checkouts}
        try:
            for boundary in month_boundaries(start or self._settings.stats_start, today):
                yield self.measure(checkouts, boundary)
        finally:
            self._restore(checkouts, branches)

    def measure(
        self, checkouts: Sequence[RepositoryCheckout], boundary: date
    ) -> MonthlyMeasurement:
        problems: List[str] = []
        ready = {}
        for checkout in checkouts:
            problem = self._move_to(checkout, boundary)
            if problem:
                self._record(problems, boundary, problem)
            else:
                ready[checkout.name] = checkout.path

        packages, *images = self._settings.stats_repos
        counts = dict.fromkeys(
            ("source_packages", "binary_packages", "patches", "definition_lines",
             "commits", "tests"),
            0,
        )
        if packages in ready:
            path = ready[packages]
            descriptors = load_descriptors(path)
            counts = {
                "source_packages": extractors.count_source_packages(path, descriptors),
                "binary_packages": extractors.count_binary_packages(path, descriptors),
                "patches": extractors.count_patches(path),
                "definition_lines": extractors.count_definition_lines(path, descriptors),
                "commits": self._count_commits(packages, path, boundary, problems),
                "tests": extractors.count_tests(path, descriptors),
            }
        image_dirs = [ready[name] for name in images if name in ready]
        return MonthlyMeasurement(
            boundary=boundary,
            images=extractors.count_images_in(image_dirs, self._settings.registry_host),
            problems=tuple(problems),
            **counts,
        )

    def _move_to(self, checkout: RepositoryCheckout, boundary: date) -> Optional[str]:
        if not (checkout.path / ".git").exists():
            return f"{checkout.name}: no git checkout at {checkout.path}"
        try:
            sha = self._git.last_commit_before(
                checkout.path, boundary, self._settings.default_branch
            )
            if sha is None:
                return f"{checkout.name}: no commit before {boundary.isoformat()}"
            self._git.checkout_detached(checkout.path, sha)
        except ExternalCommandError as exc:
            if self._strict:
                raise
            return f"{checkout.name}: {exc}".splitlines()[0]
        return None

    def _record(self, problems: List[str], boundary: date, problem: str) -> None:
        if self._strict:
            raise NotFoundError(problem)
        logger.warning("%s: %s", boundary.isoformat(), problem)
        problems.append(problem)

    def _count_commits(
        self, name: str, path: Path, boundary: date, problems: List[str]
    ) -> int:
        try:
            return extractors.count_commits(path, self._git)
        except ExternalCommandError as exc:
            if self._strict:
                raise
            self._record(problems, boundary, f"{name}: {exc}".splitlines()[0])
            return 0

    def _starting_branch(self, checkout: RepositoryCheckout) -> str:
        """The branch to return to after the run; detached or unreadable means the default."""
        if (checkout.path / ".git").exists():
            try:
                branch = self._git.current_branch(checkout.path)
            except ExternalCommandError as exc:
                logger.debug("no current branch for %s: %s", checkout.name, exc)
            else:
                if branch:
                    return branch
        return self._settings.default_branch

    def _restore(
        self, checkouts: Sequence[RepositoryCheckout], branches: Dict[str, str]
    ) -> None:
        for checkout in checkouts:
            if not (checkout.path / ".git").exists():
                continue
            branch = branches[checkout.name]
            if not self._git.switch(checkout.path, branch):
                logger.warning("could not return %s to %s", checkout.name, branch)
