from __future__ import annotations

from datetime import date
import os
from pathlib import Path
import shutil
import subprocess

import pytest

from wolfi_dev.config import Settings
from wolfi_dev.errors import ExternalCommandError, NotFoundError
from wolfi_dev.models.command import CommandResult
from wolfi_dev.models.workspace import WorkspaceContext
from wolfi_dev.providers.command.local import LocalRunner
from wolfi_dev.providers.scm.git import GitCli
from wolfi_dev.services.timeseries import StatisticsDriver, header, month_boundaries, next_month


class FakeGit:
    """Each repository is a list of (commit date, files) snapshots."""

    def __init__(self, root: Path, history: dict[str, list[tuple[date, dict[str, str]]]]):
        self.root = root
        self.history = history
        self.heads: dict[str, int] = {}
        self.switched: list[str] = []
        self.restored: dict[str, str] = {}
        self.branches: dict[str, str] = {}
        self.broken: set[str] = set()
        self.uncountable: set[str] = set()

    def last_commit_before(self, path, day, branch):
        if path.name in self.broken:
            raise ExternalCommandError(CommandResult(("git", "rev-list"), 128, "", "bad revision", 0))
        shas = [str(i) for i, (when, _) in enumerate(self.history[path.name]) if when < day]
        return shas[-1] if shas else None

    def checkout_detached(self, path, revision):
        for child in path.iterdir():
            if child.is_file():
                child.unlink()
        for name, text in self.history[path.name][int(revision)][1].items():
            (path / name).write_text(text)
        self.heads[path.name] = int(revision)

    def has_head(self, path):
        return True

    def commit_count(self, path):
        if path.name in self.uncountable:
            raise ExternalCommandError(CommandResult(("git", "rev-list"), 128, "", "object file is corrupt", 0))
        return self.heads[path.name] + 1

    def current_branch(self, path):
        return self.branches.get(path.name, "main")

    def switch(self, path, branch, create=False):
        self.switched.append(path.name)
        self.restored[path.name] = branch
        return True


def make_tree(root: Path, names=("os", "images", "images-private")) -> Path:
    for name in names:
        (root / name / ".git").mkdir(parents=True)
    return root


def package(name: str, subpackages=(), tests=0) -> str:
    text = f"package:\n  name: {name}\n"
    if subpackages:
        text += "subpackages:\n" + "".join(f"  - name: {sub}\n" for sub in subpackages)
    return text + "test:\n  pipeline: []\n" * tests


HISTORY = {
    "os": [
        (date(2023, 1, 10), {"a.yaml": package("a", ["a-dev"])}),
        (date(2023, 2, 10), {"a.yaml": package("a", ["a-dev"]), "b.yaml": package("b", ["b-doc", "a-dev"], tests=1)}),
    ],
    "images": [
        (date(2022, 12, 1), {"main.tf": 'target_repository = "cgr.dev/chainguard/nginx"\n'}),
    ],
    "images-private": [
        (date(2023, 1, 20), {"main.tf": 'target_repository = "cgr.dev/chainguard-private/nginx-fips"\n'}),
    ],
}


def run_driver(tmp_path, git, today, strict=False, start=date(2023, 1, 1)):
    driver = StatisticsDriver(Settings(), git, strict=strict)
    context = driver.attach(WorkspaceContext.from_cwd(tmp_path), tmp_path)
    return list(driver.run(context, today=today, start=start))


def test_next_month_rolls_over_the_year():
    assert next_month(date(2023, 12, 1)) == date(2024, 1, 1)
    assert next_month(date(2023, 1, 31)) == date(2023, 2, 1)


def test_boundaries_are_consecutive_months_up_to_today():
    boundaries = list(month_boundaries(date(2023, 1, 1), date(2024, 10, 19)))

    assert boundaries[0] == date(2023, 1, 1)
    assert boundaries[-1] == date(2024, 10, 1)
    assert len(boundaries) == 22
    for earlier, later in zip(boundaries, boundaries[1:]):
        assert later == next_month(earlier)
        assert later > earlier


def test_boundary_on_today_is_included_and_tomorrow_is_not():
    assert list(month_boundaries(date(2024, 1, 1), date(2024, 2, 1)))[-1] == date(2024, 2, 1)
    assert list(month_boundaries(date(2024, 1, 1), date(2024, 1, 31))) == [date(2024, 1, 1)]


def test_start_mid_month_snaps_to_first_day():
    assert list(month_boundaries(date(2023, 5, 17), date(2023, 6, 2))) == [
        date(2023, 5, 1),
        date(2023, 6, 1),
    ]


def test_rows_measure_each_month(tmp_path):
    git = FakeGit(make_tree(tmp_path), HISTORY)

    rows = run_driver(tmp_path, git, today=date(2023, 3, 5))

    assert [row.boundary for row in rows] == [date(2023, 1, 1), date(2023, 2, 1), date(2023, 3, 1)]
    january, february, march = rows

    assert january.partial
    assert (january.source_packages, january.images) == (0, 1)
    assert january.as_row().endswith("\tpartial")

    assert not february.partial
    assert february.as_row() == "2023-02-01\t1\t1\t0\t4\t1\t0\t2"

    assert march.as_row() == "2023-03-01\t2\t2\t0\t11\t2\t1\t2"
    assert sorted(git.switched) == ["images", "images-private", "os"]


def test_missing_checkout_marks_rows_partial(tmp_path):
    git = FakeGit(make_tree(tmp_path, names=("os", "images")), HISTORY)

    rows = run_driver(tmp_path, git, today=date(2023, 3, 1), start=date(2023, 3, 1))

    assert len(rows) == 1
    assert rows[0].partial
    assert any("images-private" in problem for problem in rows[0].problems)
    assert rows[0].source_packages == 2
    assert rows[0].images == 1


def test_failed_revision_lookup_is_partial_not_fatal(tmp_path):
    git = FakeGit(make_tree(tmp_path), HISTORY)
    git.broken.add("os")

    rows = run_driver(tmp_path, git, today=date(2023, 3, 1), start=date(2023, 3, 1))

    assert rows[0].partial
    assert rows[0].source_packages == 0
    assert rows[0].images == 2


def test_strict_mode_stops_at_first_problem(tmp_path):
    git = FakeGit(make_tree(tmp_path), HISTORY)

    with pytest.raises(NotFoundError, match="no commit before 2023-01-01"):
        run_driver(tmp_path, git, today=date(2023, 3, 1), strict=True)
    assert sorted(git.switched) == ["images", "images-private", "os"]


def test_strict_mode_propagates_git_failures(tmp_path):
    git = FakeGit(make_tree(tmp_path), HISTORY)
    git.broken.add("images")

    with pytest.raises(ExternalCommandError):
        run_driver(tmp_path, git, today=date(2023, 3, 1), start=date(2023, 3, 1), strict=True)


def test_failed_commit_count_is_partial_not_zero(tmp_path):
    git = FakeGit(make_tree(tmp_path), HISTORY)
    git.uncountable.add("os")

    rows = run_driver(tmp_path, git, today=date(2023, 3, 1), start=date(2023, 3, 1))

    assert rows[0].partial
    assert rows[0].problems == ("os: Command failed (128): git rev-list",)
    assert rows[0].as_row() == "2023-03-01\t2\t2\t0\t11\t0\t1\t2\tpartial"


def test_strict_mode_propagates_commit_count_failures(tmp_path):
    git = FakeGit(make_tree(tmp_path), HISTORY)
    git.uncountable.add("os")

    with pytest.raises(ExternalCommandError, match="object file is corrupt"):
        run_driver(tmp_path, git, today=date(2023, 3, 1), start=date(2023, 3, 1), strict=True)


def test_checkouts_return_to_the_branch_they_started_on(tmp_path):
    git = FakeGit(make_tree(tmp_path), HISTORY)
    git.branches = {"os": "bump-curl", "images": ""}

    run_driver(tmp_path, git, today=date(2023, 3, 1), start=date(2023, 3, 1))

    assert git.restored == {"os": "bump-curl", "images": "main", "images-private": "main"}


def test_header_names_every_column():
    assert header().split("\t") == [
        "date", "packages", "subpackages", "patches", "lines", "commits", "tests", "images",
    ]


def _git(path: Path, *args: str, when: str | None = None) -> None:
    env = dict(os.environ)
    if when:
        env.update(GIT_AUTHOR_DATE=when, GIT_COMMITTER_DATE=when)
    subprocess.run(
        ["git", "-c", "user.name=t", "-c", "user.email=t@example.com",
         "-c", "commit.gpgsign=false", *args],
        cwd=path, env=env, check=True, capture_output=True,
    )


def _repo(path: Path, commits: list[tuple[str, dict[str, str]]]) -> None:
    path.mkdir()
    _git(path, "init", "-q")
    _git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    for when, files in commits:
        for name, text in files.items():
            target = path / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(text)
        _git(path, "add", "-A")
        _git(path, "commit", "-q", "-m", when, when=when)


@pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")
def test_real_checkouts_are_measured_and_restored(tmp_path):
    _repo(tmp_path / "os", [
        ("2023-01-15T12:00:00+00:00", {"a.yaml": package("a"), "a/fix.patch": ""}),
        ("2023-02-15T12:00:00+00:00", {"b.yaml": package("b", ["b-dev"], tests=1)}),
    ])
    _repo(tmp_path / "images", [
        ("2022-12-15T12:00:00+00:00", {"images/x/main.tf": 'target_repository = "cgr.dev/chainguard/x"\n'}),
    ])
    _repo(tmp_path / "images-private", [
        ("2023-01-20T12:00:00+00:00", {"main.tf": 'target_repository = "cgr.dev/chainguard-private/y"\n'}),
    ])

    rows = run_driver(tmp_path, GitCli(LocalRunner()), today=date(2023, 3, 10))

    assert [row.as_row() for row in rows] == [
        "2023-01-01\t0\t0\t0\t0\t0\t0\t1\tpartial",
        "2023-02-01\t1\t0\t1\t2\t1\t0\t2",
        "2023-03-01\t2\t1\t1\t8\t2\t1\t2",
    ]
    assert GitCli(LocalRunner()).current_branch(tmp_path / "os") == "main"
