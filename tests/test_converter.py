from __future__ import annotations

from pathlib import Path

import pytest

from conftest import FakeProber, FakeRunner, clone_creates_directory
from wolfi_dev.errors import (
    ConflictError,
    ConversionError,
    ExternalCommandError,
    NotFoundError,
    ValidationError,
)
from wolfi_dev.models.command import CommandResult
from wolfi_dev.providers.sandbox.local import LocalSandboxAllocator
from wolfi_dev.providers.scm.git import GitCli
from wolfi_dev.services.converter import PackageConverter
from wolfi_dev.services.fetcher import RepositoryFetcher
from wolfi_dev.services.formatting import make_formatter
from wolfi_dev.services.tools import ToolBootstrapper

MAIN = "https://git.alpinelinux.org/aports/plain/main/jq/APKBUILD"
COMMUNITY = "https://git.alpinelinux.org/aports/plain/community/jq/APKBUILD"
PUBLISHED = "https://raw.githubusercontent.com/wolfi-dev/os/main/jq.yaml"
CONVERTED = "package:\n  name: jq\n  version: 1.7.1\n"


def write_conversion(argv, cwd):
    out_dir = Path(argv[argv.index("--out-dir") + 1])
    (out_dir / "jq.yaml").write_text(CONVERTED)
    (out_dir / "oniguruma.yaml").write_text("package:\n  name: oniguruma\n")
    return CommandResult(argv, 0, "", "", 0)


def make_converter(settings, runner, prober):
    git = GitCli(runner)
    sandboxes = LocalSandboxAllocator(settings.temp_root)
    tools = ToolBootstrapper(runner, settings.install_recipes)
    return PackageConverter(
        settings,
        runner,
        prober,
        sandboxes,
        RepositoryFetcher(settings, git, sandboxes),
        make_formatter(settings, runner, tools),
        tools,
    )


@pytest.fixture
def converting_runner() -> FakeRunner:
    runner = FakeRunner()
    runner.on(("git", "clone"), clone_creates_directory)
    runner.on(("melange", "convert"), write_conversion)
    return runner


def test_candidate_urls_are_probed_in_order(settings, runner):
    prober = FakeProber([MAIN, COMMUNITY])

    assert make_converter(settings, runner, prober).locate_source("jq") == (
        "https://git.alpinelinux.org/aports/plain/main",
        MAIN,
    )
    assert prober.probed == [MAIN]


def test_community_is_used_when_main_is_missing(settings, runner):
    prober = FakeProber([COMMUNITY])

    assert make_converter(settings, runner, prober).locate_source("jq") == (
        "https://git.alpinelinux.org/aports/plain/community",
        COMMUNITY,
    )
    assert prober.probed == [MAIN, COMMUNITY]


@pytest.mark.parametrize("name", ["", "   ", None])
def test_package_name_is_required(settings, runner, context, name):
    with pytest.raises(ValidationError):
        make_converter(settings, runner, FakeProber()).convert(context, name)

    assert not settings.temp_root.exists()


def test_unknown_package_is_not_found(settings, runner, context):
    with pytest.raises(NotFoundError, match="jq"):
        make_converter(settings, runner, FakeProber()).convert(context, "jq")

    assert runner.calls == []


def test_existing_descriptor_aborts_before_clone_and_conversion(settings, converting_runner, context):
    prober = FakeProber([MAIN, PUBLISHED])

    with pytest.raises(ConflictError, match="jq.yaml"):
        make_converter(settings, converting_runner, prober).convert(context, "jq")

    assert converting_runner.calls == []
    assert prober.probed == [MAIN, PUBLISHED]


def test_convert_produces_formatted_descriptor_on_branch(settings, converting_runner, context):
    converter = make_converter(settings, converting_runner, FakeProber([COMMUNITY]))

    result, updated = converter.convert(context, "jq")

    checkout = updated.checkout("os")
    assert result.destination == checkout.path / "jq.yaml"
    assert result.contents == CONVERTED
    assert result.source_url == COMMUNITY
    assert updated.cwd == checkout.path
    assert checkout.branch == "jq"

    commands = converting_runner.commands()
    melange = next(argv for argv in commands if argv[0] == "melange")
    assert melange[:4] == ("melange", "convert", "apkbuild", "jq")
    assert melange[-2:] == (
        "--base-uri-format",
        "https://git.alpinelinux.org/aports/plain/community/%s/APKBUILD",
    )
    assert commands.index(("git", "switch", "jq")) < commands.index(melange)
    assert commands[-1] == ("yam", "jq.yaml")
    assert list(settings.temp_root.rglob("melange-convert")) == []

    report = PackageConverter.describe(result)
    assert report.startswith(CONVERTED)
    assert "make package/jq" in report


def test_scratch_directory_is_removed_when_conversion_fails(settings, runner, context):
    runner.on(("git", "clone"), clone_creates_directory)
    runner.on(("melange", "convert"), 1)

    with pytest.raises(ExternalCommandError):
        make_converter(settings, runner, FakeProber([MAIN])).convert(context, "jq")

    assert list(settings.temp_root.rglob("melange-convert")) == []


def test_missing_output_is_a_conversion_error(settings, runner, context):
    runner.on(("git", "clone"), clone_creates_directory)

    with pytest.raises(ConversionError, match="jq.yaml"):
        make_converter(settings, runner, FakeProber([MAIN])).convert(context, "jq")

    assert list(settings.temp_root.rglob("melange-convert")) == []
    assert not runner.ran("yam")


def test_base_uri_template_is_built_from_the_matching_prefix(settings, runner, context):
    source = "https://git.alpinelinux.org/aports/plain/main/main/APKBUILD"

    def write_main(argv, cwd):
        out_dir = Path(argv[argv.index("--out-dir") + 1])
        (out_dir / "main.yaml").write_text("package:\n  name: main\n")
        return CommandResult(argv, 0, "", "", 0)

    runner.on(("git", "clone"), clone_creates_directory)
    runner.on(("melange", "convert"), write_main)

    result, _ = make_converter(settings, runner, FakeProber([source])).convert(context, "main")

    melange = next(argv for argv in runner.commands() if argv[0] == "melange")
    assert melange[-1] == "https://git.alpinelinux.org/aports/plain/main/%s/APKBUILD"
    assert result.source_url == source
