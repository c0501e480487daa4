"""Command line entry point."""

from __future__ import annotations

import argparse
from dataclasses import dataclass
import logging
from pathlib import Path
import sys
from typing import Callable, Optional, Sequence, TextIO

from wolfi_dev import __version__
from wolfi_dev.config import Settings, load_settings, parse_month
from wolfi_dev.errors import WolfiDevError
from wolfi_dev.logs import configure_logging
from wolfi_dev.models.workspace import WorkspaceContext
from wolfi_dev.providers.command.base import CommandRunner
from wolfi_dev.providers.command.local import LocalRunner
from wolfi_dev.providers.http.base import UrlProber
from wolfi_dev.providers.http.urllib_prober import UrllibProber
from wolfi_dev.providers.sandbox.local import LocalSandboxAllocator
from wolfi_dev.providers.scm.git import GitCli
from wolfi_dev.services.builder import PackageBuilder
from wolfi_dev.services.containers import ContainerLauncher
from wolfi_dev.services.converter import PackageConverter
from wolfi_dev.services.fetcher import RepositoryFetcher
from wolfi_dev.services.formatting import make_formatter
from wolfi_dev.services.signing import configure_signing
from wolfi_dev.services.timeseries import StatisticsDriver, header
from wolfi_dev.services.tools import ToolBootstrapper

logger = logging.getLogger(__name__)

CONTAINER_COMMANDS = frozenset(("container", "sdk"))


@dataclass
class Services:
    settings: Settings
    runner: CommandRunner
    git: GitCli
    tools: ToolBootstrapper
    sandboxes: LocalSandboxAllocator
    fetcher: RepositoryFetcher
    converter: PackageConverter
    containers: ContainerLauncher
    builder: PackageBuilder


def build_services(
    settings: Settings,
    runner: Optional[CommandRunner] = None,
    prober: Optional[UrlProber] = None,
) -> Services:
    runner = runner or LocalRunner()
    git = GitCli(runner)
    tools = ToolBootstrapper(runner, settings.install_recipes)
    sandboxes = LocalSandboxAllocator(settings.temp_root)
    fetcher = RepositoryFetcher(settings, git, sandboxes)
    converter = PackageConverter(
        settings,
        runner,
        prober or UrllibProber(),
        sandboxes,
        fetcher,
        make_formatter(settings, runner, tools),
        tools,
    )
    return Services(
        settings=settings,
        runner=runner,
        git=git,
        tools=tools,
        sandboxes=sandboxes,
        fetcher=fetcher,
        converter=converter,
        containers=ContainerLauncher(runner, tools),
        builder=PackageBuilder(runner, tools),
    )


def _cmd_help(args: argparse.Namespace, services: Services, out: TextIO) -> int:
    args.parser.print_help(out)
    return 0


def _cmd_sandbox(args: argparse.Namespace, services: Services, out: TextIO) -> int:
    sandbox, _ = services.sandboxes.allocate(args.context, args.label)
    print(sandbox.path, file=out)
    return 0


def _cmd_clone(args: argparse.Namespace, services: Services, out: TextIO) -> int:
    context, checkout = services.fetcher.fetch(
        args.context, args.repo, branch=args.branch, url=args.url
    )
    logger.info("%s is on branch %s", checkout.name, checkout.branch)
    print(context.cwd, file=out)
    return 0


def _cmd_branch(args: argparse.Namespace, services: Services, out: TextIO) -> int:
    context = services.fetcher.switch_branch(args.context, args.name)
    print(services.fetcher.current_branch(context), file=out)
    return 0


def _cmd_convert(args: argparse.Namespace, services: Services, out: TextIO) -> int:
    result, context = services.converter.convert(args.context, args.package)
    print(PackageConverter.describe(result), file=out)
    print(context.cwd, file=out)
    return 0


def _cmd_numbers(args: argparse.Namespace, services: Services, out: TextIO) -> int:
    driver = StatisticsDriver(services.settings, services.git, strict=args.strict)
    parent = Path(args.parent).resolve() if args.parent else args.context.cwd
    context = driver.attach(args.context, parent)
    start = parse_month(args.start) if args.start else None
    print(header(), file=out)
    for row in driver.run(context, start=start):
        print(row.as_row(), file=out)
        out.flush()
    return 0


def _cmd_container(args: argparse.Namespace, services: Services, out: TextIO) -> int:
    image = args.image or services.settings.sdk_image
    return services.containers.launch(
        args.context, image, args.run_opt, args.container_command
    )


def _cmd_build(args: argparse.Namespace, services: Services, out: TextIO) -> int:
    services.builder.build(args.context, args.targets)
    return 0


def _cmd_setup_signing(args: argparse.Namespace, services: Services, out: TextIO) -> int:
    configure_signing(services.git, services.tools)
    return 0


def split_command(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Split ``argv`` at the first ``--`` into wolfi-dev arguments and a command."""
    argv = list(argv)
    if "--" not in argv:
        return argv, []
    index = argv.index("--")
    return argv[:index], argv[index + 1 :]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wolfi-dev",
        description="Helpers for working on Wolfi packages and Chainguard images.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every command run")
    parser.add_argument("--config", help="path to a YAML config file")
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    def add(name: str, handler: Callable[..., int], help_text: str) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(name, help=help_text, description=help_text)
        sub.set_defaults(handler=handler)
        return sub

    add("help", _cmd_help, "show the available commands")

    sub = add("sandbox", _cmd_sandbox, "create a fresh working directory and print it")
    sub.add_argument("label", nargs="?", help="label included in the directory name")

    sub = add("clone", _cmd_clone, "clone your fork into a sandbox and sync it with upstream")
    sub.add_argument("repo", nargs="?", default="os", help="repository name (default: os)")
    sub.add_argument("branch", nargs="?", help="branch to switch to or create")
    sub.add_argument("--url", help="clone this URL instead of your fork")

    sub = add("branch", _cmd_branch, "switch to a branch, creating and pushing it if new")
    sub.add_argument("name")

    sub = add("convert", _cmd_convert, "convert an Alpine APKBUILD into a melange descriptor")
    sub.add_argument("package")

    sub = add("numbers", _cmd_numbers, "print monthly package and image statistics")
    sub.add_argument("--parent", help="directory holding the os and images checkouts")
    sub.add_argument("--start", help="first month, YYYY-MM (default: 2023-01)")
    sub.add_argument("--strict", action="store_true", help="stop at the first failed checkout")

    for name, help_text, takes_image in (
        ("container", "run an image with the current directory mounted", True),
        ("sdk", "run the Wolfi SDK image with the current directory mounted", False),
    ):
        sub = add(name, _cmd_container, help_text)
        sub.epilog = "Arguments after -- are run inside the container."
        if takes_image:
            sub.add_argument("image")
        else:
            sub.set_defaults(image=None)
        sub.add_argument(
            "--run-opt",
            action="append",
            default=[],
            help="extra option passed to docker run (repeatable)",
        )
        sub.set_defaults(container_command=[])

    sub = add("build", _cmd_build, "build packages with make in an os checkout")
    sub.add_argument("targets", nargs="+", metavar="package")

    add("setup-signing", _cmd_setup_signing, "configure git to sign commits with gitsign")
    return parser


def main(
    argv: Optional[Sequence[str]] = None,
    runner: Optional[CommandRunner] = None,
    prober: Optional[UrlProber] = None,
    context: Optional[WorkspaceContext] = None,
    out: Optional[TextIO] = None,
) -> int:
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    head, tail = split_command(argv)
    if not CONTAINER_COMMANDS.intersection(head):
        head, tail = argv, []
    args = parser.parse_args(head)
    if getattr(args, "handler", None) is _cmd_container:
        args.container_command = tail
    out = out or sys.stdout
    configure_logging(args.verbose)
    if not getattr(args, "handler", None):
        parser.print_help(out)
        return 0
    args.parser = parser
    args.context = context or WorkspaceContext.from_cwd()
    try:
        services = build_services(load_settings(args.config), runner, prober)
        return args.handler(args, services, out)
    except WolfiDevError as exc:
        logger.error("%s", exc)
        return 1
    except KeyboardInterrupt:
        logger.error("interrupted")
        return 130
