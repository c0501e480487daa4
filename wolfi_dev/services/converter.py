"""Converts an Alpine APKBUILD into a melange descriptor on a fresh branch."""

from __future__ import annotations

import logging
import shutil
from typing import List, Tuple

from wolfi_dev.config import Settings
from wolfi_dev.errors import ConflictError, ConversionError, NotFoundError, ValidationError
from wolfi_dev.models.descriptor import ConversionResult
from wolfi_dev.models.workspace import WorkspaceContext
from wolfi_dev.providers.command.base import CommandRunner
from wolfi_dev.providers.http.base import UrlProber
from wolfi_dev.providers.sandbox.base import SandboxAllocator
from wolfi_dev.services.fetcher import RepositoryFetcher
from wolfi_dev.services.formatting import Formatter
from wolfi_dev.services.tools import ToolBootstrapper

logger = logging.getLogger(__name__)

SCRATCH_DIR = "melange-convert"


def follow_up_steps(package: str) -> Tuple[str, ...]:
    return (
        f"Review {package}.yaml: version, license, dependencies and pipeline steps.",
        f"Build it locally: make package/{package}",
        "Add a test: block exercising the installed binaries.",
        f"Commit with a signed-off message, e.g. git commit -s -m '{package}/<version> package update'",
        "Push the branch and open a pull request against wolfi-dev/os.",
    )


class PackageConverter:
    def __init__(
        self,
        settings: Settings,
        runner: CommandRunner,
        prober: UrlProber,
        sandboxes: SandboxAllocator,
        fetcher: RepositoryFetcher,
        formatter: Formatter,
        tools: ToolBootstrapper,
    ) -> None:
        self._settings = settings
        self._runner = runner
        self._prober = prober
        self._sandboxes = sandboxes
        self._fetcher = fetcher
        self._formatter = formatter
        self._tools = tools

    def candidate_urls(self, package: str) -> List[str]:
        return [f"{prefix}/{package}/APKBUILD" for prefix in self._settings.apkbuild_prefixes]

    def published_url(self, package: str) -> str:
        return self._settings.published_descriptor_url.format(
            org=self._settings.org,
            branch=self._settings.default_branch,
            package=package,
        )

    def locate_source(self, package: str) -> Tuple[str, str]:
        """Return the aports prefix holding ``package`` and its APKBUILD URL."""
        for prefix in self._settings.apkbuild_prefixes:
            url = f"{prefix}/{package}/APKBUILD"
            if self._prober.exists(url):
                logger.info("found APKBUILD at %s", url)
                return prefix, url
        raise NotFoundError(
            f"No APKBUILD found for {package} (tried "
            + ", ".join(self.candidate_urls(package))
            + ")."
        )

    def convert(
        self, context: WorkspaceContext, package: str
    ) -> tuple[ConversionResult, WorkspaceContext]:
        package = (package or "").strip()
        if not package:
            raise ValidationError("A package name is required.")
        self._settings.require_user()

        sandbox, context = self._sandboxes.allocate(context, package)
        prefix, source_url = self.locate_source(package)
        published = self.published_url(package)
        if self._prober.exists(published):
            raise ConflictError(f"{package}.yaml already exists upstream: {published}")

        self._tools.ensure("melange")
        context, checkout = self._fetcher.fetch(context, "os", branch=package)
        destination = checkout.path / f"{package}.yaml"

        scratch = sandbox.path / SCRATCH_DIR
        scratch.mkdir(parents=True, exist_ok=True)
        try:
            self._runner.run(
                [
                    "melange",
                    "convert",
                    "apkbuild",
                    package,
                    "--out-dir",
                    str(scratch),
                    "--base-uri-format",
                    f"{prefix}/%s/APKBUILD",
                ],
                cwd=checkout.path,
            )
            produced = scratch / f"{package}.yaml"
            if not produced.is_file():
                raise ConversionError(f"melange did not produce {produced.name}")
            shutil.move(str(produced), str(destination))
            self._formatter.format_file(destination)
        finally:
            shutil.rmtree(scratch, ignore_errors=True)

        result = ConversionResult(
            package=package,
            source_url=source_url,
            destination=destination,
            contents=destination.read_text(encoding="utf-8"),
            checklist=follow_up_steps(package),
        )
        return result, context

    @staticmethod
    def describe(result: ConversionResult) -> str:
        lines = [
            result.contents.rstrip("\n"),
            "",
            f"Converted {result.package} into {result.destination}",
            "Next steps:",
        ]
        lines.extend(f"  {index}. {step}" for index, step in enumerate(result.checklist, 1))
        return "\n".join(lines)
