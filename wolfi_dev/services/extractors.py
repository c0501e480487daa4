"""Counting metrics over a checkout of package descriptors or images.

Every function takes a directory and returns a non-negative integer; a
directory that is missing or holds no matching files counts as zero.
"""

from __future__ import annotations

from pathlib import Path
import re
from typing import Iterable, Optional, Sequence

from wolfi_dev.models.descriptor import PackageDescriptor
from wolfi_dev.providers.scm.base import GitClient
from wolfi_dev.services.descriptors import load_descriptors, subpackage_names

PATCH_SUFFIX = ".patch"
IMAGE_GLOB = "*.tf"
IMAGE_MARKER = "target_repository"


def _descriptors(
    directory: Path, descriptors: Optional[Sequence[PackageDescriptor]]
) -> Sequence[PackageDescriptor]:
    return load_descriptors(directory) if descriptors is None else descriptors


def count_source_packages(
    directory: Path, descriptors: Optional[Sequence[PackageDescriptor]] = None
) -> int:
    return sum(item.package_declarations for item in _descriptors(directory, descriptors))


def count_binary_packages(
    directory: Path, descriptors: Optional[Sequence[PackageDescriptor]] = None
) -> int:
    return len(subpackage_names(_descriptors(directory, descriptors)))


def count_definition_lines(
    directory: Path, descriptors: Optional[Sequence[PackageDescriptor]] = None
) -> int:
    return sum(item.line_count for item in _descriptors(directory, descriptors))


def count_tests(
    directory: Path, descriptors: Optional[Sequence[PackageDescriptor]] = None
) -> int:
    return sum(item.tests for item in _descriptors(directory, descriptors))


def count_patches(directory: Path) -> int:
    if not directory.is_dir():
        return 0
    return sum(
        1
        for path in directory.rglob(f"*{PATCH_SUFFIX}")
        if path.is_file() and ".git" not in path.relative_to(directory).parts
    )


def count_commits(directory: Path, git: GitClient) -> int:
    """Commits reachable from HEAD; a repository without commits counts as zero."""
    if not (directory / ".git").exists() or not git.has_head(directory):
        return 0
    return git.commit_count(directory)


def image_pattern(registry_host: str) -> re.Pattern[str]:
    return re.compile(re.escape(registry_host) + r"/([^\"'\s]+)")


def _image_name(reference: str) -> str:
    name = reference.split("@", 1)[0].rstrip("/").rsplit("/", 1)[-1]
    return name.split(":", 1)[0]


def collect_images(directory: Path, registry_host: str) -> set[str]:
    images: set[str] = set()
    if not directory.is_dir():
        return images
    pattern = image_pattern(registry_host)
    for path in sorted(directory.rglob(IMAGE_GLOB)):
        if not path.is_file() or ".git" in path.relative_to(directory).parts:
            continue
        for line in path.read_text(encoding="utf-8", errors="replace").splitlines():
            if IMAGE_MARKER not in line:
                continue
            for reference in pattern.findall(line):
                name = _image_name(reference)
                if name:
                    images.add(name)
    return images


def count_images(directory: Path, registry_host: str) -> int:
    return len(collect_images(directory, registry_host))


def count_images_in(directories: Iterable[Path], registry_host: str) -> int:
    images: set[str] = set()
    for directory in directories:
        images |= collect_images(directory, registry_host)
    return len(images)
