"""Line-oriented parsing of melange package descriptors.

Descriptors are read as text rather than loaded as YAML: counts are defined
in terms of marker lines, and files with duplicate keys or template syntax
that a YAML loader would reject still have to be counted.
"""

from __future__ import annotations

from pathlib import Path
import re
from typing import Iterable, List, Optional

from wolfi_dev.models.descriptor import PackageDescriptor

DESCRIPTOR_GLOB = "*.yaml"

PACKAGE_MARKER = re.compile(r"^package:")
TEST_MARKER = re.compile(r"^\s*test:")
SUBPACKAGES_MARKER = re.compile(r"^subpackages:")
TOP_LEVEL_KEY = re.compile(r"^[^\s#-][^:]*:")
LIST_ITEM = re.compile(r"^(\s*)-\s")
NAME_ITEM = re.compile(r"^(\s*)-\s+name:\s*(.*?)\s*$")
NAME_KEY = re.compile(r"^\s+name:\s*(.*?)\s*$")
PATCHES_KEY = re.compile(r"^(\s*)patches:\s*(.*)$")
PATCH_FILE = re.compile(r"[^\s\"',]+\.patch\b")


def _unquote(value: str) -> str:
    value = value.split(" #", 1)[0].strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def parse_descriptor(text: str, path: Path = Path("<memory>")) -> PackageDescriptor:
    lines = text.splitlines()
    name: Optional[str] = None
    declarations = 0
    subpackages: List[str] = []
    patches: List[str] = []
    tests = 0
    section: Optional[str] = None
    item_indent: Optional[int] = None
    patch_indent: Optional[int] = None
    package_indent: Optional[int] = None

    for line in lines:
        if not line.strip() or line.lstrip().startswith("#"):
            continue
        if TEST_MARKER.match(line):
            tests += 1

        if patch_indent is not None:
            if _indent(line) > patch_indent:
                patches.extend(PATCH_FILE.findall(line))
                continue
            patch_indent = None
        patch_key = PATCHES_KEY.match(line)
        if patch_key:
            inline = patch_key.group(2).split(" #", 1)[0]
            found = PATCH_FILE.findall(inline)
            patches.extend(found)
            if not found:
                patch_indent = len(patch_key.group(1))
            continue

        if PACKAGE_MARKER.match(line):
            declarations += 1
            section = "package"
            package_indent = None
            continue
        if SUBPACKAGES_MARKER.match(line):
            section = "subpackages"
            item_indent = None
            continue
        if TOP_LEVEL_KEY.match(line):
            section = None
            continue

        if section == "package" and name is None:
            if package_indent is None:
                package_indent = _indent(line)
            key = NAME_KEY.match(line)
            if key and _indent(line) == package_indent:
                name = _unquote(key.group(1))
        elif section == "subpackages":
            item = LIST_ITEM.match(line)
            if item and item_indent is None:
                item_indent = len(item.group(1))
            named = NAME_ITEM.match(line)
            if named and len(named.group(1)) == item_indent:
                subpackages.append(_unquote(named.group(2)))

    return PackageDescriptor(
        path=path,
        name=name,
        package_declarations=declarations,
        subpackage_names=tuple(subpackages),
        patches=tuple(patches),
        tests=tests,
        line_count=len(lines),
    )


def descriptor_files(directory: Path) -> List[Path]:
    if not directory.is_dir():
        return []
    return sorted(path for path in directory.glob(DESCRIPTOR_GLOB) if path.is_file())


def load_descriptors(directory: Path) -> List[PackageDescriptor]:
    return [
        parse_descriptor(path.read_text(encoding="utf-8", errors="replace"), path)
        for path in descriptor_files(directory)
    ]


def subpackage_names(descriptors: Iterable[PackageDescriptor]) -> set[str]:
    names: set[str] = set()
    for descriptor in descriptors:
        for name in descriptor.subpackage_names:
            if name and not any(char.isspace() for char in name):
                names.add(name)
    return names
