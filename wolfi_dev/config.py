"""Settings for the wolfi-dev helpers."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from datetime import date
import os
from pathlib import Path
import tempfile
from typing import Any, Mapping, Optional, Tuple

import yaml

from wolfi_dev.errors import ConfigurationError

DEFAULT_CONFIG_PATH = "~/.config/wolfi-dev/config.yaml"

DEFAULT_INSTALL_RECIPES: Mapping[str, Tuple[str, ...]] = {
    "yam": ("go", "install", "github.com/chainguard-dev/yam@latest"),
    "melange": ("go", "install", "chainguard.dev/melange@latest"),
    "gitsign": ("go", "install", "github.com/sigstore/gitsign@latest"),
}


@dataclass(frozen=True)
class Settings:
    github_user: Optional[str] = None
    org: str = "wolfi-dev"
    default_branch: str = "main"
    temp_root: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    apkbuild_prefixes: Tuple[str, ...] = (
        "https://git.alpinelinux.org/aports/plain/main",
        "https://git.alpinelinux.org/aports/plain/community",
    )
    published_descriptor_url: str = (
        "https://raw.githubusercontent.com/{org}/os/{branch}/{package}.yaml"
    )
    registry_host: str = "cgr.dev"
    sdk_image: str = "ghcr.io/wolfi-dev/sdk:latest"
    formatter: str = "yam"
    stats_start: date = date(2023, 1, 1)
    stats_repos: Tuple[str, ...] = ("os", "images", "images-private")
    install_recipes: Mapping[str, Tuple[str, ...]] = field(
        default_factory=lambda: dict(DEFAULT_INSTALL_RECIPES)
    )

    def require_user(self) -> str:
        if not self.github_user:
            raise ConfigurationError(
                "GitHub user is not configured (set GITHUB_USER or github_user in "
                f"{DEFAULT_CONFIG_PATH})."
            )
        return self.github_user

    def fork_url(self, repo: str) -> str:
        return f"https://github.com/{self.require_user()}/{repo}.git"

    def fork_push_url(self, repo: str) -> str:
        return f"git@github.com:{self.require_user()}/{repo}.git"

    def upstream_url(self, repo: str) -> str:
        return f"https://github.com/{self.org}/{repo}.git"


def _config_path(path: str | None, env: Mapping[str, str]) -> Path:
    return Path(
        os.path.expanduser(path or env.get("WOLFI_DEV_CONFIG") or DEFAULT_CONFIG_PATH)
    )


def _load_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        try:
            data = yaml.safe_load(handle) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping.")
    return data


def _coerce(name: str, value: Any) -> Any:
    if name == "temp_root":
        return Path(os.path.expanduser(str(value)))
    if name in ("apkbuild_prefixes", "stats_repos"):
        return tuple(str(item) for item in value)
    if name == "stats_start":
        if isinstance(value, date):
            return value.replace(day=1)
        return parse_month(str(value))
    if name == "install_recipes":
        return {str(tool): tuple(str(arg) for arg in argv) for tool, argv in value.items()}
    return value


def parse_month(value: str) -> date:
    try:
        year, month = value.strip().split("-")[:2]
        return date(int(year), int(month), 1)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid month {value!r}, expected YYYY-MM.") from exc


def load_settings(
    path: str | None = None, env: Mapping[str, str] | None = None
) -> Settings:
    env = os.environ if env is None else env
    known = {item.name for item in fields(Settings)}
    overrides: dict[str, Any] = {}
    for key, value in _load_file(_config_path(path, env)).items():
        if key in known and value is not None:
            overrides[key] = _coerce(key, value)

    env_keys = {
        "GITHUB_USER": "github_user",
        "WOLFI_DEV_ORG": "org",
        "WOLFI_DEV_TMPDIR": "temp_root",
        "WOLFI_DEV_SDK_IMAGE": "sdk_image",
    }
    for variable, key in env_keys.items():
        value = env.get(variable)
        if value:
            overrides[key] = _coerce(key, value)

    settings = replace(Settings(), **overrides)
    if settings.formatter not in ("yam", "pyyaml"):
        raise ConfigurationError(
            f"Unknown formatter {settings.formatter!r} (expected yam or pyyaml)."
        )
    return settings
