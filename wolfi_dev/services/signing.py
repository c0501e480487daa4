"""Global git configuration for keyless commit signing with gitsign."""

from __future__ import annotations

import logging

from wolfi_dev.providers.scm.base import GitClient
from wolfi_dev.services.tools import ToolBootstrapper

logger = logging.getLogger(__name__)

SIGNING_CONFIG = (
    ("commit.gpgsign", "true"),
    ("tag.gpgsign", "true"),
    ("gpg.x509.program", "gitsign"),
    ("gpg.format", "x509"),
)


def configure_signing(git: GitClient, tools: ToolBootstrapper) -> None:
    tools.ensure("gitsign")
    for key, value in SIGNING_CONFIG:
        git.set_global_config(key, value)
        logger.info("git config --global %s %s", key, value)
