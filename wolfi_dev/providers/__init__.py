"""Provider package for commands, sandboxes, git and HTTP."""

from wolfi_dev.providers.command import CommandRunner, LocalRunner
from wolfi_dev.providers.http import UrlProber, UrllibProber
from wolfi_dev.providers.sandbox import LocalSandboxAllocator, SandboxAllocator
from wolfi_dev.providers.scm import GitCli, GitClient

__all__ = [
    "CommandRunner",
    "GitCli",
    "GitClient",
    "LocalRunner",
    "LocalSandboxAllocator",
    "SandboxAllocator",
    "UrlProber",
    "UrllibProber",
]
