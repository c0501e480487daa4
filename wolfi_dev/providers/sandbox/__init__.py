"""Sandbox allocators."""

from wolfi_dev.providers.sandbox.base import SandboxAllocator
from wolfi_dev.providers.sandbox.local import LocalSandboxAllocator, sanitize_label

__all__ = ["LocalSandboxAllocator", "SandboxAllocator", "sanitize_label"]
