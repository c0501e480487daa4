"""Clones a fork into a fresh sandbox and wires it to upstream."""

from __future__ import annotations

import logging
from pathlib import Path

from wolfi_dev.config import Settings
from wolfi_dev.models.workspace import RepositoryCheckout, WorkspaceContext
from wolfi_dev.providers.sandbox.base import SandboxAllocator
from wolfi_dev.providers.scm.base import GitClient

logger = logging.getLogger(__name__)

UPSTREAM_REMOTE = "upstream"
ORIGIN_REMOTE = "origin"


class RepositoryFetcher:
    def __init__(
        self, settings: Settings, git: GitClient, sandboxes: SandboxAllocator
    ) -> None:
        self._settings = settings
        self._git = git
        self._sandboxes = sandboxes

    def fetch(
        self,
        context: WorkspaceContext,
        repo: str = "os",
        branch: str | None = None,
        url: str | None = None,
    ) -> tuple[WorkspaceContext, RepositoryCheckout]:
        """Clone ``repo`` from the user's fork and leave it on ``branch``.

        The returned context points at the checkout. A merge conflict with
        upstream is reported but left in place for the user to resolve.
        """
        settings = self._settings
        settings.require_user()
        clone_url = url or settings.fork_url(repo)

        _, context = self._sandboxes.allocate(context, repo)
        path = context.cwd / repo
        logger.info("cloning %s", clone_url)
        self._git.clone(clone_url, path)

        if branch:
            self._switch_or_create(path, branch)

        self._git.add_remote(path, UPSTREAM_REMOTE, settings.upstream_url(repo))
        self._git.fetch(path, UPSTREAM_REMOTE)
        upstream_ref = f"{UPSTREAM_REMOTE}/{settings.default_branch}"
        merged = self._git.merge(path, upstream_ref)
        if not merged.ok:
            logger.warning(
                "merging %s did not complete; resolve it in %s\n%s",
                upstream_ref,
                path,
                (merged.stdout + merged.stderr).strip(),
            )

        self._git.set_remote_url(path, ORIGIN_REMOTE, settings.fork_push_url(repo))
        self._git.push(path)

        checkout = RepositoryCheckout(
            name=repo,
            path=path,
            remote_url=settings.fork_push_url(repo),
            branch=branch or self._git.current_branch(path),
        )
        return context.with_checkout(checkout), checkout

    def switch_branch(self, context: WorkspaceContext, branch: str) -> WorkspaceContext:
        self._switch_or_create(context.cwd, branch)
        return context

    def current_branch(self, context: WorkspaceContext) -> str:
        return self._git.current_branch(context.cwd)

    def _switch_or_create(self, path: Path, branch: str) -> None:
        if self._git.switch(path, branch):
            logger.info("switched to existing branch %s", branch)
            return
        logger.info("creating branch %s", branch)
        self._git.switch(path, branch, create=True)
        self._git.push(path, ORIGIN_REMOTE, branch, set_upstream=True)
