"""Candidate discovery — locate lock files of one kind in a repository."""

from __future__ import annotations

import asyncio

import structlog

from devdashboard.core.cancel import raise_if_cancelled
from devdashboard.dependencies.models import AnalyzerConfig, DependencyFile
from devdashboard.repository.base import basename

log = structlog.get_logger("devdashboard.dependencies")


class LockFileLocator:
    """Find files whose basename is exactly *format_kind* (case-sensitive)."""

    def __init__(self, format_kind: str, analyzer: str) -> None:
        self.format_kind = format_kind
        self.analyzer = analyzer

    async def candidate_files(
        self,
        owner: str,
        repo: str,
        ref: str,
        config: AnalyzerConfig,
        *,
        cancel: asyncio.Event | None = None,
    ) -> list[DependencyFile]:
        """Return candidate files in discovery order.

        Explicit paths are used verbatim, without touching the repository.
        Otherwise the whole tree is listed; an empty result is not an error
        here. Traversal failures propagate unchanged.
        """
        if config.explicit_paths:
            return [self._describe(path) for path in config.explicit_paths]

        raise_if_cancelled(cancel)
        entries = await config.client.list_files_recursive(owner, repo, ref)

        candidates = [
            self._describe(entry.path)
            for entry in entries
            if entry.type == "file" and basename(entry.path) == self.format_kind
        ]
        log.debug(
            "locator.searched",
            repo=f"{owner}/{repo}",
            ref=ref,
            scanned=len(entries),
            found=len(candidates),
            format_kind=self.format_kind,
        )
        return candidates

    def _describe(self, path: str) -> DependencyFile:
        return DependencyFile(path=path, format_kind=self.format_kind, analyzer=self.analyzer)
