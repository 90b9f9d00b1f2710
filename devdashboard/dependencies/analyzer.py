"""DependencyAnalyzer — candidate discovery + per-file fetch and parse."""

from __future__ import annotations

import asyncio

import structlog

from devdashboard.core.cancel import raise_if_cancelled
from devdashboard.dependencies.locator import LockFileLocator
from devdashboard.dependencies.models import AnalyzerConfig, Dependency, DependencyFile
from devdashboard.dependencies.registry import FormatParser
from devdashboard.exceptions import AnalysisError, ParseError

log = structlog.get_logger("devdashboard.dependencies")


class DependencyAnalyzer:
    """Pairs one :class:`LockFileLocator` with one :class:`FormatParser`."""

    def __init__(self, name: str, locator: LockFileLocator, parser: FormatParser) -> None:
        self.name = name
        self.locator = locator
        self.parser = parser

    def __repr__(self) -> str:
        return f"DependencyAnalyzer(name={self.name!r}, format_kind={self.parser.format_kind!r})"

    async def candidate_files(
        self,
        owner: str,
        repo: str,
        ref: str,
        config: AnalyzerConfig,
        *,
        cancel: asyncio.Event | None = None,
    ) -> list[DependencyFile]:
        return await self.locator.candidate_files(owner, repo, ref, config, cancel=cancel)

    async def analyze_dependencies(
        self,
        owner: str,
        repo: str,
        ref: str,
        candidates: list[DependencyFile],
        config: AnalyzerConfig,
        *,
        cancel: asyncio.Event | None = None,
    ) -> dict[str, list[Dependency]]:
        """Fetch and parse every candidate, keyed by path in candidate order.

        A file that fails to fetch or parse is logged and skipped. The call
        fails with AnalysisError only when at least one candidate was
        attempted and none succeeded.
        """
        results: dict[str, list[Dependency]] = {}
        failures: dict[str, str] = {}
        attempted = 0
        succeeded = 0

        for candidate in candidates:
            raise_if_cancelled(cancel)
            attempted += 1
            try:
                content = await config.client.get_file_content(owner, repo, ref, candidate.path)
            except Exception as exc:
                log.warning(
                    "analyzer.fetch_failed",
                    analyzer=self.name,
                    repo=f"{owner}/{repo}",
                    ref=ref,
                    path=candidate.path,
                    error=str(exc),
                )
                failures[candidate.path] = str(exc)
                continue

            try:
                deps = self.parser.parse(candidate.path, content)
            except Exception as exc:
                error = exc if isinstance(exc, ParseError) else ParseError(candidate.path, exc)
                log.warning(
                    "analyzer.parse_failed",
                    analyzer=self.name,
                    repo=f"{owner}/{repo}",
                    ref=ref,
                    path=candidate.path,
                    error=str(error.cause),
                )
                failures[candidate.path] = str(error)
                continue

            succeeded += 1
            results.setdefault(candidate.path, deps)

        if attempted and not succeeded:
            raise AnalysisError(attempted, failures)

        log.debug(
            "analyzer.complete",
            analyzer=self.name,
            repo=f"{owner}/{repo}",
            attempted=attempted,
            succeeded=succeeded,
        )
        return results
