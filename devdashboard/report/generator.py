"""ReportGenerator — one concurrent analysis task per repository, joined into a Report."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence

import structlog

from devdashboard.core.cancel import raise_if_cancelled
from devdashboard.core.config import RepoConfig
from devdashboard.dependencies.analyzer import DependencyAnalyzer
from devdashboard.dependencies.factory import create_analyzer
from devdashboard.dependencies.models import AnalyzerConfig, Dependency
from devdashboard.exceptions import (
    DiscoveryError,
    NoDependencyFilesError,
    ReportCancelledError,
    SetupError,
)
from devdashboard.report.models import Report, RepositoryReport
from devdashboard.report.progress import ProgressCallback, ProgressTracker, RepoPhase
from devdashboard.repository.base import RepositoryAccess
from devdashboard.repository.factory import create_client

log = structlog.get_logger("devdashboard.report")

ClientFactory = Callable[[RepoConfig], RepositoryAccess]
AnalyzerFactory = Callable[[str], DependencyAnalyzer]


def default_client_factory(repo: RepoConfig) -> RepositoryAccess:
    return create_client(repo.provider, token=repo.token, base_url=repo.base_url)


def tracked_packages(repo_configs: Sequence[RepoConfig]) -> list[str]:
    """Sorted, de-duplicated union of every configured package name."""
    return sorted({pkg for repo in repo_configs for pkg in repo.packages})


def select_versions(
    results: dict[str, list[Dependency]], packages: Sequence[str]
) -> dict[str, str]:
    """Pick the version of each requested package; first file, then first entry, wins."""
    wanted = set(packages)
    found: dict[str, str] = {}
    for deps in results.values():
        for dep in deps:
            if dep.name in wanted:
                found.setdefault(dep.name, dep.version)
    return {pkg: found[pkg] for pkg in dict.fromkeys(packages) if pkg in found}


def _setup_error(stage: str, exc: Exception) -> SetupError:
    if isinstance(exc, SetupError):
        return exc
    error = SetupError(f"{stage} setup failed: {exc}")
    error.__cause__ = exc
    return error


class ReportGenerator:
    """Fan out one task per repository, wait for all, assemble the report.

    Per-repository failures are recorded on that repository's report and
    never affect siblings. Only cancellation (the *cancel* event or the
    *timeout* deadline) aborts :meth:`generate` as a whole.
    """

    def __init__(
        self,
        client_factory: ClientFactory | None = None,
        analyzer_factory: AnalyzerFactory | None = None,
        *,
        max_concurrency: int | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> None:
        if max_concurrency is not None and max_concurrency < 1:
            raise ValueError("max_concurrency must be a positive integer or None")
        self._client_factory = client_factory or default_client_factory
        self._analyzer_factory = analyzer_factory or create_analyzer
        self._max_concurrency = max_concurrency
        self._callbacks = [on_progress] if on_progress else []

    async def generate(
        self,
        repo_configs: Sequence[RepoConfig],
        *,
        cancel: asyncio.Event | None = None,
        timeout: float | None = None,
    ) -> Report:
        """Analyze every repository concurrently and return the aggregate report.

        ``Report.repositories[i]`` always corresponds to ``repo_configs[i]``.

        Raises:
            ReportCancelledError: *cancel* was set, or *timeout* seconds
                elapsed, before every repository task finished.
        """
        started = time.monotonic()
        log.info("report.start", repo_count=len(repo_configs))

        raise_if_cancelled(cancel)
        if timeout is not None and timeout <= 0:
            raise ReportCancelledError("report generation deadline already expired")

        packages = tracked_packages(repo_configs)
        slots: list[RepositoryReport | None] = [None] * len(repo_configs)
        tracker = ProgressTracker(len(repo_configs), self._callbacks)
        sem = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None

        for index, repo in enumerate(repo_configs):
            tracker.advance(index, repo.identifier, RepoPhase.QUEUED)

        tasks = [
            asyncio.create_task(
                self._run_slot(index, repo, slots, tracker, sem, cancel),
                name=f"report:{repo.provider}:{repo.identifier}",
            )
            for index, repo in enumerate(repo_configs)
        ]
        if tasks:
            try:
                await self._join(tasks, cancel, timeout)
            except ReportCancelledError:
                unfinished = [
                    repo.identifier
                    for index, repo in enumerate(repo_configs)
                    if not tracker.is_finished(index)
                ]
                log.warning("report.abandoned", unfinished=unfinished)
                raise

        # Cancellation observed after the barrier still discards the report.
        raise_if_cancelled(cancel)

        report = Report(repositories=[s for s in slots if s is not None], packages=packages)
        log.info(
            "report.complete",
            repo_count=len(report.repositories),
            package_count=len(packages),
            error_count=len(report.repositories) - report.success_count,
            duration_seconds=round(time.monotonic() - started, 3),
        )
        return report

    # ── barrier ──────────────────────────────────────────────────────────

    @staticmethod
    async def _join(
        tasks: list[asyncio.Task],
        cancel: asyncio.Event | None,
        timeout: float | None,
    ) -> None:
        """Wait for every task, or abandon the wait on cancellation/deadline."""
        barrier = asyncio.gather(*tasks)
        # Mark the outcome retrieved so abandoned barriers are not logged by asyncio.
        barrier.add_done_callback(lambda f: f.cancelled() or f.exception())
        cancel_waiter = asyncio.ensure_future(cancel.wait()) if cancel is not None else None
        waiters: set[asyncio.Future] = {barrier}
        if cancel_waiter is not None:
            waiters.add(cancel_waiter)

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
            if barrier in done:
                barrier.result()
                return
            if cancel_waiter is not None and cancel_waiter in done:
                log.warning("report.cancelled")
                raise ReportCancelledError("report generation cancelled")
            log.warning("report.deadline_exceeded", timeout_seconds=timeout)
            raise ReportCancelledError(f"report generation exceeded the {timeout}s deadline")
        finally:
            if cancel_waiter is not None:
                cancel_waiter.cancel()
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.wait(tasks)

    # ── per-repository task ──────────────────────────────────────────────

    async def _run_slot(
        self,
        index: int,
        repo: RepoConfig,
        slots: list[RepositoryReport | None],
        tracker: ProgressTracker,
        sem: asyncio.Semaphore | None,
        cancel: asyncio.Event | None,
    ) -> None:
        if sem is None:
            slots[index] = await self._analyze_repository(index, repo, tracker, cancel)
            return
        async with sem:
            slots[index] = await self._analyze_repository(index, repo, tracker, cancel)

    async def _analyze_repository(
        self,
        index: int,
        repo: RepoConfig,
        tracker: ProgressTracker,
        cancel: asyncio.Event | None,
    ) -> RepositoryReport:
        repo_log = log.bind(provider=repo.provider, repo=repo.identifier, analyzer=repo.analyzer)

        def finish(
            phase: RepoPhase,
            error: Exception | None = None,
            dependencies: dict[str, str] | None = None,
        ) -> RepositoryReport:
            tracker.advance(index, repo.identifier, phase, error)
            return RepositoryReport(
                provider=repo.provider,
                owner=repo.owner,
                repository=repo.repository,
                ref=repo.ref,
                analyzer=repo.analyzer,
                dependencies=dependencies or {},
                error=error,
            )

        try:
            client = self._client_factory(repo)
        except Exception as exc:
            error = _setup_error("client", exc)
            repo_log.warning("report.client_setup_failed", error=str(error))
            return finish(RepoPhase.FAILED, error)

        try:
            try:
                analyzer = self._analyzer_factory(repo.analyzer)
            except Exception as exc:
                error = _setup_error("analyzer", exc)
                repo_log.warning("report.analyzer_setup_failed", error=str(error))
                return finish(RepoPhase.FAILED, error)

            config = AnalyzerConfig(client=client, explicit_paths=tuple(repo.paths))

            tracker.advance(index, repo.identifier, RepoPhase.DISCOVERING)
            try:
                candidates = await analyzer.candidate_files(
                    repo.owner, repo.repository, repo.ref, config, cancel=cancel
                )
            except ReportCancelledError:
                raise
            except Exception as exc:
                error = DiscoveryError(f"failed to find dependency files: {exc}")
                error.__cause__ = exc
                repo_log.warning("report.discovery_failed", error=str(exc))
                return finish(RepoPhase.FAILED, error)

            if not candidates:
                repo_log.info("report.no_files_found", format_kind=analyzer.parser.format_kind)
                return finish(
                    RepoPhase.NO_FILES_FOUND,
                    NoDependencyFilesError(
                        f"no {analyzer.parser.format_kind} files found in {repo.identifier}"
                    ),
                )

            repo_log.debug("report.candidates_found", count=len(candidates))
            tracker.advance(index, repo.identifier, RepoPhase.ANALYZING)
            try:
                results = await analyzer.analyze_dependencies(
                    repo.owner, repo.repository, repo.ref, candidates, config, cancel=cancel
                )
            except ReportCancelledError:
                raise
            except Exception as exc:
                repo_log.warning("report.analysis_failed", error=str(exc))
                return finish(RepoPhase.FAILED, exc)

            versions = select_versions(results, repo.packages)
            repo_log.debug("report.repository_complete", found_packages=len(versions))
            return finish(RepoPhase.COMPLETE, dependencies=versions)
        finally:
            try:
                await client.close()
            except Exception:
                repo_log.warning("report.client_close_failed", exc_info=True)
