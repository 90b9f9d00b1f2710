"""Per-repository progress tracking for report generation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

import structlog

log = structlog.get_logger("devdashboard.report")


class RepoPhase(str, Enum):
    QUEUED = "queued"
    DISCOVERING = "discovering"
    NO_FILES_FOUND = "no_files_found"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    FAILED = "failed"


TERMINAL_PHASES = frozenset({RepoPhase.NO_FILES_FOUND, RepoPhase.COMPLETE, RepoPhase.FAILED})

_TRANSITIONS: dict[RepoPhase | None, frozenset[RepoPhase]] = {
    None: frozenset({RepoPhase.QUEUED}),
    # Setup errors fail a repository before discovery starts.
    RepoPhase.QUEUED: frozenset({RepoPhase.DISCOVERING, RepoPhase.FAILED}),
    RepoPhase.DISCOVERING: frozenset(
        {RepoPhase.NO_FILES_FOUND, RepoPhase.ANALYZING, RepoPhase.FAILED}
    ),
    RepoPhase.ANALYZING: frozenset({RepoPhase.COMPLETE, RepoPhase.FAILED}),
}


@dataclass(frozen=True)
class ProgressEvent:
    repo_id: str
    index: int
    phase: RepoPhase
    error: Exception | None = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


ProgressCallback = Callable[[ProgressEvent], None]


class ProgressTracker:
    """Record the phase of every repository slot and notify callbacks."""

    def __init__(self, size: int, callbacks: list[ProgressCallback] | None = None) -> None:
        self.phases: list[RepoPhase | None] = [None] * size
        self.callbacks: list[ProgressCallback] = list(callbacks or [])

    def advance(
        self,
        index: int,
        repo_id: str,
        phase: RepoPhase,
        error: Exception | None = None,
    ) -> None:
        current = self.phases[index]
        if phase not in _TRANSITIONS.get(current, frozenset()):
            raise ValueError(f"illegal transition for {repo_id}: {current} -> {phase.value}")
        self.phases[index] = phase
        self._notify(ProgressEvent(repo_id=repo_id, index=index, phase=phase, error=error))

    def is_finished(self, index: int) -> bool:
        return self.phases[index] in TERMINAL_PHASES

    def _notify(self, event: ProgressEvent) -> None:
        for cb in self.callbacks:
            try:
                cb(event)
            except Exception:
                log.warning(
                    "progress.callback_failed",
                    repo=event.repo_id,
                    phase=event.phase.value,
                    exc_info=True,
                )
