"""Data models for dependency discovery and analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from devdashboard.repository.base import RepositoryAccess


class DependencyType(str, Enum):
    RUNTIME = "runtime"
    DEV = "dev"


class DependencySource(str, Enum):
    REGISTRY = "registry"
    GIT = "git"
    PATH = "path"


@dataclass(frozen=True)
class Dependency:
    """A single locked package, as parsed from a lock file."""

    name: str
    version: str
    type: DependencyType = DependencyType.RUNTIME
    source: DependencySource = DependencySource.REGISTRY


@dataclass(frozen=True)
class DependencyFile:
    """A located, not-yet-parsed candidate lock file."""

    path: str
    format_kind: str  # lock-file basename, e.g. "poetry.lock"
    analyzer: str


@dataclass(frozen=True)
class AnalyzerConfig:
    """Per-call analyzer input: explicit paths and the repository client.

    An empty *explicit_paths* means "search the whole tree".
    """

    client: RepositoryAccess
    explicit_paths: tuple[str, ...] = field(default_factory=tuple)
