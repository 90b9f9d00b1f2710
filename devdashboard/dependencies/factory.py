"""Analyzer registry — map an analyzer name to a :class:`DependencyAnalyzer`."""

from __future__ import annotations

from enum import Enum

# Ensure parsers are registered before any analyzer is created.
import devdashboard.dependencies.parsers  # noqa: F401
from devdashboard.dependencies.analyzer import DependencyAnalyzer
from devdashboard.dependencies.locator import LockFileLocator
from devdashboard.dependencies.registry import PARSER_REGISTRY
from devdashboard.exceptions import UnsupportedAnalyzerError


class AnalyzerKind(str, Enum):
    """Closed set of supported analyzers."""

    POETRY = "poetry"
    PIPFILE = "pipfile"
    UVLOCK = "uvlock"


def supported_analyzers() -> list[str]:
    return [kind.value for kind in AnalyzerKind]


def create_analyzer(name: str) -> DependencyAnalyzer:
    """Create the analyzer for *name* (case-sensitive exact match).

    Raises UnsupportedAnalyzerError for any name outside :class:`AnalyzerKind`.
    """
    try:
        kind = AnalyzerKind(name)
    except ValueError:
        raise UnsupportedAnalyzerError(name, supported_analyzers()) from None

    parser = PARSER_REGISTRY[kind.value]
    locator = LockFileLocator(parser.format_kind, kind.value)
    return DependencyAnalyzer(kind.value, locator, parser)
