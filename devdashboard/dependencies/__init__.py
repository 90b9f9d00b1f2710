"""Dependency analysis engine — locate and parse lock files."""

from devdashboard.dependencies.analyzer import DependencyAnalyzer
from devdashboard.dependencies.factory import AnalyzerKind, create_analyzer, supported_analyzers
from devdashboard.dependencies.locator import LockFileLocator
from devdashboard.dependencies.models import (
    AnalyzerConfig,
    Dependency,
    DependencyFile,
    DependencySource,
    DependencyType,
)

__all__ = [
    "AnalyzerConfig",
    "AnalyzerKind",
    "Dependency",
    "DependencyAnalyzer",
    "DependencyFile",
    "DependencySource",
    "DependencyType",
    "LockFileLocator",
    "create_analyzer",
    "supported_analyzers",
]
