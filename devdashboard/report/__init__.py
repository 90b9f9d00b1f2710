"""Cross-repository dependency report: models, progress and generation."""

from devdashboard.report.generator import ReportGenerator
from devdashboard.report.models import PackageVersions, Report, RepositoryReport
from devdashboard.report.progress import ProgressEvent, ProgressTracker, RepoPhase

__all__ = [
    "PackageVersions",
    "ProgressEvent",
    "ProgressTracker",
    "RepoPhase",
    "Report",
    "ReportGenerator",
    "RepositoryReport",
]
