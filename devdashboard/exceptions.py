"""Custom exceptions for DevDashboard."""

from __future__ import annotations


class DevDashboardError(Exception):
    """Base exception for all DevDashboard errors."""


class ConfigError(DevDashboardError):
    """Raised when the configuration file is missing or invalid."""


# ── provider access ──────────────────────────────────────────────────────


class RepositoryError(DevDashboardError):
    """Raised when a repository provider call fails."""


class AuthenticationError(RepositoryError):
    """Raised on HTTP 401/403 — invalid, expired or under-scoped token."""


class NotFoundError(RepositoryError):
    """Raised on HTTP 404 — repository, ref or file not found."""


class NetworkError(RepositoryError):
    """Raised on timeouts, unreachable hosts, or exhausted retries."""


# ── per-repository analysis ──────────────────────────────────────────────


class SetupError(DevDashboardError):
    """Raised when a repository task cannot be set up."""


class UnsupportedProviderError(SetupError):
    def __init__(self, provider: str, supported: list[str]):
        self.provider = provider
        self.supported = supported
        super().__init__(
            f"unsupported provider: {provider!r} (supported: {', '.join(supported)})"
        )


class UnsupportedAnalyzerError(SetupError):
    def __init__(self, analyzer: str, supported: list[str]):
        self.analyzer = analyzer
        self.supported = supported
        super().__init__(
            f"unsupported analyzer: {analyzer!r} (supported: {', '.join(supported)})"
        )


class InvalidProviderConfigError(SetupError):
    """Raised when a provider client rejects its connection settings."""


class DiscoveryError(DevDashboardError):
    """Raised when candidate dependency files cannot be located."""


class NoDependencyFilesError(DiscoveryError):
    """Raised when a full-tree search finds no matching lock file."""


class AnalysisError(DevDashboardError):
    """Raised when every attempted candidate file failed to fetch or parse."""

    def __init__(self, attempted: int, failures: dict[str, str]):
        self.attempted = attempted
        self.failures = failures
        detail = "; ".join(f"{path}: {err}" for path, err in failures.items())
        super().__init__(
            f"all {attempted} dependency file(s) failed to analyze: {detail}"
        )


class ParseError(DevDashboardError):
    """Raised when a lock file is structurally invalid."""

    def __init__(self, path: str, cause: Exception | str):
        self.path = path
        self.cause = cause
        super().__init__(f"failed to parse {path}: {cause}")


class ReportCancelledError(DevDashboardError):
    """Raised when report generation is cancelled or its deadline expires."""
