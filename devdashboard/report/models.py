"""Report data models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class RepositoryReport:
    """Outcome for one configured repository.

    When *error* is set, *dependencies* is empty.
    """

    provider: str
    owner: str
    repository: str
    ref: str
    analyzer: str
    dependencies: dict[str, str] = field(default_factory=dict)  # package -> version
    error: Exception | None = None

    @property
    def identifier(self) -> str:
        return f"{self.owner}/{self.repository}"


@dataclass
class PackageVersions:
    """Every version of one package across repositories.

    ``versions`` maps version -> repo identifiers; ``""`` means "not found".
    """

    package: str
    versions: dict[str, list[str]] = field(default_factory=dict)


@dataclass
class Report:
    """Cross-repository dependency report.

    ``repositories`` follows input order; ``packages`` is the sorted,
    de-duplicated union of every tracked package name.
    """

    repositories: list[RepositoryReport] = field(default_factory=list)
    packages: list[str] = field(default_factory=list)

    def has_errors(self) -> bool:
        return any(r.error is not None for r in self.repositories)

    def get_errors(self) -> dict[str, Exception]:
        """Map ``owner/repo`` to its error, for failed repositories only."""
        return {r.identifier: r.error for r in self.repositories if r.error is not None}

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.repositories if r.error is None)

    def get_package_versions(self) -> list[PackageVersions]:
        result: list[PackageVersions] = []
        for package in self.packages:
            pv = PackageVersions(package=package)
            for repo in self.repositories:
                version = repo.dependencies.get(package, "")
                pv.versions.setdefault(version, []).append(repo.identifier)
            result.append(pv)
        return result
