"""Parser for Poetry poetry.lock files."""

from __future__ import annotations

import sys

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from devdashboard.dependencies.models import Dependency, DependencySource, DependencyType
from devdashboard.dependencies.registry import ensure_text, register_parser
from devdashboard.exceptions import ParseError

# [package.source] type -> normalized source
_SOURCE_TYPES = {
    "git": DependencySource.GIT,
    "directory": DependencySource.PATH,
    "file": DependencySource.PATH,
}


def _dependency_type(pkg: dict) -> DependencyType:
    """Poetry < 1.5 writes ``category``; newer lock files list ``groups``."""
    if pkg.get("category") == "dev":
        return DependencyType.DEV
    groups = pkg.get("groups")
    if isinstance(groups, list) and groups and "main" not in groups:
        return DependencyType.DEV
    return DependencyType.RUNTIME


class PoetryLockParser:
    analyzer_name = "poetry"
    format_kind = "poetry.lock"

    def parse(self, path: str, content: str | bytes) -> list[Dependency]:
        try:
            data = tomllib.loads(ensure_text(path, content))
        except tomllib.TOMLDecodeError as exc:
            raise ParseError(path, exc) from exc

        packages = data.get("package", [])
        if not isinstance(packages, list):
            raise ParseError(path, "'package' must be an array of tables")

        deps: list[Dependency] = []
        for index, pkg in enumerate(packages):
            if not isinstance(pkg, dict) or not isinstance(pkg.get("name"), str):
                raise ParseError(path, f"package entry {index} has no name")
            version = pkg.get("version", "")
            if not isinstance(version, str):
                raise ParseError(path, f"package {pkg['name']!r} has a non-string version")

            source = pkg.get("source") or {}
            source_type = source.get("type") if isinstance(source, dict) else None

            deps.append(
                Dependency(
                    name=pkg["name"],
                    version=version,
                    type=_dependency_type(pkg),
                    source=_SOURCE_TYPES.get(source_type, DependencySource.REGISTRY),
                )
            )

        return deps


register_parser(PoetryLockParser())
