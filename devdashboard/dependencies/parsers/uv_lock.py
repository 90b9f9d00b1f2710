"""Parser for uv uv.lock files."""

from __future__ import annotations

import sys

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from devdashboard.dependencies.models import Dependency, DependencySource, DependencyType
from devdashboard.dependencies.registry import ensure_text, register_parser
from devdashboard.exceptions import ParseError

# Real uv.lock writes ``source = { registry = "..." }``; older/hand-written
# files use ``[package.source] type = "registry"``. Both are accepted.
_SOURCE_KINDS = {
    "registry": DependencySource.REGISTRY,
    "url": DependencySource.REGISTRY,
    "git": DependencySource.GIT,
    "path": DependencySource.PATH,
    "directory": DependencySource.PATH,
    "editable": DependencySource.PATH,
    "virtual": DependencySource.PATH,
}

_DEV_EXTRAS = ("extra == 'dev'", "extra == 'test'")


def _source_kind(source: object) -> str | None:
    if not isinstance(source, dict):
        return None
    if isinstance(source.get("type"), str):
        return source["type"]
    for kind in _SOURCE_KINDS:
        if kind in source:
            return kind
    return None


def _markers(pkg: dict) -> list[str]:
    markers: list[str] = []
    for key in ("marker", "resolution-markers"):
        value = pkg.get(key)
        if isinstance(value, str):
            markers.append(value)
        elif isinstance(value, list):
            markers.extend(v for v in value if isinstance(v, str))
    return markers


def _dev_only_names(packages: list[dict]) -> set[str]:
    """Names listed in a project's dev groups but not in its runtime dependencies."""
    dev: set[str] = set()
    runtime: set[str] = set()
    for pkg in packages:
        if _source_kind(pkg.get("source")) not in ("editable", "virtual"):
            continue
        runtime.update(_dep_names(pkg.get("dependencies")))
        groups = pkg.get("dev-dependencies") or {}
        if isinstance(groups, dict):
            for group in groups.values():
                dev.update(_dep_names(group))
    return dev - runtime


def _dep_names(entries: object) -> set[str]:
    if not isinstance(entries, list):
        return set()
    return {e["name"] for e in entries if isinstance(e, dict) and isinstance(e.get("name"), str)}


class UvLockParser:
    analyzer_name = "uvlock"
    format_kind = "uv.lock"

    def parse(self, path: str, content: str | bytes) -> list[Dependency]:
        try:
            data = tomllib.loads(ensure_text(path, content))
        except tomllib.TOMLDecodeError as exc:
            raise ParseError(path, exc) from exc

        packages = data.get("package", [])
        if not isinstance(packages, list):
            raise ParseError(path, "'package' must be an array of tables")
        for index, pkg in enumerate(packages):
            if not isinstance(pkg, dict) or not isinstance(pkg.get("name"), str):
                raise ParseError(path, f"package entry {index} has no name")
            if not isinstance(pkg.get("version", ""), str):
                raise ParseError(path, f"package {pkg['name']!r} has a non-string version")

        dev_names = _dev_only_names(packages)

        deps: list[Dependency] = []
        for pkg in packages:
            name = pkg["name"]
            is_dev = name in dev_names or any(
                extra in marker for marker in _markers(pkg) for extra in _DEV_EXTRAS
            )
            kind = _source_kind(pkg.get("source"))
            deps.append(
                Dependency(
                    name=name,
                    version=pkg.get("version", ""),
                    type=DependencyType.DEV if is_dev else DependencyType.RUNTIME,
                    source=_SOURCE_KINDS.get(kind, DependencySource.REGISTRY),
                )
            )

        return deps


register_parser(UvLockParser())
