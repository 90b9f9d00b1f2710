"""Parser for Pipenv Pipfile.lock files."""

from __future__ import annotations

import json

from devdashboard.dependencies.models import Dependency, DependencySource, DependencyType
from devdashboard.dependencies.registry import ensure_text, register_parser
from devdashboard.exceptions import ParseError

_SECTIONS = (
    ("default", DependencyType.RUNTIME),
    ("develop", DependencyType.DEV),
)


def _version(path: str, section: str, name: str, info: dict) -> str:
    version = info.get("version") or ""
    if not isinstance(version, str):
        raise ParseError(path, f"'{section}.{name}.version' must be a string")
    for prefix in ("===", "=="):
        if version.startswith(prefix):
            return version[len(prefix):]
    if not version and "git" in info:
        return str(info.get("ref", ""))
    return version


def _source(info: dict) -> DependencySource:
    if "git" in info:
        return DependencySource.GIT
    if "path" in info:
        return DependencySource.PATH
    return DependencySource.REGISTRY


class PipfileLockParser:
    analyzer_name = "pipfile"
    format_kind = "Pipfile.lock"

    def parse(self, path: str, content: str | bytes) -> list[Dependency]:
        try:
            data = json.loads(ensure_text(path, content))
        except json.JSONDecodeError as exc:
            raise ParseError(path, exc) from exc

        if not isinstance(data, dict):
            raise ParseError(path, "top-level JSON value must be an object")

        deps: list[Dependency] = []
        for section, dep_type in _SECTIONS:
            entries = data.get(section) or {}
            if not isinstance(entries, dict):
                raise ParseError(path, f"'{section}' must be an object")

            for name, info in entries.items():
                if not isinstance(info, dict):
                    raise ParseError(path, f"'{section}.{name}' must be an object")
                deps.append(
                    Dependency(
                        name=name,
                        version=_version(path, section, name, info),
                        type=dep_type,
                        source=_source(info),
                    )
                )

        return deps


register_parser(PipfileLockParser())
