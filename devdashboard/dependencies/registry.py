"""Parser registry — one lock-file parser per analyzer name."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from devdashboard.dependencies.models import Dependency
from devdashboard.exceptions import ParseError


@runtime_checkable
class FormatParser(Protocol):
    """Interface that every lock-file parser must satisfy.

    ``parse`` is pure: the same content always yields the same list, in
    document order. Structurally invalid input raises ParseError.
    """

    analyzer_name: str
    format_kind: str  # exact, case-sensitive lock-file basename

    def parse(self, path: str, content: str | bytes) -> list[Dependency]: ...


PARSER_REGISTRY: dict[str, FormatParser] = {}


def register_parser(parser: FormatParser) -> None:
    """Register a parser instance by its analyzer_name."""
    PARSER_REGISTRY[parser.analyzer_name] = parser


def ensure_text(path: str, content: str | bytes) -> str:
    """Decode raw bytes as UTF-8 (BOM tolerated), raising ParseError on failure."""
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError(path, exc) from exc
