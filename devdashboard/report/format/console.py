"""Terminal table rendering for a :class:`Report`.

One ``Package`` column plus one column per repository, sized to the
terminal, followed by a summary and an ``Errors:`` section.
"""

from __future__ import annotations

import shutil
from typing import IO

import click

from devdashboard.report.models import Report, RepositoryReport

MISSING = "-"
FAILED = "ERROR"

_MIN_TERMINAL_WIDTH = 60
_MIN_PACKAGE_WIDTH = 15
_MIN_REPO_WIDTH = 8
_MAX_REPO_WIDTH = 24
_GAP = "  "


def render_console(
    report: Report,
    stream: IO[str] | None = None,
    *,
    colors: bool = True,
    package_col_width: int = 0,
    repo_col_width: int = 0,
    terminal_width: int | None = None,
) -> None:
    """Write *report* as a table to *stream* (stdout by default).

    A width of ``0`` means "choose from the terminal size".
    """
    width = terminal_width or shutil.get_terminal_size(fallback=(100, 24)).columns
    width = max(width, _MIN_TERMINAL_WIDTH)
    repos = report.repositories

    pkg_width = package_col_width or _package_width(report, width)
    repo_width = repo_col_width or _repo_width(len(repos), pkg_width, width)

    headers = [_truncate("Package", pkg_width)] + [
        _truncate(r.identifier, repo_width) for r in repos
    ]
    rows = [
        [_truncate(pkg, pkg_width)] + [_truncate(_cell(r, pkg), repo_width) for r in repos]
        for pkg in report.packages
    ]
    col_widths = [
        max(len(row[i]) for row in [headers, *rows]) for i in range(len(headers))
    ]

    def emit(line: str = "") -> None:
        # None lets click strip styles when the stream is not a terminal.
        click.echo(line, file=stream, color=None if colors else False)

    emit(_GAP.join(h.ljust(w) for h, w in zip(headers, col_widths)).rstrip())
    emit(_GAP.join("-" * w for w in col_widths))
    for row in rows:
        emit(_GAP.join(_style(c, w, colors) for c, w in zip(row, col_widths)).rstrip())

    emit()
    emit("Summary:")
    emit(f"  Repositories analyzed: {report.success_count}/{len(repos)} successful")
    emit(f"  Packages tracked: {len(report.packages)}")

    if report.has_errors():
        emit()
        emit("Errors:")
        for identifier, error in report.get_errors().items():
            emit(f"  {identifier:<30} {error}")


# ── cells and widths ─────────────────────────────────────────────────────


def _cell(repo: RepositoryReport, package: str) -> str:
    if repo.error is not None:
        return FAILED
    return repo.dependencies.get(package) or MISSING


def _style(value: str, width: int, colors: bool) -> str:
    padded = value.ljust(width)
    if not colors:
        return padded
    if value == FAILED:
        return click.style(padded, fg="red")
    if value == MISSING:
        return click.style(padded, fg="bright_black")
    return padded


def _truncate(value: str, width: int) -> str:
    if len(value) <= width:
        return value
    if width <= 3:
        return value[:width]
    return value[: width - 3] + "..."


def _package_width(report: Report, terminal_width: int) -> int:
    longest = max((len(p) for p in report.packages), default=0)
    longest = max(longest, len("Package"))
    available = terminal_width - len(report.repositories) * _MIN_REPO_WIDTH - 3
    available = max(available, _MIN_PACKAGE_WIDTH)
    return max(min(longest, available), _MIN_PACKAGE_WIDTH)


def _repo_width(repo_count: int, package_width: int, terminal_width: int) -> int:
    if repo_count == 0:
        return _MAX_REPO_WIDTH
    per_repo = (terminal_width - package_width - 3) // repo_count
    return min(max(per_repo, _MIN_REPO_WIDTH), _MAX_REPO_WIDTH)
