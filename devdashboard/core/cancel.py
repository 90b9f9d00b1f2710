"""Cancellation token helpers shared by analyzers and the report generator."""

from __future__ import annotations

import asyncio

from devdashboard.exceptions import ReportCancelledError


def raise_if_cancelled(cancel: asyncio.Event | None) -> None:
    """Raise ReportCancelledError if *cancel* has been set."""
    if cancel is not None and cancel.is_set():
        raise ReportCancelledError("report generation cancelled")
