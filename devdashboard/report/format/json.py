"""JSON payload for a :class:`Report`."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any

from devdashboard import __version__
from devdashboard.report.models import Report


def report_to_dict(
    report: Report,
    *,
    include_errors: bool = True,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    generated_at = generated_at or datetime.now(timezone.utc)
    errors = report.get_errors()

    payload: dict[str, Any] = {
        "cliVersion": __version__,
        "generatedAt": generated_at.isoformat(),
        "repositories": [
            {
                "provider": r.provider,
                "owner": r.owner,
                "repository": r.repository,
                "ref": r.ref,
                "analyzer": r.analyzer,
                "identifier": r.identifier,
                "dependencies": dict(r.dependencies),
                "error": str(r.error) if r.error is not None else None,
            }
            for r in report.repositories
        ],
        "packages": list(report.packages),
        "summary": {
            "repositoryCount": len(report.repositories),
            "packageCount": len(report.packages),
            "successCount": report.success_count,
            "errorCount": len(errors),
        },
    }
    if include_errors:
        payload["errors"] = {identifier: str(err) for identifier, err in errors.items()}
    return payload


def render_json(
    report: Report,
    *,
    indent: int | None = 2,
    include_errors: bool = True,
) -> str:
    """Serialize *report*; ``indent=None`` produces a single line."""
    return json.dumps(
        report_to_dict(report, include_errors=include_errors), indent=indent
    )
