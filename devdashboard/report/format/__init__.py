"""Report renderers: terminal table and JSON payload."""

from devdashboard.report.format.console import render_console
from devdashboard.report.format.json import render_json, report_to_dict

__all__ = ["render_console", "render_json", "report_to_dict"]
