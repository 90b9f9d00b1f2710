"""Tests for CLI commands — provider calls are avoided or mocked."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from devdashboard import __version__
from devdashboard.cli import main
from devdashboard.core.config import TEMPLATE
from devdashboard.exceptions import ReportCancelledError
from devdashboard.report.models import Report, RepositoryReport

# Unknown providers fail at setup, so these configs never touch the network.
_OFFLINE_CONFIG = """\
providers:
  invalid-provider:
    default:
      owner: acme
      analyzer: poetry
      packages: [django]
    repositories:
      - repository: api
      - repository: worker
"""


def _write_config(tmp_path, text: str = _OFFLINE_CONFIG) -> str:
    path = tmp_path / "repos.yaml"
    path.write_text(text)
    return str(path)


def _ok_report() -> Report:
    return Report(
        repositories=[
            RepositoryReport("github", "acme", "api", "main", "poetry", {"django": "4.2.0"})
        ],
        packages=["django"],
    )


# ── informational commands ──


class TestInfoCommands:
    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_analyzers(self):
        result = CliRunner().invoke(main, ["analyzers"])
        assert result.exit_code == 0
        assert result.output.split() == ["poetry", "pipfile", "uvlock"]

    def test_providers(self):
        result = CliRunner().invoke(main, ["providers"])
        assert result.exit_code == 0
        assert result.output.split() == ["github", "gitlab"]


class TestInit:
    def test_writes_template(self, tmp_path):
        out = tmp_path / "devdashboard.yaml"
        result = CliRunner().invoke(main, ["init", "-o", str(out)])
        assert result.exit_code == 0
        assert out.read_text() == TEMPLATE
        assert "Config template written" in result.output

    def test_refuses_overwrite(self, tmp_path):
        out = tmp_path / "devdashboard.yaml"
        out.write_text("existing")
        result = CliRunner().invoke(main, ["init", "-o", str(out)])
        assert result.exit_code == 1
        assert "already exists" in result.output
        assert out.read_text() == "existing"


# ── dependency-report ──


class TestDependencyReport:
    def test_missing_config(self, tmp_path):
        result = CliRunner().invoke(main, ["dependency-report", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1
        assert "config file not found" in result.output

    def test_invalid_config(self, tmp_path):
        path = _write_config(tmp_path, "providers:\n  github:\n    repositories:\n      - {}\n")
        result = CliRunner().invoke(main, ["dependency-report", path])
        assert result.exit_code == 1
        assert "missing required field" in result.output

    def test_no_repositories(self, tmp_path):
        path = _write_config(tmp_path, "providers: {}\n")
        result = CliRunner().invoke(main, ["dependency-report", path])
        assert result.exit_code == 1
        assert "no repositories configured" in result.output

    def test_console_report_with_errors(self, tmp_path):
        path = _write_config(tmp_path)
        result = CliRunner().invoke(main, ["dependency-report", path, "--no-color"])
        assert result.exit_code == 0
        assert "acme/api" in result.output
        assert "ERROR" in result.output
        assert "Repositories analyzed: 0/2 successful" in result.output

    def test_fail_on_error(self, tmp_path):
        path = _write_config(tmp_path)
        result = CliRunner().invoke(main, ["dependency-report", path, "--fail-on-error"])
        assert result.exit_code == 1
        assert "2 repositories failed" in result.output

    def test_json_to_file(self, tmp_path):
        path = _write_config(tmp_path)
        out = tmp_path / "report.json"
        result = CliRunner().invoke(
            main, ["dependency-report", path, "--format", "json", "--out", str(out)]
        )
        assert result.exit_code == 0
        payload = json.loads(out.read_text())
        assert payload["summary"]["errorCount"] == 2
        assert set(payload["errors"]) == {"acme/api", "acme/worker"}

    def test_json_without_errors_section(self, tmp_path):
        path = _write_config(tmp_path)
        with patch(
            "devdashboard.cli.ReportGenerator.generate",
            new_callable=AsyncMock,
            return_value=_ok_report(),
        ):
            result = CliRunner().invoke(
                main,
                ["dependency-report", path, "-f", "json", "--json-indent", "0",
                 "--no-json-include-errors"],
            )
        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert "errors" not in payload
        assert payload["repositories"][0]["dependencies"] == {"django": "4.2.0"}

    def test_options_reach_generator(self, tmp_path):
        path = _write_config(tmp_path)
        with patch("devdashboard.cli.ReportGenerator") as generator_cls:
            generator_cls.return_value.generate = AsyncMock(return_value=_ok_report())
            result = CliRunner().invoke(
                main,
                ["dependency-report", path, "--timeout", "30", "--max-concurrency", "4"],
            )
        assert result.exit_code == 0
        assert generator_cls.call_args.kwargs["max_concurrency"] == 4
        repos = generator_cls.return_value.generate.call_args.args[0]
        assert [r.repository for r in repos] == ["api", "worker"]
        assert generator_cls.return_value.generate.call_args.kwargs["timeout"] == 30.0

    def test_cancelled(self, tmp_path):
        path = _write_config(tmp_path)
        with patch(
            "devdashboard.cli.ReportGenerator.generate",
            new_callable=AsyncMock,
            side_effect=ReportCancelledError("report generation exceeded the 1.0s deadline"),
        ):
            result = CliRunner().invoke(main, ["dependency-report", path, "--timeout", "1"])
        assert result.exit_code == 1
        assert "deadline" in result.output

    def test_rejects_zero_concurrency(self, tmp_path):
        path = _write_config(tmp_path)
        result = CliRunner().invoke(main, ["dependency-report", path, "--max-concurrency", "0"])
        assert result.exit_code == 2
