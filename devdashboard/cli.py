"""CLI entry point: devdashboard.

Subcommands:
    devdashboard dependency-report repos.yaml          # table on stdout
    devdashboard dependency-report repos.yaml -f json  # JSON payload
    devdashboard analyzers                             # supported analyzers
    devdashboard providers                             # supported providers
    devdashboard init -o repos.yaml                    # template config
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import click
import structlog

from devdashboard import __version__
from devdashboard.core.config import generate_template, load_config
from devdashboard.core.logging import setup_logging
from devdashboard.dependencies.factory import supported_analyzers
from devdashboard.exceptions import ConfigError, ReportCancelledError
from devdashboard.report.format.console import render_console
from devdashboard.report.format.json import render_json
from devdashboard.report.generator import ReportGenerator
from devdashboard.report.progress import ProgressEvent
from devdashboard.repository.factory import supported_providers

log = structlog.get_logger("devdashboard.cli")


def _log_progress(event: ProgressEvent) -> None:
    log.debug(
        "report.progress",
        repo=event.repo_id,
        index=event.index,
        phase=event.phase.value,
        error=str(event.error) if event.error else None,
    )


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging (INFO)")
@click.option("--debug", is_flag=True, help="Debug logging")
@click.version_option(__version__, prog_name="devdashboard")
def main(verbose: bool, debug: bool) -> None:
    """DevDashboard: compare dependency versions across repositories."""
    level = "DEBUG" if debug else "INFO" if verbose else None
    setup_logging(level)


@main.command("dependency-report")
@click.argument("config_file", type=click.Path(dir_okay=False))
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice(["console", "json"]),
    default="console",
    show_default=True,
    help="Output format",
)
@click.option("-o", "--out", type=click.Path(dir_okay=False), default=None, help="Write output to FILE")
@click.option("--no-color", is_flag=True, help="Disable ANSI colors in console output")
@click.option("--package-col-width", type=click.IntRange(min=0), default=0, help="Package column width (0 = auto)")
@click.option("--repo-col-width", type=click.IntRange(min=0), default=0, help="Repository column width (0 = auto)")
@click.option("--timeout", type=float, default=None, help="Overall deadline in seconds")
@click.option("--max-concurrency", type=click.IntRange(min=1), default=None, help="Max repositories analyzed at once")
@click.option("--fail-on-error", is_flag=True, help="Exit 1 if any repository failed")
@click.option("--json-indent", type=click.IntRange(min=0), default=2, show_default=True, help="JSON indent (0 = compact)")
@click.option(
    "--json-include-errors/--no-json-include-errors",
    default=True,
    show_default=True,
    help="Include the errors section in JSON output",
)
def dependency_report(
    config_file: str,
    output_format: str,
    out: str | None,
    no_color: bool,
    package_col_width: int,
    repo_col_width: int,
    timeout: float | None,
    max_concurrency: int | None,
    fail_on_error: bool,
    json_indent: int,
    json_include_errors: bool,
) -> None:
    """Report tracked package versions across every configured repository."""
    try:
        config = load_config(config_file)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    repos = config.all_repos()
    if not repos:
        click.echo(f"Error: no repositories configured in {config_file}", err=True)
        sys.exit(1)

    generator = ReportGenerator(max_concurrency=max_concurrency, on_progress=_log_progress)
    try:
        report = asyncio.run(generator.generate(repos, timeout=timeout))
    except ReportCancelledError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        click.echo("Interrupted.", err=True)
        sys.exit(130)

    if output_format == "json":
        text = render_json(
            report,
            indent=json_indent or None,
            include_errors=json_include_errors,
        )
        if out:
            Path(out).write_text(text + "\n", encoding="utf-8")
        else:
            click.echo(text)
    elif out:
        with open(out, "w", encoding="utf-8") as f:
            render_console(
                report,
                f,
                colors=False,
                package_col_width=package_col_width,
                repo_col_width=repo_col_width,
            )
    else:
        render_console(
            report,
            colors=not no_color,
            package_col_width=package_col_width,
            repo_col_width=repo_col_width,
        )

    if out:
        click.echo(f"Report written to {out}", err=True)

    if fail_on_error and report.has_errors():
        click.echo(
            f"Error: {len(report.get_errors())} repositories failed to analyze", err=True
        )
        sys.exit(1)


@main.command("analyzers")
def analyzers() -> None:
    """List supported analyzer names."""
    for name in supported_analyzers():
        click.echo(name)


@main.command("providers")
def providers() -> None:
    """List supported repository providers."""
    for name in supported_providers():
        click.echo(name)


@main.command("init")
@click.option("-o", "--output", default="devdashboard.yaml", show_default=True, help="Output file path")
def init(output: str) -> None:
    """Generate a template configuration file."""
    try:
        generate_template(output)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    click.echo(f"Config template written to {output}")
    click.echo("Edit the file, then run: devdashboard dependency-report " + output)


if __name__ == "__main__":
    main()
