"""Command line interface for unsafe-lines.

Commands:
- count: print the unsafe-lines report for a crate
- spans: list every unsafe region, then the report
- init:  write a default .unsafe-lines.json
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable

import click

from unsafe_lines import __version__
from unsafe_lines.analysis.report import ReportFormat, format_report, format_row, render_json
from unsafe_lines.config import UnsafeLinesConfig, load_config, write_default_config
from unsafe_lines.constants import (
    EXIT_FAILURE,
    EXIT_OK,
    EXIT_THRESHOLD_EXCEEDED,
    STDIN_FILENAME,
)
from unsafe_lines.driver import AnalysisResult, analyse_path, analyse_source, exceeds_threshold
from unsafe_lines.types.errors import UnsafeLinesError
from unsafe_lines.utils.logger import configure_logging, logger


def _analysis_options(func: Callable[..., None]) -> Callable[..., None]:
    """Options shared by every command that runs an analysis."""
    options = [
        click.argument("path", type=click.Path(dir_okay=False, allow_dash=True)),
        click.option(
            "--format",
            "report_format",
            type=click.Choice([f.value for f in ReportFormat], case_sensitive=False),
            default=None,
            help="Report shape (default: auto, from config).",
        ),
        click.option("--json", "json_output", is_flag=True, help="Emit a JSON report."),
        click.option(
            "--no-follow-modules",
            is_flag=True,
            help="Do not parse out-of-line `mod foo;` files into the unit.",
        ),
        click.option(
            "--fail-above",
            type=click.FloatRange(min=0),
            default=None,
            help="Exit with status 3 when the unsafe percentage exceeds this value.",
        ),
        click.option(
            "--config",
            "config_path",
            type=click.Path(exists=True, dir_okay=False),
            default=None,
            help="Configuration file (default: nearest .unsafe-lines.json).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _resolve_config(path: str, config_path: str | None, **overrides) -> UnsafeLinesConfig:
    start = None if path == "-" else Path(path).parent
    config = load_config(start=start, config_path=config_path)
    return config.with_overrides(**overrides)


def _run(path: str, config: UnsafeLinesConfig) -> AnalysisResult:
    if path == "-":
        return analyse_source(sys.stdin.read(), STDIN_FILENAME, config)
    return analyse_path(path, config)


def _emit_report(result: AnalysisResult, config: UnsafeLinesConfig) -> None:
    if config.json_output:
        click.echo(render_json(result.metrics))
    else:
        click.echo(format_report(result.metrics, config.report_format))


def _analyse_or_exit(path: str, config_path: str | None, **overrides) -> tuple[AnalysisResult, UnsafeLinesConfig]:
    try:
        config = _resolve_config(path, config_path, **overrides)
        return _run(path, config), config
    except UnsafeLinesError as e:
        logger.debug("Analysis failed: {}", e.to_dict())
        click.echo(e.get_formatted_message(), err=True)
        sys.exit(EXIT_FAILURE)


def _exit_for_gate(result: AnalysisResult, config: UnsafeLinesConfig) -> None:
    if exceeds_threshold(result.metrics, config.fail_above):
        click.echo(
            f"Unsafe percentage {result.metrics.percentage:.2f}% is above the "
            f"{config.fail_above:.2f}% threshold",
            err=True,
        )
        sys.exit(EXIT_THRESHOLD_EXCEEDED)
    sys.exit(EXIT_OK)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="unsafe-lines", message="%(prog)s v%(version)s")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging on stderr.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """unsafe-lines - Measure how much of a Rust crate is unsafe code.

    Counts the lines covered by unsafe functions, traits, impls and blocks
    in one compilation unit and reports them against the unit's total.
    """
    configure_logging(verbose)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@_analysis_options
def count(
    path: str,
    report_format: str | None,
    json_output: bool,
    no_follow_modules: bool,
    fail_above: float | None,
    config_path: str | None,
) -> None:
    """Report unsafe lines for the crate rooted at PATH ('-' reads stdin)."""
    result, config = _analyse_or_exit(
        path,
        config_path,
        report_format=report_format,
        json_output=True if json_output else None,
        follow_modules=False if no_follow_modules else None,
        fail_above=fail_above,
    )
    _emit_report(result, config)
    _exit_for_gate(result, config)


@cli.command()
@_analysis_options
def spans(
    path: str,
    report_format: str | None,
    json_output: bool,
    no_follow_modules: bool,
    fail_above: float | None,
    config_path: str | None,
) -> None:
    """List every unsafe region in PATH, then the report line."""
    result, config = _analyse_or_exit(
        path,
        config_path,
        report_format=report_format,
        json_output=True if json_output else None,
        follow_modules=False if no_follow_modules else None,
        fail_above=fail_above,
    )
    if not config.json_output:
        for row in result.metrics.spans:
            click.echo(format_row(row))
    _emit_report(result, config)
    _exit_for_gate(result, config)


@cli.command()
@click.argument("directory", type=click.Path(file_okay=False), default=".")
@click.option("--force", is_flag=True, help="Overwrite an existing configuration file.")
def init(directory: str, force: bool) -> None:
    """Write a default .unsafe-lines.json into DIRECTORY."""
    try:
        path = write_default_config(directory, force=force)
    except UnsafeLinesError as e:
        click.echo(e.get_formatted_message(), err=True)
        sys.exit(EXIT_FAILURE)
    click.echo(f"Configuration initialized at {path}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
