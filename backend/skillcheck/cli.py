"""
Command-line front end.

Exit codes:
- 0: every rule passed for every document
- 1: at least one rule failed or errored
- 2: invocation failure (missing input file, unreadable or invalid rule set)
"""

import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional

import typer
from pydantic import ValidationError

from . import __version__
from .exceptions import InputError
from .models import RULE_KINDS, RuleSet
from .presets import load_preset, preset_names
from .report import EXIT_INPUT_ERROR, ConformanceReport, ReportFormat
from .ruleset import load_rule_set
from .validator.runner import check_paths


logger = logging.getLogger("skillcheck")

app = typer.Typer(
    add_completion=False,
    help="Check markdown skill files against declarative structural rules.",
)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _fail(message: str) -> NoReturn:
    typer.echo(f"error: {message}", err=True)
    raise typer.Exit(EXIT_INPUT_ERROR)


def _resolve_rule_set(
    rules: Optional[Path],
    preset: Optional[str],
    workers: Optional[int],
    encoding: Optional[str],
) -> RuleSet:
    if rules is not None and preset is not None:
        raise InputError("use either --rules or --preset, not both")
    if rules is None and preset is None:
        raise InputError("a rule set is required (--rules FILE or --preset NAME)")

    rule_set = load_rule_set(rules) if rules is not None else load_preset(preset)
    try:
        settings = rule_set.settings.with_overrides(workers=workers, encoding=encoding)
    except ValidationError as e:
        raise InputError(f"invalid option: {e.errors()[0].get('msg', e)}") from e
    return rule_set.model_copy(update={"settings": settings})


@app.command()
def check(
    files: List[Path] = typer.Argument(..., help="Markdown files to check."),
    rules: Optional[Path] = typer.Option(None, "--rules", "-r", help="Rule-set YAML file."),
    preset: Optional[str] = typer.Option(None, "--preset", "-p", help="Built-in rule set name."),
    machine: bool = typer.Option(False, "--machine", help="Structured JSON output (same as --format machine)."),
    output_format: ReportFormat = typer.Option(ReportFormat.HUMAN, "--format", "-f", help="Report format."),
    workers: Optional[int] = typer.Option(None, "--workers", "-j", min=1, help="Parallel document workers."),
    encoding: Optional[str] = typer.Option(None, "--encoding", help="Declared document encoding."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the report to a file."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
) -> None:
    """Evaluate a rule set against one or more markdown files."""
    configure_logging(verbose)
    if machine:
        output_format = ReportFormat.MACHINE

    try:
        rule_set = _resolve_rule_set(rules, preset, workers, encoding)
        run = check_paths(files, rule_set)
    except InputError as e:
        _fail(str(e))

    logger.debug(
        "Checked %d document(s) against %d rule(s) in %dms",
        len(run.documents), len(rule_set.rules), run.duration_ms,
    )

    report = ConformanceReport(run)
    if output is not None:
        report.save(output, output_format)
    else:
        typer.echo(report.render(output_format))
    raise typer.Exit(report.exit_code)


@app.command()
def kinds() -> None:
    """List supported rule kinds and built-in presets."""
    typer.echo("Rule kinds:")
    for kind in RULE_KINDS:
        typer.echo(f"  {kind}")
    typer.echo("Presets:")
    for name in preset_names():
        typer.echo(f"  {name}")


@app.command()
def version() -> None:
    """Print the version."""
    typer.echo(__version__)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
