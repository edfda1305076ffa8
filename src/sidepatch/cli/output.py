"""
CLI Output Utilities

Rich output for people, JSON for wrapper scripts.
"""

import json
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from sidepatch.schemas import FilePatchReport, PatchOutcome, RecipeReport
from .config import CLIConfig

_console = Console()

OUTCOME_STYLES = {
    PatchOutcome.APPLIED: "green",
    PatchOutcome.ALREADY_APPLIED: "dim",
    PatchOutcome.NOT_FOUND: "yellow",
    PatchOutcome.MALFORMED: "yellow",
    PatchOutcome.IO_ERROR: "red",
}


def get_console() -> Console:
    return _console


def wants_json(json_output: bool) -> bool:
    return json_output or CLIConfig.is_machine_mode()


def print_json(data: Any, minified: Optional[bool] = None) -> None:
    """In machine mode, always minifies. Otherwise pretty prints."""
    if minified is None:
        minified = CLIConfig.is_machine_mode()

    if minified:
        typer.echo(json.dumps(data, separators=(',', ':')))
    else:
        typer.echo(json.dumps(data, indent=2))


def structured_error(code: str, message: str, input_value: Optional[str] = None) -> dict:
    """
    Create a structured error object for machine mode.

    Args:
        code: Error code (e.g., "IO_ERROR", "INVALID_RECIPE")
        message: Human-readable error message
        input_value: The input that caused the error
    """
    error_obj = {
        "status": "error",
        "code": code,
        "message": message
    }
    if input_value:
        error_obj["input"] = input_value
    return error_obj


def print_error(code: str, message: str, json_output: bool = False, input_value: Optional[str] = None) -> None:
    if wants_json(json_output):
        print_json(structured_error(code, message, input_value))
    else:
        _console.print(f"[red]Error: {escape(message)}[/red]")


def print_file_report(report: FilePatchReport, show_diff: bool = False) -> None:
    """Print one line per operation, then the diff if asked for."""
    if report.discarded:
        verb = "untouched, malformed input"
    elif report.written:
        verb = "patched"
    elif report.dry_run and report.changed:
        verb = "would patch"
    else:
        verb = "unchanged"
    _console.print(f"[bold]{escape(report.file_path)}[/bold] [dim]({verb})[/dim]")

    for result in report.results:
        style = OUTCOME_STYLES[result.outcome]
        line = f"  [{style}]{result.outcome.value:<16}[/{style}] {result.operation} {escape(result.target)}"
        if result.message and result.outcome is not PatchOutcome.APPLIED:
            line += f" [dim]- {escape(result.message)}[/dim]"
        _console.print(line)

    if report.backup_path:
        _console.print(f"  [dim]backup: {escape(report.backup_path)}[/dim]")
    if show_diff and report.diff:
        _console.print(escape(report.diff), highlight=False)


def print_recipe_report(report: RecipeReport, show_diff: bool = False) -> None:
    for file_report in report.files:
        print_file_report(file_report, show_diff)

    table = Table(title=f"Recipe {report.recipe}")
    table.add_column("Outcome")
    table.add_column("Count", justify="right")
    for outcome in PatchOutcome:
        table.add_row(outcome.value, str(report.count(outcome)))
    _console.print(table)
