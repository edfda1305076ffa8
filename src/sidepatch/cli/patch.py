"""
CLI Patch Commands

replace-body, guard, wrap-call, add-probe, comment-out, pin-package, substitute
"""

import typer
from pathlib import Path
from typing import List, Optional, Sequence

from sidepatch.exceptions import ConfigError, PatchIOError
from sidepatch.patching import PatchFacade
from sidepatch.schemas import (
    CallSiteGuard,
    DEFAULT_EXTENSION_POINTS,
    FilePatchReport,
    GuardInsertion,
    LineComment,
    PackagePin,
    PatchOperation,
    PatchOutcome,
    PatchResult,
    PatchTarget,
    ProbeDefinition,
    TextSubstitution,
)
from .output import print_error, print_file_report, print_json, wants_json

app = typer.Typer()

FILE_ARG = typer.Argument(..., help="Source file to patch", exists=True, dir_okay=False)
DRY_RUN_OPT = typer.Option(False, "--dry-run", help="Report what would change without writing")
BACKUP_OPT = typer.Option(False, "--backup", help="Keep a timestamped copy under .sidepatch/backups")
JSON_OPT = typer.Option(False, "--json", help="Output as JSON")
DIFF_OPT = typer.Option(False, "--diff", help="Show a unified diff of the change")
INDENT_OPT = typer.Option(None, "--indent-unit", help="Indentation added per nesting level (default: two spaces)")


def run_operations(
    file: Path,
    operations: Sequence[PatchOperation],
    dry_run: bool,
    backup: bool,
    json_output: bool,
    show_diff: bool = False,
) -> FilePatchReport:
    """Apply operations to one file and print the report; exit 1 on I/O failure."""
    facade = PatchFacade()
    try:
        report = facade.apply_file(str(file), operations, dry_run=dry_run, backup=backup or None)
    except PatchIOError as e:
        if wants_json(json_output):
            failed = FilePatchReport(
                file_path=str(file),
                dry_run=dry_run,
                results=[
                    PatchResult(operation=op.kind, target=op.target, outcome=PatchOutcome.IO_ERROR, message=e.message)
                    for op in operations
                ],
            )
            print_json(failed.model_dump(mode="json"))
        else:
            print_error("IO_ERROR", str(e), input_value=str(file))
        raise typer.Exit(code=1)
    except ConfigError as e:
        print_error("INVALID_ARGUMENT", str(e), json_output)
        raise typer.Exit(code=1)

    if wants_json(json_output):
        print_json(report.model_dump(mode="json"))
    else:
        print_file_report(report, show_diff)
    return report


@app.command("replace-body")
def replace_body_cmd(
    file: Path = FILE_ARG,
    function: List[str] = typer.Option(..., "--function", "-f", help="Function name; repeat for several functions"),
    line: List[str] = typer.Option(..., "--line", "-l", help="Replacement body line; repeat for several lines"),
    marker: Optional[str] = typer.Option(None, "--marker", "-m", help="Idempotency marker written as a leading comment"),
    declaration: Optional[str] = typer.Option(None, "--declaration", "-d", help="Regex preceding the name (default: 'public func')"),
    indent_unit: Optional[str] = INDENT_OPT,
    dry_run: bool = DRY_RUN_OPT,
    backup: bool = BACKUP_OPT,
    show_diff: bool = DIFF_OPT,
    json_output: bool = JSON_OPT,
):
    """
    Replace the body of one or more functions with the given lines.

    Every --function gets the same body. Functions already carrying the
    marker are left alone.
    """
    operations = [
        PatchTarget(
            function_name=name,
            replacement_body=line,
            idempotency_marker=marker,
            declaration=declaration,
            indent_unit=indent_unit,
        )
        for name in function
    ]
    run_operations(file, operations, dry_run, backup, json_output, show_diff)


@app.command("guard")
def guard_cmd(
    file: Path = FILE_ARG,
    function: str = typer.Option(..., "--function", "-f", help="Function to guard"),
    condition: str = typer.Option(..., "--condition", "-c", help="Boolean expression; the function returns early when false"),
    declaration: Optional[str] = typer.Option(None, "--declaration", "-d", help="Regex preceding the name (default: 'public func')"),
    style: str = typer.Option("swift", "--style", help="swift (guard ... else) or c (if (!(...)))"),
    return_value: Optional[str] = typer.Option(None, "--return-value", help="Value returned by the guard"),
    indent_unit: Optional[str] = INDENT_OPT,
    dry_run: bool = DRY_RUN_OPT,
    backup: bool = BACKUP_OPT,
    show_diff: bool = DIFF_OPT,
    json_output: bool = JSON_OPT,
):
    """
    Insert an early return at the top of a function body.
    """
    if style not in ("swift", "c"):
        print_error("INVALID_ARGUMENT", f"Unknown guard style '{style}'", json_output, style)
        raise typer.Exit(code=1)

    operation = GuardInsertion(
        function_name=function,
        condition_expression=condition,
        declaration=declaration,
        style=style,
        return_value=return_value,
        indent_unit=indent_unit,
    )
    run_operations(file, [operation], dry_run, backup, json_output, show_diff)


@app.command("wrap-call")
def wrap_call_cmd(
    file: Path = FILE_ARG,
    call_site: str = typer.Option(..., "--call-site", "-s", help="Literal text identifying the statement line"),
    condition: str = typer.Option(..., "--condition", "-c", help="Condition the statement runs under"),
    indent_unit: Optional[str] = INDENT_OPT,
    dry_run: bool = DRY_RUN_OPT,
    backup: bool = BACKUP_OPT,
    show_diff: bool = DIFF_OPT,
    json_output: bool = JSON_OPT,
):
    """
    Wrap a single statement line in an if block.
    """
    operation = CallSiteGuard(call_site=call_site, condition_expression=condition, indent_unit=indent_unit)
    run_operations(file, [operation], dry_run, backup, json_output, show_diff)


@app.command("add-probe")
def add_probe_cmd(
    file: Path = FILE_ARG,
    class_name: str = typer.Option("FileProviderAvailability", "--class-name", help="Name of the probe class"),
    property_name: str = typer.Option("isAvailable", "--property", help="Name of the static Bool property"),
    extension_point: Optional[List[str]] = typer.Option(
        None,
        "--extension-point",
        "-e",
        help="Allowed NSExtensionPointIdentifier; repeat for several (default: FileProvider identifiers)",
    ),
    dry_run: bool = DRY_RUN_OPT,
    backup: bool = BACKUP_OPT,
    show_diff: bool = DIFF_OPT,
    json_output: bool = JSON_OPT,
):
    """
    Append an extension availability probe class to a Swift file.
    """
    operation = ProbeDefinition(
        class_name=class_name,
        property_name=property_name,
        extension_points=extension_point or list(DEFAULT_EXTENSION_POINTS),
    )
    run_operations(file, [operation], dry_run, backup, json_output, show_diff)


@app.command("comment-out")
def comment_out_cmd(
    file: Path = FILE_ARG,
    statement: str = typer.Option(..., "--statement", "-s", help="Statement to disable, as it appears at line start"),
    note: Optional[str] = typer.Option(None, "--note", "-n", help="Trailing comment explaining why"),
    dry_run: bool = DRY_RUN_OPT,
    backup: bool = BACKUP_OPT,
    show_diff: bool = DIFF_OPT,
    json_output: bool = JSON_OPT,
):
    """
    Comment out every line starting with a statement.
    """
    run_operations(file, [LineComment(statement=statement, note=note)], dry_run, backup, json_output, show_diff)


@app.command("pin-package")
def pin_package_cmd(
    file: Path = FILE_ARG,
    package: str = typer.Option(..., "--package", "-p", help="Swift package reference name"),
    min_version: str = typer.Option(..., "--min-version", "-v", help="Minimum version (up to next major)"),
    dry_run: bool = DRY_RUN_OPT,
    backup: bool = BACKUP_OPT,
    show_diff: bool = DIFF_OPT,
    json_output: bool = JSON_OPT,
):
    """
    Replace branch tracking of a Swift package with a version requirement.
    """
    operation = PackagePin(package=package, minimum_version=min_version)
    run_operations(file, [operation], dry_run, backup, json_output, show_diff)


@app.command("substitute")
def substitute_cmd(
    file: Path = FILE_ARG,
    old: str = typer.Option(..., "--old", help="Literal text to replace"),
    new: str = typer.Option(..., "--new", help="Replacement text"),
    dry_run: bool = DRY_RUN_OPT,
    backup: bool = BACKUP_OPT,
    show_diff: bool = DIFF_OPT,
    json_output: bool = JSON_OPT,
):
    """
    Replace a literal piece of text.
    """
    run_operations(file, [TextSubstitution(old=old, new=new)], dry_run, backup, json_output, show_diff)
