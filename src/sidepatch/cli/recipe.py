"""
CLI Recipe Commands

apply, list, show
"""

import typer
from pathlib import Path
from typing import List, Optional

from sidepatch.exceptions import ConfigError, PatchIOError, RecipeError
from sidepatch.patching import PatchFacade
from sidepatch.recipes import BUILTIN_RECIPES, resolve_recipe, with_extension_points
from .output import get_console, print_error, print_json, print_recipe_report, wants_json

app = typer.Typer()
console = get_console()


@app.command("apply")
def apply_cmd(
    root: Path = typer.Argument(..., help="Checkout root the recipe paths are relative to", exists=True, file_okay=False),
    recipe_file: Optional[Path] = typer.Option(None, "--recipe", "-r", help="JSON recipe file", dir_okay=False),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Built-in recipe name (default: blink-sideload)"),
    extension_point: Optional[List[str]] = typer.Option(
        None,
        "--extension-point",
        "-e",
        help="Override the probe allow-list; repeat for several",
    ),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report what would change without writing"),
    backup: bool = typer.Option(False, "--backup", help="Keep timestamped copies under .sidepatch/backups"),
    show_diff: bool = typer.Option(False, "--diff", help="Show unified diffs"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    Apply a recipe to a checkout.

    Missing files and functions are skipped with a warning. Exits 1 if a
    file cannot be read or written, leaving that file untouched.
    """
    try:
        recipe = resolve_recipe(str(recipe_file) if recipe_file else None, name)
        if extension_point:
            recipe = with_extension_points(recipe, extension_point)
    except RecipeError as e:
        print_error("INVALID_RECIPE", str(e), json_output, e.source)
        raise typer.Exit(code=1)

    facade = PatchFacade()
    try:
        report = facade.apply_recipe(str(root), recipe, dry_run=dry_run, backup=backup or None)
    except PatchIOError as e:
        print_error("IO_ERROR", str(e), json_output, e.file_path)
        raise typer.Exit(code=1)
    except ConfigError as e:
        print_error("INVALID_RECIPE", str(e), json_output, recipe.name)
        raise typer.Exit(code=1)

    if wants_json(json_output):
        print_json(report.model_dump(mode="json"))
    else:
        print_recipe_report(report, show_diff)


@app.command("list")
def list_cmd(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """
    List built-in recipes.
    """
    if wants_json(json_output):
        print_json([
            {"name": r.name, "description": r.description, "files": len(r.files)}
            for r in BUILTIN_RECIPES.values()
        ])
        return

    for recipe in BUILTIN_RECIPES.values():
        console.print(f"[bold]{recipe.name}[/bold] [dim]({len(recipe.files)} files)[/dim] {recipe.description or ''}")


@app.command("show")
def show_cmd(
    name: str = typer.Argument(..., help="Built-in recipe name"),
):
    """
    Print a built-in recipe as JSON, as a starting point for custom recipes.
    """
    try:
        recipe = resolve_recipe(name=name)
    except RecipeError as e:
        print_error("INVALID_RECIPE", str(e), input_value=name)
        raise typer.Exit(code=1)
    print_json(recipe.model_dump(mode="json", exclude_none=True), minified=False)
