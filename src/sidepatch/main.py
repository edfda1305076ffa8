import typer

from sidepatch import __version__
from sidepatch.logging_config import logger, setup_logging
from sidepatch.cli import patch, recipe
from sidepatch.cli.config import CLIConfig

app = typer.Typer()


# Global CLI callback for flags that apply to all commands
@app.callback()
def global_options(
    machine: bool = typer.Option(
        False,
        "--machine",
        "-M",
        help="Machine mode: JSON output and no console logging (also via SIDEPATCH_MACHINE_MODE env var)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
):
    """
    sidepatch: idempotent source patches for sideload builds.

    Runs between fetching a checkout and building it. Exit code 1 means a
    file could not be read or written and the build should stop.
    """
    if machine:
        CLIConfig.set_machine_mode(True)

    setup_logging(
        level="DEBUG" if verbose else "INFO",
        suppress_console=CLIConfig.is_machine_mode(),
        force=True,
    )


app.add_typer(patch.app, name="patch", help="Single-file patch commands (replace-body, guard, wrap-call, ...)")
app.add_typer(recipe.app, name="recipe", help="Recipe commands (apply, list, show)")


@app.command()
def version():
    """
    Prints the current version of sidepatch.
    """
    logger.debug("version requested")
    typer.echo(f"sidepatch v{__version__}")


if __name__ == "__main__":
    app()
