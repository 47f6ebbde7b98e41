"""CLI entry point for contentquery.

This module provides the main CLI interface using Typer framework.
"""

import typer
from typing import Annotated, Optional
from contentquery import __version__
from contentquery.cli.commands import fetch, config_show, config_init


def version_callback(value: bool) -> None:
    """Display version information and exit.

    Args:
        value: Whether version flag was set

    Raises:
        typer.Exit: Always exits after displaying version
    """
    if value:
        typer.echo(f"contentquery version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    help="Query a directory of content documents with filters, search and sorting",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", callback=version_callback, is_eager=True,
                     help="Show version and exit")
    ] = None,
) -> None:
    """Query a directory of content documents."""
    pass


app.command(name="fetch")(fetch)
app.command(name="config-show")(config_show)
app.command(name="config-init")(config_init)


def run() -> None:
    """Entry point function for CLI."""
    app()


if __name__ == "__main__":
    run()
