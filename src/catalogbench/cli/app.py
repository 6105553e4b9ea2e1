"""Main Typer application -- entry point for the ``catalogbench`` CLI."""

from __future__ import annotations

import typer

from catalogbench import __version__
from catalogbench.cli.serve import serve_cmd
from catalogbench.cli.tester import tester_cmd

app = typer.Typer(
    name="catalogbench",
    help="Product catalog service and interactive API test client.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("serve", help="Run the product catalog service.")(serve_cmd)
app.command("tester", help="Start the interactive API test client.")(tester_cmd)


def _version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version was passed.
    """
    if value:
        typer.echo(f"catalogbench {__version__}")
        raise typer.Exit


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """catalogbench -- product catalog service and API tester."""
