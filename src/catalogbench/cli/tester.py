"""``catalogbench tester`` -- interactive API test client."""

from __future__ import annotations

import logging

import typer
from rich.console import Console

from catalogbench._internal.errors import CatalogBenchError
from catalogbench._internal.logging import get_logger, setup_logging
from catalogbench.client.config import config_path_from_env, load_client_config
from catalogbench.client.menu import TesterMenu

console = Console(stderr=True)
logger = get_logger("cli.tester")


def tester_cmd() -> None:
    """Start the interactive menu.

    The configuration file is read from ``CATALOGBENCH_CONFIG``
    (default ``./config.json``) and created with defaults if missing.
    """
    # Warnings only, so log lines stay out of the menu
    setup_logging(logging.WARNING)
    config_path = config_path_from_env()

    try:
        config = load_client_config(config_path)
    except CatalogBenchError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    menu = TesterMenu(config, config_path)
    try:
        menu.run()
    except (KeyboardInterrupt, EOFError):
        menu.console.print("\n[yellow]Goodbye![/yellow]")
    except Exception as exc:
        logger.exception("Test client terminated unexpectedly")
        console.print(f"[red]Unexpected error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
