"""``catalogbench serve`` -- run the product catalog service."""

from __future__ import annotations

import typer
from rich.console import Console

from catalogbench._internal.config import load_settings
from catalogbench._internal.errors import CatalogBenchError
from catalogbench.service.app import run_server

console = Console(stderr=True)


def serve_cmd() -> None:
    """Run the catalog service.

    Settings come from the environment (and a ``.env`` file): ``MONGODB_URI``,
    ``PORT``, ``HOST``, ``CATALOGBENCH_LOG_LEVEL`` and ``CATALOGBENCH_LOG_JSON``.
    """
    try:
        settings = load_settings()
        run_server(settings)
    except CatalogBenchError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc
