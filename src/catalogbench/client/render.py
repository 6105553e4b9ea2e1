"""Rich rendering of invocation and stress test results."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from collections.abc import Sequence

    from rich.console import Console

    from catalogbench.client.config import ClientConfig
    from catalogbench.client.invoker import InvocationResult
    from catalogbench.client.stress import StressTestResult


def title_panel(config: ClientConfig) -> Panel:
    """Banner shown above the main menu."""
    return Panel(
        f"[bold]Target:[/bold]      {config.base_url}\n"
        f"[bold]Products:[/bold]    {config.endpoints.products}\n"
        f"[bold]Stress test:[/bold] {config.stress_test.concurrent_requests} concurrent, "
        f"{config.stress_test.duration}s, {config.stress_test.request_delay}ms delay",
        title="API Tester",
        border_style="cyan",
    )


def results_table(results: Sequence[InvocationResult], title: str = "Test Results") -> Table:
    """Build a table with one row per invocation.

    Args:
        results: Invocation outcomes in the order they ran.
        title: Table title.

    Returns:
        Formatted Rich Table.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan", expand=True)
    table.add_column("Endpoint", overflow="fold")
    table.add_column("Method")
    table.add_column("Status")
    table.add_column("Time (ms)", justify="right")
    table.add_column("Result")
    table.add_column("Details", overflow="fold")

    for r in results:
        status = f"[green]{r.status}[/green]" if r.succeeded else f"[red]{r.status}[/red]"
        table.add_row(
            r.endpoint,
            r.method,
            status,
            f"{r.time_ms:.0f}",
            r.result,
            r.details or "",
        )
    return table


def stress_table(result: StressTestResult) -> Table:
    """Build the summary table printed after a stress test."""
    table = Table(
        title="Stress Test Results",
        show_header=True,
        header_style="bold green",
        expand=True,
    )
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    table.add_row("Target", f"{result.method} {result.endpoint}")
    table.add_row("Batches", str(result.batches))
    table.add_row("Wall Time", f"{result.wall_time_s:.1f}s")
    table.add_row("Successful Requests", f"[green]{result.successful}[/green]")
    table.add_row("Failed Requests", f"[red]{result.failed}[/red]")
    table.add_row("Average Response Time", f"{result.avg_response_time_ms:.0f}ms")
    table.add_row("p50 Latency", f"{result.latency_p50:.1f}ms")
    table.add_row("p95 Latency", f"{result.latency_p95:.1f}ms")
    table.add_row("p99 Latency", f"{result.latency_p99:.1f}ms")
    table.add_row("Max Latency", f"{result.latency_max:.1f}ms")
    return table


def print_results(console: Console, results: Sequence[InvocationResult], title: str = "Test Results") -> None:
    """Print an invocation table, or a notice when there is nothing to show."""
    if not results:
        console.print("[yellow]No requests were made.[/yellow]")
        return
    console.print(results_table(results, title))
