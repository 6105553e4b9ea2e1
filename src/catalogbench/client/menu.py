"""Interactive menu of the API test client.

Each menu action runs its network calls in a fresh event loop and returns
to the main menu. Only the configuration survives between actions.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, TypeVar

from rich.console import Console
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt

from catalogbench._internal.errors import ConfigError
from catalogbench._internal.logging import get_logger
from catalogbench._internal.types import SUGGESTED_CATEGORIES
from catalogbench.client.config import EDITABLE_SETTINGS, apply_edit, save_client_config
from catalogbench.client.invoker import EndpointInvoker
from catalogbench.client.render import print_results, stress_table, title_panel
from catalogbench.client.scenarios import (
    add_products,
    generate_random_product,
    run_functional_test,
    run_single_endpoint,
    view_products,
)
from catalogbench.client.stress import run_stress_test

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence
    from pathlib import Path

    from catalogbench._internal.types import JsonDict
    from catalogbench.client.config import ClientConfig
    from catalogbench.client.invoker import InvocationResult
    from catalogbench.client.stress import StressTestResult

logger = get_logger("client.menu")

T = TypeVar("T")

ADD_PRODUCTS = "Add Products"
VIEW_PRODUCTS = "View Products"
CRUD_TESTS = "Run Basic CRUD Tests"
SINGLE_ENDPOINT = "Test Single Endpoint"
STRESS_TEST = "Run Stress Test"
MODIFY_CONFIG = "Modify Configuration"
EXIT = "Exit"

MAIN_CHOICES = (
    ADD_PRODUCTS,
    VIEW_PRODUCTS,
    CRUD_TESTS,
    SINGLE_ENDPOINT,
    STRESS_TEST,
    MODIFY_CONFIG,
    EXIT,
)

SAMPLE_SOURCE = "Use sample products"
CUSTOM_SOURCE = "Create custom products"
RANDOM_SOURCE = "Create random products"

HTTP_METHODS = ("GET", "POST", "PUT", "DELETE")


class TesterMenu:
    """Menu loop driving the test client.

    Attributes:
        config: Current configuration. Replaced after every successful edit.
        config_path: File the configuration is written back to.
    """

    def __init__(
        self,
        config: ClientConfig,
        config_path: Path,
        console: Console | None = None,
    ) -> None:
        self.config = config
        self.config_path = config_path
        self.console = console or Console()
        self.last_results: list[InvocationResult] = []

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    def run(self) -> None:
        """Show the main menu until the operator picks Exit."""
        while True:
            self.console.print(title_panel(self.config))
            action = self._choose("What would you like to do?", MAIN_CHOICES)
            if action == EXIT:
                self.console.print("[yellow]Goodbye![/yellow]")
                return
            self.dispatch(action)

    def dispatch(self, action: str) -> None:
        """Run one main-menu action."""
        handlers = {
            ADD_PRODUCTS: self.add_products,
            VIEW_PRODUCTS: self.view_products,
            CRUD_TESTS: self.run_crud_tests,
            SINGLE_ENDPOINT: self.test_single_endpoint,
            STRESS_TEST: self.run_stress_test,
            MODIFY_CONFIG: self.modify_config,
        }
        logger.debug("Menu action: %s", action)
        handlers[action]()

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def add_products(self) -> None:
        """Seed the catalog from samples, operator input or random data."""
        source = self._choose(
            "How would you like to add products?",
            (SAMPLE_SOURCE, CUSTOM_SOURCE, RANDOM_SOURCE),
        )

        if source == SAMPLE_SOURCE:
            products = [dict(p) for p in self.config.test_data.sample_products]
        else:
            count = self._ask_int("How many products would you like to add?", minimum=1, default=1)
            if source == CUSTOM_SOURCE:
                products = [self._prompt_product(i + 1) for i in range(count)]
            else:
                products = [generate_random_product(i + 1) for i in range(count)]

        self.console.print(f"\n[cyan]Adding {len(products)} product(s)...[/cyan]\n")
        results = self._run_with_invoker(
            lambda invoker: add_products(invoker, self.config, products),
            f"Creating {len(products)} product(s)",
        )
        self._show(results, "Product Addition Results")

    def view_products(self) -> None:
        """List the catalog and print the returned records."""
        result = self._run_with_invoker(
            lambda invoker: view_products(invoker, self.config),
            f"GET {self.config.endpoints.products}",
        )
        self._show([result])
        if result.succeeded:
            self.console.print("\n[bold]Current Products:[/bold]")
            self.console.print_json(data=result.data)

    def run_crud_tests(self) -> None:
        """Run the list/create/get/update/delete sequence."""
        self.console.print("\n[cyan]Running basic CRUD tests...[/cyan]\n")
        results = self._run_with_invoker(
            lambda invoker: run_functional_test(invoker, self.config),
            "Running CRUD tests",
        )
        self._show(results)

    def test_single_endpoint(self) -> None:
        """Invoke one endpoint chosen by the operator."""
        method = self._choose("Select HTTP method:", HTTP_METHODS)
        path = Prompt.ask(
            "Endpoint path",
            console=self.console,
            default=self.config.endpoints.products,
        ).strip()
        if not path.startswith("/"):
            path = f"/{path}"

        payload: JsonDict | None = None
        if method in {"POST", "PUT"} and Confirm.ask(
            "Send the default test payload?",
            console=self.console,
            default=True,
        ):
            payload = dict(self.config.test_data.product)

        result = self._run_with_invoker(
            lambda invoker: run_single_endpoint(invoker, method, path, payload),
            f"{method} {path}",
        )
        self._show([result])

    def run_stress_test(self) -> None:
        """Stress one endpoint for the configured duration."""
        products = self.config.endpoints.products
        list_target = f"GET {products}"
        single_target = f"GET {products}/:id"
        create_target = f"POST {products}"
        target = self._choose(
            "Select endpoint to stress test:",
            (list_target, single_target, create_target),
        )

        method, path, payload = "GET", products, None
        if target == single_target:
            product_id = Prompt.ask("Product ID", console=self.console).strip()
            path = self.config.endpoints.product(product_id)
        elif target == create_target:
            method, payload = "POST", dict(self.config.test_data.product)

        settings = self.config.stress_test
        self.console.print(
            f"\n[yellow]Starting stress test for {method} {path}[/yellow]\n"
            f"[dim]Running for {settings.duration} seconds with "
            f"{settings.concurrent_requests} concurrent requests[/dim]\n",
        )

        with self.console.status("Stress testing in progress") as status:

            def _on_batch(partial: StressTestResult) -> None:
                status.update(
                    f"Stress testing in progress: {partial.batches} batches, "
                    f"{partial.successful} ok, {partial.failed} failed",
                )

            async def _run() -> StressTestResult:
                async with EndpointInvoker.from_config(self.config) as invoker:
                    return await run_stress_test(
                        invoker,
                        settings,
                        method,
                        path,
                        payload,
                        on_batch=_on_batch,
                    )

            result = asyncio.run(_run())

        self.console.print(stress_table(result))

    def modify_config(self) -> None:
        """Change one setting and write the whole configuration back."""
        setting = self._choose("Select setting to modify:", EDITABLE_SETTINGS)
        value = Prompt.ask("Enter new value", console=self.console)
        try:
            updated = apply_edit(self.config, setting, value)
            save_client_config(updated, self.config_path)
        except ConfigError as exc:
            self.console.print(f"[red]Configuration not changed:[/red] {exc}")
            return
        self.config = updated
        self.console.print("[green]Configuration updated successfully![/green]")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _run_with_invoker(
        self,
        action: Callable[[EndpointInvoker], Awaitable[T]],
        description: str,
    ) -> T:
        async def _run() -> T:
            async with EndpointInvoker.from_config(self.config) as invoker:
                return await action(invoker)

        with self.console.status(description):
            return asyncio.run(_run())

    def _show(self, results: Sequence[InvocationResult], title: str = "Test Results") -> None:
        self.last_results = list(results)
        self.console.print()
        print_results(self.console, self.last_results, title)

    def _choose(self, message: str, options: Sequence[str]) -> str:
        self.console.print(f"\n[bold]{message}[/bold]")
        for number, option in enumerate(options, start=1):
            self.console.print(f"  [cyan]{number}[/cyan]. {option}")
        answer = Prompt.ask(
            "Choice",
            console=self.console,
            choices=[str(n) for n in range(1, len(options) + 1)],
            show_choices=False,
        )
        return options[int(answer) - 1]

    def _ask_int(self, message: str, *, minimum: int, default: int | None = None) -> int:
        while True:
            if default is None:
                value = IntPrompt.ask(message, console=self.console)
            else:
                value = IntPrompt.ask(message, console=self.console, default=default)
            if value >= minimum:
                return value
            self.console.print(f"[red]Please enter a number >= {minimum}[/red]")

    def _ask_text(self, message: str) -> str:
        while True:
            value = Prompt.ask(message, console=self.console).strip()
            if value:
                return value
            self.console.print("[red]A value is required[/red]")

    def _prompt_product(self, index: int) -> JsonDict:
        self.console.print(f"\n[cyan]Enter details for product #{index}:[/cyan]")
        name = self._ask_text("Product name")
        description = self._ask_text("Product description")
        while True:
            price = FloatPrompt.ask("Price", console=self.console)
            if price >= 0:
                break
            self.console.print("[red]Price must be greater than or equal to 0[/red]")
        stock = self._ask_int("Stock quantity", minimum=0)
        category = self._choose("Category:", SUGGESTED_CATEGORIES)
        return {
            "name": name,
            "description": description,
            "price": price,
            "stock": stock,
            "category": category,
        }
