"""Functional test sequences and product seeding."""

from __future__ import annotations

import random
from typing import TYPE_CHECKING

from catalogbench._internal.logging import get_logger
from catalogbench._internal.types import DEFAULT_CATEGORY, SUGGESTED_CATEGORIES

if TYPE_CHECKING:
    from collections.abc import Iterable

    from catalogbench._internal.types import JsonDict
    from catalogbench.client.config import ClientConfig
    from catalogbench.client.invoker import EndpointInvoker, InvocationResult

logger = get_logger("client.scenarios")

UPDATED_PRODUCT_NAME = "Updated Test Product"

_RANDOM_CATEGORIES = tuple(c for c in SUGGESTED_CATEGORIES if c != DEFAULT_CATEGORY)
_ADJECTIVES = ("Premium", "Deluxe", "Professional", "Basic", "Advanced", "Smart", "Ultra", "Super")
_PRODUCT_TYPES = ("Widget", "Gadget", "Tool", "Device", "Kit", "System", "Pack", "Set")


async def run_functional_test(
    invoker: EndpointInvoker,
    config: ClientConfig,
) -> list[InvocationResult]:
    """Exercise every product endpoint once.

    Sequence: list, create, then get, update and delete of the created
    product. When create fails the three dependent steps are not attempted
    and do not appear in the results.

    Args:
        invoker: Open invoker.
        config: Endpoint paths and the default payload.

    Returns:
        One result per step that ran, in order.
    """
    endpoints = config.endpoints
    payload = dict(config.test_data.product)

    results = [await invoker.invoke("GET", endpoints.products)]

    created = await invoker.invoke("POST", endpoints.products, payload)
    results.append(created)

    if not created.succeeded or created.product_id is None:
        logger.debug("Create failed, skipping dependent steps")
        return results

    product_path = endpoints.product(created.product_id)
    results.append(await invoker.invoke("GET", product_path))
    results.append(
        await invoker.invoke("PUT", product_path, {**payload, "name": UPDATED_PRODUCT_NAME}),
    )
    results.append(await invoker.invoke("DELETE", product_path))
    return results


async def run_single_endpoint(
    invoker: EndpointInvoker,
    method: str,
    path: str,
    payload: JsonDict | None = None,
) -> InvocationResult:
    """Invoke one operator-chosen endpoint."""
    return await invoker.invoke(method, path, payload)


async def view_products(invoker: EndpointInvoker, config: ClientConfig) -> InvocationResult:
    """List all products; the decoded array is in ``result.data``."""
    return await invoker.invoke("GET", config.endpoints.products)


async def add_products(
    invoker: EndpointInvoker,
    config: ClientConfig,
    products: Iterable[JsonDict],
) -> list[InvocationResult]:
    """Create products one after another, in the order given.

    Args:
        invoker: Open invoker.
        config: Supplies the products endpoint path.
        products: Payloads to create.

    Returns:
        One create result per payload, in input order.
    """
    results = []
    for product in products:
        results.append(await invoker.invoke("POST", config.endpoints.products, product))
    return results


def generate_random_product(index: int, rng: random.Random | None = None) -> JsonDict:
    """Build a plausible random product payload.

    Args:
        index: Sequence number used in the name and description.
        rng: Random source, for reproducible output.

    Returns:
        A payload accepted by the create endpoint.
    """
    rng = rng or random.Random()  # noqa: S311
    return {
        "name": f"{rng.choice(_ADJECTIVES)} {rng.choice(_PRODUCT_TYPES)} {index}",
        "description": f"Auto-generated test product #{index}",
        "price": round(rng.random() * 1000, 2),
        "stock": rng.randint(1, 100),
        "category": rng.choice(_RANDOM_CATEGORIES),
    }
