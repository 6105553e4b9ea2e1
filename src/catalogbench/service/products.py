"""Request handlers for the ``/api/products`` resource."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from aiohttp import web

from catalogbench._internal.errors import ProductNotFound, ProductValidationError, StoreError
from catalogbench._internal.logging import get_logger
from catalogbench.service.models import merge_fields, validate_fields
from catalogbench.service.store import ProductStore

if TYPE_CHECKING:
    from catalogbench._internal.types import JsonDict

logger = get_logger("service.products")

STORE_KEY = web.AppKey("product_store", ProductStore)

PRODUCTS_PATH = "/api/products"
PRODUCT_PATH = "/api/products/{id}"


def _message(status: int, message: str) -> web.Response:
    return web.json_response({"message": message}, status=status)


def _store_failure(exc: StoreError) -> web.Response:
    logger.error("Store operation failed: %s", exc)
    return _message(500, str(exc))


async def _read_body(request: web.Request) -> Any:
    try:
        return await request.json()
    except json.JSONDecodeError as exc:
        msg = f"Request body is not valid JSON: {exc.msg}"
        raise ProductValidationError(msg) from exc
    except (UnicodeDecodeError, LookupError) as exc:
        # undecodable bytes or an unknown charset= parameter
        msg = f"Request body is not valid JSON: {exc}"
        raise ProductValidationError(msg) from exc


async def _fetch_existing(store: ProductStore, product_id: str) -> JsonDict:
    product = await store.get_product(product_id)
    if product is None:
        raise ProductNotFound(product_id)
    return product


async def list_products(request: web.Request) -> web.Response:
    """``GET /api/products`` -- every stored product."""
    store = request.app[STORE_KEY]
    try:
        products = await store.list_products()
    except StoreError as exc:
        return _store_failure(exc)
    return web.json_response(products)


async def get_product(request: web.Request) -> web.Response:
    """``GET /api/products/{id}`` -- one product or 404."""
    store = request.app[STORE_KEY]
    product_id = request.match_info["id"]
    try:
        product = await _fetch_existing(store, product_id)
    except ProductNotFound:
        return _message(404, "Product not found")
    except StoreError as exc:
        return _store_failure(exc)
    return web.json_response(product)


async def create_product(request: web.Request) -> web.Response:
    """``POST /api/products`` -- validate, assign an identifier, store.

    Responds 201 with the stored record, 400 when the body fails schema
    checks.
    """
    store = request.app[STORE_KEY]
    try:
        fields = validate_fields(await _read_body(request))
        product = await store.insert_product(fields.to_document())
    except ProductValidationError as exc:
        return _message(400, str(exc))
    except StoreError as exc:
        return _store_failure(exc)

    logger.info("Created product %s", product["_id"])
    return web.json_response(product, status=201)


async def update_product(request: web.Request) -> web.Response:
    """``PUT /api/products/{id}`` -- overlay the given fields onto the record.

    Fields absent from the body keep their stored values. There is no
    concurrency check, so the last writer wins.
    """
    store = request.app[STORE_KEY]
    product_id = request.match_info["id"]
    try:
        changes = await _read_body(request)
        existing = await _fetch_existing(store, product_id)
        fields = merge_fields(existing, changes)
        product = await store.replace_product(product_id, fields.to_document())
        if product is None:
            raise ProductNotFound(product_id)
    except ProductNotFound:
        return _message(404, "Product not found")
    except ProductValidationError as exc:
        return _message(400, str(exc))
    except StoreError as exc:
        return _store_failure(exc)

    logger.info("Updated product %s", product_id)
    return web.json_response(product)


async def delete_product(request: web.Request) -> web.Response:
    """``DELETE /api/products/{id}`` -- remove the record."""
    store = request.app[STORE_KEY]
    product_id = request.match_info["id"]
    try:
        await _fetch_existing(store, product_id)
        if not await store.delete_product(product_id):
            raise ProductNotFound(product_id)
    except ProductNotFound:
        return _message(404, "Product not found")
    except StoreError as exc:
        return _store_failure(exc)

    logger.info("Deleted product %s", product_id)
    return _message(200, "Product deleted")


def setup_routes(app: web.Application) -> None:
    """Register the product routes on ``app``."""
    app.router.add_get(PRODUCTS_PATH, list_products)
    app.router.add_post(PRODUCTS_PATH, create_product)
    app.router.add_get(PRODUCT_PATH, get_product)
    app.router.add_put(PRODUCT_PATH, update_product)
    app.router.add_delete(PRODUCT_PATH, delete_product)
