"""Tests for the functional test sequence and product seeding."""

from __future__ import annotations

from catalogbench.client.config import DEFAULT_SAMPLE_PRODUCTS, ClientConfig, Endpoints
from catalogbench.client.invoker import EndpointInvoker
from catalogbench.client.scenarios import (
    UPDATED_PRODUCT_NAME,
    add_products,
    run_functional_test,
    run_single_endpoint,
    view_products,
)


class TestFunctionalTest:
    async def test_all_steps_succeed(self, catalog_server, memory_store):
        config = ClientConfig(base_url=catalog_server)
        async with EndpointInvoker.from_config(config) as invoker:
            results = await run_functional_test(invoker, config)

        assert [(r.method, r.status_code) for r in results] == [
            ("GET", 200),
            ("POST", 201),
            ("GET", 200),
            ("PUT", 200),
            ("DELETE", 200),
        ]
        assert all(r.succeeded for r in results)
        assert results[3].data["name"] == UPDATED_PRODUCT_NAME
        assert results[2].endpoint == f"/api/products/{results[1].product_id}"
        # the product it created is gone again
        assert len(memory_store) == 0

    async def test_failed_create_skips_dependent_steps(self, stub_server):
        config = ClientConfig(base_url=stub_server, endpoints=Endpoints(products="/reject/products"))
        async with EndpointInvoker.from_config(config) as invoker:
            results = await run_functional_test(invoker, config)

        assert len(results) == 2
        assert results[0].succeeded
        assert not results[1].succeeded
        assert results[1].details == "Product validation failed"

    async def test_service_down(self, unused_tcp_port):
        config = ClientConfig(base_url=f"http://127.0.0.1:{unused_tcp_port}")
        async with EndpointInvoker.from_config(config) as invoker:
            results = await run_functional_test(invoker, config)

        assert len(results) == 2
        assert all(r.result == "Network Error" for r in results)


class TestSeeding:
    async def test_add_products_in_order(self, catalog_server, memory_store):
        config = ClientConfig(base_url=catalog_server)
        async with EndpointInvoker.from_config(config) as invoker:
            results = await add_products(invoker, config, DEFAULT_SAMPLE_PRODUCTS)

        assert len(results) == len(DEFAULT_SAMPLE_PRODUCTS)
        assert all(r.status_code == 201 for r in results)
        assert [r.data["name"] for r in results] == [p["name"] for p in DEFAULT_SAMPLE_PRODUCTS]
        assert len(memory_store) == len(DEFAULT_SAMPLE_PRODUCTS)

    async def test_invalid_product_fails_others_succeed(self, catalog_server, widget):
        config = ClientConfig(base_url=catalog_server)
        products = [widget, {**widget, "price": -5}, {**widget, "name": "Second"}]
        async with EndpointInvoker.from_config(config) as invoker:
            results = await add_products(invoker, config, products)

        assert [r.succeeded for r in results] == [True, False, True]
        assert results[1].result == "400 Error"

    async def test_view_products(self, catalog_server, widget):
        config = ClientConfig(base_url=catalog_server)
        async with EndpointInvoker.from_config(config) as invoker:
            await add_products(invoker, config, [widget])
            result = await view_products(invoker, config)

        assert result.succeeded
        assert [p["name"] for p in result.data] == ["Widget"]


async def test_single_endpoint(catalog_server, widget):
    async with EndpointInvoker(catalog_server) as invoker:
        created = await run_single_endpoint(invoker, "POST", "/api/products", widget)
        deleted = await run_single_endpoint(invoker, "DELETE", f"/api/products/{created.product_id}")

    assert created.succeeded
    assert deleted.data == {"message": "Product deleted"}
