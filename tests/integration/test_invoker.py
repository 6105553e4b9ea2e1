"""Tests for EndpointInvoker outcome classification."""

from __future__ import annotations

import pytest

from catalogbench.client.config import ClientConfig, StressTestSettings
from catalogbench.client.invoker import FAILED, SUCCESS, EndpointInvoker, InvocationResult


class TestInvocationResult:
    def test_defaults(self):
        result = InvocationResult(endpoint="/x", method="GET", status=SUCCESS, time_ms=1.0, result="200 OK")
        assert result.details is None
        assert result.status_code == 0
        assert result.product_id is None
        assert result.succeeded is True

    def test_failed_is_not_succeeded(self):
        result = InvocationResult(endpoint="/x", method="GET", status=FAILED, time_ms=1.0, result="Network Error")
        assert result.succeeded is False


class TestEndpointInvoker:
    async def test_create_success_reports_id(self, catalog_server, widget):
        async with EndpointInvoker(catalog_server) as invoker:
            result = await invoker.invoke("post", "/api/products", widget)

        assert result.status == SUCCESS
        assert result.method == "POST"
        assert result.endpoint == "/api/products"
        assert result.status_code == 201
        assert result.result == "201 OK"
        assert result.product_id
        assert result.details == f"ID: {result.product_id}"
        assert result.time_ms > 0

    async def test_list_success_has_no_details(self, catalog_server):
        async with EndpointInvoker(catalog_server) as invoker:
            result = await invoker.invoke("GET", "/api/products")
        assert result.succeeded
        assert result.data == []
        assert result.details is None

    async def test_not_found_uses_message(self, catalog_server):
        async with EndpointInvoker(catalog_server) as invoker:
            result = await invoker.invoke("GET", "/api/products/doesnotexist")

        assert result.status == FAILED
        assert result.status_code == 404
        assert result.result == "404 Error"
        assert result.details == "Product not found"

    @pytest.mark.parametrize("status", [400, 409, 500])
    async def test_error_statuses_fail(self, stub_server, status):
        async with EndpointInvoker(stub_server) as invoker:
            result = await invoker.invoke("GET", f"/status/{status}")
        assert result.status == FAILED
        assert result.result == f"{status} Error"
        assert result.details == f"stub status {status}"

    async def test_non_error_status_is_success(self, stub_server):
        async with EndpointInvoker(stub_server) as invoker:
            result = await invoker.invoke("GET", "/status/202")
        assert result.status == SUCCESS
        assert result.result == "202 OK"

    async def test_error_without_body_uses_reason(self, stub_server):
        async with EndpointInvoker(stub_server) as invoker:
            result = await invoker.invoke("GET", "/bare-error")
        assert result.status == FAILED
        assert result.result == "503 Error"
        assert result.details == "Service Unavailable"

    async def test_non_json_body(self, stub_server):
        async with EndpointInvoker(stub_server) as invoker:
            result = await invoker.invoke("GET", "/text")
        assert result.succeeded
        assert result.data is None

    async def test_refused_connection_is_network_error(self, unused_tcp_port):
        async with EndpointInvoker(f"http://127.0.0.1:{unused_tcp_port}") as invoker:
            result = await invoker.invoke("GET", "/api/products")

        assert result.status == FAILED
        assert result.result == "Network Error"
        assert result.status_code == 0
        assert result.details

    async def test_timeout_is_network_error(self, stub_server):
        async with EndpointInvoker(stub_server, timeout_ms=100) as invoker:
            result = await invoker.invoke("GET", "/slow?delay=1.0")

        assert result.result == "Network Error"
        assert result.time_ms < 1000

    async def test_trailing_slash_in_base_url(self, catalog_server):
        async with EndpointInvoker(f"{catalog_server}/") as invoker:
            result = await invoker.invoke("GET", "/health")
        assert result.succeeded

    async def test_on_result_receives_every_outcome(self, catalog_server):
        seen: list[InvocationResult] = []
        async with EndpointInvoker(catalog_server, on_result=seen.append) as invoker:
            first = await invoker.invoke("GET", "/health")
            second = await invoker.invoke("GET", "/api/products/doesnotexist")
        assert seen == [first, second]

    async def test_outside_context_manager_raises(self, catalog_server):
        invoker = EndpointInvoker(catalog_server)
        with pytest.raises(RuntimeError, match="async context manager"):
            await invoker.invoke("GET", "/health")

    async def test_from_config(self, catalog_server):
        config = ClientConfig(base_url=catalog_server, stress_test=StressTestSettings(timeout_ms=1500))
        invoker = EndpointInvoker.from_config(config)
        assert invoker.base_url == catalog_server
        async with invoker:
            assert (await invoker.invoke("GET", config.endpoints.health)).succeeded
