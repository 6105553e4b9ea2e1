"""Shared test fixtures for the catalogbench test suite."""

from __future__ import annotations

import asyncio
import logging
import socket
import threading
from typing import TYPE_CHECKING

import pytest
from aiohttp import web

from catalogbench.client.config import ClientConfig, StressTestSettings, save_client_config
from catalogbench.service.app import create_app
from catalogbench.service.store import MemoryProductStore

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterator
    from pathlib import Path


WIDGET = {
    "name": "Widget",
    "description": "x",
    "price": 9.99,
    "stock": 5,
    "category": "toys",
}


# =============================================================================
# Pytest configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-apply markers based on test directory structure."""
    for item in items:
        test_path = str(item.fspath)
        if "/unit/" in test_path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
        elif "/e2e/" in test_path:
            item.add_marker(pytest.mark.e2e)


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Drop handlers a CLI run bound to its captured (then closed) stderr."""
    yield
    pkg_logger = logging.getLogger("catalogbench")
    for handler in list(pkg_logger.handlers):
        pkg_logger.removeHandler(handler)
    pkg_logger.setLevel(logging.NOTSET)
    pkg_logger.propagate = True


# =============================================================================
# Network utilities
# =============================================================================


def _get_free_port() -> int:
    """Find an available port on localhost."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("", 0))
        s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        return s.getsockname()[1]


async def _start(app: web.Application) -> tuple[web.AppRunner, str]:
    port = _get_free_port()
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    return runner, f"http://127.0.0.1:{port}"


# =============================================================================
# Stub server handlers (client failure modes)
# =============================================================================


async def _status_handler(request: web.Request) -> web.Response:
    """Return the status given in the path with a JSON message body."""
    status = int(request.match_info["status"])
    return web.json_response({"message": f"stub status {status}"}, status=status)


async def _slow_handler(request: web.Request) -> web.Response:
    """Respond after ``?delay=`` seconds."""
    await asyncio.sleep(float(request.query.get("delay", "0.1")))
    return web.json_response({"delayed": True})


async def _text_handler(request: web.Request) -> web.Response:
    """Plain-text body that is not JSON."""
    return web.Response(text="not json at all")


async def _bare_error_handler(request: web.Request) -> web.Response:
    """Error status with an empty body."""
    return web.Response(status=503)


async def _reject_create_handler(request: web.Request) -> web.Response:
    """A products endpoint whose list works and whose create always fails."""
    if request.method == "POST":
        return web.json_response({"message": "Product validation failed"}, status=400)
    return web.json_response([])


def _create_stub_app() -> web.Application:
    app = web.Application()
    app.router.add_route("*", "/status/{status}", _status_handler)
    app.router.add_get("/slow", _slow_handler)
    app.router.add_get("/text", _text_handler)
    app.router.add_get("/bare-error", _bare_error_handler)
    app.router.add_route("*", "/reject/products", _reject_create_handler)
    return app


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def memory_store() -> MemoryProductStore:
    """Empty in-memory product store."""
    return MemoryProductStore()


@pytest.fixture
async def catalog_server(memory_store: MemoryProductStore) -> AsyncIterator[str]:
    """The real catalog service backed by ``memory_store``.

    Returns the base URL (e.g., 'http://127.0.0.1:54321').
    """
    runner, base_url = await _start(create_app(memory_store))
    yield base_url
    await runner.cleanup()


@pytest.fixture
async def stub_server() -> AsyncIterator[str]:
    """Server with canned error, slow and non-JSON responses."""
    runner, base_url = await _start(_create_stub_app())
    yield base_url
    await runner.cleanup()


@pytest.fixture
def widget() -> dict:
    """A valid product payload."""
    return dict(WIDGET)


@pytest.fixture
def fast_stress_settings() -> StressTestSettings:
    """Stress settings that finish in about a second."""
    return StressTestSettings(duration=1, concurrent_requests=4, request_delay=10, timeout_ms=2000)


# =============================================================================
# Sync fixtures for CLI tests
# =============================================================================


def _serve_in_thread(app_factory: Callable[[], web.Application]) -> Iterator[str]:
    port = _get_free_port()
    started = threading.Event()
    loop_holder: list[asyncio.AbstractEventLoop] = []

    def _thread_target() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        runner = web.AppRunner(app_factory())
        loop.run_until_complete(runner.setup())
        site = web.TCPSite(runner, "127.0.0.1", port)
        loop.run_until_complete(site.start())
        loop_holder.append(loop)
        started.set()
        loop.run_forever()
        loop.run_until_complete(runner.cleanup())
        loop.close()

    thread = threading.Thread(target=_thread_target, daemon=True)
    thread.start()
    started.wait(timeout=5.0)

    yield f"http://127.0.0.1:{port}"

    if loop_holder:
        loop_holder[0].call_soon_threadsafe(loop_holder[0].stop)
    thread.join(timeout=5.0)


@pytest.fixture
def sync_store() -> MemoryProductStore:
    """Store shared with ``sync_catalog_server``."""
    return MemoryProductStore()


@pytest.fixture
def sync_catalog_server(sync_store: MemoryProductStore) -> Iterator[str]:
    """Catalog service running in a background thread for sync tests."""
    yield from _serve_in_thread(lambda: create_app(sync_store))


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Path of a not-yet-existing client config, exported via the env var."""
    path = tmp_path / "config.json"
    monkeypatch.setenv("CATALOGBENCH_CONFIG", str(path))
    return path


@pytest.fixture
def live_config_file(config_file: Path, sync_catalog_server: str) -> Path:
    """Client config pointing at ``sync_catalog_server``."""
    config = ClientConfig(
        base_url=sync_catalog_server,
        stress_test=StressTestSettings(duration=1, concurrent_requests=2, request_delay=10, timeout_ms=2000),
    )
    save_client_config(config, config_file)
    return config_file
