"""Timed endpoint invocation with success/failure classification."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import aiohttp

from catalogbench._internal.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogbench._internal.types import JsonDict
    from catalogbench.client.config import ClientConfig

logger = get_logger("client.invoker")

SUCCESS = "success"
FAILED = "failed"


def _noop_callback(result: InvocationResult) -> None:
    """Default no-op result callback."""


@dataclass
class InvocationResult:
    """Outcome of one HTTP call made by the test client.

    Attributes:
        endpoint: Request path (without the base URL).
        method: HTTP method.
        status: ``"success"`` or ``"failed"``.
        time_ms: Wall-clock elapsed time in milliseconds.
        result: Short summary, e.g. ``"201 OK"``, ``"404 Error"`` or
            ``"Network Error"``.
        details: Extracted identifier (``"ID: ..."``) or error message.
        status_code: HTTP status code, 0 if no response was received.
        data: Decoded JSON body, None if absent or not JSON.
        product_id: ``_id`` of the returned record, when there is one.
    """

    endpoint: str
    method: str
    status: str
    time_ms: float
    result: str
    details: str | None = None
    status_code: int = 0
    data: Any = None
    product_id: str | None = None

    @property
    def succeeded(self) -> bool:
        """Return True if the call received a non-error response."""
        return self.status == SUCCESS


def _extract_id(data: Any) -> str | None:
    if isinstance(data, dict) and data.get("_id"):
        return str(data["_id"])
    return None


def _error_message(data: Any, fallback: str) -> str:
    if isinstance(data, dict):
        for key in ("message", "error"):
            if data.get(key):
                return str(data[key])
    return fallback


class EndpointInvoker:
    """Issues timed requests against the catalog service.

    Wraps a single ``aiohttp.ClientSession``; use it as an async context
    manager. Expected failures (error statuses, timeouts, refused
    connections) are returned as failed ``InvocationResult`` objects and
    never raised.

    Attributes:
        base_url: Base URL prepended to every request path.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout_ms: int = 5000,
        on_result: Callable[[InvocationResult], None] | None = None,
    ) -> None:
        """Initialize the invoker.

        Args:
            base_url: Base URL prepended to all request paths.
            timeout_ms: Total per-request timeout in milliseconds.
            on_result: Callback invoked with every ``InvocationResult``.
        """
        self.base_url = base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)
        self._on_result = on_result or _noop_callback
        self._session: aiohttp.ClientSession | None = None

    @classmethod
    def from_config(
        cls,
        config: ClientConfig,
        on_result: Callable[[InvocationResult], None] | None = None,
    ) -> EndpointInvoker:
        """Create an invoker for the base URL and timeout in ``config``."""
        return cls(
            config.base_url,
            timeout_ms=config.stress_test.timeout_ms,
            on_result=on_result,
        )

    async def __aenter__(self) -> EndpointInvoker:
        """Open the underlying aiohttp session."""
        self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Close the underlying aiohttp session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def invoke(
        self,
        method: str,
        path: str,
        payload: JsonDict | None = None,
    ) -> InvocationResult:
        """Send one request and classify the outcome.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            path: URL path appended to ``base_url``.
            payload: JSON body for POST/PUT requests.

        Returns:
            The recorded outcome. Status codes of 400 and above, timeouts
            and connection errors are reported as ``failed``.

        Raises:
            RuntimeError: If the invoker is used outside of an async context
                manager.
        """
        if self._session is None:
            msg = "EndpointInvoker must be used as an async context manager"
            raise RuntimeError(msg)

        method = method.upper()
        url = f"{self.base_url}{path}"
        start = time.monotonic()

        try:
            async with self._session.request(method, url, json=payload) as resp:
                status_code = resp.status
                reason = resp.reason or ""
                try:
                    data = await resp.json(content_type=None)
                except (json.JSONDecodeError, UnicodeDecodeError):
                    data = None
        except (aiohttp.ClientError, TimeoutError) as exc:
            time_ms = (time.monotonic() - start) * 1000
            result = InvocationResult(
                endpoint=path,
                method=method,
                status=FAILED,
                time_ms=time_ms,
                result="Network Error",
                details=str(exc) or type(exc).__name__,
            )
            logger.debug("%s %s failed after %.1fms: %s", method, path, time_ms, result.details)
            self._on_result(result)
            return result

        time_ms = (time.monotonic() - start) * 1000
        product_id = _extract_id(data)

        if status_code >= 400:
            result = InvocationResult(
                endpoint=path,
                method=method,
                status=FAILED,
                time_ms=time_ms,
                result=f"{status_code} Error",
                details=_error_message(data, reason),
                status_code=status_code,
                data=data,
            )
        else:
            result = InvocationResult(
                endpoint=path,
                method=method,
                status=SUCCESS,
                time_ms=time_ms,
                result=f"{status_code} OK",
                details=f"ID: {product_id}" if product_id else None,
                status_code=status_code,
                data=data,
                product_id=product_id,
            )

        logger.debug("%s %s -> %d in %.1fms", method, path, status_code, time_ms)
        self._on_result(result)
        return result
