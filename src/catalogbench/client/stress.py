"""Fixed-duration batched stress test."""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from catalogbench._internal.logging import get_logger
from catalogbench.client.histogram import LatencyHistogram

if TYPE_CHECKING:
    from collections.abc import Callable

    from catalogbench._internal.types import JsonDict
    from catalogbench.client.config import StressTestSettings
    from catalogbench.client.invoker import EndpointInvoker

logger = get_logger("client.stress")


@dataclass
class StressTestResult:
    """Aggregated outcome of a stress test run.

    Attributes:
        method: HTTP method that was exercised.
        endpoint: Path that was exercised.
        successful: Number of successful invocations.
        failed: Number of failed invocations.
        total_time_ms: Sum of the elapsed time of every invocation.
        batches: Number of completed batches.
        wall_time_s: Seconds from the first launch to the end of the last batch.
    """

    method: str
    endpoint: str
    successful: int = 0
    failed: int = 0
    total_time_ms: float = 0.0
    batches: int = 0
    wall_time_s: float = 0.0
    _histogram: LatencyHistogram = field(default_factory=LatencyHistogram, repr=False)

    @property
    def total(self) -> int:
        """Number of invocations issued."""
        return self.successful + self.failed

    @property
    def avg_response_time_ms(self) -> float:
        """Mean elapsed time per invocation; 0.0 if nothing ran."""
        if self.total == 0:
            return 0.0
        return self.total_time_ms / self.total

    @property
    def latency_p50(self) -> float:
        """Median invocation latency in milliseconds."""
        return self._histogram.percentile(50.0)

    @property
    def latency_p95(self) -> float:
        """95th percentile invocation latency in milliseconds."""
        return self._histogram.percentile(95.0)

    @property
    def latency_p99(self) -> float:
        """99th percentile invocation latency in milliseconds."""
        return self._histogram.percentile(99.0)

    @property
    def latency_max(self) -> float:
        """Slowest invocation latency in milliseconds."""
        return self._histogram.max()

    def record(self, succeeded: bool, time_ms: float) -> None:
        """Fold one invocation outcome into the totals."""
        if succeeded:
            self.successful += 1
        else:
            self.failed += 1
        self.total_time_ms += time_ms
        self._histogram.record(time_ms)


async def run_stress_test(
    invoker: EndpointInvoker,
    settings: StressTestSettings,
    method: str,
    path: str,
    payload: JsonDict | None = None,
    *,
    on_batch: Callable[[StressTestResult], None] | None = None,
) -> StressTestResult:
    """Fire batches of concurrent invocations until the duration elapses.

    Each batch launches ``settings.concurrent_requests`` invocations and
    sleeps ``settings.request_delay`` milliseconds after every launch, so
    the launches inside a batch are staggered. Early invocations may finish
    before later ones start, which makes the in-flight concurrency vary over
    time with ``concurrent_requests`` as its upper bound. A batch is always
    awaited in full before the deadline is checked again; a batch started
    before the deadline runs to completion even if it ends after it.

    Args:
        invoker: Open invoker used for every call.
        settings: Duration, concurrency and delay parameters.
        method: HTTP method to exercise.
        path: Endpoint path to exercise.
        payload: JSON body sent with every call, for POST/PUT.
        on_batch: Called with the running totals after each batch.

    Returns:
        Aggregated counts, timings and latency percentiles.
    """
    result = StressTestResult(method=method.upper(), endpoint=path)
    delay_s = settings.request_delay / 1000
    start = time.monotonic()
    deadline = start + settings.duration

    logger.info(
        "Stress test %s %s: duration=%ss, concurrency=%d, delay=%dms",
        result.method,
        path,
        settings.duration,
        settings.concurrent_requests,
        settings.request_delay,
    )

    while time.monotonic() < deadline:
        tasks = []
        for _ in range(settings.concurrent_requests):
            tasks.append(asyncio.create_task(invoker.invoke(method, path, payload)))
            await asyncio.sleep(delay_s)

        for outcome in await asyncio.gather(*tasks):
            result.record(outcome.succeeded, outcome.time_ms)
        result.batches += 1

        if on_batch is not None:
            on_batch(result)

    result.wall_time_s = time.monotonic() - start
    logger.info(
        "Stress test finished: batches=%d, successful=%d, failed=%d, avg=%.1fms",
        result.batches,
        result.successful,
        result.failed,
        result.avg_response_time_ms,
    )
    return result
