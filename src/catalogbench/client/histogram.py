"""Latency histogram for stress test percentiles.

Thin layer over ``hdrh.histogram.HdrHistogram`` that speaks milliseconds.
The HDR histogram stores integer microseconds.
"""

from __future__ import annotations

from hdrh.histogram import HdrHistogram  # type: ignore[import-untyped]

# Trackable range: 1 microsecond to 10 minutes
_LOWEST_US = 1
_HIGHEST_US = 600_000_000
_SIGNIFICANT_DIGITS = 3


class LatencyHistogram:
    """Records invocation latencies and answers percentile queries.

    Values outside the trackable range are clamped to it, so a
    pathological timeout never drops a sample.
    """

    def __init__(self) -> None:
        self._histogram: HdrHistogram = HdrHistogram(  # type: ignore[no-any-unimported]
            _LOWEST_US, _HIGHEST_US, _SIGNIFICANT_DIGITS
        )

    def record(self, latency_ms: float) -> None:
        """Record one latency sample in milliseconds."""
        value_us = max(_LOWEST_US, min(int(latency_ms * 1000), _HIGHEST_US))
        self._histogram.record_value(value_us)

    @property
    def count(self) -> int:
        """Number of recorded samples."""
        return int(self._histogram.total_count)

    def percentile(self, percentile: float) -> float:
        """Return the latency in milliseconds at ``percentile`` (0-100).

        Returns 0.0 when nothing has been recorded.
        """
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_value_at_percentile(percentile)) / 1000.0

    def max(self) -> float:
        """Return the largest recorded latency in milliseconds, 0.0 if empty."""
        if self.count == 0:
            return 0.0
        return float(self._histogram.get_max_value()) / 1000.0
