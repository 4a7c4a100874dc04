"""OpenTelemetry metrics for registry token exchanges.

Uses the OpenTelemetry API only; the application decides whether a
MeterProvider is installed. Without one, recording is a no-op.
"""

from __future__ import annotations

import logging
from typing import Optional

from opentelemetry import metrics
from opentelemetry.metrics import Histogram

logger = logging.getLogger(__name__)

METER_NAME = "wi_registry_auth"
EXCHANGE_DURATION = "registry_exchange_duration"


class ExchangeMetrics:
    """MetricsReporter recording exchange durations in a histogram.

    Example:
        >>> reporter = ExchangeMetrics()
        >>> reporter(1_500_000, "myregistry.azurecr.io")
    """

    def __init__(self, meter_name: str = METER_NAME, meter_version: str = "") -> None:
        self._meter = metrics.get_meter(meter_name, meter_version)
        self._duration_histogram: Optional[Histogram] = None

    @property
    def duration_histogram(self) -> Histogram:
        """Get or create the exchange duration histogram."""
        if self._duration_histogram is None:
            self._duration_histogram = self._meter.create_histogram(
                EXCHANGE_DURATION,
                unit="ms",
                description="Duration of identity-token to registry-token exchanges",
            )
        return self._duration_histogram

    def __call__(self, elapsed_ns: int, host: str) -> None:
        self.duration_histogram.record(elapsed_ns / 1_000_000, attributes={"registry": host})


__all__ = [
    "METER_NAME",
    "EXCHANGE_DURATION",
    "ExchangeMetrics",
]
