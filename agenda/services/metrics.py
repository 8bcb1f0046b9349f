"""Per-call metrics for the external services a turn depends on.

Every completion request and every public API request records a count and
a latency.  Data points are buffered in memory; when ``METRICS_ENABLED`` is
``"true"`` a daemon thread pushes them to CloudWatch every
``FLUSH_INTERVAL_SECONDS``.  Otherwise they are only logged at DEBUG level.

>>> from agenda.services.metrics import metrics
>>> metrics.record_success("openai", "decide", latency_ms=812.0)
>>> metrics.record_failure("wttr.in", "GET", error_type="ConnectTimeout")
"""

from __future__ import annotations

import atexit
import logging
import os
import threading
import time
from datetime import UTC, datetime
from typing import Any

logger = logging.getLogger(__name__)

NAMESPACE = "AgendaAssistant"
FLUSH_INTERVAL_SECONDS = 60
MAX_BATCH_SIZE = 1_000  # CloudWatch PutMetricData limit


class MetricsClient:
    """Buffered metrics publisher."""

    def __init__(self) -> None:
        self._enabled = os.getenv("METRICS_ENABLED", "false").lower() == "true"
        self._buffer: list[dict[str, Any]] = []
        self._lock = threading.Lock()
        self._cw_client = None

        if self._enabled:
            self._start_flush_thread()

    def _get_cw_client(self):
        if self._cw_client is None:
            import boto3

            self._cw_client = boto3.client("cloudwatch")
        return self._cw_client

    # ── Recording ─────────────────────────────────────────────────────

    def record_success(self, service: str, operation: str, latency_ms: float) -> None:
        """Record a successful call: one count, one latency point."""
        now = datetime.now(UTC)
        self._append(
            _point("Calls", now, 1, "Count", Service=service, Status="success"),
            _point("Latency", now, latency_ms, "Milliseconds", Service=service, Operation=operation),
        )
        logger.debug("Metric: %s %s ok %.1fms", service, operation, latency_ms)

    def record_failure(
        self,
        service: str,
        operation: str,
        error_type: str,
        latency_ms: float = 0,
    ) -> None:
        """Record a failed call.  Latency is only kept when known."""
        now = datetime.now(UTC)
        points = [
            _point("Calls", now, 1, "Count", Service=service, Status="failure"),
            _point("Errors", now, 1, "Count", Service=service, ErrorType=error_type),
        ]
        if latency_ms > 0:
            points.append(
                _point("Latency", now, latency_ms, "Milliseconds", Service=service, Operation=operation),
            )
        self._append(*points)
        logger.debug("Metric: %s %s failed (%s)", service, operation, error_type)

    # ── Publishing ────────────────────────────────────────────────────

    def flush(self) -> int:
        """Send buffered points to CloudWatch.  Returns count sent."""
        with self._lock:
            batch, self._buffer = self._buffer, []

        if not batch or not self._enabled:
            return 0

        sent = 0
        try:
            cw = self._get_cw_client()
            for i in range(0, len(batch), MAX_BATCH_SIZE):
                chunk = batch[i : i + MAX_BATCH_SIZE]
                cw.put_metric_data(Namespace=NAMESPACE, MetricData=chunk)
                sent += len(chunk)
        except Exception:
            logger.exception("Failed to flush metrics to CloudWatch")
        return sent

    def _append(self, *points: dict[str, Any]) -> None:
        with self._lock:
            self._buffer.extend(points)

    def _start_flush_thread(self) -> None:
        def _loop():
            while True:
                time.sleep(FLUSH_INTERVAL_SECONDS)
                self.flush()

        threading.Thread(target=_loop, daemon=True, name="metrics-flush").start()
        atexit.register(self.flush)


def _point(name: str, ts: datetime, value: float, unit: str, **dims: str) -> dict[str, Any]:
    return {
        "MetricName": name,
        "Dimensions": [{"Name": k, "Value": v} for k, v in dims.items()],
        "Timestamp": ts,
        "Value": value,
        "Unit": unit,
    }


metrics = MetricsClient()
