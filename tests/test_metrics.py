"""Tests for the metrics client."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

from agenda.services.metrics import MAX_BATCH_SIZE, NAMESPACE, MetricsClient


def _make_client(*, enabled: bool = False) -> MetricsClient:
    with patch.dict("os.environ", {"METRICS_ENABLED": str(enabled).lower()}):
        with patch.object(MetricsClient, "_start_flush_thread"):
            return MetricsClient()


def _dims(point: dict) -> dict:
    return {d["Name"]: d["Value"] for d in point["Dimensions"]}


class TestRecording:
    def test_success_buffers_count_and_latency(self):
        client = _make_client()
        client.record_success("openai", "decide", latency_ms=120.0)
        assert [m["MetricName"] for m in client._buffer] == ["Calls", "Latency"]
        assert _dims(client._buffer[0]) == {"Service": "openai", "Status": "success"}
        assert _dims(client._buffer[1]) == {"Service": "openai", "Operation": "decide"}

    def test_failure_without_latency(self):
        client = _make_client()
        client.record_failure("wttr.in", "GET", error_type="ConnectError")
        assert [m["MetricName"] for m in client._buffer] == ["Calls", "Errors"]
        assert _dims(client._buffer[1])["ErrorType"] == "ConnectError"

    def test_failure_with_latency(self):
        client = _make_client()
        client.record_failure("openai", "synthesize", error_type="APITimeoutError", latency_ms=900.0)
        assert [m["MetricName"] for m in client._buffer] == ["Calls", "Errors", "Latency"]


class TestFlush:
    def test_disabled_flush_drops_buffer(self):
        client = _make_client()
        client.record_success("openai", "decide", latency_ms=1.0)
        assert client.flush() == 0
        assert client._buffer == []

    def test_enabled_flush_sends_in_batches(self):
        client = _make_client(enabled=True)
        cw = MagicMock()
        client._cw_client = cw
        for _ in range(MAX_BATCH_SIZE):
            client.record_success("openai", "decide", latency_ms=1.0)

        assert client.flush() == 2 * MAX_BATCH_SIZE
        assert cw.put_metric_data.call_count == 2
        assert cw.put_metric_data.call_args[1]["Namespace"] == NAMESPACE

    def test_flush_error_is_logged(self, caplog):
        client = _make_client(enabled=True)
        client._cw_client = MagicMock()
        client._cw_client.put_metric_data.side_effect = RuntimeError("throttled")
        client.record_success("openai", "decide", latency_ms=1.0)
        assert client.flush() == 0
        assert "Failed to flush metrics" in caplog.text
