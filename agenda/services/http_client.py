"""HTTP client for the public read-only APIs behind the info capabilities.

Wraps a single ``httpx.Client`` with exponential-backoff retries for
timeouts, connection errors and 5xx responses.  4xx responses fail fast.
"""

from __future__ import annotations

import logging
import time
from typing import Any
from urllib.parse import urlsplit

import httpx

from agenda.services.metrics import metrics

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
INITIAL_BACKOFF_SECONDS = 1.0
DEFAULT_TIMEOUT_SECONDS = 15.0


class RemoteCallError(Exception):
    """Raised when a public API call fails after all retries."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class PublicAPIClient:
    """GET-only client shared by every public-info capability."""

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._client = httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": "agenda-assistant/1.0"},
        )

    def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """GET *url* with retries; returns the successful response."""
        host = urlsplit(url).netloc or url
        last_error: Exception | None = None

        for attempt in range(1, MAX_RETRIES + 1):
            t0 = time.perf_counter()
            try:
                response = self._client.get(url, params=params)
                elapsed = (time.perf_counter() - t0) * 1000
                if response.status_code >= 500:
                    raise RemoteCallError(
                        f"Server error {response.status_code} from {host}",
                        status_code=response.status_code,
                    )
                if response.status_code >= 400:
                    raise RemoteCallError(
                        f"Client error {response.status_code} from {host}",
                        status_code=response.status_code,
                    )
                metrics.record_success(host, "GET", latency_ms=elapsed)
                return response

            except (httpx.TimeoutException, httpx.ConnectError) as exc:
                last_error = exc
                metrics.record_failure(host, "GET", error_type=type(exc).__name__)
                logger.warning(
                    "%s attempt %d/%d failed (%s). Retrying in %.1fs…",
                    host, attempt, MAX_RETRIES, type(exc).__name__,
                    INITIAL_BACKOFF_SECONDS * (2 ** (attempt - 1)),
                )
            except RemoteCallError as exc:
                metrics.record_failure(host, "GET", error_type=f"http_{exc.status_code}")
                if exc.status_code and exc.status_code >= 500:
                    last_error = exc
                    logger.warning("%s server error on attempt %d/%d", host, attempt, MAX_RETRIES)
                else:
                    raise

            if attempt < MAX_RETRIES:
                time.sleep(INITIAL_BACKOFF_SECONDS * (2 ** (attempt - 1)))

        raise RemoteCallError(f"Request to {host} failed after {MAX_RETRIES} attempts: {last_error}")

    def get_text(self, url: str, params: dict[str, Any] | None = None) -> str:
        return self._get(url, params).text

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET *url* and decode the JSON body."""
        response = self._get(url, params)
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteCallError(f"Invalid JSON from {url}: {exc}") from exc

    def close(self) -> None:
        self._client.close()
