"""
Prometheus metrics for Visa SDK calls.

Series live in the default prometheus_client registry; the host
application decides how to expose it.
"""

import logging
import time
from contextlib import contextmanager
from typing import Iterator, Union

from prometheus_client import Counter, Histogram

logger = logging.getLogger("visa_sdk.metrics")

# Status label recorded when the adapter raised instead of answering
TRANSPORT_ERROR_CODE = "transport_error"

REQUEST_COUNT = Counter(
    "visa_sdk_requests_total",
    "Visa API calls by operation and outcome",
    ["endpoint", "code"],
)

REQUEST_LATENCY = Histogram(
    "visa_sdk_request_latency_seconds",
    "Visa API call latency in seconds, transport included",
    ["endpoint"],
)


class RequestObservation:
    """Outcome holder filled in by the caller of :func:`observe_request`"""

    __slots__ = ("endpoint", "code")

    def __init__(self, endpoint: str):
        self.endpoint = endpoint
        self.code: Union[int, str] = TRANSPORT_ERROR_CODE


def metrics_request(endpoint: str, code: Union[int, str], latency: float) -> None:
    """
    Record one call.

    Args:
        endpoint: Operation id, or ``"<METHOD> <url>"`` for raw calls
        code: HTTP status, or ``transport_error``
        latency: Duration in seconds
    """
    try:
        REQUEST_COUNT.labels(endpoint=endpoint, code=str(code)).inc()
        REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency)
    except Exception as e:
        # Metrics failures should not crash the SDK
        logger.debug("Failed to record metrics: %s", e)


@contextmanager
def observe_request(endpoint: str) -> Iterator[RequestObservation]:
    """
    Time a dispatch and record it on exit.

    Set ``code`` on the yielded observation once a response arrives; if the
    block raises first, the call is recorded as ``transport_error`` and the
    exception propagates.

    Example:
        >>> with observe_request("Users_Enroll") as observation:
        ...     response = adapter.send(request)
        ...     observation.code = response.status
    """
    observation = RequestObservation(endpoint)
    start = time.perf_counter()
    try:
        yield observation
    finally:
        metrics_request(endpoint, observation.code, time.perf_counter() - start)
