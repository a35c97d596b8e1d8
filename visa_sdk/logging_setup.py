"""
Structured JSON logging for the Visa SDK.

One JSON object per line. Call context passed through ``extra=`` (operation
id, correlation id, status, request id) is lifted to top-level keys.
"""

import json
import logging
import sys
from typing import Any, Dict, Iterable, Optional, TextIO

# LogRecord attributes forwarded to the JSON payload when set via ``extra``
EXTRA_FIELDS = ("operation_id", "correlation_id", "status", "request_id")


class JsonFormatter(logging.Formatter):
    """
    Formats log records as JSON.

    Args:
        extra_fields: Record attributes copied into the payload when present
    """

    def __init__(self, extra_fields: Iterable[str] = EXTRA_FIELDS):
        super().__init__()
        self.extra_fields = tuple(extra_fields)

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": int(record.created * 1000),  # milliseconds
            "name": record.name,
            "level": record.levelname,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)

        for name in self.extra_fields:
            if hasattr(record, name):
                payload[name] = getattr(record, name)

        return json.dumps(payload, default=str)


def setup_structured_logger(level: int = logging.INFO, stream: Optional[TextIO] = None) -> None:
    """
    Route every ``visa_sdk.*`` logger to a JSON handler.

    Replaces handlers on the ``visa_sdk`` logger and stops propagation to
    the root logger, so records are not emitted twice.

    Args:
        level: Logging level (default: logging.INFO)
        stream: Output stream (default: stdout)

    Example:
        >>> from visa_sdk.logging_setup import setup_structured_logger
        >>> setup_structured_logger(logging.DEBUG)
    """
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter())

    sdk_logger = logging.getLogger("visa_sdk")
    sdk_logger.setLevel(level)
    sdk_logger.handlers = [handler]
    sdk_logger.propagate = False
