"""
Visa SDK Exceptions
"""

import json
from typing import Any, Dict, Optional


class VisaError(Exception):
    """Base exception for Visa SDK"""

    # Pre-network failures carry no HTTP status
    status_code: int = 0


class ConfigurationError(VisaError):
    """SDK configuration error"""

    pass


class RemoteError(VisaError):
    """
    Remote API error.

    Raised when the API answers with a status >= 400. The message is the
    JSON text of ``{"status", "statusText", "data"}`` so the raw response
    survives into logs and tracebacks.
    """

    def __init__(
        self,
        status_code: int,
        status_text: str = "",
        body: Any = None,
        request_id: Optional[str] = None,
    ):
        self.status_code = status_code
        self.status_text = status_text
        self.body = body
        self.request_id = request_id
        super().__init__(
            json.dumps(
                {"status": status_code, "statusText": status_text, "data": body},
                default=str,
            )
        )

    @property
    def retryable(self) -> bool:
        """True for statuses a caller may reasonably retry (429, 5xx)"""
        return self.status_code == 429 or self.status_code >= 500

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status_code,
            "statusText": self.status_text,
            "data": self.body,
        }

    def __repr__(self) -> str:
        return (
            f"RemoteError(status_code={self.status_code}, "
            f"status_text={self.status_text!r}, "
            f"request_id={self.request_id!r})"
        )


class TransportError(VisaError):
    """Network/connectivity error below the HTTP layer"""

    pass


class TransportTimeoutError(TransportError):
    """Request timeout error"""

    pass


class EnvelopeError(VisaError):
    """Message-level encryption error (key material, encrypt, decrypt)"""

    pass
