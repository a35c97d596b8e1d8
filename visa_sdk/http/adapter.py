"""
Base HTTP adapter interface.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict

from visa_sdk.models import RequestConfig


@dataclass(frozen=True)
class HTTPResponse:
    """Transport-neutral HTTP response"""

    status: int
    reason: str = ""
    text: str = ""
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def data(self) -> Any:
        """
        Decoded body: parsed JSON, the raw text if it is not JSON, or an
        empty dict for an empty body
        """
        if not self.text:
            return {}
        try:
            return json.loads(self.text)
        except ValueError:
            return self.text


class HTTPAdapter(ABC):
    """
    Abstract base class for HTTP adapters.

    Adapters never raise on HTTP error statuses; they return the response
    and leave status inspection to the caller.
    """

    @abstractmethod
    def send(self, request: RequestConfig) -> HTTPResponse:
        """
        Send HTTP request.

        Args:
            request: Fully merged request configuration

        Returns:
            HTTPResponse

        Raises:
            TransportError: On network connectivity issues
            TransportTimeoutError: On request timeout
        """
        raise NotImplementedError
