"""
Visa Python SDK
Server-side client for the Visa Offers Platform user and card APIs
"""

from visa_sdk.client import VisaClient
from visa_sdk.async_client import AsyncVisaClient
from visa_sdk.catalog import Operation, OperationCatalog, OperationId
from visa_sdk.envelope import EnvelopeKey, decode, encode, init_envelope
from visa_sdk.models import ClientConfig, RequestConfig, Result
from visa_sdk.exceptions import (
    VisaError,
    ConfigurationError,
    RemoteError,
    TransportError,
    TransportTimeoutError,
    EnvelopeError,
)
from visa_sdk.utils import safe_call, safe_call_async
from visa_sdk.__version__ import __version__

__all__ = [
    "VisaClient",
    "AsyncVisaClient",
    "ClientConfig",
    "RequestConfig",
    "Result",
    "Operation",
    "OperationCatalog",
    "OperationId",
    "EnvelopeKey",
    "init_envelope",
    "encode",
    "decode",
    "VisaError",
    "ConfigurationError",
    "RemoteError",
    "TransportError",
    "TransportTimeoutError",
    "EnvelopeError",
    "safe_call",
    "safe_call_async",
    "__version__",
]
