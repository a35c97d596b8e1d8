"""
HTTP adapters for Visa SDK.
"""

from .adapter import HTTPAdapter, HTTPResponse
from .requests_adapter import RequestsAdapter, TLSContextAdapter
from .aiohttp_adapter import AiohttpAdapter

__all__ = ["HTTPAdapter", "HTTPResponse", "RequestsAdapter", "TLSContextAdapter", "AiohttpAdapter"]
