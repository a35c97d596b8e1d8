"""
Aiohttp-based HTTP adapter (asynchronous).
"""

import asyncio
import ssl
from typing import Optional, Union

import aiohttp

from visa_sdk.exceptions import TransportError, TransportTimeoutError
from visa_sdk.http.adapter import HTTPResponse
from visa_sdk.models import RequestConfig
from visa_sdk.transport import TransportHandle


class AiohttpAdapter:
    """
    Asynchronous HTTP adapter using aiohttp library.

    Each call opens and closes its own session. No retries.
    """

    def __init__(self, transport: Optional[TransportHandle] = None):
        """
        Initialize aiohttp adapter.

        Args:
            transport: mTLS transport handle; plain TLS defaults when omitted
        """
        self.transport = transport

    def _ssl(self) -> Union[bool, ssl.SSLContext]:
        return self.transport.ssl_context if self.transport is not None else True

    async def send(self, request: RequestConfig) -> HTTPResponse:
        """
        Send HTTP request using aiohttp library.

        Args:
            request: Merged request configuration

        Returns:
            HTTPResponse

        Raises:
            TransportError: On network connectivity issues
            TransportTimeoutError: On request timeout
        """
        auth = aiohttp.BasicAuth(*request.auth) if request.auth else None
        timeout = aiohttp.ClientTimeout(total=request.timeout)

        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(
                    request.method.upper(),
                    request.full_url,
                    headers=request.headers,
                    params=request.params,
                    json=request.data,
                    auth=auth,
                    ssl=self._ssl(),
                ) as response:
                    text = await response.text()
                    return HTTPResponse(
                        status=response.status,
                        reason=response.reason or "",
                        text=text,
                        headers=dict(response.headers),
                    )

        except asyncio.TimeoutError as e:
            raise TransportTimeoutError(f"Request timed out: {e}") from e

        except aiohttp.ClientError as e:
            raise TransportError(f"Network request failed: {e}") from e
