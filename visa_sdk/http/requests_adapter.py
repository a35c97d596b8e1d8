"""
Requests-based HTTP adapter (synchronous).
"""

from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter as RequestsHTTPAdapter
from urllib3.util.retry import Retry

from visa_sdk.exceptions import TransportError, TransportTimeoutError
from visa_sdk.http.adapter import HTTPAdapter, HTTPResponse
from visa_sdk.models import RequestConfig
from visa_sdk.transport import TransportHandle


class TLSContextAdapter(RequestsHTTPAdapter):
    """
    Transport adapter that connects with a prebuilt SSL context.

    Trust anchor and client identity come from the context, so the CA
    bundle requests would otherwise load is not applied.
    """

    def __init__(self, transport: TransportHandle, **kwargs: Any):
        self.transport = transport
        # Failures surface to the caller; nothing is retried
        super().__init__(max_retries=Retry(total=0, read=False, raise_on_status=False), **kwargs)

    def _tls_kwargs(self, kwargs: dict) -> dict:
        kwargs["ssl_context"] = self.transport.ssl_context
        if not self.transport.verify_hostname:
            kwargs["assert_hostname"] = False
        return kwargs

    def init_poolmanager(self, *args: Any, **kwargs: Any) -> None:
        super().init_poolmanager(*args, **self._tls_kwargs(kwargs))

    def proxy_manager_for(self, proxy: str, **proxy_kwargs: Any) -> Any:
        return super().proxy_manager_for(proxy, **self._tls_kwargs(proxy_kwargs))

    def cert_verify(self, conn: Any, url: str, verify: Any, cert: Any) -> None:
        # Verification is configured on the SSL context
        return None


class RequestsAdapter(HTTPAdapter):
    """
    Synchronous HTTP adapter using requests library.

    Each call runs in its own session, so no connection outlives a call.
    No retries are configured: every failure surfaces to the caller.
    """

    def __init__(self, transport: Optional[TransportHandle] = None):
        """
        Initialize requests adapter.

        Args:
            transport: mTLS transport handle; plain TLS defaults when omitted
        """
        self.transport = transport

    def _session(self) -> requests.Session:
        session = requests.Session()
        if self.transport is not None:
            session.mount("https://", TLSContextAdapter(self.transport))
        return session

    def send(self, request: RequestConfig) -> HTTPResponse:
        """
        Send HTTP request using requests library.

        Args:
            request: Merged request configuration

        Returns:
            HTTPResponse

        Raises:
            TransportError: On network connectivity issues
            TransportTimeoutError: On request timeout
        """
        try:
            with self._session() as session:
                response = session.request(
                    method=request.method.upper(),
                    url=request.full_url,
                    headers=request.headers,
                    params=request.params,
                    json=request.data,
                    auth=request.auth,
                    timeout=request.timeout,
                )
        except requests.exceptions.Timeout as e:
            raise TransportTimeoutError(f"Request timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(f"Network request failed: {e}") from e

        return HTTPResponse(
            status=response.status_code,
            reason=response.reason or "",
            text=response.text,
            headers=dict(response.headers),
        )
