"""
Request pipeline.

Every call runs the same sequence, with no retries:

1. resolve the operation id (if any) against the catalog
2. overlay the call fields on a copy of the default request config
3. encrypt the body when the operation or the caller requires MLE
4. dispatch through the operation or as a raw request
5. inspect the status: < 400 returns the decoded body, >= 400 raises
   RemoteError

Transport exceptions raised by the adapter pass through untouched.
"""

import inspect
import logging
from typing import Any, Dict, Optional, Tuple, Union

from visa_sdk.catalog import Operation, OperationCatalog, OperationId
from visa_sdk.envelope import EnvelopeKey, wrap_body
from visa_sdk.exceptions import ConfigurationError, RemoteError
from visa_sdk.http.adapter import HTTPResponse
from visa_sdk.metrics import observe_request
from visa_sdk.models import RequestConfig
from visa_sdk.utils import sanitize_for_logging

REQUEST_ID_HEADER = "x-correlation-id"


def _header(headers: Dict[str, str], name: str) -> Optional[str]:
    for key, value in headers.items():
        if key.lower() == name:
            return value
    return None


def _discard(awaitable: Any) -> None:
    # Close an unawaited coroutine so it does not warn at garbage collection
    close = getattr(awaitable, "close", None)
    if close is not None:
        close()


class RequestPipeline:
    """
    Merges, encrypts, dispatches and normalizes API calls.

    The pipeline never writes to ``defaults``; calls may run concurrently
    from threads (sync adapter) or tasks (async adapter).

    Args:
        defaults: Default request configuration (auth, base URL, headers)
        adapter: HTTP adapter; ``send`` may be sync or async
        catalog: Operation catalog
        logger: Object with debug/info/error methods
    """

    def __init__(
        self,
        defaults: RequestConfig,
        adapter: Any,
        catalog: OperationCatalog,
        logger: Optional[Any] = None,
    ):
        self.defaults = defaults
        self.adapter = adapter
        self.catalog = catalog
        self.logger = logger or logging.getLogger("visa_sdk.pipeline")
        self._envelope_key: Optional[EnvelopeKey] = None

    @property
    def envelope_key(self) -> Optional[EnvelopeKey]:
        return self._envelope_key

    def attach_envelope(self, key: EnvelopeKey) -> None:
        """
        Set the MLE key. Allowed once per pipeline.

        Raises:
            ConfigurationError: If a key is already attached
        """
        if self._envelope_key is not None:
            raise ConfigurationError("MLE is already initialized")
        self._envelope_key = key

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def _prepare(
        self,
        overlay: Optional[Dict[str, Any]],
        operation_id: Optional[Union[OperationId, str]],
        encrypt: bool,
    ) -> Tuple[RequestConfig, Optional[Operation]]:
        operation = self.catalog.resolve(operation_id) if operation_id is not None else None

        request = self.defaults.overlay(**(overlay or {}))

        if encrypt or (operation is not None and operation.encrypted):
            request = self._encrypt(request, operation)

        self.logger.debug(
            "*** REQUEST CONFIG *** %s operationId=%s",
            sanitize_for_logging(request.view()),
            operation.operation_id if operation else None,
        )
        return request, operation

    def _encrypt(self, request: RequestConfig, operation: Optional[Operation]) -> RequestConfig:
        if self._envelope_key is None:
            target = operation.operation_id if operation else request.url
            raise ConfigurationError(f"MLE is not initialized; call init_mle() before {target}")
        if request.data is None:
            raise ConfigurationError(
                f"Nothing to encrypt: {request.method.upper()} {request.url} has no body"
            )

        body, headers = wrap_body(self._envelope_key, request.data)
        return request.overlay(data=body, headers=headers)

    def _dispatch(self, request: RequestConfig, operation: Optional[Operation]) -> Any:
        if operation is not None:
            return operation.invoke(self.adapter.send, request)
        return self.adapter.send(request)

    def _inspect(self, request: RequestConfig, endpoint: str, response: HTTPResponse) -> Any:
        data = response.data
        self.logger.debug("*** RESPONSE *** %s %s", response.status, response.text)

        if response.status >= 400:
            self.logger.error(
                "*** REQUEST FAILED *** operationId=%s request=%s response=%s",
                endpoint,
                sanitize_for_logging(request.view()),
                {
                    "status": response.status,
                    "statusText": response.reason,
                    "headers": response.headers,
                    "data": data,
                },
            )
            raise RemoteError(
                status_code=response.status,
                status_text=response.reason,
                body=data,
                request_id=_header(response.headers, REQUEST_ID_HEADER),
            )

        return data

    @staticmethod
    def _endpoint(request: RequestConfig, operation: Optional[Operation]) -> str:
        if operation is not None:
            return operation.operation_id
        return f"{request.method.upper()} {request.url}"

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def request(
        self,
        overlay: Optional[Dict[str, Any]] = None,
        operation_id: Optional[Union[OperationId, str]] = None,
        encrypt: bool = False,
    ) -> Any:
        """
        Run a call with a synchronous adapter

        Args:
            overlay: Call-specific request fields (method, url, data, ...)
            operation_id: Catalog operation; raw request when omitted
            encrypt: Force MLE even if the operation does not require it

        Returns:
            Decoded response body

        Raises:
            ConfigurationError: Unknown operation id, MLE required but not
                initialized or no body to encrypt (raised before any network
                activity), or an adapter of the wrong kind (sync vs async)
            EnvelopeError: If the body cannot be encrypted
            RemoteError: If the API answers with status >= 400
            TransportError: On network failures (from the adapter)
        """
        request, operation = self._prepare(overlay, operation_id, encrypt)
        endpoint = self._endpoint(request, operation)

        with observe_request(endpoint) as observation:
            response = self._dispatch(request, operation)
            if inspect.isawaitable(response):
                _discard(response)
                raise ConfigurationError(
                    "Adapter returned an awaitable; use AsyncVisaClient with an async adapter"
                )
            observation.code = response.status

        return self._inspect(request, endpoint, response)

    async def request_async(
        self,
        overlay: Optional[Dict[str, Any]] = None,
        operation_id: Optional[Union[OperationId, str]] = None,
        encrypt: bool = False,
    ) -> Any:
        """Run a call with an asynchronous adapter; see :meth:`request`"""
        request, operation = self._prepare(overlay, operation_id, encrypt)
        endpoint = self._endpoint(request, operation)

        with observe_request(endpoint) as observation:
            pending = self._dispatch(request, operation)
            if not inspect.isawaitable(pending):
                raise ConfigurationError(
                    "Adapter is synchronous; use VisaClient with a synchronous adapter"
                )
            response = await pending
            observation.code = response.status

        return self._inspect(request, endpoint, response)
