"""
Asynchronous Client for Visa SDK

Provides non-blocking API calls using aiohttp.
Ideal for async frameworks like FastAPI, aiohttp, or async scripts.
"""

from typing import Any, Dict, Optional, Union

from visa_sdk.catalog import OperationCatalog, OperationId
from visa_sdk.client import HELLO_WORLD_PATH, BaseVisaClient
from visa_sdk.http.aiohttp_adapter import AiohttpAdapter
from visa_sdk.models import ClientConfig
from visa_sdk.transport import TransportHandle


class AsyncVisaClient(BaseVisaClient):
    """
    Asynchronous Visa Offers Platform client

    Same operations as :class:`~visa_sdk.client.VisaClient`, as coroutines.
    Concurrent calls share nothing mutable.

    Example:
        >>> import asyncio
        >>> from visa_sdk import AsyncVisaClient, ClientConfig
        >>>
        >>> async def main():
        ...     async with AsyncVisaClient(ClientConfig.from_env()) as client:
        ...         return await asyncio.gather(
        ...             client.get_user("user-1"),
        ...             client.get_user("user-2"),
        ...         )
        >>>
        >>> asyncio.run(main())
    """

    def __init__(
        self,
        config: ClientConfig,
        http_adapter: Optional[Any] = None,
        catalog: Optional[OperationCatalog] = None,
    ):
        super().__init__(config, http_adapter=http_adapter, catalog=catalog)

    def _default_adapter(self, transport: TransportHandle) -> AiohttpAdapter:
        return AiohttpAdapter(transport)

    async def __aenter__(self) -> "AsyncVisaClient":
        """Context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit; sessions are per call, nothing to close"""
        return None

    async def request(
        self,
        overlay: Optional[Dict[str, Any]] = None,
        operation_id: Optional[Union[OperationId, str]] = None,
        encrypt: bool = False,
    ) -> Any:
        """Make a request to the Visa API (async)"""
        return await self.pipeline.request_async(overlay, operation_id, encrypt)

    async def add_card(
        self, user_key: str, card_info: Dict[str, Any], encrypt: bool = False
    ) -> Any:
        """Add a card to an enrolled user (async)"""
        return await self.request(
            {"data": self._card_body(user_key, card_info)}, OperationId.ADD_CARD, encrypt
        )

    async def delete_card(self, user_key: str, card_id: str) -> Any:
        """Delete a card (async)"""
        return await self.request(
            {"data": self._card_body(user_key, {"cardId": card_id})}, OperationId.DELETE_CARD
        )

    async def enroll_user(
        self, user_key: str, card_info: Dict[str, Any], encrypt: bool = False
    ) -> Any:
        """Enroll a user (async)"""
        return await self.request(
            {"data": self._enroll_body(user_key, card_info)}, OperationId.ENROLL_USER, encrypt
        )

    async def get_user(self, user_key: str) -> Any:
        """Get a user's enrollment record (async)"""
        return await self.request({"data": self._user_body(user_key)}, OperationId.GET_USER)

    async def unenroll_user(self, user_key: str) -> Any:
        """Unenroll a user (async)"""
        return await self.request({"data": self._user_body(user_key)}, OperationId.UNENROLL_USER)

    async def hello_world(self) -> Any:
        """Hello World health check (async)"""
        return await self.request({"method": "GET", "url": HELLO_WORLD_PATH})
