"""
Visa SDK Main Client
"""

import logging
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from visa_sdk.__version__ import __version__
from visa_sdk.catalog import OperationCatalog, OperationId
from visa_sdk.envelope import EnvelopeKey, decode, init_envelope
from visa_sdk.exceptions import ConfigurationError
from visa_sdk.http.adapter import HTTPAdapter
from visa_sdk.http.requests_adapter import RequestsAdapter
from visa_sdk.models import (
    CardRequest,
    ClientConfig,
    EnrollUserRequest,
    RequestConfig,
    UserDetails,
    UserRequest,
)
from visa_sdk.pipeline import RequestPipeline
from visa_sdk.transport import TransportHandle, build_transport
from visa_sdk.utils import make_correlation_id, setup_logging

logger = logging.getLogger("visa_sdk.client")

HELLO_WORLD_PATH = "vdp/helloworld"


class BaseVisaClient:
    """
    Configuration, transport and payload assembly shared by the sync and
    async clients. Subclasses choose the HTTP adapter and how calls run.
    """

    def __init__(
        self,
        config: ClientConfig,
        http_adapter: Optional[Any] = None,
        catalog: Optional[OperationCatalog] = None,
    ):
        """
        Initialize Visa client

        Args:
            config: Client configuration
            http_adapter: Optional custom HTTP adapter
            catalog: Operation catalog (default: bundled VOP catalog)

        Raises:
            ConfigurationError: If configuration is incomplete or the TLS
                material cannot be loaded. No network activity happens first.
        """
        if isinstance(config, dict):
            try:
                config = ClientConfig(**config)
            except ValidationError as e:
                # Field names only; input values may be key material
                fields = ", ".join(".".join(map(str, err["loc"])) for err in e.errors())
                raise ConfigurationError(f"Invalid configuration field(s): {fields}") from e
        if not isinstance(config, ClientConfig):
            raise ConfigurationError("config must be a ClientConfig")

        config.validate_required()
        self.config = config

        if config.debug:
            setup_logging(debug=True)

        self.transport = build_transport(config)
        self.catalog = catalog or OperationCatalog.load_default()

        self.defaults = RequestConfig(
            base_url=config.base_url.rstrip("/"),
            headers={
                "Accept": "application/json",
                "Content-Type": "application/json",
                "User-Agent": f"visa-python-sdk/{__version__}",
            },
            auth=(config.user_id, config.passphrase),
            timeout=config.timeout,
        )

        self.pipeline = RequestPipeline(
            self.defaults,
            http_adapter or self._default_adapter(self.transport),
            self.catalog,
            logger=config.logger,
        )

        logger.info("Visa SDK initialized (version %s)", __version__)
        logger.debug("Base URL: %s", self.defaults.base_url)

    def _default_adapter(self, transport: TransportHandle) -> Any:
        raise NotImplementedError

    @property
    def community_code(self) -> str:
        return self.config.community_code

    # ===================================================================
    # Message Level Encryption
    # ===================================================================

    def init_mle(
        self,
        key_id: Optional[str],
        server_key: Optional[str],
        private_key: Optional[str] = None,
        private_key_passphrase: Optional[str] = None,
    ) -> EnvelopeKey:
        """
        Initialize Message Level Encryption

        Args:
            key_id: MLE key id
            server_key: Visa MLE server key or certificate (PEM)
            private_key: Client MLE private key (PEM), needed to decrypt
                encrypted responses
            private_key_passphrase: Passphrase of ``private_key``

        Returns:
            The MLE key now used by every encrypted call

        Raises:
            ConfigurationError: If an argument is missing or MLE is already
                initialized
            EnvelopeError: If the key material is invalid
        """
        if self.pipeline.envelope_key is not None:
            raise ConfigurationError("MLE is already initialized")

        key = init_envelope(key_id, server_key, private_key, private_key_passphrase)
        self.pipeline.attach_envelope(key)
        logger.info("MLE initialized with key id %s", key_id)
        return key

    def decrypt(self, token: str) -> Any:
        """
        Decrypt an MLE token (e.g. the ``encData`` of a response)

        Raises:
            ConfigurationError: If MLE is not initialized
            EnvelopeError: If the token cannot be decrypted
        """
        key = self.pipeline.envelope_key
        if key is None:
            raise ConfigurationError("MLE is not initialized; call init_mle() first")
        return decode(key, token)

    # ===================================================================
    # Payloads
    # ===================================================================

    def _user_body(self, user_key: str) -> Dict[str, Any]:
        return UserRequest(
            community_code=self.community_code,
            correlation_id=make_correlation_id(),
            user_key=user_key,
        ).to_body()

    def _card_body(self, user_key: str, card: Dict[str, Any]) -> Dict[str, Any]:
        return CardRequest(
            card=card,
            community_code=self.community_code,
            correlation_id=make_correlation_id(),
            user_key=user_key,
        ).to_body()

    def _enroll_body(self, user_key: str, card_info: Dict[str, Any]) -> Dict[str, Any]:
        return EnrollUserRequest(
            correlation_id=make_correlation_id(),
            user_details=UserDetails(
                cards=[card_info],
                community_code=self.community_code,
                external_user_id=user_key,
                user_key=user_key,
            ),
        ).to_body()


class VisaClient(BaseVisaClient):
    """
    Synchronous Visa Offers Platform client

    Features:
    - Mutual TLS with the bundled DigiCert trust anchor
    - HTTP Basic authentication
    - Optional Message Level Encryption (JWE)
    - Catalog-driven operation dispatch
    - Prometheus metrics and structured logging

    Example:
        >>> from visa_sdk import VisaClient, ClientConfig
        >>> client = VisaClient(ClientConfig.from_env())
        >>> client.hello_world()
        {'message': 'helloworld', 'timestamp': '...'}
    """

    def __init__(
        self,
        config: ClientConfig,
        http_adapter: Optional[HTTPAdapter] = None,
        catalog: Optional[OperationCatalog] = None,
    ):
        super().__init__(config, http_adapter=http_adapter, catalog=catalog)

    def _default_adapter(self, transport: TransportHandle) -> HTTPAdapter:
        return RequestsAdapter(transport)

    def request(
        self,
        overlay: Optional[Dict[str, Any]] = None,
        operation_id: Optional[Union[OperationId, str]] = None,
        encrypt: bool = False,
    ) -> Any:
        """
        Make a request to the Visa API

        Args:
            overlay: Call-specific fields (method, url, data, params, headers)
            operation_id: Catalog operation id; raw request when omitted
            encrypt: Force MLE for this call

        Returns:
            Decoded response body
        """
        return self.pipeline.request(overlay, operation_id, encrypt)

    def add_card(self, user_key: str, card_info: Dict[str, Any], encrypt: bool = False) -> Any:
        """
        Send a POST request to the Add Card endpoint

        Args:
            user_key: External user ID
            card_info: Card info
            encrypt: Wrap the body in an MLE envelope (requires init_mle)

        Returns:
            Response body
        """
        return self.request(
            {"data": self._card_body(user_key, card_info)}, OperationId.ADD_CARD, encrypt
        )

    def delete_card(self, user_key: str, card_id: str) -> Any:
        """
        Send a POST request to the Delete Card endpoint

        Args:
            user_key: External user ID
            card_id: Card ID

        Returns:
            Response body
        """
        return self.request(
            {"data": self._card_body(user_key, {"cardId": card_id})}, OperationId.DELETE_CARD
        )

    def enroll_user(self, user_key: str, card_info: Dict[str, Any], encrypt: bool = False) -> Any:
        """
        Send a POST request to the Enroll User endpoint

        Args:
            user_key: External user ID
            card_info: Card info
            encrypt: Wrap the body in an MLE envelope (requires init_mle)

        Returns:
            Response body
        """
        return self.request(
            {"data": self._enroll_body(user_key, card_info)}, OperationId.ENROLL_USER, encrypt
        )

    def get_user(self, user_key: str) -> Any:
        """Send a POST request to the Get User endpoint"""
        return self.request({"data": self._user_body(user_key)}, OperationId.GET_USER)

    def unenroll_user(self, user_key: str) -> Any:
        """Send a POST request to the Unenroll User endpoint"""
        return self.request({"data": self._user_body(user_key)}, OperationId.UNENROLL_USER)

    def hello_world(self) -> Any:
        """Send a GET request to the Hello World endpoint"""
        return self.request({"method": "GET", "url": HELLO_WORLD_PATH})
