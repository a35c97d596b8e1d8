"""
Visa SDK Data Models
"""

import copy
import dataclasses
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from visa_sdk.exceptions import ConfigurationError, VisaError

REQUIRED_CONFIG_FIELDS = (
    "base_url",
    "client_cert",
    "client_key",
    "community_code",
    "passphrase",
    "user_id",
)

# Environment variables read by ClientConfig.from_env()
ENV_VARS = {
    "base_url": "VISA_API_BASE_URL",
    "client_cert": "VISA_API_CLIENT_CERT",
    "client_key": "VISA_API_PRIVATE_KEY",
    "community_code": "VISA_API_COMMUNITY_CODE",
    "passphrase": "VISA_API_PASSWORD",
    "user_id": "VISA_API_USER_ID",
    "ca_cert": "VISA_API_CA_CERT",
}

COMMUNITY_TERMS_VERSION = "1"


class ClientConfig(BaseModel):
    """SDK client configuration"""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    base_url: Optional[str] = Field(None, description="Visa API base URL")
    client_cert: Optional[str] = Field(None, description="Client certificate (PEM)")
    client_key: Optional[str] = Field(None, description="Client certificate private key (PEM)")
    passphrase: Optional[str] = Field(
        None, description="Private key passphrase, also the Basic auth password"
    )
    community_code: Optional[str] = Field(None, description="Visa API community code")
    user_id: Optional[str] = Field(None, description="Visa API user ID")
    ca_cert: Optional[str] = Field(
        None, description="Trust anchor (PEM); defaults to the bundled DigiCert root"
    )
    logger: Optional[Any] = Field(
        None, description="Logger with debug/info/error methods (default: visa_sdk logger)"
    )
    timeout: float = Field(30.0, description="Request timeout in seconds")
    verify_hostname: bool = Field(
        False,
        description="Verify the server certificate host name. The chain is always "
        "verified against the trust anchor.",
    )
    debug: bool = Field(False, description="Enable debug logging")

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientConfig":
        """
        Build configuration from VISA_API_* environment variables

        Keyword overrides win over the environment.
        """
        values: Dict[str, Any] = {}
        for name, env_var in ENV_VARS.items():
            value = os.getenv(env_var)
            if value:
                values[name] = value
        values.update(overrides)
        return cls(**values)

    def validate_required(self) -> None:
        """
        Check that every required field is present

        Raises:
            ConfigurationError: Naming the first missing field
        """
        for name in REQUIRED_CONFIG_FIELDS:
            if not getattr(self, name):
                raise ConfigurationError(f"{name} is required")

        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")

    def __repr__(self) -> str:
        return (
            f"ClientConfig(base_url={self.base_url!r}, "
            f"community_code={self.community_code!r}, "
            f"user_id={self.user_id!r}, "
            f"client_cert=***REDACTED***, client_key=***REDACTED***, "
            f"passphrase=***REDACTED***, "
            f"verify_hostname={self.verify_hostname})"
        )

    __str__ = __repr__


_REQUEST_FIELDS = ("base_url", "url", "method", "headers", "params", "data", "auth", "timeout")


@dataclass(frozen=True)
class RequestConfig:
    """
    Immutable HTTP request configuration.

    The client holds one instance as its defaults; each call derives its
    own instance with :meth:`overlay`, so defaults are never written to.
    """

    base_url: str
    url: str = ""
    method: str = "GET"
    headers: Dict[str, str] = field(default_factory=dict)
    params: Optional[Dict[str, Any]] = None
    data: Any = None
    auth: Optional[Tuple[str, str]] = None
    timeout: Optional[float] = None

    def overlay(self, **fields: Any) -> "RequestConfig":
        """
        Return a new config with ``fields`` laid over a deep copy of this one

        Headers are merged (call headers win); every other field is replaced.

        Raises:
            ConfigurationError: If an unknown field is given
        """
        unknown = set(fields) - set(_REQUEST_FIELDS)
        if unknown:
            raise ConfigurationError(f"Unknown request config field(s): {sorted(unknown)}")

        fields = copy.deepcopy(fields)
        headers = copy.deepcopy(self.headers)
        headers.update(fields.pop("headers", None) or {})

        updates = {"params": copy.deepcopy(self.params), "data": copy.deepcopy(self.data)}
        updates.update(fields)
        updates["headers"] = headers
        return dataclasses.replace(self, **updates)

    @property
    def full_url(self) -> str:
        """Absolute request URL"""
        if self.url.startswith(("http://", "https://")):
            return self.url
        if not self.url:
            return self.base_url
        return f"{self.base_url.rstrip('/')}/{self.url.lstrip('/')}"

    def view(self) -> Dict[str, Any]:
        """Loggable subset of the config (auth excluded)"""
        return {
            "base_url": self.base_url,
            "url": self.url,
            "method": self.method,
            "headers": self.headers,
            "params": self.params,
            "data": self.data,
        }

    def snapshot(self) -> Dict[str, Any]:
        """Deep copy of every field, for equality checks"""
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class Result:
    """Explicit outcome of an SDK call: a value or a VisaError, never both"""

    value: Any = None
    error: Optional[VisaError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Any:
        """Return the value or raise the captured error"""
        if self.error is not None:
            raise self.error
        return self.value


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_body(self) -> Dict[str, Any]:
        """Wire representation (camelCase keys)"""
        return self.model_dump(by_alias=True, exclude_none=True)


class UserRequest(_Payload):
    """Body shared by user-scoped calls (get user, unenroll)"""

    community_code: str = Field(..., alias="communityCode")
    community_terms_version: str = Field(COMMUNITY_TERMS_VERSION, alias="communityTermsVersion")
    correlation_id: str = Field(..., alias="correlationId")
    user_key: str = Field(..., alias="userKey")


class CardRequest(UserRequest):
    """Add/delete card request"""

    card: Dict[str, Any] = Field(..., description="Card info, or {'cardId': ...} for deletion")


class UserDetails(_Payload):
    """Enrollment user details"""

    cards: List[Dict[str, Any]]
    community_code: str = Field(..., alias="communityCode")
    external_user_id: str = Field(..., alias="externalUserId")
    user_key: str = Field(..., alias="userKey")


class EnrollUserRequest(_Payload):
    """Enroll user request"""

    correlation_id: str = Field(..., alias="correlationId")
    community_terms_version: str = Field(COMMUNITY_TERMS_VERSION, alias="communityTermsVersion")
    user_details: UserDetails = Field(..., alias="userDetails")
