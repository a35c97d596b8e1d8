"""
Pytest configuration and fixtures
"""

import asyncio
import datetime
import json
from typing import Any, List, Optional

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

from visa_sdk import ClientConfig
from visa_sdk.http.adapter import HTTPAdapter, HTTPResponse
from visa_sdk.models import RequestConfig

BASE_URL = "https://sandbox.api.visa.com"
PASSPHRASE = "test-passphrase"


def _name(common_name: str) -> x509.Name:
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


def _certificate(subject, issuer, public_key, signing_key, ca: bool) -> x509.Certificate:
    now = datetime.datetime.now(datetime.timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(public_key)
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - datetime.timedelta(days=1))
        .not_valid_after(now + datetime.timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=ca, path_length=None), critical=True)
        .sign(signing_key, hashes.SHA256())
    )


def _pem(cert: x509.Certificate) -> str:
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


@pytest.fixture(scope="session")
def tls_material():
    """Test CA plus a client certificate and passphrase-protected key signed by it"""
    ca_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    ca_cert = _certificate(_name("Visa SDK Test Root"), _name("Visa SDK Test Root"),
                           ca_key.public_key(), ca_key, ca=True)

    client_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    client_cert = _certificate(_name("visa-sdk-test-client"), _name("Visa SDK Test Root"),
                               client_key.public_key(), ca_key, ca=False)

    return {
        "ca_cert": _pem(ca_cert),
        "client_cert": _pem(client_cert),
        "client_key": client_key.private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.PKCS8,
            serialization.BestAvailableEncryption(PASSPHRASE.encode()),
        ).decode("ascii"),
        "passphrase": PASSPHRASE,
    }


@pytest.fixture(scope="session")
def mle_keys():
    """RSA key pair for MLE, as PEM strings"""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    public_pem = key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode("ascii")
    private_pem = key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("ascii")
    certificate_pem = _pem(
        _certificate(_name("Visa MLE"), _name("Visa MLE"), key.public_key(), key, ca=False)
    )
    return {
        "key_id": "mle-key-1",
        "public": public_pem,
        "private": private_pem,
        "certificate": certificate_pem,
    }


@pytest.fixture
def config_values(tls_material):
    """Complete set of client configuration values"""
    return {
        "base_url": BASE_URL,
        "client_cert": tls_material["client_cert"],
        "client_key": tls_material["client_key"],
        "passphrase": tls_material["passphrase"],
        "ca_cert": tls_material["ca_cert"],
        "community_code": "TESTCOMMUNITY",
        "user_id": "test-user",
    }


@pytest.fixture
def test_config(config_values):
    """Create test configuration fixture"""
    return ClientConfig(**config_values)


class DummyAdapter(HTTPAdapter):
    """Stub HTTP adapter that records requests and returns a canned response"""

    def __init__(
        self,
        status: int = 200,
        body: Any = None,
        reason: str = "OK",
        headers: Optional[dict] = None,
        echo: bool = False,
        error: Optional[Exception] = None,
    ):
        self.requests: List[RequestConfig] = []
        self.status = status
        self.body = body
        self.reason = reason
        self.headers = headers or {}
        self.echo = echo
        self.error = error

    @property
    def last_request(self) -> Optional[RequestConfig]:
        return self.requests[-1] if self.requests else None

    def _response(self, request: RequestConfig) -> HTTPResponse:
        self.requests.append(request)
        if self.error is not None:
            raise self.error

        payload = request.data if self.echo else self.body
        text = json.dumps(payload) if payload is not None else ""
        return HTTPResponse(status=self.status, reason=self.reason, text=text, headers=self.headers)

    def send(self, request: RequestConfig) -> HTTPResponse:
        return self._response(request)


class AsyncDummyAdapter(DummyAdapter):
    """Async stub; yields to the event loop before answering"""

    def __init__(self, delays: Optional[dict] = None, **kwargs: Any):
        super().__init__(**kwargs)
        self.delays = delays or {}

    async def send(self, request: RequestConfig) -> HTTPResponse:
        user_key = (request.data or {}).get("userKey")
        await asyncio.sleep(self.delays.get(user_key, 0))
        return self._response(request)


@pytest.fixture
def make_adapter():
    """Factory for DummyAdapter instances"""
    return DummyAdapter


@pytest.fixture
def make_async_adapter():
    """Factory for AsyncDummyAdapter instances"""
    return AsyncDummyAdapter
