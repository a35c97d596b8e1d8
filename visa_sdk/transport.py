"""
Mutual-TLS transport identity.

Builds the SSL context shared by every call a client makes: the trust
anchor used to validate the server chain plus the client certificate and
key presented for mutual authentication.
"""

import functools
import logging
import os
import ssl
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from visa_sdk.exceptions import ConfigurationError
from visa_sdk.models import ClientConfig

logger = logging.getLogger("visa_sdk.transport")

TRUST_ANCHOR_PATH = Path(__file__).parent / "data" / "DigiCertGlobalRootCA.crt"


@dataclass(frozen=True)
class TransportHandle:
    """Secure-channel configuration, built once per client"""

    ssl_context: ssl.SSLContext
    verify_hostname: bool


@functools.lru_cache(maxsize=1)
def load_trust_anchor() -> str:
    """Bundled root certificate (PEM), read once per process"""
    return TRUST_ANCHOR_PATH.read_text(encoding="ascii")


def _write_private_temp(content: str, directory: str, name: str) -> str:
    path = os.path.join(directory, name)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
    with os.fdopen(fd, "w", encoding="ascii") as fh:
        fh.write(content)
    return path


def _load_client_identity(
    context: ssl.SSLContext, cert_pem: str, key_pem: str, passphrase: Optional[str]
) -> None:
    # load_cert_chain only reads files; keep the PEM on disk just long enough
    with tempfile.TemporaryDirectory(prefix="visa-sdk-") as directory:
        cert_path = _write_private_temp(cert_pem, directory, "client.crt")
        key_path = _write_private_temp(key_pem, directory, "client.key")
        context.load_cert_chain(cert_path, key_path, password=passphrase)


def build_transport(config: ClientConfig) -> TransportHandle:
    """
    Build the mutual-TLS transport handle for a client

    Args:
        config: Validated client configuration

    Returns:
        TransportHandle wrapping a client-side SSL context

    Raises:
        ConfigurationError: If the certificate, key, passphrase or trust
            anchor cannot be loaded
    """
    for name in ("client_cert", "client_key"):
        if not getattr(config, name):
            raise ConfigurationError(f"{name} is required")

    context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
    context.minimum_version = ssl.TLSVersion.TLSv1_2

    try:
        context.load_verify_locations(cadata=config.ca_cert or load_trust_anchor())
    except (ssl.SSLError, ValueError) as e:
        raise ConfigurationError(f"Invalid trust anchor: {e}") from e

    try:
        _load_client_identity(context, config.client_cert, config.client_key, config.passphrase)
    except (ssl.SSLError, ValueError) as e:
        raise ConfigurationError(f"Invalid client certificate or key: {e}") from e

    context.check_hostname = config.verify_hostname
    context.verify_mode = ssl.CERT_REQUIRED

    if not config.verify_hostname:
        logger.warning(
            "Server host name verification is disabled; the certificate chain "
            "is still verified against the trust anchor"
        )

    return TransportHandle(ssl_context=context, verify_hostname=config.verify_hostname)
