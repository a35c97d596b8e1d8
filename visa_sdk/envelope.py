"""
Message Level Encryption (MLE) envelope.

Payloads are wrapped in a compact JWE (RFC 7516): the content key is
wrapped with RSA-OAEP-256 and the content encrypted with AES-128-GCM. The
protected header carries the key id and an ``iat`` claim in milliseconds.

Token layout::

    BASE64URL(header) . BASE64URL(wrapped key) . BASE64URL(iv)
        . BASE64URL(ciphertext) . BASE64URL(tag)
"""

import base64
import binascii
import json
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from cryptography import x509
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from visa_sdk.exceptions import ConfigurationError, EnvelopeError

ALG = "RSA-OAEP-256"
ENC = "A128GCM"
KEY_OPS = ("wrapKey", "encrypt")

CEK_SIZE = 16
IV_SIZE = 12
TAG_SIZE = 16

# Request body wrapper and header used by the Visa MLE convention
ENC_DATA_FIELD = "encData"
KEY_ID_HEADER = "keyId"

_OAEP = padding.OAEP(
    mgf=padding.MGF1(algorithm=hashes.SHA256()),
    algorithm=hashes.SHA256(),
    label=None,
)


@dataclass(frozen=True)
class EnvelopeKey:
    """MLE key description, immutable once built"""

    key_id: str
    public_key: rsa.RSAPublicKey
    private_key: Optional[rsa.RSAPrivateKey] = None
    alg: str = ALG
    enc: str = ENC
    key_ops: Tuple[str, ...] = KEY_OPS

    @property
    def can_decrypt(self) -> bool:
        return self.private_key is not None


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(segment: str) -> bytes:
    try:
        raw = segment.encode("ascii")
        data = base64.urlsafe_b64decode(raw + b"=" * (-len(raw) % 4))
    except (ValueError, binascii.Error) as e:
        raise EnvelopeError(f"Invalid base64url segment: {e}") from e

    # Reject non-alphabet characters and non-zero padding bits
    if _b64url_encode(data) != segment:
        raise EnvelopeError("Invalid base64url segment: non-canonical encoding")

    return data


def _load_public_key(key_pem: str) -> Tuple[rsa.RSAPublicKey, Optional[rsa.RSAPrivateKey]]:
    data = key_pem.encode("utf-8")

    if b"CERTIFICATE" in data:
        try:
            key = x509.load_pem_x509_certificate(data).public_key()
        except ValueError as e:
            raise EnvelopeError(f"Invalid MLE certificate: {e}") from e
        private = None
    elif b"PRIVATE KEY" in data:
        private = _load_private_key(key_pem)
        key = private.public_key()
    else:
        try:
            key = serialization.load_pem_public_key(data)
        except ValueError as e:
            raise EnvelopeError(f"Invalid MLE public key: {e}") from e
        private = None

    if not isinstance(key, rsa.RSAPublicKey):
        raise EnvelopeError(f"MLE key must be RSA, got {type(key).__name__}")

    return key, private


def _load_private_key(key_pem: str, passphrase: Optional[str] = None) -> rsa.RSAPrivateKey:
    password = passphrase.encode("utf-8") if passphrase else None
    try:
        key = serialization.load_pem_private_key(key_pem.encode("utf-8"), password=password)
    except (ValueError, TypeError) as e:
        raise EnvelopeError(f"Invalid MLE private key: {e}") from e

    if not isinstance(key, rsa.RSAPrivateKey):
        raise EnvelopeError(f"MLE private key must be RSA, got {type(key).__name__}")
    return key


def init_envelope(
    key_id: Optional[str],
    key_pem: Optional[str],
    private_key_pem: Optional[str] = None,
    passphrase: Optional[str] = None,
) -> EnvelopeKey:
    """
    Build an MLE key

    Args:
        key_id: MLE key id issued by Visa
        key_pem: Server encryption key: RSA public key, X.509 certificate or
            RSA private key (PEM)
        private_key_pem: Client MLE private key used to decrypt responses
        passphrase: Passphrase of ``private_key_pem``

    Returns:
        EnvelopeKey

    Raises:
        ConfigurationError: If ``key_id`` or ``key_pem`` is missing
        EnvelopeError: If key material cannot be parsed
    """
    if not key_id:
        raise ConfigurationError("keyId is required")
    if not key_pem:
        raise ConfigurationError("serverKey is required")

    public_key, private_key = _load_public_key(key_pem)
    if private_key_pem:
        private_key = _load_private_key(private_key_pem, passphrase)

    return EnvelopeKey(key_id=key_id, public_key=public_key, private_key=private_key)


def encode(key: EnvelopeKey, payload: Any, issued_at: Optional[int] = None) -> str:
    """
    Encrypt a JSON-serializable object into a compact JWE

    Args:
        key: MLE key
        payload: Object to encrypt
        issued_at: ``iat`` in milliseconds (default: now)

    Returns:
        Compact JWE string

    Raises:
        EnvelopeError: If the payload is not JSON-serializable or encryption fails
    """
    try:
        plaintext = json.dumps(payload, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EnvelopeError(f"Payload is not JSON-serializable: {e}") from e

    header = {
        "alg": key.alg,
        "enc": key.enc,
        "kid": key.key_id,
        "iat": issued_at if issued_at is not None else int(time.time() * 1000),
    }
    protected = _b64url_encode(json.dumps(header, separators=(",", ":")).encode("utf-8"))

    cek = AESGCM.generate_key(bit_length=CEK_SIZE * 8)
    iv = os.urandom(IV_SIZE)

    try:
        wrapped_key = key.public_key.encrypt(cek, _OAEP)
        sealed = AESGCM(cek).encrypt(iv, plaintext, protected.encode("ascii"))
    except ValueError as e:
        raise EnvelopeError(f"MLE encryption failed: {e}") from e

    ciphertext, tag = sealed[:-TAG_SIZE], sealed[-TAG_SIZE:]
    return ".".join(
        [
            protected,
            _b64url_encode(wrapped_key),
            _b64url_encode(iv),
            _b64url_encode(ciphertext),
            _b64url_encode(tag),
        ]
    )


def read_header(token: str) -> Dict[str, Any]:
    """
    Parse the protected header of a compact JWE without decrypting it

    Raises:
        EnvelopeError: If the token or header is malformed
    """
    if not isinstance(token, str):
        raise EnvelopeError("Token must be a string")

    segments = token.split(".")
    if len(segments) != 5:
        raise EnvelopeError(f"Compact JWE must have 5 segments, got {len(segments)}")

    try:
        header = json.loads(_b64url_decode(segments[0]).decode("utf-8"))
    except ValueError as e:
        raise EnvelopeError(f"Invalid JWE header: {e}") from e

    if not isinstance(header, dict):
        raise EnvelopeError("JWE header must be a JSON object")
    return header


def issued_at(token: str) -> Optional[int]:
    """``iat`` claim (milliseconds) of a token"""
    return read_header(token).get("iat")


def decode(key: EnvelopeKey, token: str) -> Any:
    """
    Decrypt a compact JWE produced for ``key``

    Args:
        key: MLE key holding a private key
        token: Compact JWE

    Returns:
        The decrypted JSON value

    Raises:
        EnvelopeError: On malformed tokens, unsupported algorithms, key id
            mismatch, missing private key or failed authentication
    """
    header = read_header(token)

    if header.get("alg") != key.alg or header.get("enc") != key.enc:
        raise EnvelopeError(
            f"Unsupported JWE algorithms: alg={header.get('alg')!r} enc={header.get('enc')!r}"
        )
    if header.get("kid") != key.key_id:
        raise EnvelopeError(f"JWE key id {header.get('kid')!r} does not match {key.key_id!r}")
    if key.private_key is None:
        raise EnvelopeError(f"No private key available to decrypt with key id {key.key_id!r}")

    protected, wrapped_key, iv, ciphertext, tag = token.split(".")
    wrapped_key_bytes = _b64url_decode(wrapped_key)
    iv_bytes = _b64url_decode(iv)
    ciphertext_bytes = _b64url_decode(ciphertext)
    tag_bytes = _b64url_decode(tag)

    if len(iv_bytes) != IV_SIZE or len(tag_bytes) != TAG_SIZE:
        raise EnvelopeError("Invalid JWE IV or tag length")

    try:
        cek = key.private_key.decrypt(wrapped_key_bytes, _OAEP)
    except ValueError as e:
        raise EnvelopeError(f"Content key unwrap failed: {e}") from e

    if len(cek) != CEK_SIZE:
        raise EnvelopeError(f"Invalid content key size: {len(cek)}")

    try:
        plaintext = AESGCM(cek).decrypt(
            iv_bytes, ciphertext_bytes + tag_bytes, protected.encode("ascii")
        )
    except InvalidTag as e:
        raise EnvelopeError("JWE authentication tag mismatch") from e

    try:
        return json.loads(plaintext.decode("utf-8"))
    except ValueError as e:
        raise EnvelopeError(f"Decrypted payload is not JSON: {e}") from e


def wrap_body(key: EnvelopeKey, payload: Any) -> Tuple[Dict[str, str], Dict[str, str]]:
    """
    Encrypt a request body the way Visa MLE endpoints expect

    Returns:
        Tuple of (body, extra headers)
    """
    return {ENC_DATA_FIELD: encode(key, payload)}, {KEY_ID_HEADER: key.key_id}
