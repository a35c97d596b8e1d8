"""
Visa SDK Utilities
"""

import logging
import secrets
from typing import Any, Callable

from visa_sdk.exceptions import VisaError
from visa_sdk.models import Result

logger = logging.getLogger("visa_sdk")

# nanoid's default URL-safe alphabet
CORRELATION_ID_ALPHABET = "useandom-26T198340PX75pxJACKVERYMINDBUSHWOLF_GQZbfghjklqvwyzrict"
CORRELATION_ID_SIZE = 21

SENSITIVE_KEYS = {"api_key", "token", "secret", "password", "passphrase", "key", "authorization"}
# Headers/fields that look sensitive by name but are routinely needed in logs
NON_SENSITIVE_KEYS = {"keyid", "userkey"}


def make_correlation_id(size: int = CORRELATION_ID_SIZE) -> str:
    """
    Generate a correlation id for an outbound business call

    Args:
        size: Number of characters (default: 21, same as nanoid)

    Returns:
        Random URL-safe identifier

    Examples:
        >>> cid = make_correlation_id()
        >>> len(cid)
        21
    """
    return "".join(secrets.choice(CORRELATION_ID_ALPHABET) for _ in range(size))


def setup_logging(debug: bool = False) -> None:
    """
    Setup basic logging for SDK

    Args:
        debug: Enable debug level logging
    """
    level = logging.DEBUG if debug else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _is_sensitive(key: str) -> bool:
    lowered = key.lower()
    if lowered in NON_SENSITIVE_KEYS:
        return False
    return any(sensitive in lowered for sensitive in SENSITIVE_KEYS)


def sanitize_for_logging(data: Any) -> Any:
    """
    Sanitize sensitive data for logging

    Nested dicts and lists are walked; the input is never modified.

    Args:
        data: Value to sanitize

    Returns:
        Sanitized copy
    """
    if isinstance(data, dict):
        sanitized = {}
        for key, value in data.items():
            if isinstance(key, str) and _is_sensitive(key):
                sanitized[key] = "***REDACTED***"
            else:
                sanitized[key] = sanitize_for_logging(value)
        return sanitized

    if isinstance(data, (list, tuple)):
        return [sanitize_for_logging(item) for item in data]

    return data


def safe_call(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Result:
    """
    Run an SDK call and capture its outcome as a Result

    Only SDK errors are captured; anything else is a bug and propagates.

    Example:
        >>> result = safe_call(client.get_user, "user-1")
        >>> if result.ok:
        ...     print(result.value)
        ... else:
        ...     print(result.error.status_code)
    """
    try:
        return Result(value=fn(*args, **kwargs))
    except VisaError as e:
        return Result(error=e)


async def safe_call_async(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Result:
    """Async variant of :func:`safe_call` for coroutine functions"""
    try:
        return Result(value=await fn(*args, **kwargs))
    except VisaError as e:
        return Result(error=e)
