"""
Utility functions for request signing

This module provides the leaf helpers of the signing pipeline: canonical path
resolution, nonce generation, timestamp handling and body digest calculation.
"""

import re
import time
import base64
import hashlib
import logging
import secrets
from urllib.parse import urlsplit

from requests.utils import requote_uri

from ..exceptions import ConfigError
from .types import SigningErrorCodes, RequestBody

logger = logging.getLogger(__name__)

NONCE_BYTES = 16

# 16 bytes in unpadded URL-safe base64
_NONCE_PATTERN = re.compile(r'^[A-Za-z0-9_-]{22}$')
_HEX_SHA256_PATTERN = re.compile(r'^[0-9a-f]{64}$')


def generate_nonce() -> str:
    """
    Generate a single-use nonce for replay protection.

    Returns:
        str: 16 random bytes encoded as URL-safe base64 without padding
    """
    raw = secrets.token_bytes(NONCE_BYTES)
    return base64.urlsafe_b64encode(raw).rstrip(b'=').decode('ascii')


def validate_nonce(nonce: str) -> bool:
    """
    Validate nonce format.

    Args:
        nonce: Nonce string to validate

    Returns:
        bool: True if nonce has the shape produced by generate_nonce
    """
    if not isinstance(nonce, str):
        return False

    return bool(_NONCE_PATTERN.match(nonce))


def generate_timestamp_ms() -> int:
    """
    Generate current Unix timestamp in milliseconds.

    Falls back to 0 if the system clock cannot be read.

    Returns:
        int: Milliseconds since epoch
    """
    try:
        return int(time.time() * 1000)
    except (OSError, OverflowError, ValueError) as e:
        logger.warning(f"System clock unavailable, using timestamp 0: {e}")
        return 0


def body_to_bytes(body: RequestBody) -> bytes:
    """
    Normalize a request body to the bytes that go on the wire.

    Args:
        body: Request body (string, bytes, or None)

    Returns:
        bytes: UTF-8 encoded body, empty for None
    """
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode('utf-8')
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)

    raise ConfigError(
        f"Body must be string, bytes, or None, got {type(body)}",
        SigningErrorCodes.INVALID_PAYLOAD,
        {"body_type": str(type(body))}
    )


def sha256_hex(body: RequestBody) -> str:
    """
    Calculate the lowercase hex SHA-256 digest of a request body.

    Args:
        body: Request body (string, bytes, or None)

    Returns:
        str: 64-character lowercase hex digest
    """
    return to_hex(hashlib.sha256(body_to_bytes(body)).digest())


def is_sha256_hex(value: str) -> bool:
    """Check that value is a 64-character lowercase hex digest."""
    return isinstance(value, str) and bool(_HEX_SHA256_PATTERN.match(value))


def _parse_http_url(url: str):
    # Same quoting requests applies when preparing the request
    try:
        parsed = urlsplit(requote_uri(url))
    except (TypeError, ValueError) as e:
        raise ConfigError(
            f"Failed to parse URL: {e}",
            SigningErrorCodes.INVALID_URL,
            {"url": url, "original_error": str(e)}
        )

    if not parsed.scheme or not parsed.netloc:
        raise ConfigError(
            f"Invalid URL format: {url}",
            SigningErrorCodes.INVALID_URL,
            {"url": url}
        )

    return parsed


def extract_base_path(base_url: str) -> str:
    """
    Extract the path component of a client base URL.

    Args:
        base_url: Base API URL (e.g. https://api.nebulauth.com/api/v1/)

    Returns:
        str: Path without trailing slash, empty when the URL has no path

    Raises:
        ConfigError: If the URL cannot be parsed
    """
    parsed = _parse_http_url(base_url.rstrip('/'))
    return parsed.path.rstrip('/')


def resolve_canonical_path(full_url: str, base_path: str = "") -> str:
    """
    Resolve the path the server expects inside the signed payload.

    The configured base path prefix is stripped so signatures stay stable
    when the API base URL is relocated.

    Args:
        full_url: Complete request URL
        base_path: Client base path (see extract_base_path)

    Returns:
        str: Canonical path, always starting with '/'

    Raises:
        ConfigError: If the URL cannot be parsed
    """
    path = _parse_http_url(full_url).path

    if base_path and path.startswith(base_path):
        path = path[len(base_path):]
        if not path:
            path = "/"

    if not path.startswith('/'):
        path = f"/{path}"

    return path


class PerformanceTimer:
    """Simple performance timer for monitoring signing operations."""

    def __init__(self):
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000


def to_hex(data: bytes) -> str:
    """
    Convert bytes to lowercase hex string.

    Args:
        data: Bytes to convert

    Returns:
        str: Lowercase hex string
    """
    return data.hex().lower()
