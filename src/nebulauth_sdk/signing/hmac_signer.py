"""
HMAC-SHA256 request signer

This module provides the signer used by the nonce, strict and proof-of-possession
auth paths. It builds the canonical message for a request and computes a
lowercase hex HMAC-SHA256 over it with the cryptography package.
"""

import logging
from typing import Optional, Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, hmac

from ..exceptions import CryptoError
from .types import (
    SigningInput,
    SignatureResult,
    SigningErrorCodes,
    NonceGenerator,
    TimestampGenerator,
    RequestBody,
)
from .utils import (
    generate_nonce,
    generate_timestamp_ms,
    resolve_canonical_path,
    sha256_hex,
    to_hex,
    PerformanceTimer,
)
from .canonical_message import build_canonical_message

logger = logging.getLogger(__name__)

# Signing a short canonical string should never take this long
SLOW_SIGNING_THRESHOLD_MS = 10


def _secret_bytes(secret: Union[str, bytes]) -> bytes:
    if isinstance(secret, str):
        return secret.encode('utf-8')
    return secret


def _new_hmac(secret: Union[str, bytes]) -> hmac.HMAC:
    try:
        return hmac.HMAC(_secret_bytes(secret), hashes.SHA256())
    except (UnsupportedAlgorithm, TypeError, ValueError) as e:
        raise CryptoError(
            f"HMAC-SHA256 rejected the signing key: {e}",
            SigningErrorCodes.CRYPTO_ERROR,
            {"original_error": str(e)}
        )


def compute_signature(canonical_message: str, secret: Union[str, bytes]) -> str:
    """
    Compute HMAC-SHA256 over a canonical message.

    Args:
        canonical_message: Message produced by build_canonical_message
        secret: Signing secret or PoP key

    Returns:
        str: Lowercase hex signature (64 characters)

    Raises:
        CryptoError: If the HMAC primitive rejects the key material
    """
    h = _new_hmac(secret)
    h.update(canonical_message.encode('utf-8'))
    return to_hex(h.finalize())


def verify_signature(canonical_message: str, signature: str, secret: Union[str, bytes]) -> bool:
    """
    Check a hex signature against a canonical message in constant time.

    Args:
        canonical_message: Canonical message that was signed
        signature: Lowercase hex signature to check
        secret: Signing secret or PoP key

    Returns:
        bool: True if the signature matches
    """
    try:
        expected = bytes.fromhex(signature)
    except (TypeError, ValueError):
        return False

    h = _new_hmac(secret)
    h.update(canonical_message.encode('utf-8'))
    try:
        h.verify(expected)
    except InvalidSignature:
        return False
    return True


class HmacSigner:
    """
    Signs outgoing requests with HMAC-SHA256

    The signer holds no secrets. The key is passed to each sign() call and
    dropped when the call returns, so one signer can serve both the client's
    signing secret and per-request PoP keys.
    """

    def __init__(
        self,
        base_path: str = "",
        nonce_generator: Optional[NonceGenerator] = None,
        timestamp_generator: Optional[TimestampGenerator] = None
    ):
        """
        Initialize the signer.

        Args:
            base_path: Client base path stripped from the signed path
            nonce_generator: Override for nonce generation (tests)
            timestamp_generator: Override for the millisecond clock (tests)
        """
        self.base_path = base_path
        self.nonce_generator = nonce_generator or generate_nonce
        self.timestamp_generator = timestamp_generator or generate_timestamp_ms

    def create_signing_input(self, method: str, url: str, body: RequestBody) -> SigningInput:
        """Collect the per-request values covered by the signature."""
        return SigningInput(
            method=method.upper(),
            path=resolve_canonical_path(url, self.base_path),
            timestamp=self.timestamp_generator(),
            nonce=self.nonce_generator(),
            body_hash=sha256_hex(body)
        )

    def sign(
        self,
        method: str,
        url: str,
        body: RequestBody,
        secret: Union[str, bytes]
    ) -> SignatureResult:
        """
        Sign a request.

        Args:
            method: HTTP method
            url: Full request URL
            body: Exact body bytes (or string) that will be sent
            secret: Signing secret or PoP key

        Returns:
            SignatureResult: Canonical message, signature and covered values

        Raises:
            ConfigError: If the URL cannot be parsed
            CryptoError: If the HMAC primitive rejects the key material
        """
        timer = PerformanceTimer()

        signing_input = self.create_signing_input(method, url, body)
        canonical_message = build_canonical_message(signing_input)
        signature = compute_signature(canonical_message, secret)

        elapsed_ms = timer.elapsed_ms()
        if elapsed_ms > SLOW_SIGNING_THRESHOLD_MS:
            logger.warning(f"Signing operation took {elapsed_ms:.2f}ms (target: <{SLOW_SIGNING_THRESHOLD_MS}ms)")

        return SignatureResult(
            canonical_message=canonical_message,
            signature=signature,
            timestamp=signing_input.timestamp,
            nonce=signing_input.nonce,
            body_hash=signing_input.body_hash
        )


def sign_request(
    method: str,
    url: str,
    body: RequestBody,
    secret: Union[str, bytes],
    base_path: str = "",
    nonce_generator: Optional[NonceGenerator] = None,
    timestamp_generator: Optional[TimestampGenerator] = None
) -> SignatureResult:
    """
    Convenience function to sign a single request.

    Args:
        method: HTTP method
        url: Full request URL
        body: Request body
        secret: Signing secret or PoP key
        base_path: Client base path stripped from the signed path
        nonce_generator: Optional nonce override
        timestamp_generator: Optional timestamp override

    Returns:
        SignatureResult: Signing result
    """
    signer = HmacSigner(base_path, nonce_generator, timestamp_generator)
    return signer.sign(method, url, body, secret)
