"""
Type definitions for request authentication and replay protection

This module provides the enums, data classes and header constants shared by
the canonical message builder, the HMAC signer and the auth header assembler.
"""

from typing import Dict, Optional, Union, Callable
from dataclasses import dataclass
from enum import Enum


# Wire header names, matched exactly by the verifying server
AUTHORIZATION_HEADER = "Authorization"
TIMESTAMP_HEADER = "X-Timestamp"
NONCE_HEADER = "X-Nonce"
SIGNATURE_HEADER = "X-Signature"
BODY_HASH_HEADER = "X-Body-Sha256"
HWID_HEADER = "X-HWID"


class ReplayProtectionMode(str, Enum):
    """Replay protection regimes a client can be configured with"""
    NONE = "none"
    NONCE = "nonce"
    STRICT = "strict"


class AuthPath(str, Enum):
    """Authentication path selected for a single outgoing request"""
    POP = "pop"
    STRICT = "strict"
    NONCE = "nonce"
    NONE = "none"


@dataclass(frozen=True)
class Credentials:
    """
    Long-lived credentials owned by a client instance

    Attributes:
        bearer_token: Bearer token sent in the Authorization header
        signing_secret: Shared HMAC secret used in nonce/strict modes
    """
    bearer_token: Optional[str] = None
    signing_secret: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"Credentials(bearer_token={'***' if self.bearer_token else None}, "
            f"signing_secret={'***' if self.signing_secret else None})"
        )


@dataclass(frozen=True)
class PopAuthOptions:
    """
    Per-request proof-of-possession override

    When use_pop is set, access_token and pop_key are both required and the
    request is signed with pop_key regardless of the client's replay mode.
    """
    use_pop: bool = False
    access_token: Optional[str] = None
    pop_key: Optional[str] = None

    def __repr__(self) -> str:
        return (
            f"PopAuthOptions(use_pop={self.use_pop}, "
            f"access_token={'***' if self.access_token else None}, "
            f"pop_key={'***' if self.pop_key else None})"
        )


@dataclass(frozen=True)
class SigningInput:
    """
    Request-scoped values covered by the signature

    Attributes:
        method: Uppercased HTTP method
        path: Canonical path with the client base path stripped
        timestamp: Milliseconds since the Unix epoch
        nonce: Single-use random token
        body_hash: Lowercase hex SHA-256 of the raw request body
    """
    method: str
    path: str
    timestamp: int
    nonce: str
    body_hash: str


@dataclass
class SignatureResult:
    """
    Result of signing a request

    Attributes:
        canonical_message: Exact string that was signed
        signature: Lowercase hex HMAC-SHA256 of the canonical message
        timestamp: Timestamp covered by the signature
        nonce: Nonce covered by the signature
        body_hash: Body hash covered by the signature
    """
    canonical_message: str
    signature: str
    timestamp: int
    nonce: str
    body_hash: str

    def to_headers(self, include_body_hash: bool = True) -> Dict[str, str]:
        """Signing headers to merge into the outgoing request."""
        headers = {
            TIMESTAMP_HEADER: str(self.timestamp),
            NONCE_HEADER: self.nonce,
            SIGNATURE_HEADER: self.signature,
        }
        if include_body_hash:
            headers[BODY_HASH_HEADER] = self.body_hash
        return headers


@dataclass(frozen=True)
class AuthPathPolicy:
    """
    What a given auth path needs and emits

    Attributes:
        requires_signing_key: Path signs and needs a key
        include_body_hash: Path exposes X-Body-Sha256
    """
    requires_signing_key: bool
    include_body_hash: bool


AUTH_PATH_POLICIES: Dict[AuthPath, AuthPathPolicy] = {
    AuthPath.POP: AuthPathPolicy(requires_signing_key=True, include_body_hash=True),
    AuthPath.STRICT: AuthPathPolicy(requires_signing_key=True, include_body_hash=True),
    AuthPath.NONCE: AuthPathPolicy(requires_signing_key=True, include_body_hash=False),
    AuthPath.NONE: AuthPathPolicy(requires_signing_key=False, include_body_hash=False),
}


# Common signing error codes
class SigningErrorCodes:
    """Standard error codes for signing operations"""

    # Configuration errors
    INVALID_CONFIG = "INVALID_CONFIG"
    MISSING_CREDENTIAL = "MISSING_CREDENTIAL"
    INVALID_REPLAY_MODE = "INVALID_REPLAY_MODE"

    # Request errors
    INVALID_URL = "INVALID_URL"
    INVALID_METHOD = "INVALID_METHOD"
    INVALID_HEADERS = "INVALID_HEADERS"
    INVALID_PAYLOAD = "INVALID_PAYLOAD"

    # Canonical message errors
    INVALID_CANONICAL_MESSAGE = "INVALID_CANONICAL_MESSAGE"

    # Crypto errors
    CRYPTO_ERROR = "CRYPTO_ERROR"


# Type aliases for convenience
NonceGenerator = Callable[[], str]
TimestampGenerator = Callable[[], int]
HeaderDict = Dict[str, str]
RequestBody = Union[str, bytes, None]
