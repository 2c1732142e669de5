"""
NebulAuth Python SDK - Request Signing Module

HMAC-SHA256 request signing and replay protection.
This module decides which credentials and signed headers accompany each
request sent to NebulAuth's verification API.
"""

from .types import (
    ReplayProtectionMode,
    AuthPath,
    AuthPathPolicy,
    AUTH_PATH_POLICIES,
    Credentials,
    PopAuthOptions,
    SigningInput,
    SignatureResult,
    SigningErrorCodes,
    AUTHORIZATION_HEADER,
    TIMESTAMP_HEADER,
    NONCE_HEADER,
    SIGNATURE_HEADER,
    BODY_HASH_HEADER,
    HWID_HEADER,
)

from .hmac_signer import (
    HmacSigner,
    compute_signature,
    verify_signature,
    sign_request,
)

from .auth_headers import (
    AuthHeaderAssembler,
    build_auth_headers,
    coerce_replay_mode,
    select_auth_path,
)

from .canonical_message import (
    build_canonical_message,
    parse_canonical_message,
    validate_canonical_message,
)

from .utils import (
    generate_nonce,
    generate_timestamp_ms,
    validate_nonce,
    sha256_hex,
    extract_base_path,
    resolve_canonical_path,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'HmacSigner',
    'compute_signature',
    'verify_signature',
    'sign_request',
    # Auth header assembly
    'AuthHeaderAssembler',
    'build_auth_headers',
    'coerce_replay_mode',
    'select_auth_path',
    # Types
    'ReplayProtectionMode',
    'AuthPath',
    'AuthPathPolicy',
    'AUTH_PATH_POLICIES',
    'Credentials',
    'PopAuthOptions',
    'SigningInput',
    'SignatureResult',
    'SigningErrorCodes',
    # Header names
    'AUTHORIZATION_HEADER',
    'TIMESTAMP_HEADER',
    'NONCE_HEADER',
    'SIGNATURE_HEADER',
    'BODY_HASH_HEADER',
    'HWID_HEADER',
    # Canonical message
    'build_canonical_message',
    'parse_canonical_message',
    'validate_canonical_message',
    # Utilities
    'generate_nonce',
    'generate_timestamp_ms',
    'validate_nonce',
    'sha256_hex',
    'extract_base_path',
    'resolve_canonical_path',
]
