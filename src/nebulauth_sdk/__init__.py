"""
NebulAuth Python SDK
License key verification with HMAC request signing and replay protection
"""

from .version import __version__
from .exceptions import (
    NebulAuthError,
    ConfigError,
    CryptoError,
    ValidationError,
    ServerCommunicationError,
)
from .http_client import (
    NebulAuthClient,
    ClientOptions,
    NebulAuthResponse,
    VerifyKeyInput,
    AuthVerifyInput,
    RedeemKeyInput,
    ResetHwidInput,
    PostOptions,
    create_client,
    DEFAULT_BASE_URL,
)
from .dashboard import (
    NebulAuthDashboardClient,
    DashboardAuth,
    DashboardClientOptions,
    DashboardRequestOptions,
    DashboardResponse,
    LoginRequest,
    CustomerUpdateRequest,
    TeamMemberCreateRequest,
    TeamMemberUpdateRequest,
    KeyCreateRequest,
    KeyBatchCreateRequest,
    KeyUpdateRequest,
    KeyRevokeRequest,
    RevokeSessionRequest,
    RevokeAllSessionsRequest,
    CheckpointStepInput,
    CheckpointCreateRequest,
    CheckpointUpdateRequest,
    BlacklistCreateRequest,
    ApiTokenCreateRequest,
    ApiTokenUpdateRequest,
    create_dashboard_client,
    DEFAULT_DASHBOARD_BASE_URL,
)
from .config import (
    load_client_options_from_env,
    load_dashboard_options_from_env,
    load_client_options_from_json,
    load_client_options_from_file,
)
from .signing import (
    # Core signing functionality
    HmacSigner,
    compute_signature,
    verify_signature,
    sign_request,
    AuthHeaderAssembler,
    build_auth_headers,
    select_auth_path,
    # Types
    ReplayProtectionMode,
    AuthPath,
    Credentials,
    PopAuthOptions,
    SigningInput,
    SignatureResult,
    # Header names
    AUTHORIZATION_HEADER,
    TIMESTAMP_HEADER,
    NONCE_HEADER,
    SIGNATURE_HEADER,
    BODY_HASH_HEADER,
    HWID_HEADER,
    # Utilities
    build_canonical_message,
    generate_nonce,
    sha256_hex,
    resolve_canonical_path,
)


# Public API exports
__all__ = [
    '__version__',
    # Exceptions
    'NebulAuthError',
    'ConfigError',
    'CryptoError',
    'ValidationError',
    'ServerCommunicationError',
    # Verification client
    'NebulAuthClient',
    'ClientOptions',
    'NebulAuthResponse',
    'VerifyKeyInput',
    'AuthVerifyInput',
    'RedeemKeyInput',
    'ResetHwidInput',
    'PostOptions',
    'create_client',
    'DEFAULT_BASE_URL',
    # Dashboard client
    'NebulAuthDashboardClient',
    'DashboardAuth',
    'DashboardClientOptions',
    'DashboardRequestOptions',
    'DashboardResponse',
    'LoginRequest',
    'CustomerUpdateRequest',
    'TeamMemberCreateRequest',
    'TeamMemberUpdateRequest',
    'KeyCreateRequest',
    'KeyBatchCreateRequest',
    'KeyUpdateRequest',
    'KeyRevokeRequest',
    'RevokeSessionRequest',
    'RevokeAllSessionsRequest',
    'CheckpointStepInput',
    'CheckpointCreateRequest',
    'CheckpointUpdateRequest',
    'BlacklistCreateRequest',
    'ApiTokenCreateRequest',
    'ApiTokenUpdateRequest',
    'create_dashboard_client',
    'DEFAULT_DASHBOARD_BASE_URL',
    # Configuration
    'load_client_options_from_env',
    'load_dashboard_options_from_env',
    'load_client_options_from_json',
    'load_client_options_from_file',
    # Request Signing - Core
    'HmacSigner',
    'compute_signature',
    'verify_signature',
    'sign_request',
    'AuthHeaderAssembler',
    'build_auth_headers',
    'select_auth_path',
    # Request Signing - Types
    'ReplayProtectionMode',
    'AuthPath',
    'Credentials',
    'PopAuthOptions',
    'SigningInput',
    'SignatureResult',
    # Request Signing - Header names
    'AUTHORIZATION_HEADER',
    'TIMESTAMP_HEADER',
    'NONCE_HEADER',
    'SIGNATURE_HEADER',
    'BODY_HASH_HEADER',
    'HWID_HEADER',
    # Request Signing - Utilities
    'build_canonical_message',
    'generate_nonce',
    'sha256_hex',
    'resolve_canonical_path',
]
