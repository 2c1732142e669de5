"""
Authentication header assembly

This module decides, for a single outgoing request, which credentials and
replay-protection headers to attach. Exactly one auth path applies per
request:

- POP: per-request access token, signed with the per-request PoP key
- STRICT: client bearer token, signed, body hash header included
- NONCE: client bearer token, signed, body hash header omitted
- NONE: client bearer token only
"""

import logging
from typing import Dict, Optional, Tuple, Union

from ..exceptions import ConfigError
from .types import (
    AuthPath,
    AuthPathPolicy,
    AUTH_PATH_POLICIES,
    AUTHORIZATION_HEADER,
    Credentials,
    PopAuthOptions,
    ReplayProtectionMode,
    SigningErrorCodes,
    HeaderDict,
    RequestBody,
)
from .hmac_signer import HmacSigner

logger = logging.getLogger(__name__)


def coerce_replay_mode(mode: Union[str, ReplayProtectionMode]) -> ReplayProtectionMode:
    """
    Convert a replay protection value to the enum.

    Raises:
        ConfigError: If the value is not a known mode
    """
    if isinstance(mode, ReplayProtectionMode):
        return mode

    try:
        return ReplayProtectionMode(str(mode).strip().lower())
    except ValueError:
        valid = ", ".join(m.value for m in ReplayProtectionMode)
        raise ConfigError(
            f"Invalid replay_protection '{mode}'. Must be one of: {valid}",
            SigningErrorCodes.INVALID_REPLAY_MODE,
            {"replay_protection": str(mode)}
        )


def select_auth_path(
    mode: ReplayProtectionMode,
    override: Optional[PopAuthOptions] = None
) -> AuthPath:
    """
    Select the auth path for a request.

    A PoP override takes precedence over the configured mode.

    Args:
        mode: Client replay protection mode
        override: Optional per-request PoP options

    Returns:
        AuthPath: Selected path
    """
    if override is not None and override.use_pop:
        return AuthPath.POP

    return AuthPath(coerce_replay_mode(mode).value)


def _validate_method(method: str) -> str:
    if not isinstance(method, str) or not method.strip() or any(c.isspace() for c in method):
        raise ConfigError(
            f"Invalid HTTP method: {method!r}",
            SigningErrorCodes.INVALID_METHOD,
            {"method": repr(method)}
        )
    return method.upper()


def _require(value: Optional[str], message: str, field_name: str) -> str:
    if not value:
        raise ConfigError(
            f"{message} (blank values are rejected)",
            SigningErrorCodes.MISSING_CREDENTIAL,
            {"field": field_name}
        )
    return value


class AuthHeaderAssembler:
    """
    Builds the authentication header set for outgoing requests

    The assembler owns the client's long-lived credentials and replay mode,
    both fixed at construction.
    """

    def __init__(
        self,
        mode: Union[str, ReplayProtectionMode],
        credentials: Credentials,
        base_path: str = "",
        signer: Optional[HmacSigner] = None
    ):
        self.mode = coerce_replay_mode(mode)
        self.credentials = credentials
        self.signer = signer or HmacSigner(base_path=base_path)

    def _resolve_token_and_key(
        self,
        path: AuthPath,
        policy: AuthPathPolicy,
        override: Optional[PopAuthOptions]
    ) -> Tuple[str, Optional[str]]:
        if path is AuthPath.POP:
            token = _require(
                override.access_token,
                "access_token is required when use_pop=true",
                "access_token"
            )
            key = _require(
                override.pop_key,
                "pop_key is required when use_pop=true",
                "pop_key"
            )
            return token, key

        token = _require(
            self.credentials.bearer_token,
            "bearer_token is required for bearer mode",
            "bearer_token"
        )
        key = None
        if policy.requires_signing_key:
            key = _require(
                self.credentials.signing_secret,
                "signing_secret is required when replay_protection is nonce/strict",
                "signing_secret"
            )
        return token, key

    def build(
        self,
        method: str,
        url: str,
        body: RequestBody,
        override: Optional[PopAuthOptions] = None
    ) -> HeaderDict:
        """
        Build authentication headers for a request.

        Args:
            method: HTTP method
            url: Full request URL
            body: Exact serialized body that will be sent
            override: Optional per-request PoP options

        Returns:
            Dict[str, str]: Authorization plus any signing headers

        Raises:
            ConfigError: If the method is malformed or a credential required by
                the selected path is missing
            CryptoError: If the signing key is rejected
        """
        method = _validate_method(method)
        path = select_auth_path(self.mode, override)
        policy = AUTH_PATH_POLICIES[path]

        # All preconditions are checked before any signing work
        token, key = self._resolve_token_and_key(path, policy, override)

        headers: Dict[str, str] = {}
        if policy.requires_signing_key:
            result = self.signer.sign(method, url, body, key)
            headers.update(result.to_headers(include_body_hash=policy.include_body_hash))

        headers[AUTHORIZATION_HEADER] = f"Bearer {token}"

        logger.debug(f"Built auth headers for {method} {url} via {path.value} path")
        return headers


def build_auth_headers(
    method: str,
    url: str,
    body: RequestBody,
    mode: Union[str, ReplayProtectionMode],
    credentials: Credentials,
    base_path: str = "",
    override: Optional[PopAuthOptions] = None
) -> HeaderDict:
    """
    Convenience function to build auth headers without keeping an assembler.

    Args:
        method: HTTP method
        url: Full request URL
        body: Serialized request body
        mode: Replay protection mode
        credentials: Bearer token and signing secret
        base_path: Client base path stripped from the signed path
        override: Optional per-request PoP options

    Returns:
        Dict[str, str]: Authentication headers
    """
    assembler = AuthHeaderAssembler(mode, credentials, base_path=base_path)
    return assembler.build(method, url, body, override)
