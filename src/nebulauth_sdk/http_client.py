"""
HTTP client for the NebulAuth verification API

This module provides the client used by applications to verify license keys,
redeem keys, reset hardware bindings and call other signed POST endpoints.
Every request carries authentication headers built by the signing module
according to the client's replay protection mode.
"""

import json
import logging
from dataclasses import dataclass, field, asdict, is_dataclass
from typing import Dict, Optional, Any, Union
from urllib.parse import urljoin, urlparse

import requests

from .exceptions import ConfigError, ServerCommunicationError, ValidationError
from .signing.types import (
    Credentials,
    PopAuthOptions,
    ReplayProtectionMode,
    SigningErrorCodes,
    HWID_HEADER,
    HeaderDict,
    RequestBody,
)
from .signing.auth_headers import AuthHeaderAssembler, coerce_replay_mode
from .signing.utils import extract_base_path
from .version import __version__

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.nebulauth.com/api/v1"
DEFAULT_TIMEOUT_MS = 15000
DEFAULT_USER_AGENT = f"NebulAuth-Python-SDK/{__version__}"


@dataclass
class ClientOptions:
    """Configuration for a NebulAuth verification client."""
    base_url: str = DEFAULT_BASE_URL
    bearer_token: Optional[str] = None
    signing_secret: Optional[str] = None
    service_slug: Optional[str] = None
    replay_protection: ReplayProtectionMode = ReplayProtectionMode.STRICT
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    verify_ssl: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        """Normalize and validate client configuration."""
        if not self.base_url or not self.base_url.strip():
            self.base_url = DEFAULT_BASE_URL

        self.base_url = self.base_url.strip().rstrip('/')
        validate_base_url(self.base_url)

        self.replay_protection = coerce_replay_mode(self.replay_protection)

        if isinstance(self.timeout_ms, bool) or not isinstance(self.timeout_ms, int) or self.timeout_ms <= 0:
            raise ConfigError(
                f"timeout_ms must be a positive integer, got {self.timeout_ms!r}",
                SigningErrorCodes.INVALID_CONFIG,
                {"timeout_ms": self.timeout_ms}
            )

    def __repr__(self) -> str:
        return (
            f"ClientOptions(base_url={self.base_url!r}, "
            f"bearer_token={'***' if self.bearer_token else None}, "
            f"signing_secret={'***' if self.signing_secret else None}, "
            f"service_slug={self.service_slug!r}, "
            f"replay_protection={self.replay_protection.value!r}, "
            f"timeout_ms={self.timeout_ms})"
        )


def validate_base_url(base_url: str) -> None:
    """
    Check that a base URL is an absolute http(s) URL.

    Raises:
        ConfigError: If the URL is not usable as an API base
    """
    parsed = urlparse(base_url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        raise ConfigError(
            f"Invalid base URL format: {base_url}",
            SigningErrorCodes.INVALID_URL,
            {"base_url": base_url}
        )


@dataclass
class NebulAuthResponse:
    """Response returned by the verification API."""
    status_code: int
    ok: bool
    data: Any
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class VerifyKeyInput:
    """Input for POST /keys/verify."""
    key: str
    request_id: Optional[str] = None
    hwid: Optional[str] = None
    use_pop: bool = False
    access_token: Optional[str] = None
    pop_key: Optional[str] = None


@dataclass
class AuthVerifyInput:
    """Input for POST /auth/verify."""
    key: str
    hwid: Optional[str] = None
    request_id: Optional[str] = None


@dataclass
class RedeemKeyInput:
    """Input for POST /keys/redeem."""
    key: str
    discord_id: str
    service_slug: Optional[str] = None
    request_id: Optional[str] = None
    use_pop: bool = False
    access_token: Optional[str] = None
    pop_key: Optional[str] = None


@dataclass
class ResetHwidInput:
    """Input for POST /keys/reset-hwid. At least one of discord_id or key is required."""
    discord_id: Optional[str] = None
    key: Optional[str] = None
    request_id: Optional[str] = None
    use_pop: bool = False
    access_token: Optional[str] = None
    pop_key: Optional[str] = None


@dataclass
class PostOptions:
    """Per-request options for signed POST calls."""
    use_pop: bool = False
    access_token: Optional[str] = None
    pop_key: Optional[str] = None
    extra_headers: Dict[str, str] = field(default_factory=dict)


def serialize_json_body(payload: Any) -> str:
    """
    Serialize a request payload to compact JSON.

    The returned string is both hashed for signing and sent on the wire.

    Args:
        payload: dict, or dataclass (to_payload() is used when present)

    Returns:
        str: Compact JSON text

    Raises:
        ValidationError: If the payload cannot be serialized
    """
    if hasattr(payload, 'to_payload'):
        payload = payload.to_payload()
    elif is_dataclass(payload) and not isinstance(payload, type):
        payload = asdict(payload)

    try:
        return json.dumps(payload, separators=(',', ':'))
    except (TypeError, ValueError) as e:
        raise ValidationError(
            f"Failed to serialize payload: {e}",
            SigningErrorCodes.INVALID_PAYLOAD,
            {"original_error": str(e)}
        )


def response_headers(response: requests.Response) -> Dict[str, str]:
    """Collect response headers with lowercased names."""
    return {name.lower(): value for name, value in response.headers.items()}


def parse_json_data(text: str) -> Any:
    """
    Decode a response body for the verification API.

    Empty bodies become {} and non-JSON bodies become {"error": text}.
    """
    if not text or not text.strip():
        return {}

    try:
        return json.loads(text)
    except ValueError:
        return {"error": text}


def _pop_override(source: Any) -> PopAuthOptions:
    return PopAuthOptions(use_pop=source.use_pop, access_token=source.access_token, pop_key=source.pop_key)


class NebulAuthClient:
    """
    HTTP client for the NebulAuth verification API.

    Credentials, replay protection mode and base path are fixed when the
    client is created. Non-2xx responses are returned with ok=False rather
    than raised.
    """

    def __init__(self, options: Optional[ClientOptions] = None):
        """
        Initialize the HTTP client.

        Args:
            options: Client configuration (defaults to ClientOptions())
        """
        self.options = options or ClientOptions()
        self.base_url = self.options.base_url
        self.base_path = extract_base_path(self.base_url)
        self.assembler = AuthHeaderAssembler(
            self.options.replay_protection,
            Credentials(
                bearer_token=self.options.bearer_token,
                signing_secret=self.options.signing_secret
            ),
            base_path=self.base_path
        )
        self.session = self._create_session()

        logger.info(
            f"Initialized NebulAuth client for {self.base_url} "
            f"(replay protection: {self.options.replay_protection.value})"
        )

    def _create_session(self) -> requests.Session:
        """Create HTTP session with default headers."""
        session = requests.Session()
        session.headers.update({
            'Accept': 'application/json',
            'User-Agent': self.options.user_agent
        })
        return session

    @property
    def replay_protection(self) -> ReplayProtectionMode:
        return self.options.replay_protection

    def endpoint_url(self, endpoint: str) -> str:
        """
        Build the full URL for an API endpoint.

        Args:
            endpoint: Endpoint path, with or without a leading slash

        Returns:
            str: Absolute URL under the client base URL
        """
        return urljoin(self.base_url + '/', endpoint.lstrip('/'))

    def build_auth_headers(
        self,
        method: str,
        url: str,
        body: RequestBody,
        override: Optional[PopAuthOptions] = None
    ) -> HeaderDict:
        """
        Build authentication headers for a request sent by the caller.

        Args:
            method: HTTP method
            url: Full request URL
            body: Exact body that will be sent
            override: Optional PoP options

        Returns:
            Dict[str, str]: Authentication headers
        """
        return self.assembler.build(method, url, body, override)

    def verify_key(self, input: VerifyKeyInput) -> NebulAuthResponse:
        """
        Verify a license key.

        Args:
            input: Key, optional request id, hwid and PoP options

        Returns:
            NebulAuthResponse: Server response
        """
        payload: Dict[str, Any] = {'key': input.key}
        if input.request_id is not None:
            payload['requestId'] = input.request_id

        extra_headers = {}
        if input.hwid is not None:
            extra_headers[HWID_HEADER] = input.hwid

        return self._post_internal(
            '/keys/verify',
            payload,
            _pop_override(input),
            extra_headers
        )

    def auth_verify(self, input: AuthVerifyInput) -> NebulAuthResponse:
        """Verify a key for an auth session. Always uses the configured replay mode."""
        payload: Dict[str, Any] = {'key': input.key}
        if input.hwid is not None:
            payload['hwid'] = input.hwid
        if input.request_id is not None:
            payload['requestId'] = input.request_id

        return self._post_internal('/auth/verify', payload, None, {})

    def redeem_key(self, input: RedeemKeyInput) -> NebulAuthResponse:
        """
        Redeem a key for a Discord user.

        The service slug from the input takes precedence over the client option.

        Raises:
            ConfigError: If no service slug is available
        """
        slug = input.service_slug or self.options.service_slug
        if not slug:
            raise ConfigError(
                "service_slug is required either in client options or redeem_key input",
                SigningErrorCodes.INVALID_CONFIG,
                {"field": "service_slug"}
            )

        payload: Dict[str, Any] = {
            'key': input.key,
            'discordId': input.discord_id,
            'serviceSlug': slug,
        }
        if input.request_id is not None:
            payload['requestId'] = input.request_id

        return self._post_internal(
            '/keys/redeem',
            payload,
            _pop_override(input),
            {}
        )

    def reset_hwid(self, input: ResetHwidInput) -> NebulAuthResponse:
        """
        Reset the hardware binding of a key.

        Raises:
            ConfigError: If neither discord_id nor key is given
        """
        if input.discord_id is None and input.key is None:
            raise ConfigError(
                "reset_hwid requires at least discord_id or key",
                SigningErrorCodes.INVALID_CONFIG,
                {"fields": ["discord_id", "key"]}
            )

        payload: Dict[str, Any] = {}
        if input.discord_id is not None:
            payload['discordId'] = input.discord_id
        if input.key is not None:
            payload['key'] = input.key
        if input.request_id is not None:
            payload['requestId'] = input.request_id

        return self._post_internal(
            '/keys/reset-hwid',
            payload,
            _pop_override(input),
            {}
        )

    def post(
        self,
        endpoint: str,
        payload: Any,
        options: Optional[PostOptions] = None
    ) -> NebulAuthResponse:
        """
        Send a signed POST to an arbitrary endpoint.

        Args:
            endpoint: Endpoint path relative to the base URL
            payload: dict or dataclass body
            options: Optional PoP options and extra headers

        Returns:
            NebulAuthResponse: Server response
        """
        options = options or PostOptions()
        return self._post_internal(
            endpoint,
            payload,
            _pop_override(options),
            options.extra_headers
        )

    def _post_internal(
        self,
        endpoint: str,
        payload: Any,
        override: Optional[PopAuthOptions],
        extra_headers: Dict[str, str]
    ) -> NebulAuthResponse:
        url = self.endpoint_url(endpoint)
        body = serialize_json_body(payload)

        headers = {'Content-Type': 'application/json'}
        headers.update(extra_headers)
        headers.update(self.assembler.build('POST', url, body, override))

        return self._send('POST', url, body, headers)

    def _send(self, method: str, url: str, body: str, headers: Dict[str, str]) -> NebulAuthResponse:
        """
        Send a request and wrap the response.

        Raises:
            ServerCommunicationError: On network errors
        """
        timeout = self.options.timeout_ms / 1000

        try:
            logger.debug(f"Making {method} request to {url}")
            response = self.session.request(
                method,
                url,
                data=body.encode('utf-8'),
                headers=headers,
                timeout=timeout,
                verify=self.options.verify_ssl
            )
        except requests.exceptions.Timeout:
            logger.error(f"Request to {url} timed out after {timeout} seconds")
            raise ServerCommunicationError(
                f"Request timeout after {timeout} seconds",
                "TIMEOUT"
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error for {url}: {e}")
            raise ServerCommunicationError(f"Connection error: {e}", "CONNECTION_ERROR")
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to {url} failed: {e}")
            raise ServerCommunicationError(f"Request failed: {e}")

        logger.debug(f"{method} {url} -> {response.status_code}")

        return NebulAuthResponse(
            status_code=response.status_code,
            ok=200 <= response.status_code < 300,
            data=parse_json_data(response.text),
            headers=response_headers(response)
        )

    def close(self):
        """Close the HTTP session."""
        if hasattr(self, 'session'):
            self.session.close()
            logger.debug("HTTP session closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_client(
    base_url: str = DEFAULT_BASE_URL,
    bearer_token: Optional[str] = None,
    signing_secret: Optional[str] = None,
    service_slug: Optional[str] = None,
    replay_protection: Union[str, ReplayProtectionMode] = ReplayProtectionMode.STRICT,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    verify_ssl: bool = True
) -> NebulAuthClient:
    """
    Create NebulAuth client with default configuration.

    Args:
        base_url: API base URL
        bearer_token: API bearer token
        signing_secret: HMAC signing secret for nonce/strict modes
        service_slug: Default service slug for redeem_key
        replay_protection: "none", "nonce" or "strict"
        timeout_ms: Request timeout in milliseconds
        verify_ssl: Whether to verify SSL certificates

    Returns:
        NebulAuthClient: Configured client
    """
    options = ClientOptions(
        base_url=base_url,
        bearer_token=bearer_token,
        signing_secret=signing_secret,
        service_slug=service_slug,
        replay_protection=replay_protection,
        timeout_ms=timeout_ms,
        verify_ssl=verify_ssl
    )
    return NebulAuthClient(options)
