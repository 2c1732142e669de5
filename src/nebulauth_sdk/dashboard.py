"""
HTTP client for the NebulAuth dashboard API

This module wraps the dashboard CRUD endpoints used to manage a customer
account: team members, keys, key sessions, checkpoints, blacklist entries,
API tokens and analytics. Dashboard requests authenticate with either a
session cookie or a bearer token and are not signed.
"""

import json
import logging
from dataclasses import dataclass, field, asdict
from typing import Dict, Optional, Any, List

import requests

from .exceptions import ConfigError, ServerCommunicationError
from .http_client import (
    DEFAULT_TIMEOUT_MS,
    DEFAULT_USER_AGENT,
    serialize_json_body,
    response_headers,
    validate_base_url,
)
from .signing.types import AUTHORIZATION_HEADER, SigningErrorCodes

logger = logging.getLogger(__name__)

DEFAULT_DASHBOARD_BASE_URL = "https://api.nebulauth.com/dashboard"
SESSION_COOKIE_NAME = "mc_session"
SUPPORTED_METHODS = ("GET", "POST", "PATCH", "DELETE")


@dataclass(frozen=True)
class DashboardAuth:
    """
    Dashboard credentials

    Use DashboardAuth.session(cookie) or DashboardAuth.bearer(token).
    """
    session_cookie: Optional[str] = None
    bearer_token: Optional[str] = None

    def __post_init__(self):
        if bool(self.session_cookie) == bool(self.bearer_token):
            raise ConfigError(
                "DashboardAuth requires exactly one of session_cookie or bearer_token",
                SigningErrorCodes.MISSING_CREDENTIAL
            )

    @classmethod
    def session(cls, session_cookie: str) -> 'DashboardAuth':
        return cls(session_cookie=session_cookie)

    @classmethod
    def bearer(cls, bearer_token: str) -> 'DashboardAuth':
        return cls(bearer_token=bearer_token)

    def to_headers(self) -> Dict[str, str]:
        if self.session_cookie:
            return {'Cookie': f"{SESSION_COOKIE_NAME}={self.session_cookie}"}
        return {AUTHORIZATION_HEADER: f"Bearer {self.bearer_token}"}

    def __repr__(self) -> str:
        kind = 'session' if self.session_cookie else 'bearer'
        return f"DashboardAuth({kind}=***)"


@dataclass
class DashboardClientOptions:
    """Configuration for a dashboard client."""
    base_url: str = DEFAULT_DASHBOARD_BASE_URL
    auth: Optional[DashboardAuth] = None
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    verify_ssl: bool = True
    user_agent: str = DEFAULT_USER_AGENT

    def __post_init__(self):
        if not self.base_url or not self.base_url.strip():
            self.base_url = DEFAULT_DASHBOARD_BASE_URL

        self.base_url = self.base_url.strip().rstrip('/')
        validate_base_url(self.base_url)

        if isinstance(self.timeout_ms, bool) or not isinstance(self.timeout_ms, int) or self.timeout_ms <= 0:
            raise ConfigError(
                f"timeout_ms must be a positive integer, got {self.timeout_ms!r}",
                SigningErrorCodes.INVALID_CONFIG,
                {"timeout_ms": self.timeout_ms}
            )


@dataclass
class DashboardRequestOptions:
    """Per-request overrides for dashboard calls."""
    auth: Optional[DashboardAuth] = None
    query: Dict[str, str] = field(default_factory=dict)
    extra_headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class DashboardResponse:
    """Response returned by the dashboard API."""
    status_code: int
    ok: bool
    data: Any
    headers: Dict[str, str] = field(default_factory=dict)


class _Payload:
    """Mixin for request bodies: unset (None) fields are left out of the JSON."""

    def to_payload(self) -> Dict[str, Any]:
        return {name: value for name, value in asdict(self).items() if value is not None}


@dataclass
class LoginRequest(_Payload):
    email: str
    password: str


@dataclass
class CustomerUpdateRequest(_Payload):
    require_discord_redeem: Optional[bool] = None
    require_hwid: Optional[bool] = None
    paused: Optional[bool] = None


@dataclass
class TeamMemberCreateRequest(_Payload):
    email: str
    password: str
    role: str


@dataclass
class TeamMemberUpdateRequest(_Payload):
    role: Optional[str] = None
    password: Optional[str] = None


@dataclass
class KeyCreateRequest(_Payload):
    label: Optional[str] = None
    duration_hours: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None


@dataclass
class KeyBatchCreateRequest(_Payload):
    count: int
    label_prefix: Optional[str] = None
    duration_hours: Optional[int] = None
    key_only: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None


@dataclass
class KeyUpdateRequest(_Payload):
    label: Optional[str] = None
    duration_hours: Optional[int] = None
    metadata: Optional[Dict[str, Any]] = None


@dataclass
class KeyRevokeRequest(_Payload):
    reason: Optional[str] = None


@dataclass
class RevokeSessionRequest(_Payload):
    reason: Optional[str] = None
    revoke_key: Optional[bool] = None
    reset_hwid: Optional[bool] = None
    blacklist_discord: Optional[bool] = None
    terminate_all_for_key: Optional[bool] = None
    terminate_all_for_token: Optional[bool] = None


@dataclass
class RevokeAllSessionsRequest(_Payload):
    reason: Optional[str] = None
    key_id: Optional[str] = None
    token_id: Optional[str] = None


@dataclass
class CheckpointStepInput(_Payload):
    ad_url: str


@dataclass
class CheckpointCreateRequest(_Payload):
    name: str
    duration_hours: int
    is_active: bool
    steps: List[CheckpointStepInput] = field(default_factory=list)
    referrer_domain_only: Optional[bool] = None


@dataclass
class CheckpointUpdateRequest(_Payload):
    name: Optional[str] = None
    duration_hours: Optional[int] = None
    is_active: Optional[bool] = None
    referrer_domain_only: Optional[bool] = None
    steps: Optional[List[CheckpointStepInput]] = None


@dataclass
class BlacklistCreateRequest(_Payload):
    type: str
    value: str
    reason: Optional[str] = None


@dataclass
class ApiTokenCreateRequest(_Payload):
    scopes: List[str]
    replay_protection: str
    auth_mode: str
    expires_at: Optional[str] = None


@dataclass
class ApiTokenUpdateRequest(_Payload):
    scopes: Optional[List[str]] = None
    replay_protection: Optional[str] = None
    auth_mode: Optional[str] = None
    expires_at: Optional[str] = None


def parse_dashboard_data(text: str) -> Any:
    """Empty bodies become {}, non-JSON bodies are returned as raw text."""
    if not text or not text.strip():
        return {}

    try:
        return json.loads(text)
    except ValueError:
        return text


def _with_query(options: Optional[DashboardRequestOptions], **query: Any) -> DashboardRequestOptions:
    options = options or DashboardRequestOptions()
    merged = dict(options.query)
    for name, value in query.items():
        if value is not None:
            merged[name] = str(value)
    return DashboardRequestOptions(
        auth=options.auth,
        query=merged,
        extra_headers=dict(options.extra_headers)
    )


class NebulAuthDashboardClient:
    """
    HTTP client for the NebulAuth dashboard API.

    Per-request auth in DashboardRequestOptions overrides the client default.
    Non-2xx responses are returned with ok=False rather than raised.
    """

    def __init__(self, options: Optional[DashboardClientOptions] = None):
        self.options = options or DashboardClientOptions()
        self.base_url = self.options.base_url
        self.default_auth = self.options.auth
        self.session = requests.Session()
        self.session.headers.update({
            'Accept': 'application/json',
            'User-Agent': self.options.user_agent
        })

        logger.info(f"Initialized NebulAuth dashboard client for {self.base_url}")

    # Auth and customer

    def login(self, payload: LoginRequest, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('POST', '/auth/login', payload, options)

    def logout(self, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('POST', '/auth/logout', {}, options)

    def me(self, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('GET', '/me', None, options)

    def get_customer(self, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('GET', '/customer', None, options)

    def update_customer(
        self,
        payload: CustomerUpdateRequest,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('PATCH', '/customer', payload, options)

    # Team members

    def create_user(
        self,
        payload: TeamMemberCreateRequest,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('POST', '/users', payload, options)

    def list_users(self, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('GET', '/users', None, options)

    def update_user(
        self,
        id: str,
        payload: TeamMemberUpdateRequest,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('PATCH', f'/users/{id}', payload, options)

    def delete_user(self, id: str, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('DELETE', f'/users/{id}', None, options)

    # Keys

    def create_key(
        self,
        payload: KeyCreateRequest,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('POST', '/keys', payload, options)

    def bulk_create_keys(
        self,
        payload: KeyBatchCreateRequest,
        format: str = 'json',
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        """
        Create a batch of keys.

        Args:
            payload: Batch parameters
            format: Response format passed as the 'format' query parameter
            options: Optional per-request overrides
        """
        return self.request('POST', '/keys/batch', payload, _with_query(options, format=format))

    def extend_key_durations(
        self,
        hours: int,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        """Extend the duration of every active key by the given number of hours."""
        return self.request('POST', '/keys/extend-duration', {'hours': hours}, options)

    def get_key(self, id: str, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('GET', f'/keys/{id}', None, options)

    def list_keys(self, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('GET', '/keys', None, options)

    def update_key(
        self,
        id: str,
        payload: KeyUpdateRequest,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('PATCH', f'/keys/{id}', payload, options)

    def reset_key_hwid(self, id: str, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('POST', f'/keys/{id}/reset-hwid', {}, options)

    def delete_key(
        self,
        id: str,
        payload: Optional[KeyRevokeRequest] = None,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('DELETE', f'/keys/{id}', payload or KeyRevokeRequest(), options)

    # Key sessions

    def list_key_sessions(self, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('GET', '/key-sessions', None, options)

    def revoke_key_session(
        self,
        id: str,
        payload: Optional[RevokeSessionRequest] = None,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('DELETE', f'/key-sessions/{id}', payload or RevokeSessionRequest(), options)

    def revoke_all_key_sessions(
        self,
        payload: Optional[RevokeAllSessionsRequest] = None,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('POST', '/key-sessions/revoke-all', payload or RevokeAllSessionsRequest(), options)

    # Checkpoints

    def list_checkpoints(self, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('GET', '/checkpoints', None, options)

    def get_checkpoint(self, id: str, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('GET', f'/checkpoints/{id}', None, options)

    def create_checkpoint(
        self,
        payload: CheckpointCreateRequest,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('POST', '/checkpoints', payload, options)

    def update_checkpoint(
        self,
        id: str,
        payload: CheckpointUpdateRequest,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('PATCH', f'/checkpoints/{id}', payload, options)

    def delete_checkpoint(self, id: str, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('DELETE', f'/checkpoints/{id}', None, options)

    # Blacklist

    def list_blacklist(self, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('GET', '/blacklist', None, options)

    def create_blacklist_entry(
        self,
        payload: BlacklistCreateRequest,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('POST', '/blacklist', payload, options)

    def delete_blacklist_entry(self, id: str, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('DELETE', f'/blacklist/{id}', None, options)

    # API tokens

    def create_api_token(
        self,
        payload: ApiTokenCreateRequest,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('POST', '/api-tokens', payload, options)

    def update_api_token(
        self,
        id: str,
        payload: ApiTokenUpdateRequest,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('PATCH', f'/api-tokens/{id}', payload, options)

    def list_api_tokens(self, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('GET', '/api-tokens', None, options)

    def delete_api_token(self, id: str, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('DELETE', f'/api-tokens/{id}', None, options)

    # Analytics

    def analytics_summary(
        self,
        days: Optional[int] = None,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('GET', '/analytics/summary', None, _with_query(options, days=days))

    def analytics_geo(
        self,
        days: Optional[int] = None,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        return self.request('GET', '/analytics/geo', None, _with_query(options, days=days))

    def analytics_activity(self, options: Optional[DashboardRequestOptions] = None) -> DashboardResponse:
        return self.request('GET', '/analytics/activity', None, options)

    def request(
        self,
        method: str,
        path: str,
        body: Any = None,
        options: Optional[DashboardRequestOptions] = None
    ) -> DashboardResponse:
        """
        Send a dashboard request.

        Args:
            method: GET, POST, PATCH or DELETE
            path: Endpoint path relative to the dashboard base URL
            body: Optional dict or payload dataclass
            options: Optional auth override, query parameters and extra headers

        Returns:
            DashboardResponse: Server response

        Raises:
            ConfigError: If the method is not supported
            ServerCommunicationError: On network errors
        """
        method_upper = method.upper()
        if method_upper not in SUPPORTED_METHODS:
            raise ConfigError(
                f"unsupported dashboard method: {method}",
                SigningErrorCodes.INVALID_METHOD,
                {"method": method}
            )

        options = options or DashboardRequestOptions()
        endpoint = path if path.startswith('/') else f'/{path}'
        url = f"{self.base_url}{endpoint}"

        headers = dict(options.extra_headers)
        auth = options.auth or self.default_auth
        if auth is not None:
            headers.update(auth.to_headers())

        data = None
        if body is not None:
            headers['Content-Type'] = 'application/json'
            data = serialize_json_body(body).encode('utf-8')

        timeout = self.options.timeout_ms / 1000

        try:
            logger.debug(f"Making dashboard {method_upper} request to {url}")
            response = self.session.request(
                method_upper,
                url,
                params=options.query or None,
                data=data,
                headers=headers,
                timeout=timeout,
                verify=self.options.verify_ssl
            )
        except requests.exceptions.Timeout:
            logger.error(f"Dashboard request to {url} timed out after {timeout} seconds")
            raise ServerCommunicationError(
                f"Request timeout after {timeout} seconds",
                "TIMEOUT"
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error for {url}: {e}")
            raise ServerCommunicationError(f"Connection error: {e}", "CONNECTION_ERROR")
        except requests.exceptions.RequestException as e:
            logger.error(f"Dashboard request to {url} failed: {e}")
            raise ServerCommunicationError(f"Request failed: {e}")

        return DashboardResponse(
            status_code=response.status_code,
            ok=200 <= response.status_code < 300,
            data=parse_dashboard_data(response.text),
            headers=response_headers(response)
        )

    def close(self):
        """Close the HTTP session."""
        self.session.close()
        logger.debug("Dashboard HTTP session closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def create_dashboard_client(
    base_url: str = DEFAULT_DASHBOARD_BASE_URL,
    session_cookie: Optional[str] = None,
    bearer_token: Optional[str] = None,
    timeout_ms: int = DEFAULT_TIMEOUT_MS
) -> NebulAuthDashboardClient:
    """
    Create dashboard client with session or bearer auth.

    Args:
        base_url: Dashboard API base URL
        session_cookie: mc_session cookie value
        bearer_token: Dashboard API token
        timeout_ms: Request timeout in milliseconds

    Returns:
        NebulAuthDashboardClient: Configured client
    """
    auth = None
    if session_cookie:
        auth = DashboardAuth.session(session_cookie)
    elif bearer_token:
        auth = DashboardAuth.bearer(bearer_token)

    return NebulAuthDashboardClient(
        DashboardClientOptions(base_url=base_url, auth=auth, timeout_ms=timeout_ms)
    )
