"""
Client configuration loading for Python SDK

Builds verification and dashboard client options from environment variables,
JSON strings or JSON files.
"""

import os
import json
from dataclasses import fields
from pathlib import Path
from typing import Dict, Optional, Any, Mapping, Union

from ..exceptions import ConfigError
from ..http_client import ClientOptions
from ..dashboard import DashboardAuth, DashboardClientOptions

ENV_BASE_URL = "NEBULAUTH_BASE_URL"
ENV_BEARER_TOKEN = "NEBULAUTH_BEARER_TOKEN"
ENV_SIGNING_SECRET = "NEBULAUTH_SIGNING_SECRET"
ENV_SERVICE_SLUG = "NEBULAUTH_SERVICE_SLUG"
ENV_REPLAY_PROTECTION = "NEBULAUTH_REPLAY_PROTECTION"
ENV_TIMEOUT_MS = "NEBULAUTH_TIMEOUT_MS"

ENV_DASHBOARD_BASE_URL = "NEBULAUTH_DASHBOARD_BASE_URL"
ENV_DASHBOARD_SESSION = "NEBULAUTH_DASHBOARD_SESSION"
ENV_DASHBOARD_TOKEN = "NEBULAUTH_DASHBOARD_TOKEN"


def _env_value(environ: Mapping[str, str], name: str) -> Optional[str]:
    value = environ.get(name)
    if value is None or not value.strip():
        return None
    return value.strip()


def _parse_timeout(raw: Optional[str], name: str) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got '{raw}'", "INVALID_FORMAT", {"variable": name})


def load_client_options_from_env(environ: Optional[Mapping[str, str]] = None) -> ClientOptions:
    """
    Load verification client options from environment variables.

    When NEBULAUTH_REPLAY_PROTECTION is unset the mode is 'strict' if a
    signing secret is present and 'none' otherwise.

    Args:
        environ: Mapping to read instead of os.environ

    Returns:
        ClientOptions: Parsed options

    Raises:
        ConfigError: If a value is malformed
    """
    env = os.environ if environ is None else environ

    signing_secret = _env_value(env, ENV_SIGNING_SECRET)
    replay_protection = _env_value(env, ENV_REPLAY_PROTECTION)
    if replay_protection is None:
        replay_protection = "strict" if signing_secret else "none"

    kwargs: Dict[str, Any] = {
        'bearer_token': _env_value(env, ENV_BEARER_TOKEN),
        'signing_secret': signing_secret,
        'service_slug': _env_value(env, ENV_SERVICE_SLUG),
        'replay_protection': replay_protection,
    }

    base_url = _env_value(env, ENV_BASE_URL)
    if base_url is not None:
        kwargs['base_url'] = base_url

    timeout_ms = _parse_timeout(_env_value(env, ENV_TIMEOUT_MS), ENV_TIMEOUT_MS)
    if timeout_ms is not None:
        kwargs['timeout_ms'] = timeout_ms

    return ClientOptions(**kwargs)


def load_dashboard_options_from_env(environ: Optional[Mapping[str, str]] = None) -> DashboardClientOptions:
    """
    Load dashboard client options from environment variables.

    A session cookie takes precedence over a dashboard token when both are set.
    """
    env = os.environ if environ is None else environ

    auth = None
    session_cookie = _env_value(env, ENV_DASHBOARD_SESSION)
    token = _env_value(env, ENV_DASHBOARD_TOKEN)
    if session_cookie:
        auth = DashboardAuth.session(session_cookie)
    elif token:
        auth = DashboardAuth.bearer(token)

    kwargs: Dict[str, Any] = {'auth': auth}
    base_url = _env_value(env, ENV_DASHBOARD_BASE_URL)
    if base_url is not None:
        kwargs['base_url'] = base_url

    timeout_ms = _parse_timeout(_env_value(env, ENV_TIMEOUT_MS), ENV_TIMEOUT_MS)
    if timeout_ms is not None:
        kwargs['timeout_ms'] = timeout_ms

    return DashboardClientOptions(**kwargs)


def _client_options_from_dict(data: Any) -> ClientOptions:
    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a JSON object", "INVALID_FORMAT")

    allowed = {f.name for f in fields(ClientOptions)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(unknown)}",
            "INVALID_FORMAT",
            {"unknown_keys": unknown}
        )

    return ClientOptions(**data)


def load_client_options_from_json(json_string: str) -> ClientOptions:
    """Load verification client options from a JSON string with snake_case keys"""
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR")

    try:
        return _client_options_from_dict(data)
    except (KeyError, TypeError, AttributeError) as e:
        raise ConfigError(f"Invalid configuration format: {e}", "INVALID_FORMAT")


def load_client_options_from_file(file_path: Union[str, Path]) -> ClientOptions:
    """Load verification client options from a JSON file"""
    try:
        path = Path(file_path)
        with open(path, 'r', encoding='utf-8') as f:
            json_string = f.read()
    except OSError as e:
        raise ConfigError(f"Failed to read configuration file: {e}", "FILE_ERROR", {"path": str(file_path)})

    return load_client_options_from_json(json_string)
