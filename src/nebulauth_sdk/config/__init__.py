"""
Configuration management for NebulAuth Python SDK

This module loads verification and dashboard client options from the
environment or from JSON configuration files.
"""

from .client_config import (
    ENV_BASE_URL,
    ENV_BEARER_TOKEN,
    ENV_SIGNING_SECRET,
    ENV_SERVICE_SLUG,
    ENV_REPLAY_PROTECTION,
    ENV_TIMEOUT_MS,
    ENV_DASHBOARD_BASE_URL,
    ENV_DASHBOARD_SESSION,
    ENV_DASHBOARD_TOKEN,
    load_client_options_from_env,
    load_dashboard_options_from_env,
    load_client_options_from_json,
    load_client_options_from_file,
)

__all__ = [
    'ENV_BASE_URL',
    'ENV_BEARER_TOKEN',
    'ENV_SIGNING_SECRET',
    'ENV_SERVICE_SLUG',
    'ENV_REPLAY_PROTECTION',
    'ENV_TIMEOUT_MS',
    'ENV_DASHBOARD_BASE_URL',
    'ENV_DASHBOARD_SESSION',
    'ENV_DASHBOARD_TOKEN',
    'load_client_options_from_env',
    'load_dashboard_options_from_env',
    'load_client_options_from_json',
    'load_client_options_from_file',
]
