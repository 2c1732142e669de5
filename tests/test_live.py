"""
Live tests against a NebulAuth deployment

Skipped unless NEBULAUTH_LIVE_TEST=1. Credentials come from the same
environment variables the SDK reads, plus NEBULAUTH_TEST_KEY and
NEBULAUTH_TEST_HWID for the verified key.
"""

import os
import time

import pytest

from nebulauth_sdk import (
    NebulAuthClient,
    NebulAuthDashboardClient,
    VerifyKeyInput,
    load_client_options_from_env,
    load_dashboard_options_from_env,
)

pytestmark = pytest.mark.skipif(
    os.environ.get("NEBULAUTH_LIVE_TEST") != "1",
    reason="set NEBULAUTH_LIVE_TEST=1 to enable live tests"
)


def require_env(name: str) -> str:
    value = os.environ.get(name, "").strip()
    if not value:
        pytest.skip(f"missing {name}")
    return value


class TestLiveVerification:
    """Verify a real key end to end"""

    def test_verify_key(self):
        """Test verify_key against the live API"""
        require_env("NEBULAUTH_BEARER_TOKEN")
        test_key = require_env("NEBULAUTH_TEST_KEY")

        with NebulAuthClient(load_client_options_from_env()) as client:
            response = client.verify_key(VerifyKeyInput(
                key=test_key,
                request_id=f"live-python-{int(time.time() * 1000)}",
                hwid=os.environ.get("NEBULAUTH_TEST_HWID") or None
            ))

        assert isinstance(response.data, dict)
        assert "valid" in response.data


class TestLiveDashboard:
    """Read the current dashboard identity"""

    def test_me(self):
        """Test dashboard /me with session or token auth"""
        options = load_dashboard_options_from_env()
        if options.auth is None:
            pytest.skip("missing NEBULAUTH_DASHBOARD_SESSION or NEBULAUTH_DASHBOARD_TOKEN")

        with NebulAuthDashboardClient(options) as client:
            response = client.me()

        assert response.status_code in (200, 401, 403)
        assert isinstance(response.headers, dict)
