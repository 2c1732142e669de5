"""
Test suite for authentication header assembly

Covers auth path selection, the per-path header sets and the credential
preconditions checked before any signing work.
"""

import pytest
import hashlib
import hmac
import logging
from unittest.mock import Mock

from nebulauth_sdk.signing import (
    AuthHeaderAssembler,
    AuthPath,
    AUTH_PATH_POLICIES,
    Credentials,
    HmacSigner,
    PopAuthOptions,
    ReplayProtectionMode,
    build_auth_headers,
    select_auth_path,
)
from nebulauth_sdk.exceptions import ConfigError

URL = "https://api.nebulauth.com/api/v1/keys/verify"
BODY = '{"key":"ABC-123"}'
SIGNING_HEADERS = {"X-Timestamp", "X-Nonce", "X-Signature"}


def recompute_signature(secret: str, headers: dict, path: str = "/keys/verify", method: str = "POST") -> str:
    """Recompute a signature the way the verifying server does."""
    body_hash = hashlib.sha256(BODY.encode('utf-8')).hexdigest()
    canonical = "\n".join([
        method,
        path,
        headers["X-Timestamp"],
        headers["X-Nonce"],
        body_hash,
    ])
    return hmac.new(secret.encode('utf-8'), canonical.encode('utf-8'), hashlib.sha256).hexdigest()


class TestSelectAuthPath:
    """Test auth path selection"""

    def test_mode_selects_path(self):
        """Test each mode maps to its own path"""
        assert select_auth_path(ReplayProtectionMode.STRICT) == AuthPath.STRICT
        assert select_auth_path(ReplayProtectionMode.NONCE) == AuthPath.NONCE
        assert select_auth_path(ReplayProtectionMode.NONE) == AuthPath.NONE

    def test_pop_wins_over_every_mode(self):
        """Test PoP precedence"""
        override = PopAuthOptions(use_pop=True, access_token="at", pop_key="pk")
        for mode in ReplayProtectionMode:
            assert select_auth_path(mode, override) == AuthPath.POP

    def test_pop_disabled_falls_back_to_mode(self):
        """Test use_pop=False ignores the other override fields"""
        override = PopAuthOptions(use_pop=False, access_token="at", pop_key="pk")
        assert select_auth_path(ReplayProtectionMode.NONE, override) == AuthPath.NONE

    def test_policy_table(self):
        """Test body hash exposure per path"""
        assert AUTH_PATH_POLICIES[AuthPath.STRICT].include_body_hash
        assert AUTH_PATH_POLICIES[AuthPath.POP].include_body_hash
        assert not AUTH_PATH_POLICIES[AuthPath.NONCE].include_body_hash
        assert not AUTH_PATH_POLICIES[AuthPath.NONE].requires_signing_key


class TestAuthHeaderAssembler:
    """Test AuthHeaderAssembler class"""

    def setup_method(self):
        """Setup test fixtures"""
        self.credentials = Credentials(bearer_token="tok", signing_secret="sec")

    def make_assembler(self, mode, credentials=None, signer=None):
        return AuthHeaderAssembler(
            mode,
            credentials or self.credentials,
            base_path="/api/v1",
            signer=signer
        )

    def test_strict_mode_headers(self):
        """Test strict mode emits all signing headers"""
        headers = self.make_assembler(ReplayProtectionMode.STRICT).build("POST", URL, BODY)

        assert set(headers) == {"Authorization", "X-Body-Sha256"} | SIGNING_HEADERS
        assert headers["Authorization"] == "Bearer tok"
        assert headers["X-Body-Sha256"] == hashlib.sha256(BODY.encode('utf-8')).hexdigest()
        assert headers["X-Signature"] == recompute_signature("sec", headers)

    def test_nonce_mode_drops_body_hash_header(self):
        """Test nonce mode omits X-Body-Sha256 but still signs over the hash"""
        headers = self.make_assembler(ReplayProtectionMode.NONCE).build("POST", URL, BODY)

        assert set(headers) == {"Authorization"} | SIGNING_HEADERS
        assert headers["X-Signature"] == recompute_signature("sec", headers)

    def test_none_mode_is_bearer_only(self):
        """Test no replay protection sends only the bearer token"""
        headers = self.make_assembler(ReplayProtectionMode.NONE).build("POST", URL, BODY)
        assert headers == {"Authorization": "Bearer tok"}

    def test_none_mode_needs_no_secret(self):
        """Test signing secret is optional without replay protection"""
        assembler = self.make_assembler(ReplayProtectionMode.NONE, Credentials(bearer_token="tok"))
        assert assembler.build("POST", URL, BODY) == {"Authorization": "Bearer tok"}

    def test_pop_overrides_mode(self):
        """Test PoP uses the per-request token and key"""
        override = PopAuthOptions(use_pop=True, access_token="access", pop_key="popkey")
        headers = self.make_assembler(ReplayProtectionMode.NONE).build("POST", URL, BODY, override)

        assert set(headers) == {"Authorization", "X-Body-Sha256"} | SIGNING_HEADERS
        assert headers["Authorization"] == "Bearer access"
        assert headers["X-Signature"] == recompute_signature("popkey", headers)
        assert headers["X-Signature"] != recompute_signature("sec", headers)

    def test_pop_works_without_client_credentials(self):
        """Test PoP does not need the client bearer token or secret"""
        assembler = self.make_assembler(ReplayProtectionMode.STRICT, Credentials())
        override = PopAuthOptions(use_pop=True, access_token="access", pop_key="popkey")

        headers = assembler.build("POST", URL, BODY, override)
        assert headers["Authorization"] == "Bearer access"

    def test_method_is_uppercased(self):
        """Test lowercase methods sign as uppercase"""
        headers = self.make_assembler(ReplayProtectionMode.STRICT).build("post", URL, BODY)
        assert headers["X-Signature"] == recompute_signature("sec", headers, method="POST")

    def test_string_mode(self):
        """Test mode strings are accepted"""
        assembler = self.make_assembler("nonce")
        assert assembler.mode == ReplayProtectionMode.NONCE

    def test_invalid_mode(self):
        """Test unknown modes are rejected"""
        with pytest.raises(ConfigError) as exc_info:
            self.make_assembler("paranoid")
        assert exc_info.value.error_code == "INVALID_REPLAY_MODE"

    def test_fresh_nonce_per_request(self):
        """Test two builds never share a nonce"""
        assembler = self.make_assembler(ReplayProtectionMode.STRICT)
        first = assembler.build("POST", URL, BODY)
        second = assembler.build("POST", URL, BODY)
        assert first["X-Nonce"] != second["X-Nonce"]


class TestAuthPreconditions:
    """Test missing credentials fail before signing"""

    def setup_method(self):
        """Setup test fixtures"""
        self.signer = Mock(spec=HmacSigner)

    def test_missing_bearer_token(self):
        """Test bearer token is required outside PoP"""
        assembler = AuthHeaderAssembler(ReplayProtectionMode.NONE, Credentials(), signer=self.signer)

        with pytest.raises(ConfigError, match="bearer_token is required") as exc_info:
            assembler.build("POST", URL, BODY)
        assert exc_info.value.error_code == "MISSING_CREDENTIAL"

    def test_missing_signing_secret(self):
        """Test signing secret is required in strict and nonce modes"""
        for mode in (ReplayProtectionMode.STRICT, ReplayProtectionMode.NONCE):
            assembler = AuthHeaderAssembler(mode, Credentials(bearer_token="tok"), signer=self.signer)
            with pytest.raises(ConfigError, match="signing_secret is required"):
                assembler.build("POST", URL, BODY)

        self.signer.sign.assert_not_called()

    def test_empty_string_counts_as_missing(self):
        """Test empty credentials are treated as absent"""
        assembler = AuthHeaderAssembler(
            ReplayProtectionMode.STRICT,
            Credentials(bearer_token="tok", signing_secret=""),
            signer=self.signer
        )
        with pytest.raises(ConfigError, match="signing_secret") as exc_info:
            assembler.build("POST", URL, BODY)
        assert "blank values are rejected" in str(exc_info.value)

        self.signer.sign.assert_not_called()

    def test_malformed_method(self):
        """Test methods that would break the signed payload are rejected"""
        assembler = AuthHeaderAssembler(
            ReplayProtectionMode.STRICT,
            Credentials(bearer_token="tok", signing_secret="sec"),
            signer=self.signer
        )
        for method in ("POST\nX", "", "GE T", None):
            with pytest.raises(ConfigError) as exc_info:
                assembler.build(method, URL, BODY)
            assert exc_info.value.error_code == "INVALID_METHOD"

        self.signer.sign.assert_not_called()

    def test_pop_requires_access_token(self):
        """Test PoP without an access token"""
        assembler = AuthHeaderAssembler(ReplayProtectionMode.STRICT, Credentials(), signer=self.signer)
        override = PopAuthOptions(use_pop=True, pop_key="pk")

        with pytest.raises(ConfigError, match="access_token is required when use_pop=true"):
            assembler.build("POST", URL, BODY, override)
        self.signer.sign.assert_not_called()

    def test_pop_requires_pop_key(self):
        """Test PoP without a key"""
        assembler = AuthHeaderAssembler(ReplayProtectionMode.STRICT, Credentials(), signer=self.signer)
        override = PopAuthOptions(use_pop=True, access_token="at")

        with pytest.raises(ConfigError, match="pop_key is required when use_pop=true"):
            assembler.build("POST", URL, BODY, override)
        self.signer.sign.assert_not_called()


class TestSecretHygiene:
    """Test secrets stay out of logs and reprs"""

    def test_debug_log_has_no_secrets(self, caplog):
        """Test the debug line never carries credentials"""
        assembler = AuthHeaderAssembler(
            ReplayProtectionMode.STRICT,
            Credentials(bearer_token="tok-SECRET", signing_secret="sec-SECRET")
        )
        override = PopAuthOptions(use_pop=True, access_token="at-SECRET", pop_key="pk-SECRET")

        with caplog.at_level(logging.DEBUG, logger="nebulauth_sdk"):
            headers = assembler.build("POST", URL, BODY)
            pop_headers = assembler.build("POST", URL, BODY, override)

        assert "strict" in caplog.text
        assert "pop" in caplog.text
        assert "SECRET" not in caplog.text
        assert headers["X-Signature"] not in caplog.text
        assert pop_headers["X-Signature"] not in caplog.text

    def test_reprs_mask_secrets(self):
        """Test dataclass reprs hide credential values"""
        credentials = Credentials(bearer_token="tok-SECRET", signing_secret="sec-SECRET")
        override = PopAuthOptions(use_pop=True, access_token="at-SECRET", pop_key="pk-SECRET")

        assert "SECRET" not in repr(credentials)
        assert "SECRET" not in repr(override)


class TestBuildAuthHeadersHelper:
    """Test build_auth_headers convenience function"""

    def test_build_auth_headers(self):
        """Test helper matches assembler output shape"""
        headers = build_auth_headers(
            "POST",
            URL,
            BODY,
            "strict",
            Credentials(bearer_token="tok", signing_secret="sec"),
            base_path="/api/v1"
        )
        assert headers["Authorization"] == "Bearer tok"
        assert headers["X-Signature"] == recompute_signature("sec", headers)
