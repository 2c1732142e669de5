"""
Test suite for the nebulauth-cli command-line interface
"""

import pytest
import json
import os
from unittest.mock import Mock, patch

from nebulauth_sdk.cli import main, create_parser

ENV = {
    "NEBULAUTH_BEARER_TOKEN": "tok",
    "NEBULAUTH_SIGNING_SECRET": "sec",
}
VERIFY_URL = "https://api.nebulauth.com/api/v1/keys/verify"


class TestCliParser:
    """Test argument parsing"""

    def test_version(self, capsys):
        """Test --version exits cleanly"""
        with pytest.raises(SystemExit) as exc_info:
            create_parser().parse_args(['--version'])
        assert exc_info.value.code == 0
        assert "NebulAuth Python SDK" in capsys.readouterr().out

    def test_no_command_shows_help(self, capsys):
        """Test running without a subcommand"""
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out


class TestSignHeadersCommand:
    """Test sign-headers dry run"""

    def test_strict_headers(self, capsys):
        """Test headers printed for the configured mode"""
        with patch.dict(os.environ, ENV, clear=True):
            code = main(['sign-headers', '--url', VERIFY_URL, '--body', '{"key":"ABC"}'])

        assert code == 0
        headers = json.loads(capsys.readouterr().out)
        assert headers["Authorization"] == "Bearer tok"
        assert set(headers) == {"Authorization", "X-Timestamp", "X-Nonce", "X-Signature", "X-Body-Sha256"}

    def test_pop_headers(self, capsys):
        """Test PoP options on the command line"""
        with patch.dict(os.environ, {}, clear=True):
            code = main([
                'sign-headers', '--url', VERIFY_URL,
                '--use-pop', '--access-token', 'access', '--pop-key', 'popkey'
            ])

        assert code == 0
        headers = json.loads(capsys.readouterr().out)
        assert headers["Authorization"] == "Bearer access"

    def test_missing_credentials(self, capsys):
        """Test config errors exit with 1"""
        with patch.dict(os.environ, {}, clear=True):
            code = main(['sign-headers', '--url', VERIFY_URL])

        assert code == 1
        assert "bearer_token is required" in capsys.readouterr().err

    def test_config_file(self, tmp_path, capsys):
        """Test --config takes options from a file"""
        config_file = tmp_path / "nebulauth.json"
        config_file.write_text(json.dumps({"bearer_token": "filetok", "replay_protection": "none"}), encoding='utf-8')

        with patch.dict(os.environ, ENV, clear=True):
            code = main(['--config', str(config_file), 'sign-headers', '--url', VERIFY_URL])

        assert code == 0
        assert json.loads(capsys.readouterr().out) == {"Authorization": "Bearer filetok"}


class TestVerifyCommands:
    """Test commands that call the API"""

    def make_response(self, status_code, text):
        response = Mock()
        response.status_code = status_code
        response.text = text
        response.headers = {}
        return response

    @patch('requests.Session.request')
    def test_verify_key(self, mock_request, capsys):
        """Test verify-key prints the response"""
        mock_request.return_value = self.make_response(200, '{"valid": true}')

        with patch.dict(os.environ, ENV, clear=True):
            code = main(['verify-key', '--key', 'ABC', '--hwid', 'HW-1'])

        assert code == 0
        output = json.loads(capsys.readouterr().out)
        assert output == {"status_code": 200, "ok": True, "data": {"valid": True}}

        _, kwargs = mock_request.call_args
        assert kwargs['headers']["X-HWID"] == "HW-1"

    @patch('requests.Session.request')
    def test_auth_verify_failure_status(self, mock_request, capsys):
        """Test non-2xx responses exit with 1"""
        mock_request.return_value = self.make_response(403, '{"error": "revoked"}')

        with patch.dict(os.environ, ENV, clear=True):
            code = main(['auth-verify', '--key', 'ABC'])

        assert code == 1
        output = json.loads(capsys.readouterr().out)
        assert output["status_code"] == 403
        assert output["data"] == {"error": "revoked"}
