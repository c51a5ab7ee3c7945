"""Tests for the command line interface."""

import json

import httpx
import pytest
from typer.testing import CliRunner

from nextengine_cli.api.models import TokenPair
from nextengine_cli.auth.token_manager import TokenCache
from nextengine_cli.main import app

from conftest import API_SERVER

runner = CliRunner()

CALL_URL = f"{API_SERVER}/api_v1_login_user/info"

ENV_FILE = """\
LOGIN_ID=user@example.com
LOGIN_PASSWORD=secret
CLIENT_ID=cid
CLIENT_SECRET=csecret
BASE_SERVER=https://base.example.com/
API_SERVER=https://api.example.com/
"""


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run from a directory holding env and api_params, like the original layout."""
    (tmp_path / "env").write_text(ENV_FILE)
    (tmp_path / "api_params").write_text("fields = uid,pic_url\n")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def token_cache(workdir):
    return TokenCache(workdir / "tmp" / "token")


class TestInvoke:
    """Tests for `nextengine invoke`."""

    def test_missing_path_shows_usage(self, workdir):
        """No request path: usage error, nothing else happens."""
        result = runner.invoke(app, ["invoke"])

        assert result.exit_code == 2
        assert "Missing argument" in result.output

    def test_prints_raw_body(self, workdir, token_cache, api_mock):
        """Cached tokens: body printed to stdout, default parameter file used."""
        token_cache.save_token(TokenPair(access_token="A0", refresh_token="R0"))
        body = '{"result":"success","data":[],"access_token":"A0","refresh_token":"R0"}'
        route = api_mock.post(CALL_URL).mock(return_value=httpx.Response(200, text=body))

        result = runner.invoke(app, ["invoke", "/api_v1_login_user/info/"])

        assert result.exit_code == 0, result.output
        assert body in result.stdout
        assert b"fields=uid%2Cpic_url" in route.calls.last.request.content

    def test_custom_params_file(self, workdir, token_cache, api_mock):
        (workdir / "goods_params").write_text("limit=5\n")
        token_cache.save_token(TokenPair(access_token="A0", refresh_token="R0"))
        route = api_mock.post(CALL_URL).mock(
            return_value=httpx.Response(200, json={"result": "success"})
        )

        result = runner.invoke(app, ["invoke", "api_v1_login_user/info", "goods_params"])

        assert result.exit_code == 0, result.output
        assert b"limit=5" in route.calls.last.request.content

    def test_logs_in_when_no_tokens(self, workdir, token_cache, api_mock, login_routes):
        """First run performs the login chain and caches the tokens."""
        api_mock.post(CALL_URL).mock(
            return_value=httpx.Response(
                200, json={"result": "success", "access_token": "A1", "refresh_token": "R1"}
            )
        )

        result = runner.invoke(app, ["invoke", "api_v1_login_user/info"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout.strip().splitlines()[-1])["result"] == "success"
        assert token_cache.get_token() == TokenPair(access_token="A1", refresh_token="R1")

    def test_scrape_error_exits_with_diagnostic(self, workdir, api_mock, login_routes):
        """Markup drift: diagnostic with the raw page, exit code 1."""
        login_routes["page"].mock(
            return_value=httpx.Response(200, text="<html>maintenance</html>")
        )

        result = runner.invoke(app, ["invoke", "api_v1_login_user/info"])

        assert result.exit_code == 1
        assert "authenticity_token" in result.output
        assert "maintenance" in result.output

    def test_missing_params_file(self, workdir):
        result = runner.invoke(app, ["invoke", "api_v1_login_user/info", "nope"])

        assert result.exit_code == 1
        assert "nope" in result.output

    def test_params_file_not_utf8(self, workdir):
        """A Shift_JIS parameter file gets the file diagnostic, exit code 1."""
        (workdir / "api_params").write_bytes("goods_name=商品\n".encode("cp932"))

        result = runner.invoke(app, ["invoke", "api_v1_login_user/info"])

        assert result.exit_code == 1
        assert not isinstance(result.exception, UnicodeDecodeError)
        assert "api_params" in result.output

    def test_missing_env_file(self, tmp_path, monkeypatch):
        """Without credentials the command fails with a settings error."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "api_params").write_text("")

        result = runner.invoke(app, ["invoke", "api_v1_login_user/info"])

        assert result.exit_code == 1
        assert "login_id" in result.output


class TestAuthCommands:
    """Tests for login/logout/status."""

    def test_login_replaces_tokens(self, workdir, token_cache, login_routes):
        token_cache.save_token(TokenPair(access_token="OLD", refresh_token="OLD"))

        result = runner.invoke(app, ["login"])

        assert result.exit_code == 0, result.output
        assert token_cache.get_token() == TokenPair(access_token="A1", refresh_token="R1")

    def test_logout(self, workdir, token_cache):
        token_cache.save_token(TokenPair(access_token="A", refresh_token="R"))

        result = runner.invoke(app, ["logout"])

        assert result.exit_code == 0
        assert not token_cache.exists()

    def test_logout_nothing_cached(self, workdir):
        result = runner.invoke(app, ["logout"])

        assert result.exit_code == 0

    def test_status_logged_in(self, workdir, token_cache):
        token_cache.save_token(TokenPair(access_token="abcdefghijkl", refresh_token="R"))

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0
        assert "abcdef" in result.output
        assert "abcdefghijkl" not in result.output

    def test_status_logged_out(self, workdir):
        result = runner.invoke(app, ["status"])

        assert result.exit_code == 1

    def test_status_discards_corrupt_cache(self, workdir, token_cache):
        """A corrupt cache reads as logged out and is removed under the lock."""
        token_cache.token_file.parent.mkdir(parents=True, exist_ok=True)
        token_cache.token_file.write_bytes(b"\xff\xfe\x00garbage")

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 1
        assert not token_cache.exists()
        assert (workdir / "tmp" / ".state.lock").exists()

    def test_env_file_option(self, tmp_path, monkeypatch):
        """--env-file points at another credentials file."""
        monkeypatch.chdir(tmp_path)
        (tmp_path / "prod.env").write_text(ENV_FILE)

        result = runner.invoke(app, ["--env-file", "prod.env", "status"])

        assert result.exit_code == 1
        assert "未ログイン" in result.output
