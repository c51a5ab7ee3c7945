"""Shared fixtures: settings in a temp dir and a mocked Next Engine."""

import os

import httpx
import pytest
import respx

from nextengine_cli.config import Settings

BASE_SERVER = "https://base.example.com"
API_SERVER = "https://api.example.com"
SIGN_IN_URL = f"{BASE_SERVER}/users/sign_in?client_id=cid"
CALLBACK_URL = f"{BASE_SERVER}/apps/callback?uid=U1&state=S1"
NEAUTH_URL = f"{API_SERVER}/api_neauth"

LOGIN_PAGE = """
<html><body>
  <form action="/users/sign_in?client_id=cid" method="post">
    <input type="hidden" name="utf8" value="&#x2713;">
    <input type="hidden" name="authenticity_token" value="csrf-123">
    <input type="text" name="user[login_code]">
    <input type="password" name="user[password]">
  </form>
</body></html>
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's NEXTENGINE_* variables out of the tests."""
    for key in list(os.environ):
        if key.upper().startswith("NEXTENGINE_"):
            monkeypatch.delenv(key)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at the mocked servers, state kept in tmp_path."""
    return Settings(
        login_id="user@example.com",
        login_password="secret",
        client_id="cid",
        client_secret="csecret",
        base_server=f"{BASE_SERVER}/",
        api_server=f"{API_SERVER}/",
        env_file=tmp_path / "no-such-env",
        state_dir=tmp_path / "state",
    )


@pytest.fixture
def api_mock():
    """respx router for the login and API servers."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def login_routes(api_mock):
    """Install a working login flow; exchange hands out A1/R1."""
    return {
        "page": api_mock.get(SIGN_IN_URL).mock(
            return_value=httpx.Response(
                200,
                text=LOGIN_PAGE,
                headers={"Set-Cookie": "_ne_session=sess-1; path=/"},
            )
        ),
        "submit": api_mock.post(SIGN_IN_URL).mock(
            return_value=httpx.Response(302, headers={"Location": CALLBACK_URL})
        ),
        "callback": api_mock.get(CALLBACK_URL).mock(
            return_value=httpx.Response(200, text="<html>ok</html>")
        ),
        "exchange": api_mock.post(NEAUTH_URL).mock(
            return_value=httpx.Response(
                200,
                json={"result": "success", "access_token": "A1", "refresh_token": "R1"},
            )
        ),
    }
