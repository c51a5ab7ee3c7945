"""Tests for the token cache."""

import json
import stat

import pytest
from pydantic import ValidationError

from nextengine_cli.api.models import TokenPair
from nextengine_cli.auth.token_manager import TokenCache, get_token_cache


class TestTokenPair:
    """Tests for TokenPair."""

    def test_to_dict_and_from_dict(self):
        """Pair can be serialized and deserialized field for field."""
        original = TokenPair(access_token="access-1", refresh_token="refresh-1")

        restored = TokenPair.from_dict(original.to_dict())

        assert restored == original

    def test_empty_token_rejected(self):
        """Both tokens must be non-empty."""
        with pytest.raises(ValidationError):
            TokenPair(access_token="", refresh_token="r")

    def test_masked_hides_token(self):
        """Masked preview does not reveal the full token."""
        pair = TokenPair(access_token="abcdefghijklmnop", refresh_token="r")
        assert "ghijklmnop" not in pair.masked()


class TestTokenCache:
    """Tests for TokenCache."""

    @pytest.fixture
    def cache(self, tmp_path):
        return TokenCache(tmp_path / "state" / "token")

    def test_save_and_get_token(self, cache):
        """Saved pair is returned on load."""
        tokens = TokenPair(access_token="A", refresh_token="R")

        cache.save_token(tokens)

        assert cache.exists()
        assert cache.get_token() == tokens

    def test_file_holds_single_json_object(self, cache):
        """On-disk format is one object with both tokens."""
        cache.save_token(TokenPair(access_token="A", refresh_token="R"))

        data = json.loads(cache.token_file.read_text())

        assert data == {"access_token": "A", "refresh_token": "R"}

    def test_save_overwrites_wholesale(self, cache):
        """A second save replaces the whole record."""
        cache.save_token(TokenPair(access_token="A1", refresh_token="R1"))
        cache.save_token(TokenPair(access_token="A2", refresh_token="R2"))

        assert cache.get_token() == TokenPair(access_token="A2", refresh_token="R2")
        assert not cache.token_file.with_name("token.tmp").exists()

    def test_file_is_private(self, cache):
        """Token file is readable by the owner only."""
        cache.save_token(TokenPair(access_token="A", refresh_token="R"))

        mode = stat.S_IMODE(cache.token_file.stat().st_mode)

        assert mode == 0o600

    def test_get_token_not_found(self, cache):
        """Returns None when nothing is cached."""
        assert cache.get_token() is None
        assert not cache.exists()

    @pytest.mark.parametrize(
        "content",
        [
            "not valid json",
            json.dumps({"access_token": "A"}),
            json.dumps({"access_token": None, "refresh_token": None}),
            json.dumps(["A", "R"]),
        ],
    )
    def test_corrupt_cache_discarded(self, cache, content):
        """An unreadable record counts as absent and is removed."""
        cache.token_file.parent.mkdir(parents=True)
        cache.token_file.write_text(content)

        assert cache.get_token() is None
        assert not cache.exists()

    def test_binary_cache_discarded(self, cache):
        """Bytes that are not UTF-8 count as absent too."""
        cache.token_file.parent.mkdir(parents=True)
        cache.token_file.write_bytes(b"\xff\xfe\x00garbage")

        assert cache.get_token() is None
        assert not cache.exists()

    def test_delete_token_success(self, cache):
        """Delete returns True when a pair was cached."""
        cache.save_token(TokenPair(access_token="A", refresh_token="R"))

        assert cache.delete_token() is True
        assert not cache.exists()

    def test_delete_token_not_found(self, cache):
        """Delete returns False when nothing was cached."""
        assert cache.delete_token() is False

    def test_get_token_cache_uses_settings_path(self, settings):
        """Factory points at the settings' token file."""
        assert get_token_cache(settings).token_file == settings.token_file
