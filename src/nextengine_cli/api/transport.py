"""HTTP transport with a persistent cookie jar."""

import logging
from http.cookiejar import LoadError, MozillaCookieJar
from pathlib import Path
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from nextengine_cli.api.exceptions import TransportError
from nextengine_cli.config import Settings

logger = logging.getLogger(__name__)

USER_AGENT = "NextEngine-CLI/0.1.0"


class HttpTransport:
    """Synchronous HTTP transport shared by the auth chain and the gateway.

    Cookies live in a Mozilla-format jar on disk so the login sequence
    keeps its session, and survive between process runs. Redirects are
    followed; the response's ``url`` is the final resolved URL.
    """

    def __init__(
        self,
        cookie_file: Path,
        timeout: int = 30,
        verify: bool = False,
        max_redirects: int = 10,
    ):
        self.cookie_file = Path(cookie_file)
        self._timeout = timeout
        self._verify = verify
        self._max_redirects = max_redirects
        self._jar = MozillaCookieJar(str(self.cookie_file))
        self._client: httpx.Client | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "HttpTransport":
        return cls(
            settings.cookie_file,
            timeout=settings.timeout,
            verify=settings.verify_ssl,
            max_redirects=settings.max_redirects,
        )

    def __enter__(self) -> "HttpTransport":
        """Enter context manager, loading cookies and creating the HTTP client."""
        self._load_cookies()
        self._client = httpx.Client(
            cookies=self._jar,
            headers={"User-Agent": USER_AGENT},
            timeout=self._timeout,
            verify=self._verify,
            follow_redirects=True,
            max_redirects=self._max_redirects,
        )
        return self

    def __exit__(self, *args) -> None:
        """Exit context manager, saving cookies and closing the HTTP client."""
        if self._client:
            self._client.close()
            self._client = None
        self.save_cookies()

    def _load_cookies(self) -> None:
        if not self.cookie_file.exists() or self.cookie_file.stat().st_size == 0:
            return
        try:
            self._jar.load(ignore_discard=True, ignore_expires=True)
        except (LoadError, OSError) as e:
            logger.warning(f"Ignoring unreadable cookie jar {self.cookie_file}: {e}")
            self._jar.clear()

    def save_cookies(self) -> None:
        self.cookie_file.parent.mkdir(parents=True, exist_ok=True)
        self._jar.save(ignore_discard=True, ignore_expires=True)
        self.cookie_file.chmod(0o600)

    def clear_cookies(self) -> None:
        """Drop all session cookies, in memory and on disk."""
        self._jar.clear()
        self.save_cookies()
        logger.debug("Cookie jar cleared")

    def _check_client(self) -> None:
        """Ensure client is initialized."""
        if self._client is None:
            raise RuntimeError("Transport not initialized - use 'with' context manager")

    # Only connection-establishment failures are retried: the request was never sent.
    @retry(
        retry=retry_if_exception_type((httpx.ConnectError, httpx.ConnectTimeout)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        assert self._client is not None
        return self._client.request(method, url, **kwargs)

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Make a request, wrapping network failures in TransportError."""
        self._check_client()
        logger.debug(f"{method} {url}")
        try:
            response = self._send(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {url} failed: {e}") from e
        logger.debug(f"{method} {url} -> {response.status_code} ({response.url})")
        return response

    def get(self, url: str, params: dict[str, str] | None = None) -> httpx.Response:
        """Convenience method for GET requests."""
        return self.request("GET", url, params=params)

    def post(
        self,
        url: str,
        data: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """POST a form-encoded body."""
        return self.request("POST", url, params=params, data=data or {})
