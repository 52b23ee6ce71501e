"""HTTP transport shared by the upstream API clients."""

import logging
from typing import Mapping

import niquests
from urllib3.util import Retry

from mediathek2rss.core.config import Settings, get_settings
from mediathek2rss.core.errors import UpstreamUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
}


class HttpClient:
    """Thin async wrapper around a niquests session.

    The API clients only depend on `get`, `post` and `probe`, so tests can
    hand them any object offering these coroutines.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        retry_config: Retry | None = None,
    ):
        settings = settings or get_settings()
        self._timeout = settings.http_timeout
        if retry_config is None:
            retry_config = Retry(
                total=settings.http_retries,
                backoff_factor=1,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["HEAD", "GET", "OPTIONS", "POST"],
            )
        self.session = niquests.AsyncSession(retries=retry_config)
        self.session.headers.update(DEFAULT_HEADERS)
        if settings.proxy:
            self.session.proxies = {"http": settings.proxy, "https": settings.proxy}

    async def aclose(self) -> None:
        """Properly close the internal HTTP session."""
        if self.session:
            await self.session.close()

    async def get(self, url: str, headers: Mapping[str, str] | None = None) -> bytes:
        """Perform a GET request and return the response body."""
        try:
            response = await self.session.get(
                url, headers=dict(headers or {}), timeout=self._timeout
            )
            response.raise_for_status()
        except niquests.exceptions.RequestException as e:
            logger.warning(f"GET request to {url} failed: {e}")
            raise UpstreamUnavailableError(f"Request to {url} failed: {e}", e)
        return response.content or b""

    async def post(
        self,
        url: str,
        data: Mapping[str, str],
        headers: Mapping[str, str] | None = None,
    ) -> bytes:
        """Perform a form-encoded POST request and return the response body."""
        try:
            response = await self.session.post(
                url, data=dict(data), headers=dict(headers or {}), timeout=self._timeout
            )
            response.raise_for_status()
        except niquests.exceptions.RequestException as e:
            logger.warning(f"POST request to {url} failed: {e}")
            raise UpstreamUnavailableError(f"Request to {url} failed: {e}", e)
        return response.content or b""

    async def probe(self, url: str, headers: Mapping[str, str] | None = None) -> bool:
        """Check whether url exists without downloading its body."""
        try:
            response = await self.session.head(
                url,
                headers=dict(headers or {}),
                timeout=self._timeout,
                allow_redirects=False,
            )
        except niquests.exceptions.RequestException as e:
            logger.debug(f"Probing {url} failed: {e}")
            return False
        return 200 <= response.status_code < 400
