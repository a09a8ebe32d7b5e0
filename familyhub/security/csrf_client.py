"""
HTTP client that attaches the CSRF token to first-party mutating requests.

The token is read from the ``csrf-token`` cookie when the server has set one,
otherwise from the cached token, otherwise fetched from the token endpoint.
Concurrent callers that all need a token share one in-flight fetch.
"""
import asyncio
import logging
from typing import Any, Optional

import httpx

from familyhub.core.config import settings
from familyhub.core.constants import MUTATING_METHODS

logger = logging.getLogger(__name__)


class CSRFClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        token_path: Optional[str] = None,
        **client_kwargs: Any,
    ):
        self.base_url = httpx.URL(base_url or settings.API_BASE_URL)
        self.token_path = token_path or f"{settings.API_STR}/security/csrf"
        self.header_name = settings.CSRF_HEADER_NAME
        self.cookie_name = settings.CSRF_COOKIE_NAME

        self._token: Optional[str] = None
        self._inflight: Optional["asyncio.Future[Optional[str]]"] = None

        self.http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.DEFAULT_TIMEOUT if timeout is None else timeout,
            transport=transport,
            event_hooks={"request": [self._attach_token]},
            **client_kwargs,
        )

    async def __aenter__(self) -> "CSRFClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self.http.aclose()

    # Token handling

    def set_token(self, token: Optional[str]) -> None:
        """Seed the cache, e.g. with a token rendered into the page."""
        self._token = token

    def clear_token(self) -> None:
        self._token = None

    def _cookie_token(self) -> Optional[str]:
        try:
            return self.http.cookies.get(self.cookie_name)
        except httpx.CookieConflict:
            return None

    async def get_token(self, refresh: bool = False) -> Optional[str]:
        if not refresh:
            token = self._cookie_token() or self._token
            if token:
                return token

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._fetch_token())
            self._inflight.add_done_callback(self._clear_inflight)
        return await asyncio.shield(self._inflight)

    def _clear_inflight(self, future: "asyncio.Future[Optional[str]]") -> None:
        if self._inflight is future:
            self._inflight = None

    async def _fetch_token(self) -> Optional[str]:
        try:
            response = await self.http.get(self.token_path)
            response.raise_for_status()
            token = response.json()["token"]
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning(f"Could not fetch CSRF token: {e}")
            return None
        self._token = token
        return token

    def _is_same_origin(self, url: httpx.URL) -> bool:
        return (url.scheme, url.host, url.port) == (
            self.base_url.scheme,
            self.base_url.host,
            self.base_url.port,
        )

    async def _attach_token(self, request: httpx.Request) -> None:
        if request.method.upper() not in MUTATING_METHODS:
            return
        if not self._is_same_origin(request.url) or self.header_name in request.headers:
            return

        token = await self.get_token()
        if token:
            request.headers[self.header_name] = token
            # A token fetched just now also set the session cookie, after this
            # request was built
            if "cookie" in request.headers:
                del request.headers["cookie"]
            self.http.cookies.set_cookie_header(request)

    # Request helpers

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        return await self.http.request(method, url, **kwargs)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.http.get(url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.http.post(url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.http.put(url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.http.delete(url, **kwargs)
