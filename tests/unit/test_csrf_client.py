import asyncio

import httpx
import pytest

from familyhub.security.csrf_client import CSRFClient

BASE_URL = "http://testserver"


class RecordingHandler:
    """Mock transport handler: issues tokens and records mutating requests."""

    def __init__(self, token="server-token", token_status=200):
        self.token = token
        self.token_status = token_status
        self.token_fetches = 0
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/security/csrf":
            self.token_fetches += 1
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "unavailable"})
            return httpx.Response(
                200,
                json={"token": self.token},
                headers={"set-cookie": "csrf-session=session-1; Path=/; HttpOnly"},
            )
        self.requests.append(request)
        return httpx.Response(200, json={"ok": True})


def _client(handler):
    return CSRFClient(base_url=BASE_URL, transport=httpx.MockTransport(handler))


class TestCSRFClient:
    @pytest.mark.asyncio
    async def test_fetches_token_for_mutating_request(self):
        handler = RecordingHandler()
        async with _client(handler) as client:
            await client.post("/api/calendar-events", json={})

        sent = handler.requests[0]
        assert sent.headers["x-csrf-token"] == "server-token"
        assert "csrf-session=session-1" in sent.headers["cookie"]

    @pytest.mark.asyncio
    async def test_safe_requests_are_left_alone(self):
        handler = RecordingHandler()
        async with _client(handler) as client:
            await client.get("/api/calendar-events")

        assert handler.token_fetches == 0
        assert "x-csrf-token" not in handler.requests[0].headers

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_fetch(self):
        handler = RecordingHandler()
        async with _client(handler) as client:
            await asyncio.gather(
                *(client.post("/api/documents", json={"n": n}) for n in range(5))
            )

        assert handler.token_fetches == 1
        assert all(r.headers["x-csrf-token"] == "server-token" for r in handler.requests)

    @pytest.mark.asyncio
    async def test_cookie_token_is_preferred(self):
        handler = RecordingHandler()
        async with _client(handler) as client:
            client.http.cookies.set("csrf-token", "cookie-token")
            await client.delete("/api/documents/doc-1")

        assert handler.token_fetches == 0
        assert handler.requests[0].headers["x-csrf-token"] == "cookie-token"

    @pytest.mark.asyncio
    async def test_cached_token_is_reused(self):
        handler = RecordingHandler()
        async with _client(handler) as client:
            await client.post("/api/portals", json={})
            await client.put("/api/portals/p-1", json={})

        assert handler.token_fetches == 1
        assert len(handler.requests) == 2

    @pytest.mark.asyncio
    async def test_other_origins_never_get_the_token(self):
        handler = RecordingHandler()
        async with _client(handler) as client:
            client.set_token("secret")
            await client.post("https://elsewhere.example.com/hook", json={})

        assert "x-csrf-token" not in handler.requests[0].headers

    @pytest.mark.asyncio
    async def test_failed_fetch_sends_request_without_header(self):
        handler = RecordingHandler(token_status=503)
        async with _client(handler) as client:
            token = await client.get_token()
            await client.post("/api/documents", json={})

        assert token is None
        assert "x-csrf-token" not in handler.requests[0].headers

    @pytest.mark.asyncio
    async def test_refresh_forces_a_new_fetch(self):
        handler = RecordingHandler()
        async with _client(handler) as client:
            client.set_token("stale")
            token = await client.get_token(refresh=True)

        assert token == "server-token"
        assert handler.token_fetches == 1
