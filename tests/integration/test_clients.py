"""Integration tests for Twitch and IGDB clients with mocked HTTP responses."""

import json
from pathlib import Path
from typing import Any, cast

import httpx
import pytest
import respx

from igdb_proxy.clients import AuthClient, CatalogClient, TokenCache
from igdb_proxy.errors import AuthError, CatalogError, UnclassifiedError

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"

TOKEN_URL = "https://id.twitch.tv/oauth2/token"
GAMES_URL = "https://api.igdb.com/v4/games"


def load_fixture(name: str) -> list[dict[str, Any]]:
    """Load a JSON fixture file."""
    with (FIXTURES_DIR / name).open(encoding="utf-8") as f:
        return cast(list[dict[str, Any]], json.load(f))


@pytest.fixture
def games_response() -> list[dict[str, Any]]:
    """Load IGDB games response fixture."""
    return load_fixture("igdb_games_response.json")


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestAuthClient:
    """Integration tests for the Twitch auth client."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_fetch_token_success(self) -> None:
        """Test credentials are sent as query parameters."""
        route = respx.post(TOKEN_URL).mock(
            return_value=httpx.Response(
                200,
                json={"access_token": "abc123", "expires_in": 5000000, "token_type": "bearer"},
            )
        )

        async with AuthClient() as auth:
            token, ttl = await auth.fetch_token("my_id", "my_secret")

        assert token == "abc123"
        assert ttl == 5000000
        params = route.calls.last.request.url.params
        assert params["client_id"] == "my_id"
        assert params["client_secret"] == "my_secret"
        assert params["grant_type"] == "client_credentials"

    @respx.mock
    @pytest.mark.asyncio
    async def test_fetch_token_rejected(self) -> None:
        """Test a non-success status raises AuthError with status and body."""
        route = respx.post(TOKEN_URL).mock(
            return_value=httpx.Response(403, text='{"status":403,"message":"invalid client secret"}')
        )

        async with AuthClient() as auth:
            with pytest.raises(AuthError) as exc_info:
                await auth.fetch_token("my_id", "bad_secret")

        assert exc_info.value.status_code == 403
        assert "invalid client secret" in (exc_info.value.body or "")
        assert "403" in str(exc_info.value)
        # No retries
        assert route.call_count == 1

    @respx.mock
    @pytest.mark.asyncio
    async def test_fetch_token_malformed_body(self) -> None:
        respx.post(TOKEN_URL).mock(return_value=httpx.Response(200, json={"nope": True}))

        async with AuthClient() as auth:
            with pytest.raises(AuthError) as exc_info:
                await auth.fetch_token("my_id", "my_secret")

        assert exc_info.value.http_status == 502

    @respx.mock
    @pytest.mark.asyncio
    async def test_network_failure(self) -> None:
        respx.post(TOKEN_URL).mock(side_effect=httpx.ConnectError("connection refused"))

        async with AuthClient() as auth:
            with pytest.raises(UnclassifiedError) as exc_info:
                await auth.fetch_token("my_id", "my_secret")

        assert exc_info.value.http_status == 500
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


class StubAuthClient:
    """Auth client double that hands out numbered tokens."""

    def __init__(self, ttl: int = 3600) -> None:
        self.ttl = ttl
        self.calls: list[tuple[str, str]] = []

    async def fetch_token(self, client_id: str, client_secret: str) -> tuple[str, int]:
        self.calls.append((client_id, client_secret))
        return f"token-{len(self.calls)}", self.ttl


class TestTokenCache:
    """Tests for the bearer token cache."""

    @pytest.mark.asyncio
    async def test_reuses_token_within_window(self) -> None:
        """Test a second call within the TTL makes no auth call."""
        auth = StubAuthClient(ttl=3600)
        clock = FakeClock()
        cache = TokenCache(auth, "id", "secret", clock=clock)  # type: ignore[arg-type]

        first = await cache.get_token()
        clock.now += 3000
        second = await cache.get_token()

        assert first == second == "token-1"
        assert auth.calls == [("id", "secret")]

    @pytest.mark.asyncio
    async def test_margin_applied_at_write_time(self) -> None:
        """Test the token is refreshed 60 seconds before it expires."""
        auth = StubAuthClient(ttl=3600)
        clock = FakeClock()
        cache = TokenCache(auth, "id", "secret", clock=clock)  # type: ignore[arg-type]

        await cache.get_token()
        assert cache.current is not None
        assert cache.current.expires_at == clock.now + 3540

        clock.now += 3539
        assert await cache.get_token() == "token-1"

        clock.now += 1
        assert await cache.get_token() == "token-2"
        assert len(auth.calls) == 2

    @pytest.mark.asyncio
    async def test_invalidate_forces_refresh(self) -> None:
        auth = StubAuthClient()
        cache = TokenCache(auth, "id", "secret", clock=FakeClock())  # type: ignore[arg-type]

        await cache.get_token()
        cache.invalidate()

        assert cache.current is None
        assert await cache.get_token() == "token-2"

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_nothing(self) -> None:
        """Test a failed exchange propagates and caches no token."""

        class FailingAuth:
            async def fetch_token(self, client_id: str, client_secret: str) -> tuple[str, int]:
                raise AuthError("Error obtaining Twitch token: 500 boom", status_code=500)

        cache = TokenCache(FailingAuth(), "id", "secret", clock=FakeClock())  # type: ignore[arg-type]

        with pytest.raises(AuthError):
            await cache.get_token()

        assert cache.current is None

    @respx.mock
    @pytest.mark.asyncio
    async def test_with_real_auth_client(self) -> None:
        route = respx.post(TOKEN_URL).mock(
            return_value=httpx.Response(200, json={"access_token": "abc", "expires_in": 3600})
        )

        async with AuthClient() as auth:
            cache = TokenCache(auth, "id", "secret")
            assert await cache.get_token() == "abc"
            assert await cache.get_token() == "abc"

        assert route.call_count == 1


class TestCatalogClient:
    """Integration tests for the IGDB catalog client."""

    @respx.mock
    @pytest.mark.asyncio
    async def test_query_success(self, games_response: list[dict[str, Any]]) -> None:
        """Test headers, body and parsed records."""
        route = respx.post(GAMES_URL).mock(return_value=httpx.Response(200, json=games_response))

        async with CatalogClient(client_id="my_id") as catalog:
            records = await catalog.query('search "witcher"; fields name;', "abc123")

        assert [r.id for r in records] == [1942, 80, 478, 99999]
        assert records[0].cover is not None
        assert records[0].cover.image_id == "co1wyy"

        request = route.calls.last.request
        assert request.headers["Client-ID"] == "my_id"
        assert request.headers["Authorization"] == "Bearer abc123"
        assert request.headers["Content-Type"] == "text/plain"
        assert request.content == b'search "witcher"; fields name;'

    @respx.mock
    @pytest.mark.asyncio
    async def test_query_error_status(self) -> None:
        """Test a non-success status raises CatalogError with status and body."""
        respx.post(GAMES_URL).mock(
            return_value=httpx.Response(400, text='[{"title":"Syntax Error"}]')
        )

        async with CatalogClient(client_id="my_id") as catalog:
            with pytest.raises(CatalogError) as exc_info:
                await catalog.query("garbage", "abc123")

        assert exc_info.value.status_code == 400
        assert exc_info.value.message == 'Error querying IGDB: 400 [{"title":"Syntax Error"}]'

    @respx.mock
    @pytest.mark.asyncio
    async def test_query_unexpected_body(self) -> None:
        respx.post(GAMES_URL).mock(return_value=httpx.Response(200, json={"not": "a list"}))

        async with CatalogClient(client_id="my_id") as catalog:
            with pytest.raises(CatalogError) as exc_info:
                await catalog.query("fields name;", "abc123")

        assert exc_info.value.http_status == 502

    @respx.mock
    @pytest.mark.asyncio
    async def test_malformed_records_do_not_fail_the_page(self) -> None:
        """Test odd fields degrade and unreadable records are skipped."""
        respx.post(GAMES_URL).mock(
            return_value=httpx.Response(
                200,
                json=[
                    {"id": 1, "name": "Good"},
                    {"id": 2, "name": None},
                    {"id": 3, "name": "Odd cover", "cover": {"image_id": 123}},
                    {"name": "No ID"},
                    "not a record",
                ],
            )
        )

        async with CatalogClient(client_id="my_id") as catalog:
            records = await catalog.query("fields name;", "abc123")

        assert [r.id for r in records] == [1, 2, 3]
        assert records[1].name == ""
        assert records[2].cover is not None
        assert records[2].cover.image_id is None

    @respx.mock
    @pytest.mark.asyncio
    async def test_custom_api_url(self) -> None:
        route = respx.post("http://localhost:9000/v4/games").mock(
            return_value=httpx.Response(200, json=[])
        )

        async with CatalogClient(client_id="my_id", api_url="http://localhost:9000/v4/") as catalog:
            assert await catalog.query("fields name;", "abc123") == []

        assert route.called
