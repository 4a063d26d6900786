"""
Request handlers for game search and latest releases.

GameService composes the token cache, the catalog client, ranking and
mapping. error_response turns any failure into the status and JSON
body returned to the caller.
"""

import time
from datetime import datetime, timezone
from typing import Any

from igdb_proxy.clients import (
    AuthClient,
    CatalogClient,
    TokenCache,
    build_recent_releases_query,
    build_search_query,
)
from igdb_proxy.clients.catalog import RECENT_RELEASES_MIN_RATING_COUNT
from igdb_proxy.config import Settings
from igdb_proxy.contracts import GameSummary, RawCatalogRecord
from igdb_proxy.errors import CatalogError, ProxyError, ValidationError
from igdb_proxy.logger import get_logger
from igdb_proxy.transformation import rank, to_summary

INTERNAL_ERROR_MESSAGE = "Internal server error"


class GameService:
    """
    Entry point for the two game operations.

    Example:
        >>> service = GameService.from_settings(get_settings())
        >>> games = await service.search_games("zelda")
        >>> await service.close()
    """

    def __init__(
        self,
        token_cache: TokenCache,
        catalog: CatalogClient,
        *,
        closeables: list[Any] | None = None,
    ) -> None:
        self._token_cache = token_cache
        self._catalog = catalog
        self._closeables = closeables if closeables is not None else [catalog]
        self._logger = get_logger(__name__, component="game_service")

    @classmethod
    def from_settings(cls, settings: Settings) -> "GameService":
        """Wire clients and the token cache from configuration."""
        twitch = settings.twitch
        auth_client = AuthClient(
            token_url=twitch.token_url,
            timeout=twitch.timeout_seconds,
        )
        catalog = CatalogClient(
            client_id=twitch.client_id,
            api_url=twitch.api_url,
            timeout=twitch.timeout_seconds,
        )
        token_cache = TokenCache(
            auth_client,
            twitch.client_id,
            twitch.client_secret.get_secret_value(),
        )
        return cls(token_cache, catalog, closeables=[auth_client, catalog])

    @property
    def token_cache(self) -> TokenCache:
        return self._token_cache

    async def close(self) -> None:
        """Close outbound HTTP clients."""
        for closeable in self._closeables:
            await closeable.close()

    async def search_games(self, search: str | None) -> list[GameSummary]:
        """
        Search games by name.

        Args:
            search: Raw search term from the caller

        Returns:
            list[GameSummary]: Up to 20 games, most popular first

        Raises:
            ValidationError: If the term is missing or blank
            AuthError: If a token could not be obtained
            CatalogError: If IGDB rejected the query
        """
        term = (search or "").strip()
        if not term:
            raise ValidationError("The search parameter is required")

        self._logger.info("Searching games", search=term)
        records = await self._run_query(build_search_query(term))
        return self._present(rank(records))

    async def latest_releases(self, now: datetime | None = None) -> list[GameSummary]:
        """
        Popular games released in the last six months.

        Args:
            now: Window anchor (defaults to the current UTC instant)

        Returns:
            list[GameSummary]: Up to 20 games, most popular first
        """
        now = now or datetime.now(timezone.utc)

        self._logger.info("Fetching latest releases", anchor=now.isoformat())
        records = await self._run_query(build_recent_releases_query(now))
        return self._present(rank(records, min_rating_count=RECENT_RELEASES_MIN_RATING_COUNT))

    async def _run_query(self, query_text: str) -> list[RawCatalogRecord]:
        start_time = time.perf_counter()
        token = await self._token_cache.get_token()
        try:
            records = await self._catalog.query(query_text, token)
        except CatalogError as e:
            if e.status_code == 401:
                # Token was revoked upstream; force an exchange on the next request
                self._token_cache.invalidate()
            raise

        self._logger.debug(
            "Catalog query finished",
            raw_results=len(records),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return records

    @staticmethod
    def _present(records: list[RawCatalogRecord]) -> list[GameSummary]:
        return [to_summary(record) for record in records]


def error_response(exc: Exception) -> tuple[int, dict[str, str]]:
    """
    Translate a failure into a status code and ``{"error": ...}`` body.

    Proxy errors keep the status they carry (the upstream status for
    auth and catalog failures); anything else is a 500.
    """
    logger = get_logger(__name__, component="error_handler")

    if isinstance(exc, ProxyError):
        status = exc.http_status
        log = logger.warning if status < 500 else logger.error
        log(
            "Request failed",
            error_type=type(exc).__name__,
            status_code=status,
            error=exc.message,
            source=exc.source,
        )
        return status, {"error": exc.message}

    logger.exception("Unexpected error", error_type=type(exc).__name__, exc_info=exc)
    return 500, {"error": str(exc) or INTERNAL_ERROR_MESSAGE}
