"""
IGDB catalog client and Apicalypse query builders.

IGDB takes its queries as a plain-text body in the Apicalypse
language, POSTed to one endpoint per resource.
"""

import calendar
import time
from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import ValidationError as PydanticValidationError

from igdb_proxy.clients.base import BaseClient
from igdb_proxy.contracts import RawCatalogRecord
from igdb_proxy.errors import CatalogError, ProxyError

GAME_FIELDS = (
    "id",
    "name",
    "summary",
    "first_release_date",
    "total_rating",
    "total_rating_count",
    "cover.image_id",
    "genres.name",
    "platforms.name",
)

# Raw results requested from IGDB before ranking
QUERY_LIMIT = 50

RECENT_RELEASES_MONTHS = 6
RECENT_RELEASES_MIN_RATING_COUNT = 5


def escape_query_string(value: str) -> str:
    """Escape double quotes so ``value`` stays inside an Apicalypse string literal."""
    return value.replace('"', '\\"')


def _fields_clause() -> str:
    return f"fields {', '.join(GAME_FIELDS)};"


def build_search_query(term: str, *, limit: int = QUERY_LIMIT) -> str:
    """
    Build a free-text name search.

    Args:
        term: Search term, used verbatim apart from quote escaping
        limit: Maximum raw results

    Returns:
        str: Apicalypse query body
    """
    return "\n".join(
        [
            f'search "{escape_query_string(term)}";',
            _fields_clause(),
            f"limit {limit};",
        ]
    )


def subtract_months(moment: datetime, months: int) -> datetime:
    """
    Go back a number of calendar months.

    The day is clamped to the length of the target month, so
    August 31st minus six months is the last day of February.
    """
    month_index = moment.year * 12 + (moment.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def build_recent_releases_query(
    now: datetime,
    *,
    months: int = RECENT_RELEASES_MONTHS,
    min_rating_count: int = RECENT_RELEASES_MIN_RATING_COUNT,
    limit: int = QUERY_LIMIT,
) -> str:
    """
    Build a query for games released in the window [now - months, now].

    Args:
        now: Anchor instant (naive values are taken as UTC)
        months: Window length in calendar months
        min_rating_count: Records need strictly more ratings than this
        limit: Maximum raw results

    Returns:
        str: Apicalypse query body, sorted by rating count descending
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    window_start = int(subtract_months(now, months).timestamp())
    window_end = int(now.timestamp())

    return "\n".join(
        [
            _fields_clause(),
            (
                f"where first_release_date >= {window_start}"
                f" & first_release_date <= {window_end}"
                f" & total_rating_count > {min_rating_count};"
            ),
            "sort total_rating_count desc;",
            f"limit {limit};",
        ]
    )


class CatalogClient(BaseClient):
    """
    Client for the IGDB games endpoint.

    Example:
        >>> async with CatalogClient(client_id="abc") as catalog:
        ...     records = await catalog.query(build_search_query("zelda"), token)
    """

    def __init__(
        self,
        *,
        client_id: str,
        api_url: str = "https://api.igdb.com/v4",
        **kwargs: Any,
    ) -> None:
        """
        Initialize the catalog client.

        Args:
            client_id: Twitch client ID, sent as the Client-ID header
            api_url: IGDB API base URL
            **kwargs: Arguments passed to BaseClient
        """
        super().__init__(**kwargs)
        self._client_id = client_id
        self._games_url = f"{api_url.rstrip('/')}/games"

    @property
    def source_name(self) -> str:
        """Return source identifier."""
        return "igdb"

    @property
    def error_class(self) -> type[ProxyError]:
        return CatalogError

    @property
    def error_prefix(self) -> str:
        return "Error querying IGDB"

    def _format_error(self, response: httpx.Response) -> CatalogError:
        return CatalogError(
            f"{self.error_prefix}: unexpected response format",
            status_code=502,
            body=response.text,
            source=self.source_name,
            endpoint=self._games_url,
        )

    def _parse_response(self, response: httpx.Response) -> list[RawCatalogRecord]:
        """
        Parse the games list.

        A body that is not a JSON array fails the whole query; a single
        record that cannot be read (no usable ID) is skipped.
        """
        try:
            raw_data = response.json()
        except ValueError as e:
            raise self._format_error(response) from e

        if not isinstance(raw_data, list):
            raise self._format_error(response)

        records: list[RawCatalogRecord] = []
        for position, item in enumerate(raw_data):
            try:
                records.append(RawCatalogRecord.model_validate(item))
            except PydanticValidationError as e:
                self._logger.warning(
                    "Skipping unreadable record",
                    position=position,
                    error=str(e),
                )
        return records

    async def query(self, query_text: str, token: str) -> list[RawCatalogRecord]:
        """
        Run an Apicalypse query against the games endpoint.

        Args:
            query_text: Query body
            token: Bearer token from the token cache

        Returns:
            list[RawCatalogRecord]: Records in the order IGDB returned them

        Raises:
            CatalogError: If IGDB answers with a non-success status
        """
        start_time = time.perf_counter()
        response = await self._make_request(
            "POST",
            self._games_url,
            headers={
                "Client-ID": self._client_id,
                "Authorization": f"Bearer {token}",
                "Content-Type": "text/plain",
            },
            content=query_text,
        )
        records = self._parse_response(response)

        self._logger.info(
            "Query successful",
            results=len(records),
            duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return records
