"""
Upstream API clients.

Twitch OAuth for bearer tokens and IGDB for game data, both
built on a common base with error mapping and structured logging.
"""

from igdb_proxy.clients.auth import (
    TOKEN_EXPIRY_MARGIN_SECONDS,
    AccessToken,
    AuthClient,
    TokenCache,
)
from igdb_proxy.clients.base import BaseClient
from igdb_proxy.clients.catalog import (
    CatalogClient,
    build_recent_releases_query,
    build_search_query,
    escape_query_string,
)

__all__ = [
    # Base
    "BaseClient",
    # Auth
    "TOKEN_EXPIRY_MARGIN_SECONDS",
    "AccessToken",
    "AuthClient",
    "TokenCache",
    # Catalog
    "CatalogClient",
    "build_recent_releases_query",
    "build_search_query",
    "escape_query_string",
]
