"""
Data contracts for IGDB responses and proxy output.

Pydantic models describing what IGDB sends us and what
we hand back to the browser client.
"""

from igdb_proxy.contracts.igdb import Cover, NamedRef, RawCatalogRecord
from igdb_proxy.contracts.summary import GameSummary

__all__ = [
    "Cover",
    "GameSummary",
    "NamedRef",
    "RawCatalogRecord",
]
