"""
Transformations applied to IGDB results.

Ranking orders and truncates raw records; mapping reshapes
each one into the public GameSummary.
"""

from igdb_proxy.transformation.mapping import (
    build_cover_url,
    format_release_date,
    scale_rating,
    to_summary,
)
from igdb_proxy.transformation.ranking import MAX_RESULTS, popularity_key, rank

__all__ = [
    "MAX_RESULTS",
    "build_cover_url",
    "format_release_date",
    "popularity_key",
    "rank",
    "scale_rating",
    "to_summary",
]
