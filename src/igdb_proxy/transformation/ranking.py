"""
Popularity ranking for catalog results.

Rating count is the primary signal, rating breaks ties, and records
equal on both keep the order IGDB returned them in.
"""

from collections.abc import Iterable

from igdb_proxy.contracts import RawCatalogRecord

MAX_RESULTS = 20


def popularity_key(record: RawCatalogRecord) -> tuple[int, float]:
    """Sort key with missing count and rating read as zero."""
    return record.rating_count_or_zero, record.rating_or_zero


def rank(
    records: Iterable[RawCatalogRecord],
    *,
    min_rating_count: int | None = None,
    limit: int = MAX_RESULTS,
) -> list[RawCatalogRecord]:
    """
    Order records by popularity and keep the top ``limit``.

    Args:
        records: Raw records in upstream order
        min_rating_count: Drop records with fewer ratings than this
        limit: Maximum number of records returned

    Returns:
        list[RawCatalogRecord]: New list; the input is left untouched
    """
    candidates = list(records)
    if min_rating_count is not None:
        candidates = [r for r in candidates if r.rating_count_or_zero >= min_rating_count]

    # sorted() is stable, so ties keep their input order
    ranked = sorted(candidates, key=popularity_key, reverse=True)
    return ranked[:limit]
