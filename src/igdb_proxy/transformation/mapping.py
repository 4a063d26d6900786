"""
Mapping from raw IGDB records to GameSummary.

Every conversion is total: a missing or unusable field becomes None
(or an empty list) instead of raising.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from igdb_proxy.contracts import GameSummary, NamedRef, RawCatalogRecord

COVER_URL_TEMPLATE = "https://images.igdb.com/igdb/image/upload/t_cover_big/{image_id}.jpg"

MAX_RATING = 5.0


def format_release_date(timestamp: float | None) -> str | None:
    """Epoch seconds to a UTC ``YYYY-MM-DD`` string."""
    if timestamp is None:
        return None
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")
    except (OverflowError, OSError, ValueError):
        return None


def scale_rating(total_rating: float | None) -> float | None:
    """
    Map a 0-100 rating onto 0-5 with one decimal.

    Halves round away from zero, so 87 (4.35) becomes 4.4.
    """
    if total_rating is None:
        return None
    scaled = min(MAX_RATING, max(0.0, total_rating / 20))
    # str() gives the shortest repr, which keeps 4.35 from reading as 4.3499...
    return float(Decimal(str(scaled)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def build_cover_url(image_id: str | None) -> str | None:
    if not image_id:
        return None
    return COVER_URL_TEMPLATE.format(image_id=image_id)


def relation_names(relations: list[NamedRef | None]) -> list[str]:
    """Names of expanded relations, skipping null or blank entries."""
    return [r.name for r in relations if r is not None and r.name]


def to_summary(record: RawCatalogRecord) -> GameSummary:
    """Convert one raw record into the shape returned to callers."""
    return GameSummary(
        id=record.id,
        name=record.name,
        summary=record.summary,
        released=format_release_date(record.first_release_date),
        rating=scale_rating(record.total_rating),
        background_image=build_cover_url(record.cover.image_id if record.cover else None),
        platforms=relation_names(record.platforms),
        genres=relation_names(record.genres),
    )
