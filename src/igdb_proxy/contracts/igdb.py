"""
Data contracts for IGDB API responses.

These Pydantic models define the expected structure of game records
returned by the /games endpoint. Every field apart from the identifier
is optional because IGDB omits fields it has no data for.
"""

import math
from numbers import Real
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _string_or_none(v: Any) -> str | None:
    return v if isinstance(v, str) else None


def _int_or_none(v: Any) -> int | None:
    if isinstance(v, bool) or not isinstance(v, int):
        return None
    return v


class NamedRef(BaseModel):
    """Expanded relation carrying a name (platform, genre)."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    name: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> int | None:
        return _int_or_none(v)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> str | None:
        return _string_or_none(v)


class Cover(BaseModel):
    """Expanded cover relation."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    image_id: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> int | None:
        return _int_or_none(v)

    @field_validator("image_id", mode="before")
    @classmethod
    def coerce_image_id(cls, v: Any) -> str | None:
        return _string_or_none(v)


class RawCatalogRecord(BaseModel):
    """A game record as returned by IGDB."""

    model_config = ConfigDict(extra="ignore")

    id: int = Field(..., description="IGDB game ID")
    name: str = Field(default="", description="Game name")
    summary: str | None = Field(default=None)
    first_release_date: float | None = Field(
        default=None, description="Release instant in seconds since epoch"
    )
    total_rating: float | None = Field(default=None, description="Rating on a 0-100 scale")
    total_rating_count: int | None = Field(default=None, description="Number of ratings")
    cover: Cover | None = Field(default=None)
    platforms: list[NamedRef | None] = Field(default_factory=list)
    genres: list[NamedRef | None] = Field(default_factory=list)

    @field_validator("name", mode="before")
    @classmethod
    def coerce_name(cls, v: Any) -> str:
        return v if isinstance(v, str) else ""

    @field_validator("summary", mode="before")
    @classmethod
    def coerce_summary(cls, v: Any) -> str | None:
        return _string_or_none(v)

    @field_validator("first_release_date", "total_rating", mode="before")
    @classmethod
    def drop_non_numeric(cls, v: Any) -> Any:
        """Treat anything that is not a real number as absent."""
        if isinstance(v, bool) or not isinstance(v, Real) or not math.isfinite(v):
            return None
        return v

    @field_validator("total_rating_count", mode="before")
    @classmethod
    def coerce_rating_count(cls, v: Any) -> int | None:
        if isinstance(v, bool) or not isinstance(v, Real) or not math.isfinite(v):
            return None
        return int(v)

    @field_validator("platforms", "genres", mode="before")
    @classmethod
    def coerce_relations(cls, v: Any) -> Any:
        """IGDB omits the key or sends null for records with no relations."""
        if v is None:
            return []
        if isinstance(v, list):
            # Unexpanded relations arrive as bare IDs
            return [item if isinstance(item, dict) or item is None else None for item in v]
        return []

    @field_validator("cover", mode="before")
    @classmethod
    def coerce_cover(cls, v: Any) -> Any:
        return v if isinstance(v, dict) else None

    @property
    def rating_count_or_zero(self) -> int:
        return self.total_rating_count or 0

    @property
    def rating_or_zero(self) -> float:
        return self.total_rating or 0.0
