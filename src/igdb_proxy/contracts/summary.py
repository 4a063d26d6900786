"""Data contract for the simplified game record returned to callers."""

from pydantic import BaseModel, Field


class GameSummary(BaseModel):
    """
    Simplified game record.

    This is the only shape the browser client ever sees.
    """

    id: int
    name: str
    summary: str | None = None
    released: str | None = Field(default=None, description="Release date as YYYY-MM-DD")
    rating: float | None = Field(default=None, ge=0, le=5, description="Rating on a 0-5 scale")
    background_image: str | None = Field(default=None, description="Cover image URL")
    platforms: list[str] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
