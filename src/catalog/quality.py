"""Metadata completeness scoring for series records.

The score picks the merge primary and drives the final catalog order.
It is a pure function of current field values and is always recomputed,
never patched.
"""

from src.catalog.schemas import SeriesRecord

# =============================================================================
# CONSTANTS - SCORE POINTS
# =============================================================================

DESCRIPTION_MIN_LENGTH = 20
DESCRIPTION_POINTS = 3
DESCRIPTION_BONUS_LENGTHS = (100, 200)
"""Each threshold exceeded adds one more point."""

MAX_GENRE_POINTS = 5
"""One point per genre, capped."""

POSTER_MIN_LENGTH = 10
POSTER_POINTS = 2
YEAR_POINTS = 1
RATING_POINTS = 1

MAX_METADATA_SCORE = (
    DESCRIPTION_POINTS
    + len(DESCRIPTION_BONUS_LENGTHS)
    + MAX_GENRE_POINTS
    + POSTER_POINTS
    + YEAR_POINTS
    + RATING_POINTS
)


def description_points(description: str | None) -> int:
    """Score description length (0, 3, 4 or 5)."""
    if not description or len(description) <= DESCRIPTION_MIN_LENGTH:
        return 0
    bonus = sum(1 for threshold in DESCRIPTION_BONUS_LENGTHS if len(description) > threshold)
    return DESCRIPTION_POINTS + bonus


def metadata_score(record: SeriesRecord) -> int:
    """Score record completeness, higher is more complete.

    Args:
        record: Record to score.

    Returns:
        Integer score between 0 and MAX_METADATA_SCORE.
    """
    score = description_points(record.description)
    score += min(len(record.genres), MAX_GENRE_POINTS)
    if record.poster and len(record.poster) > POSTER_MIN_LENGTH:
        score += POSTER_POINTS
    if record.year:
        score += YEAR_POINTS
    if record.rating is not None and record.rating > 0:
        score += RATING_POINTS
    return score


def with_metadata_score(record: SeriesRecord) -> SeriesRecord:
    """Return a copy of record carrying its recomputed score."""
    return record.model_copy(update={"metadata_score": metadata_score(record)})
