"""Pydantic schemas for catalog aggregation.

Defines the per-provider rating entry and the unified series record
exchanged between provider scrapers, the aggregation engine and the
addon adapter.
"""

import math
import re
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.catalog.utils.dates import extract_year, parse_date

# =============================================================================
# CONSTANTS
# =============================================================================

PROVIDER_PREFIX_PATTERN = re.compile(r"^([a-z]+)-")
"""Provider prefix embedded in every record id (format: hmm-some-slug)."""

UNKNOWN_PROVIDER = "unknown"
"""Prefix used when a record id carries no recognizable provider prefix."""


def provider_prefix(record_id: str) -> str:
    """Extract provider prefix from a record id.

    Args:
        record_id: Prefixed record id.

    Returns:
        Lowercase prefix, or UNKNOWN_PROVIDER when absent.
    """
    match = PROVIDER_PREFIX_PATTERN.match(record_id or "")
    return match.group(1) if match else UNKNOWN_PROVIDER


def provider_slug(record_id: str, prefix: str) -> str:
    """Strip the provider prefix from a record id."""
    marker = f"{prefix}-"
    return record_id[len(marker) :] if record_id.startswith(marker) else record_id


def as_number(value: Any) -> float | None:
    """Return value as a float, None if not numeric.

    Booleans, strings and NaN are not numbers here.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value):
        return None
    return float(value)


def _dedupe(values: Any) -> tuple[str, ...]:
    """Deduplicate string values preserving first-seen order."""
    if not isinstance(values, (list, tuple, set, frozenset)):
        return ()
    return tuple(dict.fromkeys(v for v in values if isinstance(v, str) and v))


# =============================================================================
# RATING ENTRY
# =============================================================================


class RatingType(StrEnum):
    """Rating representations reported by providers."""

    DIRECT = "direct"
    VIEWS = "views"
    PERCENTAGE = "percentage"
    STARS = "stars"
    TRENDING = "trending"

    @classmethod
    def coerce(cls, value: Any) -> "RatingType":
        """Map arbitrary input to a rating type, DIRECT when unknown."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.DIRECT


class RatingEntry(BaseModel):
    """Raw rating contributed by one provider.

    Only the raw value and its type are stored; the 0-10 value is
    always resolved on demand by RatingNormalizer.

    Attributes:
        raw: Raw rating, percentage, star count or view count.
        type: How raw must be interpreted.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    raw: float | None = None
    type: RatingType = RatingType.DIRECT

    @field_validator("raw", mode="before")
    @classmethod
    def coerce_raw(cls, v: Any) -> float | None:
        """Keep numeric raw values only."""
        return as_number(v)

    @field_validator("type", mode="before")
    @classmethod
    def coerce_type(cls, v: Any) -> RatingType:
        """Fall back to direct for missing or unknown types."""
        if v is None:
            return RatingType.DIRECT
        return RatingType.coerce(v)


RatingBreakdown = dict[str, RatingEntry | None]
"""Per-provider mapping of rating entries."""


def _coerce_breakdown_value(value: Any) -> RatingEntry | None:
    """Accept entries, dicts or legacy bare numbers."""
    if value is None or isinstance(value, RatingEntry):
        return value
    if isinstance(value, dict):
        return RatingEntry.model_validate(value)
    if as_number(value) is not None:
        return RatingEntry(raw=value, type=RatingType.DIRECT)
    return None


# =============================================================================
# SERIES RECORD
# =============================================================================


class SeriesRecord(BaseModel):
    """Unit of catalog aggregation.

    Created the first time a title is seen, replaced by a merged copy on
    every later duplicate discovery. Derived fields (rating,
    metadata_score) are owned by the engine.

    Attributes:
        id: Globally unique id, formatted <providerPrefix>-<providerSlug>.
        name: Display title.
        genres: Genre tags, deduplicated by value.
        providers: Contributing provider prefixes in discovery order.
        provider_slugs: Provider prefix to that provider's original slug.
        rating_breakdown: Provider prefix to raw rating entry.
        rating: Weighted 0-10 rating derived from rating_breakdown.
        metadata_score: Completeness score, recomputed after each change.
        last_updated: Most recent update timestamp reported.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    # Identity
    id: str = Field(min_length=1)
    name: str = Field(min_length=1)

    # Display metadata
    poster: str | None = None
    description: str | None = None
    studio: str | None = None
    genres: tuple[str, ...] = ()
    year: int | None = None

    # Ratings
    rating: float | None = None
    rating_type: RatingType | None = None
    view_count: int | None = None

    # Aggregation metadata
    providers: tuple[str, ...] = ()
    provider_slugs: dict[str, str] = Field(default_factory=dict)
    rating_breakdown: RatingBreakdown = Field(default_factory=dict)
    metadata_score: int = 0
    last_updated: datetime | None = None

    @field_validator("poster", "description", "studio", mode="before")
    @classmethod
    def drop_non_string(cls, v: Any) -> str | None:
        """Treat non-string or blank text as absent."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v

    @field_validator("genres", "providers", mode="before")
    @classmethod
    def dedupe_values(cls, v: Any) -> tuple[str, ...]:
        """Keep unique non-empty strings in first-seen order."""
        return _dedupe(v)

    @field_validator("year", mode="before")
    @classmethod
    def coerce_year(cls, v: Any) -> int | None:
        """Accept integer years or date-like strings."""
        if isinstance(v, str):
            return extract_year(v)
        number = as_number(v)
        if number is None or math.isinf(number) or number <= 0:
            return None
        return int(number)

    @field_validator("rating", mode="before")
    @classmethod
    def coerce_rating(cls, v: Any) -> float | None:
        """Keep numeric ratings only."""
        return as_number(v)

    @field_validator("rating_type", mode="before")
    @classmethod
    def coerce_rating_type(cls, v: Any) -> RatingType | None:
        """Map unknown types to direct, keep absence."""
        if v is None:
            return None
        return RatingType.coerce(v)

    @field_validator("view_count", mode="before")
    @classmethod
    def coerce_view_count(cls, v: Any) -> int | None:
        """Keep finite numeric view counts only."""
        number = as_number(v)
        if number is None or math.isinf(number):
            return None
        return int(number)

    @field_validator("provider_slugs", mode="before")
    @classmethod
    def coerce_slugs(cls, v: Any) -> dict[str, str]:
        """Keep string-to-string slug entries only."""
        if not isinstance(v, dict):
            return {}
        return {k: s for k, s in v.items() if isinstance(k, str) and isinstance(s, str)}

    @field_validator("rating_breakdown", mode="before")
    @classmethod
    def coerce_breakdown(cls, v: Any) -> RatingBreakdown:
        """Normalize breakdown values, including the legacy number format."""
        if not isinstance(v, dict):
            return {}
        return {
            str(provider): _coerce_breakdown_value(entry) for provider, entry in v.items()
        }

    @field_validator("metadata_score", mode="before")
    @classmethod
    def coerce_score(cls, v: Any) -> int:
        """Scores are recomputed by the engine; tolerate junk input."""
        number = as_number(v)
        return int(number) if number is not None and not math.isinf(number) else 0

    @field_validator("last_updated", mode="before")
    @classmethod
    def coerce_last_updated(cls, v: Any) -> datetime | None:
        """Parse scraped timestamps, unparseable values become absent."""
        return parse_date(v)

    @property
    def prefix(self) -> str:
        """Provider prefix derived from id."""
        return provider_prefix(self.id)

    @property
    def slug(self) -> str:
        """Provider slug derived from id."""
        return provider_slug(self.id, self.prefix)

    @property
    def provider_count(self) -> int:
        """Number of contributing providers (at least one)."""
        return len(self.providers) or 1
