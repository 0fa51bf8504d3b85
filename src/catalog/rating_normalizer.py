"""Rating normalization across heterogeneous provider scales.

Converts direct ratings, percentages, star counts, trending positions
and view counts to a common 0-10 scale, then computes a provider
weighted average.

Example:
    >>> normalizer = RatingNormalizer()
    >>> normalizer.normalize(80, RatingType.PERCENTAGE)
    8.0
    >>> normalizer.weighted_average({"hmm": RatingEntry(raw=8.6)})
    8.6
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.catalog.schemas import RatingBreakdown, RatingEntry, RatingType, as_number

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

MIN_RATING = 0.0
"""Lower bound of the common scale."""

MAX_RATING = 10.0
"""Upper bound of the common scale."""

PERCENTAGE_SCALE_FACTOR = 10.0
"""Factor to convert a 0-100 percentage to 0-10."""

STARS_SCALE = 5.0
"""Maximum star count for star ratings."""


def round_rating(value: float) -> float:
    """Round half-up to one decimal."""
    return math.floor(value * 10 + 0.5) / 10


def _clamp(value: float) -> float:
    """Bound a rating to the 0-10 scale.

    Args:
        value: Rating, possibly out of range.

    Returns:
        Value clamped to [MIN_RATING, MAX_RATING].
    """
    return max(MIN_RATING, min(MAX_RATING, value))


# =============================================================================
# CONFIGURATION
# =============================================================================


class RatingConfig(BaseModel):
    """Immutable rating normalization configuration.

    Attributes:
        view_threshold: Minimum views before a view count counts as a rating.
        default_rating: Rating of titles with no usable rating at all.
        provider_weights: Weight per provider prefix.
        default_weight: Weight of providers missing from provider_weights.
        views_multiplier: Multiplier applied to log10(views + 1).
        views_max: Cap for view-derived ratings.
        trending_cap: Cap for trending-derived ratings.
        provider_names: Display label per provider prefix.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    view_threshold: int = Field(default=1000, ge=0)
    default_rating: float = Field(default=6.0, ge=MIN_RATING, le=MAX_RATING)
    provider_weights: dict[str, float] = Field(default_factory=lambda: {"hmm": 5.0})
    default_weight: float = Field(default=1.0, gt=0.0)
    views_multiplier: float = Field(default=1.5, gt=0.0)
    views_max: float = Field(default=7.0, ge=MIN_RATING, le=MAX_RATING)
    trending_cap: float = Field(default=7.5, ge=MIN_RATING, le=MAX_RATING)
    provider_names: dict[str, str] = Field(default_factory=dict)

    def weight_for(self, provider: str) -> float:
        """Weight of a provider prefix."""
        return self.provider_weights.get(provider, self.default_weight)

    def display_name(self, provider: str) -> str:
        """Display label of a provider prefix."""
        return self.provider_names.get(provider, provider)


# =============================================================================
# WEIGHTED COMPONENTS
# =============================================================================


@dataclass(frozen=True)
class RatingComponent:
    """Single resolved rating with its provider weight.

    Attributes:
        provider: Provider prefix.
        value: Normalized rating (0-10).
        weight: Weight for aggregation.
    """

    provider: str
    value: float
    weight: float

    @property
    def weighted_value(self) -> float:
        """Calculate weighted contribution."""
        return self.value * self.weight


# =============================================================================
# NORMALIZER
# =============================================================================


class RatingNormalizer:
    """Normalizes provider ratings and computes weighted averages.

    Any non-numeric or NaN input resolves to None (unrated), never to 0:
    a zero rating is an assertion, missing data is not.

    Attributes:
        config: Immutable normalization configuration.
    """

    def __init__(self, config: RatingConfig | None = None) -> None:
        """Initialize normalizer.

        Args:
            config: Configuration, defaults to RatingConfig().
        """
        self.config = config or RatingConfig()

    # =========================================================================
    # Scale conversion
    # =========================================================================

    def normalize(
        self, value: Any, rating_type: RatingType | str = RatingType.DIRECT
    ) -> float | None:
        """Convert a raw value of the given type to the 0-10 scale.

        Args:
            value: Raw rating or view count.
            rating_type: Representation of value; unknown types are direct.

        Returns:
            Normalized rating or None when unusable.
        """
        rating_type = RatingType.coerce(rating_type)
        if rating_type is RatingType.VIEWS:
            return self.normalize_view_count(value)

        number = as_number(value)
        if number is None:
            return None

        match rating_type:
            case RatingType.PERCENTAGE:
                return _clamp(number / PERCENTAGE_SCALE_FACTOR)
            case RatingType.STARS:
                return _clamp(number / STARS_SCALE * MAX_RATING)
            case RatingType.TRENDING:
                return min(self.config.trending_cap, _clamp(number))
            case _:
                return _clamp(number)

    def normalize_direct(self, value: Any) -> float | None:
        """Clamp a direct 0-10 rating."""
        return self.normalize(value, RatingType.DIRECT)

    def normalize_view_count(self, views: Any) -> float | None:
        """Convert a view count to a rating on a logarithmic scale.

        Args:
            views: Raw view count.

        Returns:
            Rating capped at views_max and rounded to one decimal, or None
            below view_threshold or for invalid counts.
        """
        number = as_number(views)
        if number is None or number < 0 or number < self.config.view_threshold:
            return None
        if math.isinf(number):
            return self.config.views_max
        rating = min(self.config.views_max, math.log10(number + 1) * self.config.views_multiplier)
        return round_rating(rating)

    def resolve(self, entry: RatingEntry | None) -> float | None:
        """Resolve a breakdown entry to its normalized value.

        Pure function of raw and type; nothing is cached on the entry.
        """
        if entry is None or entry.raw is None:
            return None
        return self.normalize(entry.raw, entry.type)

    # =========================================================================
    # Aggregation
    # =========================================================================

    def components(
        self, breakdown: Mapping[str, RatingEntry | None] | None
    ) -> list[RatingComponent]:
        """Collect usable weighted components from a breakdown.

        Args:
            breakdown: Provider prefix to rating entry.

        Returns:
            Components for entries that resolve to a rating.
        """
        if not breakdown:
            return []

        components: list[RatingComponent] = []
        for provider, entry in breakdown.items():
            value = self.resolve(entry)
            if value is None:
                logger.debug("No usable rating from %s: %s", provider, entry)
                continue
            components.append(
                RatingComponent(
                    provider=provider, value=value, weight=self.config.weight_for(provider)
                )
            )
        return components

    def weighted_average(self, breakdown: Mapping[str, RatingEntry | None] | None) -> float:
        """Compute the provider weighted average of a breakdown.

        Deterministic and independent of provider iteration order.

        Args:
            breakdown: Provider prefix to rating entry.

        Returns:
            Weighted average rounded to one decimal, default_rating when
            no provider contributes a usable rating.
        """
        components = self.components(breakdown)
        total_weight = math.fsum(c.weight for c in components)
        if total_weight <= 0:
            return self.config.default_rating

        weighted_sum = math.fsum(c.weighted_value for c in components)
        return round_rating(weighted_sum / total_weight)

    def create_breakdown(
        self, ratings: Mapping[str, tuple[Any, RatingType | str] | None]
    ) -> RatingBreakdown:
        """Build a breakdown from raw (value, type) pairs.

        Args:
            ratings: Provider prefix to (value, type); None or a None value
                records the provider as unrated.

        Returns:
            Rating breakdown.
        """
        breakdown: RatingBreakdown = {}
        for provider, data in ratings.items():
            if data is None or data[0] is None:
                breakdown[provider] = None
                continue
            value, rating_type = data
            breakdown[provider] = RatingEntry(raw=value, type=rating_type)
        return breakdown

    # =========================================================================
    # Display
    # =========================================================================

    @staticmethod
    def format_rating(rating: float | None) -> str:
        """Format a rating as a one-decimal display string."""
        number = as_number(rating)
        if number is None:
            return ""
        return f"{number:.1f}"

    def format_breakdown(self, breakdown: Mapping[str, RatingEntry | None] | None) -> str:
        """Format a breakdown for metadata display.

        Args:
            breakdown: Provider prefix to rating entry.

        Returns:
            Parts joined by ' | ', e.g. 'hmm: 8.6/10 | htv: 5,000 views'.
        """
        parts: list[str] = []
        for provider, entry in (breakdown or {}).items():
            value = self.resolve(entry)
            if value is None:
                continue
            name = self.config.display_name(provider)
            if entry.type is RatingType.VIEWS:
                parts.append(f"{name}: {entry.raw:,.0f} views")
            else:
                parts.append(f"{name}: {value:g}/10")
        return " | ".join(parts)


# =============================================================================
# MODULE-LEVEL HELPERS
# =============================================================================

_default_normalizer = RatingNormalizer()


def normalize_rating(
    value: Any, rating_type: RatingType | str = RatingType.DIRECT
) -> float | None:
    """Normalize with the default configuration."""
    return _default_normalizer.normalize(value, rating_type)


def normalize_view_count(views: Any) -> float | None:
    """Normalize a view count with the default configuration."""
    return _default_normalizer.normalize_view_count(views)


def calculate_weighted_average(breakdown: Mapping[str, RatingEntry | None] | None) -> float:
    """Weighted average with the default configuration."""
    return _default_normalizer.weighted_average(breakdown)
