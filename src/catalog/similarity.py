"""Fuzzy duplicate detection between series records.

Titles are compared on their normalized form: exact equality first,
then a Levenshtein similarity ratio against a fixed threshold.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache

from rapidfuzz.distance import Levenshtein

from src.catalog.name_normalizer import normalize_name
from src.catalog.schemas import SeriesRecord

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

SIMILARITY_THRESHOLD = 0.90
"""Minimum normalized-title similarity for two records to be duplicates."""

_NORMALIZED_CACHE_SIZE = 8192


# =============================================================================
# SIMILARITY
# =============================================================================


def edit_distance(first: str, second: str) -> int:
    """Classic Levenshtein distance (insert, delete, substitute cost 1)."""
    return Levenshtein.distance(first, second)


def similarity(first: str, second: str) -> float:
    """Similarity ratio between two strings.

    Computed as (max_len - edit_distance) / max_len on the raw inputs;
    callers normalize beforehand.

    Args:
        first: First string.
        second: Second string.

    Returns:
        Ratio in [0, 1], 1.0 when both strings are empty.
    """
    max_len = max(len(first), len(second))
    if max_len == 0:
        return 1.0
    return (max_len - edit_distance(first, second)) / max_len


@lru_cache(maxsize=_NORMALIZED_CACHE_SIZE)
def _normalized(name: str) -> str:
    """Normalize a name, memoized across detector calls.

    Args:
        name: Display name.

    Returns:
        Matching key from normalize_name.
    """
    return normalize_name(name)


# =============================================================================
# DUPLICATE DETECTION
# =============================================================================


class MatchKind(StrEnum):
    """How two records were judged duplicates."""

    EXACT = "exact"
    FUZZY = "fuzzy"


def match_kind(first: SeriesRecord, second: SeriesRecord) -> MatchKind | None:
    """Classify whether two records describe the same title.

    Args:
        first: First record.
        second: Second record.

    Returns:
        EXACT on equal normalized names, FUZZY at or above
        SIMILARITY_THRESHOLD, None otherwise.
    """
    name1 = _normalized(first.name)
    name2 = _normalized(second.name)
    if name1 == name2:
        return MatchKind.EXACT
    if similarity(name1, name2) >= SIMILARITY_THRESHOLD:
        return MatchKind.FUZZY
    return None


def is_duplicate(first: SeriesRecord, second: SeriesRecord) -> bool:
    """Check if two records are duplicates of the same title."""
    return match_kind(first, second) is not None


@dataclass
class DuplicateStats:
    """Statistics for duplicate scans.

    Attributes:
        scans: Records scanned against the accumulator.
        exact_matches: Matches on identical normalized names.
        fuzzy_matches: Matches on similarity threshold.
    """

    scans: int = 0
    exact_matches: int = 0
    fuzzy_matches: int = 0

    @property
    def total_matches(self) -> int:
        """Calculate total duplicates found."""
        return self.exact_matches + self.fuzzy_matches

    def log_summary(self) -> None:
        """Log duplicate detection summary."""
        logger.info(
            "Duplicate scan: %d records, %d duplicates (exact=%d, fuzzy=%d)",
            self.scans,
            self.total_matches,
            self.exact_matches,
            self.fuzzy_matches,
        )


class DuplicateDetector:
    """Finds the accumulated record a new record duplicates.

    The scan is linear and the first match wins; there is no search for
    the best match, so accumulator order decides merge targets.

    Attributes:
        stats: Duplicate scan statistics.
    """

    def __init__(self) -> None:
        """Initialize detector with empty statistics."""
        self.stats = DuplicateStats()

    def reset(self) -> None:
        """Reset statistics for a new run."""
        self.stats = DuplicateStats()

    def find_match(
        self, accumulated: Sequence[SeriesRecord], record: SeriesRecord
    ) -> int | None:
        """Find index of the first accumulated duplicate of record.

        Args:
            accumulated: Records built so far, in accumulator order.
            record: Incoming record.

        Returns:
            Index of first duplicate or None.
        """
        self.stats.scans += 1
        for index, candidate in enumerate(accumulated):
            kind = match_kind(candidate, record)
            if kind is None:
                continue
            if kind is MatchKind.EXACT:
                self.stats.exact_matches += 1
            else:
                self.stats.fuzzy_matches += 1
            logger.debug(
                "Duplicate (%s): '%s' ~ '%s'", kind.value, record.name, candidate.name
            )
            return index
        return None
