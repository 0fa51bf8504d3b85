"""Cross-provider merge of duplicate series records.

Merges a newly discovered provider record into a catalog entry. The
richer record (by metadata score) becomes primary and supplies the
default display fields; ratings are pooled per provider and the merged
rating is always recomputed from the pooled breakdown.

A record coming straight from a provider catalog is always read as
fresh: only its id and its own rating fields are trusted, whatever
aggregation fields it carries. Only the caller knows whether a record
is an accumulator entry and says so explicitly.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from src.catalog.quality import metadata_score, with_metadata_score
from src.catalog.rating_normalizer import RatingNormalizer
from src.catalog.schemas import RatingBreakdown, RatingEntry, RatingType, SeriesRecord
from src.catalog.utils.dates import most_recent

logger = logging.getLogger(__name__)


# =============================================================================
# MERGE STATISTICS
# =============================================================================


@dataclass
class MergeStats:
    """Statistics for merge operations.

    Attributes:
        merges: Merges performed.
        primary_swaps: Merges where the incoming record became primary.
    """

    merges: int = 0
    primary_swaps: int = 0

    def log_summary(self) -> None:
        """Log merge statistics summary."""
        logger.info(
            "Merge complete: %d merges, %d primary swaps",
            self.merges,
            self.primary_swaps,
        )


# =============================================================================
# PROVENANCE
# =============================================================================


@dataclass(frozen=True)
class Provenance:
    """Provider identity and ratings one side brings into a merge.

    Attributes:
        providers: Contributing provider prefixes, in discovery order.
        slugs: Provider prefix to that provider's original slug.
        breakdown: Provider prefix to raw rating entry.
    """

    providers: tuple[str, ...]
    slugs: dict[str, str]
    breakdown: RatingBreakdown


def standalone_entry(record: SeriesRecord) -> RatingEntry | None:
    """Capture a provider record's own rating as a breakdown entry.

    A direct rating takes priority over a view count.

    Args:
        record: Provider record to inspect.

    Returns:
        Rating entry or None when the record carries no rating.
    """
    if record.rating is not None:
        return RatingEntry(raw=record.rating, type=record.rating_type or RatingType.DIRECT)
    if record.view_count is not None:
        return RatingEntry(raw=record.view_count, type=RatingType.VIEWS)
    return None


def fresh_provenance(record: SeriesRecord) -> Provenance:
    """Provenance of a record read from a provider catalog.

    The provider is derived from the id. Any providers, slugs or foreign
    breakdown entries the record carries are ignored; an entry already
    keyed on its own prefix wins over one synthesized from rating or
    view count.

    Args:
        record: Provider record, as received.

    Returns:
        Single-provider provenance.
    """
    prefix = record.prefix
    entry = record.rating_breakdown.get(prefix) or standalone_entry(record)
    return Provenance(
        providers=(prefix,),
        slugs={prefix: record.slug},
        breakdown={prefix: entry} if entry is not None else {},
    )


def accumulated_provenance(record: SeriesRecord) -> Provenance:
    """Provenance of an accumulator entry, taken as built by the engine.

    Args:
        record: Seeded or merged catalog entry.

    Returns:
        Provenance copied from the entry's aggregation fields.
    """
    return Provenance(
        providers=record.providers,
        slugs=dict(record.provider_slugs),
        breakdown=dict(record.rating_breakdown),
    )


def filter_studio_genres(genres: Iterable[str], studio: str | None) -> tuple[str, ...]:
    """Deduplicate genres and drop tags equal to the studio name.

    Args:
        genres: Genre tags, possibly with duplicates.
        studio: Studio name compared case-insensitively.

    Returns:
        Unique genres in first-seen order.
    """
    unique = dict.fromkeys(genres)
    if not studio:
        return tuple(unique)
    studio_key = studio.casefold()
    return tuple(g for g in unique if g.casefold() != studio_key)


def _is_all_caps(value: str) -> bool:
    """Check if a studio name is written in capitals only.

    Args:
        value: Studio name.

    Returns:
        True when upper-casing leaves the name unchanged.
    """
    return value == value.upper()


_Side = tuple[SeriesRecord, Provenance]


# =============================================================================
# SERIES MERGER
# =============================================================================


class SeriesMerger:
    """Merges duplicate series records from different providers.

    Attributes:
        stats: Merge operation statistics.
    """

    def __init__(self, normalizer: RatingNormalizer | None = None) -> None:
        """Initialize merger.

        Args:
            normalizer: Rating normalizer for merged ratings.
        """
        self.normalizer = normalizer or RatingNormalizer()
        self.stats = MergeStats()

    def reset(self) -> None:
        """Reset statistics for a new run."""
        self.stats = MergeStats()

    # =========================================================================
    # Public API
    # =========================================================================

    def merge(
        self,
        existing: SeriesRecord,
        incoming: SeriesRecord,
        *,
        existing_accumulated: bool = False,
    ) -> SeriesRecord:
        """Merge two records representing the same title.

        Neither input is modified. The incoming record is always read as
        a fresh provider record.

        Args:
            existing: Record already in the catalog.
            incoming: Newly discovered duplicate from a provider catalog.
            existing_accumulated: True when existing was built by the
                engine, so its providers, slugs and breakdown are kept
                as-is; otherwise it is read as a fresh provider record.

        Returns:
            New merged record based on the primary.
        """
        existing_side = (
            accumulated_provenance(existing)
            if existing_accumulated
            else fresh_provenance(existing)
        )
        (primary, primary_side), (secondary, secondary_side) = self._select_primary(
            (existing, existing_side), (incoming, fresh_provenance(incoming))
        )

        breakdown = self._merge_breakdowns(primary_side, secondary_side)
        studio = self._resolve_studio(primary.studio, secondary.studio)

        merged = primary.model_copy(
            update={
                "providers": self._merge_providers(primary_side, secondary_side),
                "provider_slugs": self._merge_slugs(primary_side, secondary_side),
                "rating_breakdown": breakdown,
                "rating": self.normalizer.weighted_average(breakdown),
                "poster": primary.poster or secondary.poster,
                "description": self._resolve_description(
                    primary.description, secondary.description
                ),
                "genres": filter_studio_genres((*primary.genres, *secondary.genres), studio),
                "studio": studio,
                "year": primary.year or secondary.year,
                "last_updated": most_recent(primary.last_updated, secondary.last_updated),
            }
        )
        merged = with_metadata_score(merged)

        self.stats.merges += 1
        logger.debug(
            "Merged %s into %s (providers=%s, rating=%.1f)",
            secondary.id,
            primary.id,
            ",".join(merged.providers),
            merged.rating,
        )
        return merged

    # =========================================================================
    # Primary selection
    # =========================================================================

    def _select_primary(self, existing: _Side, incoming: _Side) -> tuple[_Side, _Side]:
        """Pick primary by strictly higher metadata score, ties keep existing.

        Args:
            existing: Catalog record with its provenance.
            incoming: Incoming record with its provenance.

        Returns:
            (primary, secondary) sides.
        """
        existing_score = metadata_score(existing[0])
        incoming_score = metadata_score(incoming[0])
        if incoming_score > existing_score:
            self.stats.primary_swaps += 1
            logger.debug(
                "Swapping primary: %s (score: %d) > %s (score: %d)",
                incoming[0].name,
                incoming_score,
                existing[0].name,
                existing_score,
            )
            return incoming, existing
        return existing, incoming

    # =========================================================================
    # Provenance
    # =========================================================================

    @staticmethod
    def _merge_providers(primary: Provenance, secondary: Provenance) -> tuple[str, ...]:
        """Union providers, primary's order first."""
        return tuple(dict.fromkeys((*primary.providers, *secondary.providers)))

    @staticmethod
    def _merge_slugs(primary: Provenance, secondary: Provenance) -> dict[str, str]:
        """Union slugs, secondary only fills gaps."""
        slugs = dict(primary.slugs)
        for provider, slug in secondary.slugs.items():
            slugs.setdefault(provider, slug)
        return slugs

    @staticmethod
    def _merge_breakdowns(primary: Provenance, secondary: Provenance) -> RatingBreakdown:
        """Union breakdowns, primary wins on key collision."""
        breakdown = dict(primary.breakdown)
        for provider, entry in secondary.breakdown.items():
            breakdown.setdefault(provider, entry)
        return breakdown

    # =========================================================================
    # Display fields
    # =========================================================================

    @staticmethod
    def _resolve_description(primary: str | None, secondary: str | None) -> str | None:
        """Keep primary's description unless absent or strictly shorter."""
        if not primary:
            return secondary
        if secondary and len(secondary) > len(primary):
            return secondary
        return primary

    @staticmethod
    def _resolve_studio(primary: str | None, secondary: str | None) -> str | None:
        """Prefer primary's studio, but properly cased over all-caps."""
        if not primary:
            return secondary
        if secondary and _is_all_caps(primary) and not _is_all_caps(secondary):
            return secondary
        return primary
