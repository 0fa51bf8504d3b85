"""Main catalog aggregation orchestrator.

Reduces the catalogs of several providers to one deduplicated,
quality-ranked catalog: duplicate scan, merge, score, sort.
"""

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from unidecode import unidecode

from src.catalog.merger import SeriesMerger, filter_studio_genres, fresh_provenance
from src.catalog.quality import with_metadata_score
from src.catalog.rating_normalizer import RatingConfig, RatingNormalizer
from src.catalog.schemas import SeriesRecord
from src.catalog.similarity import DuplicateDetector

logger = logging.getLogger(__name__)


# =============================================================================
# CONSTANTS
# =============================================================================

DEFAULT_OUTPUT_DIR = Path("data/processed")
"""Default output directory for JSON export."""

DEFAULT_OUTPUT_FILENAME = "aggregated_catalog.json"
"""Default output filename for JSON export."""

JSON_INDENT = 2
"""JSON indentation for readable output."""

ProviderCatalog = tuple[str, Sequence[SeriesRecord | Mapping[str, Any]] | None]
"""(provider label, records) pair as produced by the scrapers."""


# =============================================================================
# AGGREGATION STATISTICS
# =============================================================================


@dataclass
class AggregationStats:
    """Complete aggregation run statistics.

    Attributes:
        start_time: Run start timestamp.
        end_time: Run end timestamp.
        providers: Provider catalogs consumed.
        input_records: Records received across all providers.
        invalid_records: Records skipped for missing id or name.
        new_records: Records seeded as new catalog entries.
        merged_records: Records merged into an existing entry.
        final_count: Final catalog size.
    """

    start_time: datetime | None = None
    end_time: datetime | None = None
    providers: int = 0
    input_records: int = 0
    invalid_records: int = 0
    new_records: int = 0
    merged_records: int = 0
    final_count: int = 0

    @property
    def duration_seconds(self) -> float:
        """Calculate run duration in seconds."""
        if not self.start_time or not self.end_time:
            return 0.0
        return round((self.end_time - self.start_time).total_seconds(), 3)

    def to_dict(self) -> dict[str, Any]:
        """Convert stats to dictionary for JSON export."""
        return {
            "duration_seconds": self.duration_seconds,
            "input": {
                "providers": self.providers,
                "records": self.input_records,
                "invalid": self.invalid_records,
            },
            "pipeline": {
                "new": self.new_records,
                "merged": self.merged_records,
                "final_count": self.final_count,
            },
        }

    def log_summary(self) -> None:
        """Log complete aggregation summary."""
        logger.info(
            "Catalog aggregation complete in %.3fs: %d unique series from %d providers "
            "(input=%d, merged=%d, invalid=%d)",
            self.duration_seconds,
            self.final_count,
            self.providers,
            self.input_records,
            self.merged_records,
            self.invalid_records,
        )


# =============================================================================
# MAIN AGGREGATOR
# =============================================================================


class CatalogAggregator:
    """Orchestrates multi-provider catalog aggregation.

    Pipeline stages:
    1. Scan: find the first accumulated duplicate of each record
    2. Merge or seed: fold duplicates in, seed new titles
    3. Sort: metadata score, provider count, then name

    One aggregate() call owns its accumulator exclusively; input records
    are never modified.

    Attributes:
        stats: Run statistics.
    """

    def __init__(self, config: RatingConfig | None = None) -> None:
        """Initialize aggregator with component instances.

        Args:
            config: Rating configuration shared by seeding and merging.
        """
        self.stats = AggregationStats()
        self._normalizer = RatingNormalizer(config)
        self._detector = DuplicateDetector()
        self._merger = SeriesMerger(self._normalizer)

    @property
    def normalizer(self) -> RatingNormalizer:
        """Rating normalizer used by this aggregator."""
        return self._normalizer

    # =========================================================================
    # Public API
    # =========================================================================

    def aggregate(self, provider_catalogs: Iterable[ProviderCatalog]) -> list[SeriesRecord]:
        """Aggregate provider catalogs into one sorted catalog.

        Args:
            provider_catalogs: (provider label, records) pairs in priority
                order; records may be SeriesRecord instances or raw dicts.

        Returns:
            Deduplicated records sorted by sort_key().
        """
        self._start_run()
        accumulated: list[SeriesRecord] = []

        for provider, catalog in provider_catalogs:
            self._consume_provider(provider, catalog or (), accumulated)

        result = sorted(accumulated, key=self.sort_key)
        self._finish_run(result)
        return result

    @staticmethod
    def sort_key(record: SeriesRecord) -> tuple[int, int, str, str]:
        """Catalog order: score desc, provider count desc, name asc."""
        name = record.name or ""
        return (
            -record.metadata_score,
            -record.provider_count,
            unidecode(name).casefold(),
            name,
        )

    def seed(self, record: SeriesRecord) -> SeriesRecord:
        """Build the first catalog entry for a newly seen title.

        Args:
            record: Provider record, as received. Aggregation fields it
                carries are ignored.

        Returns:
            Catalog entry with provenance, breakdown, rating and score.
        """
        provenance = fresh_provenance(record)

        seeded = record.model_copy(
            update={
                "genres": filter_studio_genres(record.genres, record.studio),
                "providers": provenance.providers,
                "provider_slugs": provenance.slugs,
                "rating_breakdown": provenance.breakdown,
                "rating": self._normalizer.weighted_average(provenance.breakdown),
            }
        )
        return with_metadata_score(seeded)

    def to_dicts(self, records: Iterable[SeriesRecord]) -> list[dict[str, Any]]:
        """Convert records to JSON-ready camelCase dictionaries."""
        return [record.model_dump(mode="json", by_alias=True) for record in records]

    def export_json(
        self,
        records: list[SeriesRecord],
        output_path: Path | None = None,
        include_stats: bool = True,
    ) -> Path:
        """Export aggregated catalog to a JSON file.

        Args:
            records: Records to export.
            output_path: Target path (default: data/processed/).
            include_stats: Include run stats in output.

        Returns:
            Path to created JSON file.
        """
        output_path = self._resolve_output_path(output_path)
        data: dict[str, Any] = {
            "generated_at": datetime.now(UTC).isoformat(),
            "count": len(records),
            "series": self.to_dicts(records),
        }
        if include_stats:
            data["stats"] = self.stats.to_dict()

        with output_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=JSON_INDENT, ensure_ascii=False)
        logger.info("Exported %d series to %s", len(records), output_path)
        return output_path

    # =========================================================================
    # Run lifecycle
    # =========================================================================

    def _start_run(self) -> None:
        """Reset state and statistics for a new run."""
        self.stats = AggregationStats(start_time=datetime.now(UTC))
        self._detector.reset()
        self._merger.reset()

    def _finish_run(self, records: list[SeriesRecord]) -> None:
        """Finalize run statistics."""
        self.stats.end_time = datetime.now(UTC)
        self.stats.final_count = len(records)
        self._detector.stats.log_summary()
        self._merger.stats.log_summary()
        self.stats.log_summary()

    # =========================================================================
    # Provider processing
    # =========================================================================

    def _consume_provider(
        self,
        provider: str,
        catalog: Sequence[SeriesRecord | Mapping[str, Any]],
        accumulated: list[SeriesRecord],
    ) -> None:
        """Fold one provider's catalog into the accumulator, in order."""
        logger.info("Processing %d series from %s", len(catalog), provider)
        self.stats.providers += 1

        for raw in catalog:
            self.stats.input_records += 1
            record = self._validate(raw, provider)
            if record is None:
                self.stats.invalid_records += 1
                continue

            index = self._detector.find_match(accumulated, record)
            if index is None:
                accumulated.append(self.seed(record))
                self.stats.new_records += 1
            else:
                accumulated[index] = self._merger.merge(
                    accumulated[index], record, existing_accumulated=True
                )
                self.stats.merged_records += 1
                logger.debug("Merged duplicate: %s from %s", record.name, provider)

    @staticmethod
    def _validate(raw: SeriesRecord | Mapping[str, Any], provider: str) -> SeriesRecord | None:
        """Validate a provider record, None when unusable.

        Args:
            raw: Record or raw mapping from a scraper.
            provider: Provider label for logging.

        Returns:
            Validated record or None.
        """
        if isinstance(raw, SeriesRecord):
            return raw
        try:
            return SeriesRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning(
                "Skipping invalid record from %s: %s", provider, e.errors(include_url=False)
            )
            return None

    @staticmethod
    def _resolve_output_path(output_path: Path | None) -> Path:
        """Resolve and create output path."""
        if output_path is None:
            output_path = DEFAULT_OUTPUT_DIR / DEFAULT_OUTPUT_FILENAME
        output_path.parent.mkdir(parents=True, exist_ok=True)
        return output_path
