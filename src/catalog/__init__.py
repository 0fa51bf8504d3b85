"""Catalog aggregation engine for multi-provider series catalogs.

This module provides name normalization, fuzzy duplicate detection,
rating normalization, metadata scoring and merge resolution, driven by
the CatalogAggregator.

Example:
    >>> from src.catalog import CatalogAggregator
    >>> aggregator = CatalogAggregator()
    >>> catalog = aggregator.aggregate([("hmm", hmm_records), ("hse", hse_records)])
    >>> aggregator.export_json(catalog, Path("catalog.json"))
"""

from src.catalog.aggregator import AggregationStats, CatalogAggregator
from src.catalog.loader import CatalogFileError, load_provider_catalogs
from src.catalog.merger import MergeStats, SeriesMerger
from src.catalog.name_normalizer import normalize_name
from src.catalog.quality import metadata_score
from src.catalog.rating_normalizer import (
    RatingConfig,
    RatingNormalizer,
    calculate_weighted_average,
    normalize_rating,
    normalize_view_count,
)
from src.catalog.schemas import RatingEntry, RatingType, SeriesRecord
from src.catalog.similarity import (
    SIMILARITY_THRESHOLD,
    DuplicateDetector,
    is_duplicate,
    similarity,
)

__all__ = [
    # Main orchestrator
    "CatalogAggregator",
    "AggregationStats",
    # Components
    "SeriesMerger",
    "MergeStats",
    "DuplicateDetector",
    "RatingNormalizer",
    "RatingConfig",
    # Functions
    "normalize_name",
    "similarity",
    "is_duplicate",
    "metadata_score",
    "normalize_rating",
    "normalize_view_count",
    "calculate_weighted_average",
    "load_provider_catalogs",
    # Schemas
    "SeriesRecord",
    "RatingEntry",
    "RatingType",
    "SIMILARITY_THRESHOLD",
    # Errors
    "CatalogFileError",
]
