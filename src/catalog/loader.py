"""Provider catalog snapshot loading.

Reads a JSON snapshot of provider catalogs, as written by the scraping
layer, into the (provider, records) pairs the aggregator consumes.
Records stay raw dicts; validation is the aggregator's job.
"""

import json
import logging
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

RawCatalog = tuple[str, list[dict[str, Any]]]


class CatalogFileError(ValueError):
    """Raised when a snapshot file is unreadable or malformed."""


def load_provider_catalogs(path: Path) -> list[RawCatalog]:
    """Load provider catalogs from a JSON snapshot.

    Accepted shapes:
        {"providers": [{"provider": "hmm", "catalog": [...]}, ...]}
        [["hmm", [...]], ["hse", [...]]]
        {"hmm": [...], "hse": [...]}

    Args:
        path: Snapshot file.

    Returns:
        (provider, records) pairs in file order.

    Raises:
        CatalogFileError: File missing, not JSON, or wrongly shaped.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise CatalogFileError(f"Cannot read catalog snapshot {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogFileError(f"Invalid JSON in {path}: {e}") from e

    catalogs = parse_provider_catalogs(data)
    logger.info(
        "Loaded %d provider catalogs (%d records) from %s",
        len(catalogs),
        sum(len(records) for _, records in catalogs),
        path,
    )
    return catalogs


def parse_provider_catalogs(data: Any) -> list[RawCatalog]:
    """Convert decoded snapshot JSON to (provider, records) pairs.

    Raises:
        CatalogFileError: Unsupported structure.
    """
    if isinstance(data, dict) and "providers" in data:
        return [_from_entry(entry) for entry in _require_list(data["providers"], "providers")]
    if isinstance(data, dict):
        return [(str(provider), _records(records, provider)) for provider, records in data.items()]
    if isinstance(data, list):
        return [_from_pair(pair) for pair in data]
    raise CatalogFileError(f"Unsupported snapshot root: {type(data).__name__}")


def _from_entry(entry: Any) -> RawCatalog:
    """Read a {"provider": ..., "catalog": [...]} entry.

    Args:
        entry: One item of the snapshot's providers list.

    Returns:
        (provider, records) pair.

    Raises:
        CatalogFileError: If entry is not a mapping with a provider key.
    """
    if not isinstance(entry, dict) or "provider" not in entry:
        raise CatalogFileError(f"Provider entry must have a 'provider' key: {entry!r}")
    provider = str(entry["provider"])
    return provider, _records(entry.get("catalog"), provider)


def _from_pair(pair: Any) -> RawCatalog:
    """Read a [provider, catalog] pair.

    Args:
        pair: One item of a top-level snapshot list.

    Returns:
        (provider, records) pair.

    Raises:
        CatalogFileError: If pair is not a two-item list.
    """
    if not isinstance(pair, (list, tuple)) or len(pair) != 2:
        raise CatalogFileError(f"Expected [provider, catalog] pair: {pair!r}")
    provider = str(pair[0])
    return provider, _records(pair[1], provider)


def _records(records: Any, provider: str) -> list[dict[str, Any]]:
    """Provider catalog as a list, a missing catalog counts as empty."""
    if records is None:
        return []
    return _require_list(records, f"catalog of {provider}")


def _require_list(value: Any, label: str) -> list[Any]:
    """Check that a snapshot value is a JSON array.

    Args:
        value: Decoded JSON value.
        label: Description used in the error message.

    Returns:
        The value unchanged.

    Raises:
        CatalogFileError: If value is not a list.
    """
    if not isinstance(value, list):
        raise CatalogFileError(f"Expected a list for {label}, got {type(value).__name__}")
    return value
