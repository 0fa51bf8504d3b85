"""Date parsing helpers for scraped timestamps.

Providers report update dates in a handful of formats; everything is
normalized to timezone-aware UTC datetimes.
"""

import re
from datetime import UTC, date, datetime
from typing import Any

# =============================================================================
# CONSTANTS
# =============================================================================

_ISO_PREFIX = re.compile(r"^(\d{4})-\d{2}-\d{2}")
_YEAR_TOKEN = re.compile(r"(?:19|20)\d{2}")

_FALLBACK_FORMATS = (
    "%b %d, %Y",  # Jan 15, 2023
    "%B %d, %Y",  # January 15, 2023
    "%b %d %Y",
    "%B %d %Y",
    "%d %b %Y",  # 15 Jan 2023
    "%d %B %Y",
    "%Y/%m/%d",  # 2023/01/15
    "%m/%d/%Y",  # 01/15/2023 (US)
    "%d-%m-%Y",  # 15-01-2023
    "%d.%m.%Y",  # 15.01.2023
)
"""strptime formats tried after ISO-8601, in order."""


def parse_date(value: Any) -> datetime | None:
    """Parse a date from the formats providers are known to emit.

    Args:
        value: String, date or datetime. Anything else is ignored.

    Returns:
        Timezone-aware datetime (naive values assumed UTC), or None.
    """
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    if _ISO_PREFIX.match(text):
        try:
            return _as_utc(datetime.fromisoformat(text))
        except ValueError:
            pass

    for fmt in _FALLBACK_FORMATS:
        try:
            return _as_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return None


def extract_year(value: Any) -> int | None:
    """Extract a release year from a date-like string.

    Args:
        value: ISO date, free text containing a year, or any parseable date.

    Returns:
        Four-digit year or None.
    """
    if not isinstance(value, str) or not value.strip():
        return None

    iso = _ISO_PREFIX.match(value.strip())
    if iso:
        return int(iso.group(1))

    token = _YEAR_TOKEN.search(value)
    if token:
        return int(token.group(0))

    parsed = parse_date(value)
    return parsed.year if parsed else None


def most_recent(first: Any, second: Any) -> datetime | None:
    """Return the later of two timestamps.

    An absent or unparseable side is older than any defined value.
    """
    a = parse_date(first)
    b = parse_date(second)
    if a is None or b is None:
        return a or b
    return a if a > b else b


def _as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
