"""Best-effort parsing of free-text birth and death dates.

Dump dates come in many shapes: ISO strings, English month names,
quoted literals (``"1879-03-14"``) or bare years. Nothing here raises;
unparsable input yields ``None``.
"""

from __future__ import annotations

import re
from datetime import date, datetime

# Tried in order after ISO 8601.
_LOCALE_FORMATS = (
    "%m/%d/%Y",
    "%d %B %Y",
    "%B %d, %Y",
    "%B %d %Y",
    "%d %b %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%B %Y",
    "%Y-%m",
)

_YEAR = re.compile(r"[0-9]{4}")


def _parse_locale(raw: str) -> date | None:
    text = raw.strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _LOCALE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None


def _parse_year(raw: str) -> date | None:
    text = raw.strip()
    # TODO: BC years (negative values in the dump) have no date representation.
    if not _YEAR.fullmatch(text):
        return None
    year = int(text)
    if year == 0:
        return None
    return date(year, 1, 1)


def parse_date(raw: str | None) -> date | None:
    """Parse a raw dump date, falling back to January 1st of a bare four-digit year."""
    if raw is None:
        return None
    parsed = _parse_locale(raw)
    if parsed is not None:
        return parsed
    unquoted = raw.replace('"', "")
    parsed = _parse_locale(unquoted)
    if parsed is not None:
        return parsed
    return _parse_year(unquoted)
