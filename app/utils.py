"""Utility helpers for the SeerrFeed service."""

from __future__ import annotations

import calendar
import hashlib
import uuid
from datetime import date, datetime, timedelta
from typing import TypeVar

from .models import TimeframeUnit


DateLike = TypeVar("DateLike", date, datetime)

_DATE_PATTERNS: dict[str, tuple[str, ...]] = {
    "YYYY/MM/DD": ("year", "month", "day"),
    "DD/MM/YYYY": ("day", "month", "year"),
    "MM/DD/YYYY": ("month", "day", "year"),
    "DD/MM": ("day", "month"),
    "MM/DD": ("month", "day"),
}


def stable_id(provider: str, media_kind: str, provider_item_id: int) -> uuid.UUID:
    """Return a deterministic identifier for an item living outside the library.

    The MD5 digest of ``"{provider}_{media_kind}_{provider_item_id}"`` is used
    byte-for-byte as the identifier, so ``stable_id(...).bytes_le`` always
    equals the digest.
    """

    key = f"{provider}_{media_kind}_{provider_item_id}"
    digest = hashlib.md5(key.encode("utf-8")).digest()
    return uuid.UUID(bytes_le=digest)


def _add_months(value: DateLike, months: int) -> DateLike:
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def calculate_end_date(start: DateLike, amount: int, unit: TimeframeUnit | str) -> DateLike:
    """Return ``start`` shifted forward by ``amount`` of the given unit."""

    try:
        resolved = TimeframeUnit(unit)
    except ValueError:
        resolved = None

    if resolved is TimeframeUnit.WEEKS:
        return start + timedelta(days=amount * 7)
    if resolved is TimeframeUnit.MONTHS:
        return _add_months(start, amount)
    if resolved is TimeframeUnit.YEARS:
        return _add_months(start, amount * 12)
    return start + timedelta(days=amount)


def format_date(value: date, pattern: str, delimiter: str) -> str:
    """Format ``value`` using a display pattern such as ``DD/MM/YYYY``."""

    parts = _DATE_PATTERNS.get((pattern or "").upper(), _DATE_PATTERNS["YYYY/MM/DD"])
    components = {
        "year": f"{value.year:04d}",
        "month": f"{value.month:02d}",
        "day": f"{value.day:02d}",
    }
    return delimiter.join(components[part] for part in parts)


def parse_premiere_date(value: str | None) -> date:
    """Parse a broker date string, falling back to ``1970-01-01``."""

    fallback = date(1970, 1, 1)
    if not value or not value.strip():
        return fallback
    text = value.strip()
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return fallback


def split_csv(value: str | None) -> tuple[str, ...]:
    """Split a comma separated setting into trimmed, non-empty entries."""

    if not value:
        return ()
    return tuple(part.strip() for part in value.split(",") if part.strip())
