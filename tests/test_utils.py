import hashlib
from datetime import date, datetime

import pytest

from app.models import TimeframeUnit
from app.utils import (
    calculate_end_date,
    format_date,
    parse_premiere_date,
    split_csv,
    stable_id,
)


def test_stable_id_is_deterministic():
    first = stable_id("jellyseerr", "movie", 550)
    second = stable_id("jellyseerr", "movie", 550)

    assert first == second
    assert first.bytes_le == hashlib.md5(b"jellyseerr_movie_550").digest()


def test_stable_id_matches_known_value():
    # Same textual form a .NET Guid built from the digest bytes would print.
    digest = hashlib.md5(b"jellyseerr_tv_1399").digest()
    expected = "-".join(
        [
            digest[3::-1].hex(),
            digest[5:3:-1].hex(),
            digest[7:5:-1].hex(),
            digest[8:10].hex(),
            digest[10:].hex(),
        ]
    )
    assert str(stable_id("jellyseerr", "tv", 1399)) == expected


def test_stable_id_changes_with_each_field():
    base = stable_id("jellyseerr", "movie", 1)
    variants = {
        stable_id("overseerr", "movie", 1),
        stable_id("jellyseerr", "tv", 1),
        stable_id("jellyseerr", "movie", 2),
    }

    assert base not in variants
    assert len(variants) == 3


@pytest.mark.parametrize(
    ("start", "amount", "unit", "expected"),
    [
        (date(2024, 1, 31), 1, TimeframeUnit.MONTHS, date(2024, 2, 29)),
        (date(2023, 1, 31), 1, TimeframeUnit.MONTHS, date(2023, 2, 28)),
        (date(2024, 11, 30), 3, TimeframeUnit.MONTHS, date(2025, 2, 28)),
        (date(2024, 1, 15), 2, TimeframeUnit.WEEKS, date(2024, 1, 29)),
        (date(2024, 12, 30), 5, TimeframeUnit.DAYS, date(2025, 1, 4)),
        (date(2024, 2, 29), 1, TimeframeUnit.YEARS, date(2025, 2, 28)),
        (date(2024, 1, 1), 3, "fortnights", date(2024, 1, 4)),
        (date(2024, 1, 1), 1, "weeks", date(2024, 1, 8)),
    ],
)
def test_calculate_end_date(start, amount, unit, expected):
    assert calculate_end_date(start, amount, unit) == expected


def test_calculate_end_date_keeps_time_of_day():
    start = datetime(2024, 3, 31, 18, 45)

    assert calculate_end_date(start, 1, TimeframeUnit.MONTHS) == datetime(2024, 4, 30, 18, 45)


@pytest.mark.parametrize(
    ("pattern", "delimiter", "expected"),
    [
        ("DD/MM/YYYY", "-", "05-03-2024"),
        ("YYYY/MM/DD", "/", "2024/03/05"),
        ("mm/dd/yyyy", ".", "03.05.2024"),
        ("DD/MM", "/", "05/03"),
        ("MM/DD", " ", "03 05"),
        ("unknown", "-", "2024-03-05"),
        ("", "%", "2024%03%05"),
    ],
)
def test_format_date(pattern, delimiter, expected):
    assert format_date(date(2024, 3, 5), pattern, delimiter) == expected


def test_parse_premiere_date_fallbacks():
    assert parse_premiere_date("2024-07-04") == date(2024, 7, 4)
    assert parse_premiere_date("2024-07-04T10:00:00.000Z") == date(2024, 7, 4)
    assert parse_premiere_date("") == date(1970, 1, 1)
    assert parse_premiere_date(None) == date(1970, 1, 1)
    assert parse_premiere_date("TBA") == date(1970, 1, 1)


def test_split_csv():
    assert split_csv(" en, fr ,,de ") == ("en", "fr", "de")
    assert split_csv(None) == ()
