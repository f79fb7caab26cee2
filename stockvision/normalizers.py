"""
Coercion of messy report values into numbers and ISO dates.

PDF and spreadsheet exports mix Indonesian number formatting ("44.900,50"),
plain numbers, spreadsheet serial dates and several date layouts. Everything
here is a pure function; callers decide what a failed coercion falls back to.
"""

import math
import re
from datetime import date, datetime, timedelta, timezone
from typing import Any

import pandas as pd

_CURRENCY_PREFIX = re.compile(r"^\s*rp\.?\s*", re.IGNORECASE)
_NON_NUMERIC = re.compile(r"[^\d,.\-]+")
# A dot followed by exactly three digits, then a non-digit or the end, is a thousands separator.
_GROUPING_DOT = re.compile(r"\.(?=\d{3}(?:\D|$))")
_SERIAL = re.compile(r"^\d+(?:\.\d+)?$")

# strptime accepts unpadded day/month, so "dd/MM/yyyy" also covers "d/M/yyyy".
_DATE_FORMATS = [
    "%d/%m/%Y",  # 01/10/2025, 1/10/2025
    "%m/%d/%Y",  # 10/31/2025
    "%Y/%m/%d",  # 2025/10/01
]

# Serial 1 is 1900-01-01. Spreadsheets also count a 1900-02-29 that never existed (serial 60).
_SERIAL_EPOCH = datetime(1899, 12, 31)
_PHANTOM_LEAP_DAY = 59
_MS_PER_DAY = 24 * 60 * 60 * 1000


def to_number(value: Any, fallback: float | None = None) -> float | int | None:
    """
    Coerces a number or numeric string into a finite number.

    Strings drop a leading "Rp"/"Rp." and keep only digits, '.', ',' and '-'.
    Grouping dots are dropped and the remaining comma becomes the decimal point ("44.900,50" -> 44900.5).
    When a comma comes before a dot ("1,234.56") the commas are grouping instead.
    Anything unrecoverable returns `fallback`.
    """
    if value is None or isinstance(value, bool):
        return fallback

    if isinstance(value, (int, float)):
        return value if math.isfinite(value) else fallback

    if not isinstance(value, str):
        return fallback

    cleaned = _NON_NUMERIC.sub("", _CURRENCY_PREFIX.sub("", value))
    cleaned = _GROUPING_DOT.sub("", cleaned)
    if "," in cleaned and "." in cleaned and cleaned.rfind(",") < cleaned.rfind("."):
        cleaned = cleaned.replace(",", "")
    else:
        cleaned = cleaned.replace(",", ".", 1)

    if not cleaned:
        return fallback

    try:
        parsed = float(cleaned)
    except ValueError:
        return fallback

    if not math.isfinite(parsed):
        return fallback
    return int(parsed) if parsed.is_integer() and "." not in cleaned else parsed


def to_integer(value: Any, fallback: int = 0) -> int:
    """Like to_number, truncated toward zero."""
    number = to_number(value)
    if number is None:
        return fallback
    return math.trunc(number)


def excel_serial_to_datetime(serial: float) -> datetime | None:
    """Converts a spreadsheet day count (with an optional time fraction) to a datetime."""
    if not math.isfinite(serial) or serial <= 0:
        return None

    whole_days = math.floor(serial)
    fraction = serial - whole_days
    day_offset = whole_days - 1 if whole_days > _PHANTOM_LEAP_DAY else whole_days

    try:
        return _SERIAL_EPOCH + timedelta(
            days=day_offset, milliseconds=round(fraction * _MS_PER_DAY)
        )
    except OverflowError:
        return None


def _as_naive_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def parse_flexible_date(value: Any) -> datetime | None:
    """
    Parses a date in any of the layouts seen in stock/sales exports.

    Order matters: a pure number is a spreadsheet serial before anything else,
    then ISO 8601, then the explicit day-first/month-first patterns, then a
    generic day-first parse. Returns None when every strategy fails.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return None if pd.isna(value) else _as_naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)

    if isinstance(value, (int, float)):
        if math.isfinite(value) and value > 0:
            return excel_serial_to_datetime(float(value))
        return None

    text = str(value).strip()
    if not text:
        return None

    if _SERIAL.match(text):
        serial_date = excel_serial_to_datetime(float(text))
        if serial_date is not None:
            return serial_date

    try:
        return _as_naive_utc(datetime.fromisoformat(text))
    except ValueError:
        pass

    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue

    try:
        parsed = pd.to_datetime(text, dayfirst=True, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(parsed):
        return None
    return _as_naive_utc(parsed.to_pydatetime())


def normalize_to_iso_date(value: Any, today: date | None = None) -> str:
    """
    Serializes a flexible date as YYYY-MM-DD.
    Unparseable input becomes `today` (the current date by default); this is lossy
    and meant only for records that must carry a date when they are stored.
    """
    parsed = parse_flexible_date(value)
    if parsed is None:
        return (today or date.today()).isoformat()
    return parsed.date().isoformat()
