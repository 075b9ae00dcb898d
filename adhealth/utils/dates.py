# adhealth/utils/dates.py
from __future__ import annotations
from datetime import date, datetime
from typing import Any, Iterable, Optional
import warnings

import pandas as pd

from adhealth.config import DATE_FORMATS, TOTALS_SENTINEL


def parse_date(value: Any) -> Optional[date]:
    """
    Normalize a delivery/contract date cell to a calendar day.
    Returns None for empty cells, the Totals row and anything unparseable.
    """
    if value is None:
        return None
    if isinstance(value, pd.Timestamp):
        return None if pd.isna(value) else value.date()
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    s = str(value).strip()
    if not s or s == TOTALS_SENTINEL:
        return None

    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue

    # Last resort: let pandas try (ISO with offsets, "January 5 2024", ...)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        try:
            ts = pd.to_datetime(s, errors="coerce")
        except (ValueError, TypeError, OverflowError):
            return None
    if ts is None or pd.isna(ts):
        return None
    return ts.date()


def parse_campaign_date(value: Any) -> date:
    if value is None or str(value).strip() == "":
        raise ValueError("Date string is empty or undefined")
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date format: {value}")
    return parsed


def days_between(start: date, end: date) -> int:
    """Whole calendar days from start to end (negative when end is earlier)."""
    return (end - start).days


def latest_date(values: Iterable[Any]) -> Optional[date]:
    parsed = [d for d in (parse_date(v) for v in values) if d is not None]
    return max(parsed) if parsed else None
