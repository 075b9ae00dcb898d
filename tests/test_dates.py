# tests/test_dates.py
from datetime import date, datetime

import pytest

from adhealth.utils.dates import days_between, latest_date, parse_campaign_date, parse_date


@pytest.mark.parametrize("raw", [
    "2024-01-05", "2024/01/05", "01/05/2024", "1/5/24", "Jan 5, 2024",
    "January 5, 2024", "05-Jan-2024", "2024-01-05T13:45:00", " 2024-01-05 ",
])
def test_formats_normalize_to_calendar_day(raw):
    assert parse_date(raw) == date(2024, 1, 5)


def test_datetime_inputs_drop_time():
    assert parse_date(datetime(2024, 3, 9, 23, 59)) == date(2024, 3, 9)
    assert parse_date(date(2024, 3, 9)) == date(2024, 3, 9)


@pytest.mark.parametrize("raw", [None, "", "Totals", "not a date"])
def test_unparseable_is_none(raw):
    assert parse_date(raw) is None


def test_campaign_date_raises():
    with pytest.raises(ValueError):
        parse_campaign_date("")
    with pytest.raises(ValueError):
        parse_campaign_date("soon")
    assert parse_campaign_date("2024-02-29") == date(2024, 2, 29)


def test_days_between_and_latest():
    assert days_between(date(2024, 1, 1), date(2024, 1, 30)) == 29
    assert days_between(date(2024, 1, 30), date(2024, 1, 1)) == -29
    assert latest_date(["2024-01-03", "Totals", "01/09/2024", None]) == date(2024, 1, 9)
    assert latest_date([]) is None
