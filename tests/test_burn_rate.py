# tests/test_burn_rate.py
from datetime import date, timedelta

import pytest

from adhealth.models.types import BurnRateData
from adhealth.services.burn_rate import (
    calculate_burn_rate, calculate_burn_rate_score, calculate_spend_burn_rate,
)


def _days(values, column="IMPRESSIONS", name="Alpha", first=date(2024, 1, 1)):
    return [{"DATE": (first + timedelta(days=i)).isoformat(), "CAMPAIGN ORDER NAME": name, column: v}
            for i, v in enumerate(values)]


@pytest.mark.parametrize("n_days,confidence", [
    (0, "no-data"), (1, "no-data"), (2, "1-day"), (3, "1-day"),
    (4, "3-day"), (7, "3-day"), (8, "7-day"), (20, "7-day"),
])
def test_confidence_follows_completed_days(n_days, confidence):
    assert calculate_burn_rate(_days([100] * n_days), "Alpha").confidence == confidence


def test_rates_exclude_latest_day():
    rows = _days([100, 200, 300, 400, 500, 600, 700, 800, 999])
    rows += _days([5000] * 9, name="Beta")
    rows.append({"DATE": "Totals", "CAMPAIGN ORDER NAME": "Alpha", "IMPRESSIONS": 1e9})
    b = calculate_burn_rate(rows, "Alpha", required_daily_impressions=1000)
    assert b.one_day_rate == 800
    assert b.three_day_rate == pytest.approx(700)
    assert b.seven_day_rate == pytest.approx(500)
    assert b.one_day_percentage == pytest.approx(80)
    assert b.three_day_percentage == pytest.approx(70)
    assert b.seven_day_percentage == pytest.approx(50)


def test_percentages_zero_without_target():
    b = calculate_burn_rate(_days([100] * 5), "Alpha")
    assert b.three_day_rate == 100
    assert b.three_day_percentage == 0


@pytest.mark.parametrize("rate,score", [(500, 10), (520, 10), (450, 8), (570, 8), (300, 5), (900, 5)])
def test_burn_rate_score(rate, score):
    burn = BurnRateData(seven_day_rate=rate, confidence="7-day")
    assert calculate_burn_rate_score(burn, 500) == score


def test_burn_rate_score_uses_rate_for_confidence():
    burn = BurnRateData(one_day_rate=100, three_day_rate=500, confidence="3-day")
    assert calculate_burn_rate_score(burn, 500) == 10
    assert calculate_burn_rate_score(BurnRateData(), 500) == 0
    assert calculate_burn_rate_score(burn, 0) == 0


def test_spend_rate_steady():
    out = calculate_spend_burn_rate(_days([100] * 10, "SPEND"), "Alpha", 1000, 10)
    assert out.daily_rate == pytest.approx(100)
    assert out.confidence == "7-day"


def test_spend_rate_three_day():
    out = calculate_spend_burn_rate(_days([90, 100, 110, 999], "SPEND"), "Alpha", 400, 4)
    assert out.daily_rate == pytest.approx(100)
    assert out.confidence == "3-day"


def test_spend_anomaly_falls_back_to_overall_average():
    out = calculate_spend_burn_rate(_days([1000] * 8, "SPEND"), "Alpha", 1000, 10)
    assert out.daily_rate == pytest.approx(100)
    assert out.confidence == "7-day-capped"


def test_single_day_anomaly_uses_wider_tolerance():
    out = calculate_spend_burn_rate(_days([500, 10], "SPEND"), "Alpha", 200, 2)
    assert out.daily_rate == pytest.approx(100)
    assert out.confidence == "1-day-capped"


def test_spend_rate_capped_at_twice_overall():
    out = calculate_spend_burn_rate(_days([250] * 8, "SPEND"), "Alpha", 1000, 10)
    assert out.daily_rate == pytest.approx(200)
    assert out.confidence == "7-day-capped"


def test_spend_rate_overall_average_when_window_empty():
    out = calculate_spend_burn_rate(_days([500], "SPEND"), "Alpha", 500, 5)
    assert out.daily_rate == pytest.approx(100)
    assert out.confidence == "overall-average"


def test_spend_rate_no_rows():
    out = calculate_spend_burn_rate(_days([100] * 3, "SPEND", name="Beta"), "Alpha", 0, 0)
    assert out.daily_rate == 0
    assert out.confidence == "no-data"
