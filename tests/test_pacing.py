# tests/test_pacing.py
from datetime import date, timedelta

import pytest

from adhealth.context import ScoringContext
from adhealth.data.ingest import CampaignSkipped
from adhealth.services.pacing import (
    calculate_campaign_metrics, process_campaigns, severity_level, severity_summary,
)

CONTRACT = {"Name": "Alpha", "Start Date": "2024-01-01", "End Date": "2024-01-30",
            "Budget": "$3,000", "CPM": "$5", "Impressions Goal": "600,000"}


def _rows(name, first, n_days, impressions=20000):
    return [{"DATE": (first + timedelta(days=i)).isoformat(), "CAMPAIGN ORDER NAME": name,
             "IMPRESSIONS": impressions} for i in range(n_days)]


def test_straight_line_pacing_on_target():
    # 15 days of 20k from Jan 2; latest delivery day is Jan 16
    m = calculate_campaign_metrics(CONTRACT, _rows("Alpha", date(2024, 1, 2), 15),
                                   context=ScoringContext(today=date(2024, 6, 1)))
    assert m.days_into_campaign == 15
    assert m.days_until_end == 14
    assert m.expected_impressions == pytest.approx(300000)
    assert m.actual_impressions == 300000
    assert m.current_pacing == pytest.approx(1.0)
    assert m.remaining_impressions == 300000
    assert m.remaining_average_needed == pytest.approx(300000 / 14)
    assert m.yesterday_impressions == 20000
    assert m.yesterday_vs_needed == pytest.approx(20000 / (300000 / 14))


def test_zero_expected_means_zero_pacing():
    contract = {**CONTRACT, "Start Date": "2024-01-16"}
    m = calculate_campaign_metrics(contract, _rows("Alpha", date(2024, 1, 16), 1))
    assert m.days_into_campaign == 0
    assert m.expected_impressions == 0
    assert m.current_pacing == 0.0


def test_reference_day_fallbacks():
    other = _rows("Beta", date(2024, 1, 2), 3)
    by_global = calculate_campaign_metrics(CONTRACT, other, global_most_recent_date=date(2024, 1, 11))
    assert by_global.days_into_campaign == 10
    assert by_global.expected_impressions == pytest.approx(200000)
    assert by_global.actual_impressions == 0

    by_today = calculate_campaign_metrics(CONTRACT, [], context=ScoringContext(today=date(2024, 1, 6)))
    assert by_today.days_into_campaign == 5
    assert by_today.current_pacing == 0.0


def test_days_clamped_after_flight_end():
    m = calculate_campaign_metrics(CONTRACT, [], context=ScoringContext(today=date(2024, 3, 1)))
    assert m.days_into_campaign == 30
    assert m.days_until_end == 0
    assert m.remaining_average_needed == 0
    assert m.yesterday_vs_needed == 0


def test_unfiltered_rows_drive_cumulative_total():
    everything = _rows("Alpha", date(2024, 1, 2), 15)
    last_week = everything[-7:]
    m = calculate_campaign_metrics(CONTRACT, last_week, unfiltered_delivery_rows=everything)
    assert m.days_into_campaign == 15
    assert m.actual_impressions == 300000


def test_yesterday_sums_same_day_rows():
    rows = _rows("Alpha", date(2024, 1, 14), 1) + [
        {"DATE": "2024-01-15", "CAMPAIGN ORDER NAME": "Alpha", "IMPRESSIONS": 10000},
        {"DATE": "2024-01-15", "CAMPAIGN ORDER NAME": "Alpha", "IMPRESSIONS": 7000},
        {"DATE": "2024-01-15", "CAMPAIGN ORDER NAME": "Beta", "IMPRESSIONS": 999},
        {"DATE": "2024-01-16", "CAMPAIGN ORDER NAME": "Alpha", "IMPRESSIONS": 5},
        {"DATE": "Totals", "CAMPAIGN ORDER NAME": "Alpha", "IMPRESSIONS": 1e9},
    ]
    m = calculate_campaign_metrics(CONTRACT, rows)
    assert m.yesterday_impressions == 17000
    assert m.actual_impressions == 37005


def test_bad_contract_raises():
    with pytest.raises(CampaignSkipped):
        calculate_campaign_metrics({**CONTRACT, "CPM": "n/a"}, [])


def test_batch_skips_bad_campaigns_and_keeps_going():
    contracts = [
        CONTRACT,
        {**CONTRACT, "Name": "Beta", "CPM": "n/a"},
        {**CONTRACT, "Name": "Gamma"},
    ]
    delivery = _rows("Alpha", date(2024, 1, 2), 15) + _rows("Beta", date(2024, 1, 2), 2)
    report = process_campaigns(contracts, delivery, context=ScoringContext(today=date(2024, 6, 1)))

    assert [c.name for c in report.campaigns] == ["Alpha", "Gamma"]
    assert report.skipped_count == 1
    assert [s.campaign_name for s in report.skipped] == ["Beta"]
    assert "Invalid numeric values" in report.skipped[0].reason
    alpha, gamma = report.campaigns
    assert len(alpha.delivery_data) == 15
    assert "_day" not in alpha.delivery_data[0]
    # no delivery of its own: measured against the latest day in the whole set
    assert gamma.metrics.days_into_campaign == 15
    assert gamma.delivery_data == []


def test_every_rejected_row_is_counted():
    contracts = [
        {"Budget": "1000", "CPM": "5"},
        {"Start Date": "2024-01-01"},
        {**CONTRACT, "Name": "A", "CPM": "n/a"},
        {**CONTRACT, "Name": "A", "End Date": "later"},
        CONTRACT,
    ]
    report = process_campaigns(contracts, _rows("Alpha", date(2024, 1, 2), 15))
    assert [c.name for c in report.campaigns] == ["Alpha"]
    assert report.skipped_count == 4
    assert [s.campaign_name for s in report.skipped] == ["<unnamed>", "<unnamed>", "A", "A"]


@pytest.mark.parametrize("pacing,level", [
    (1.0, "on-target"), (1.01, "on-target"), (0.95, "minor"), (1.08, "minor"),
    (0.8, "moderate"), (1.2, "moderate"), (0.5, "major"), (1.5, "major"), (0.0, "major"),
])
def test_severity_levels(pacing, level):
    assert severity_level(pacing) == level


def test_severity_summary():
    contracts = [CONTRACT, {**CONTRACT, "Name": "Beta"}]
    delivery = _rows("Alpha", date(2024, 1, 2), 15) + _rows("Beta", date(2024, 1, 2), 15, impressions=10000)
    report = process_campaigns(contracts, delivery)
    s = severity_summary(report.campaigns)
    assert s["total_campaigns"] == 2
    assert s["counts"]["on-target"] == 1
    assert s["counts"]["major"] == 1
    assert s["percentages"]["on-target"] == 50.0
    assert s["labels"]["minor"] == "Minor Deviation"

    with pytest.raises(ValueError):
        severity_summary(report.campaigns, metric="spend")
