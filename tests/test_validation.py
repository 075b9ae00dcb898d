# tests/test_validation.py
from adhealth.services.validation import validate_contract_terms


def _row(name, impressions, spend=0, revenue=0, day="2024-01-02"):
    return {"DATE": day, "CAMPAIGN ORDER NAME": name, "IMPRESSIONS": impressions,
            "SPEND": spend, "REVENUE": revenue}


def test_missing_contract_terms_most_active_first():
    delivery = [
        _row("Alpha", 1000),
        _row("Beta", 3000, spend=30, revenue=90),
        _row("Beta", 2000, spend=20, revenue=60, day="2024-01-03"),
        _row("Gamma", 0, spend=5),
        _row("Epsilon", 4000),
        _row("Zeta", 800),
        {"DATE": "Totals", "CAMPAIGN ORDER NAME": "Delta", "IMPRESSIONS": 99999},
    ]
    contracts = [
        {"Name": "Alpha"},
        {"NAME": "", "Campaign": "Zeta"},
        # only the first non-empty name field names the row
        {"NAME": "Other", "Campaign": "Beta"},
    ]
    v = validate_contract_terms(delivery, contracts)

    assert [m.campaign_name for m in v.missing_campaigns] == ["Beta", "Epsilon"]
    beta = v.missing_campaigns[0]
    assert beta.total_impressions == 5000
    assert beta.total_spend == 50
    assert beta.total_revenue == 150
    assert v.total_missing_campaigns == 2
    assert v.has_active_campaigns_missing


def test_all_covered():
    v = validate_contract_terms([_row("Alpha", 10)], [{"Campaign Name": "Alpha"}])
    assert v.missing_campaigns == []
    assert not v.has_active_campaigns_missing
