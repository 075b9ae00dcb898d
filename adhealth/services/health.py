# adhealth/services/health.py
from __future__ import annotations
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple
import logging

import pandas as pd

from adhealth.config import (
    CLICKS_COL, IMPRESSIONS_COL, REVENUE_COL, SPEND_COL, TRANSACTIONS_COL,
    END_DATE_COL, IMPRESSIONS_GOAL_COL, START_DATE_COL,
    PACING_BUDGET_COL, PACING_CAMPAIGN_COL, PACING_DAYS_LEFT_COL,
)
from adhealth.context import ScoringContext
from adhealth.data.ingest import (
    DAY_COL, Rows,
    campaign_frame, campaign_names, delivery_frame,
    find_budget, find_contract_row, find_pacing_row,
)
from adhealth.models.types import BurnRateData, CampaignHealthData
from adhealth.scoring.rules import RULES, ScoringRules
from adhealth.services.burn_rate import (
    best_rate, calculate_burn_rate, calculate_burn_rate_score, calculate_spend_burn_rate,
)
from adhealth.services.completion import calculate_completion_percentage
from adhealth.services.overspend import project_overspend
from adhealth.services.pacing import most_recent_day, straight_line_expected
from adhealth.services.validation import validate_contract_terms
from adhealth.utils.dates import days_between, parse_date
from adhealth.utils.math import r1, safe_div, to_float

log = logging.getLogger("health")

NO_CONTRACT_TERMS = "no-contract-terms"


def calculate_roas_score(roas: float, rules: ScoringRules = RULES) -> float:
    return rules.roas_points(roas)


def calculate_ctr_score(ctr: float, benchmark: Optional[float] = None, rules: ScoringRules = RULES) -> float:
    """CTR (in %) against the benchmark; display only, not part of the composite."""
    benchmark = rules.ctr_benchmark if benchmark is None else benchmark
    if ctr == 0 or benchmark == 0:
        return 0.0
    return rules.ctr_points((ctr - benchmark) / benchmark)


def calculate_delivery_pacing_score(actual_impressions: float,
                                    expected_impressions: float,
                                    rules: ScoringRules = RULES) -> float:
    """
    Actual vs straight-line expected delivery, in percent, mapped to points.

    No expectation yet (the flight starts on the latest delivery day, or has
    no usable goal) scores 0, not the out-of-band fallback.
    """
    if not expected_impressions:
        return 0.0
    return rules.delivery_pacing_points(actual_impressions / expected_impressions * 100)


def composite_health_score(roas_score: float,
                           delivery_pacing_score: float,
                           burn_rate_score: float,
                           overspend_score: float,
                           rules: ScoringRules = RULES) -> float:
    w = rules.weights
    score = (roas_score * w["roas"]
             + delivery_pacing_score * w["delivery_pacing"]
             + burn_rate_score * w["burn_rate"]
             + overspend_score * w["overspend"])
    return r1(score)


def _flight_goal(contract_row: Optional[Mapping[str, Any]]) -> Optional[Tuple[int, date, date]]:
    """Impression goal and flight dates; budget and CPM play no part in delivery expectations."""
    if contract_row is None:
        return None
    goal = to_float(contract_row.get(IMPRESSIONS_GOAL_COL))
    start = parse_date(contract_row.get(START_DATE_COL))
    end = parse_date(contract_row.get(END_DATE_COL))
    if not goal or goal <= 0 or start is None or end is None or start > end:
        return None
    return int(goal), start, end


def required_daily_impressions(contract_row: Optional[Mapping[str, Any]]) -> float:
    """Impression goal spread evenly over the inclusive flight; 0 if unknown."""
    flight = _flight_goal(contract_row)
    if flight is None:
        return 0.0
    goal, start, end = flight
    return goal / (days_between(start, end) + 1)


def expected_impressions_to_date(contract_row: Optional[Mapping[str, Any]],
                                 rows: pd.DataFrame,
                                 context: ScoringContext) -> Optional[float]:
    """
    Straight-line impressions due by the campaign's latest delivery day
    (the context's day when its rows carry no dates). `rows` must already be
    the scored campaign's own rows. None without a goal and flight dates.
    """
    flight = _flight_goal(contract_row)
    if flight is None:
        return None
    goal, start, end = flight
    reference = most_recent_day(rows) or context.today
    _, expected = straight_line_expected(goal, start, end, reference)
    return expected


def resolve_budget_and_days_left(campaign_name: str,
                                 contract_row: Optional[Mapping[str, Any]],
                                 pacing_rows: Iterable[Mapping[str, Any]],
                                 context: ScoringContext) -> Tuple[float, int]:
    """
    Budget and days left in the flight. Contract terms win; the pacing report
    fills whatever they could not provide. Days left is measured from the
    context's calendar day and goes negative once the flight has ended.
    """
    budget = find_budget(contract_row) if contract_row is not None else 0.0
    days_left: Optional[int] = None
    if contract_row is not None:
        end = parse_date(contract_row.get(END_DATE_COL))
        if end is not None:
            days_left = days_between(context.today, end)

    if budget <= 0 or days_left is None:
        pacing_row = find_pacing_row(pacing_rows, campaign_name)
        if pacing_row is not None:
            if budget <= 0:
                budget = to_float(pacing_row.get(PACING_BUDGET_COL)) or 0.0
            if days_left is None:
                days_left = int(to_float(pacing_row.get(PACING_DAYS_LEFT_COL)) or 0)
            context.note(log, campaign_name, "budget/days left filled from pacing report")

    return budget, (days_left if days_left is not None else 0)


def _sentinel(campaign_name: str, confidence: str) -> CampaignHealthData:
    return CampaignHealthData(
        campaign_name=campaign_name,
        burn_rate_confidence=confidence,
        spend_rate_confidence=confidence,
        burn_rate_data=BurnRateData(confidence=confidence),
    )


def calculate_campaign_health(delivery_rows: Rows,
                              campaign_name: str,
                              pacing_rows: Optional[List[Mapping[str, Any]]] = None,
                              contract_rows: Optional[List[Mapping[str, Any]]] = None,
                              context: Optional[ScoringContext] = None,
                              rules: ScoringRules = RULES) -> CampaignHealthData:
    """
    Weighted 0-10 health score for one campaign.

    Campaigns without delivery rows, and campaigns without contract terms
    (completion 0), come back as a zero-valued sentinel record that callers
    filter out via `is_excluded`.
    """
    ctx = context or ScoringContext()
    pacing_rows = pacing_rows or []
    contract_rows = contract_rows or []

    df = delivery_frame(delivery_rows)
    rows = campaign_frame(df, campaign_name)
    if rows.empty:
        ctx.note(log, campaign_name, "no delivery data found")
        return _sentinel(campaign_name, "no-data")

    spend = float(rows[SPEND_COL].sum())
    impressions = float(rows[IMPRESSIONS_COL].sum())
    clicks = float(rows[CLICKS_COL].sum())
    revenue = float(rows[REVENUE_COL].sum())
    transactions = float(rows[TRANSACTIONS_COL].sum())
    ctx.note(log, campaign_name, f"{len(rows)} rows: spend={spend:.2f} impressions={impressions:.0f} "
                                 f"clicks={clicks:.0f} revenue={revenue:.2f}")

    roas = safe_div(revenue, spend)
    ctr = safe_div(clicks, impressions) * 100
    roas_score = calculate_roas_score(roas, rules)
    ctr_score = calculate_ctr_score(ctr, rules=rules)

    completion = calculate_completion_percentage(contract_rows, campaign_name, ctx)
    if completion == 0:
        ctx.note(log, campaign_name, "excluded from health scoring - no contract terms")
        return _sentinel(campaign_name, NO_CONTRACT_TERMS)

    contract_row = find_contract_row(contract_rows, campaign_name)
    required_daily = required_daily_impressions(contract_row)
    if required_daily == 0:
        log.info(f"Campaign \"{campaign_name}\" has no usable impression goal; burn rate score will be 0")

    burn = calculate_burn_rate(df, campaign_name, required_daily, rules)
    burn_rate_score = calculate_burn_rate_score(burn, required_daily, rules)

    expected = expected_impressions_to_date(contract_row, rows, ctx)
    if expected is None:
        log.warning(f"Pacing unavailable for \"{campaign_name}\": no usable impression goal or flight dates")
    delivery_pacing_score = calculate_delivery_pacing_score(impressions, expected or 0.0, rules)
    pace = safe_div(impressions, expected) * 100 if expected else 0.0

    budget, days_left = resolve_budget_and_days_left(campaign_name, contract_row, pacing_rows, ctx)

    days_into_flight = max(1, int(rows[DAY_COL].dropna().nunique()))
    spend_rate = calculate_spend_burn_rate(df, campaign_name, spend, days_into_flight, ctx, rules)
    projection = project_overspend(spend, budget, spend_rate.daily_rate, days_left, spend_rate.confidence, rules)
    ctx.note(log, campaign_name, f"budget=${budget:.2f} days_left={days_left} "
                                 f"projected=${projection.projected_total:.2f} "
                                 f"overspend=${projection.projected_overspend:.2f} score={projection.score}")

    health_score = composite_health_score(roas_score, delivery_pacing_score, burn_rate_score,
                                          projection.score, rules)

    burn_value = burn.seven_day_rate or burn.three_day_rate or burn.one_day_rate or 0.0
    burn_pct = safe_div(burn_value, required_daily) * 100

    ctx.note(log, campaign_name, f"health={health_score} (roas={roas_score} pacing={delivery_pacing_score} "
                                 f"burn={burn_rate_score} overspend={projection.score})")

    return CampaignHealthData(
        campaign_name=campaign_name,
        budget=budget if budget > 0 else None,
        spend=spend,
        impressions=impressions,
        clicks=clicks,
        revenue=revenue,
        transactions=transactions,
        expected_impressions=expected,
        days_left=days_left if days_left > 0 else None,
        roas_score=roas_score,
        delivery_pacing_score=delivery_pacing_score,
        burn_rate_score=burn_rate_score,
        ctr_score=ctr_score,
        overspend_score=projection.score,
        health_score=health_score,
        burn_rate_confidence=burn.confidence,
        spend_rate_confidence=spend_rate.confidence,
        pace=pace,
        ctr=ctr,
        roas=roas,
        completion_percentage=r1(completion),
        delivery_pacing=r1(pace),
        burn_rate=float(round(burn_value)),
        overspend=round(projection.projected_overspend, 2),
        burn_rate_data=burn,
        required_daily_impressions=float(round(required_daily)),
        burn_rate_percentage=r1(burn_pct),
    )


def score_campaigns(delivery_rows: Rows,
                    pacing_rows: Optional[List[Mapping[str, Any]]] = None,
                    contract_rows: Optional[List[Mapping[str, Any]]] = None,
                    context: Optional[ScoringContext] = None,
                    exclude: Optional[Callable[[str], bool]] = None,
                    rules: ScoringRules = RULES) -> List[CampaignHealthData]:
    """Health records for every eligible campaign in the delivery set."""
    ctx = context or ScoringContext()
    df = delivery_frame(delivery_rows)
    names = [n for n in campaign_names(df) if not (exclude and exclude(n))]

    records = [calculate_campaign_health(df, n, pacing_rows, contract_rows, ctx, rules) for n in names]
    eligible = [r for r in records if not r.is_excluded]
    log.info(f"Scored {len(eligible)} of {len(names)} campaigns "
             f"({len(names) - len(eligible)} excluded for missing data or contract terms)")
    return eligible


def health_summary(records: List[CampaignHealthData], rules: ScoringRules = RULES) -> Dict[str, Any]:
    counts = {"healthy": 0, "warning": 0, "critical": 0}
    for r in records:
        counts[rules.health_band(r.health_score)] += 1
    avg = safe_div(sum(r.health_score for r in records), len(records))
    return {"total_campaigns": len(records), **counts, "average_score": r1(avg)}


def build_health_overview(delivery_rows: Rows,
                          pacing_rows: Optional[List[Mapping[str, Any]]] = None,
                          contract_rows: Optional[List[Mapping[str, Any]]] = None,
                          context: Optional[ScoringContext] = None,
                          exclude: Optional[Callable[[str], bool]] = None,
                          rules: ScoringRules = RULES) -> Dict[str, Any]:
    """Everything the health tab shows: scored campaigns, buckets and data-gap callouts."""
    pacing_rows = pacing_rows or []
    contract_rows = contract_rows or []
    df = delivery_frame(delivery_rows)

    records = score_campaigns(df, pacing_rows, contract_rows, context, exclude, rules)
    validation = validate_contract_terms(df, contract_rows)

    missing_from_pacing: List[str] = []
    if pacing_rows:
        in_pacing = {str(r.get(PACING_CAMPAIGN_COL)).strip() for r in pacing_rows if r.get(PACING_CAMPAIGN_COL)}
        missing_from_pacing = [n for n in campaign_names(df)
                               if n.strip() not in in_pacing and not (exclude and exclude(n))]

    return {
        "campaigns": records,
        "summary": health_summary(records, rules),
        "contract_terms_validation": validation,
        "missing_pacing_campaigns": missing_from_pacing,
    }
