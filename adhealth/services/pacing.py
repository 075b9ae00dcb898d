# adhealth/services/pacing.py
from __future__ import annotations
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple
import logging

import pandas as pd

from adhealth.config import IMPRESSIONS_COL
from adhealth.context import ScoringContext
from adhealth.data.ingest import (
    DAY_COL, CampaignSkipped, Rows,
    campaign_frame, daily_totals, delivery_frame, parse_contract_terms,
)
from adhealth.models.types import CampaignMetrics, PacingReport, ProcessedCampaign, SkippedCampaign
from adhealth.scoring.rules import RULES, ScoringRules
from adhealth.utils.dates import days_between
from adhealth.utils.math import clamp, safe_div

log = logging.getLogger("pacing")


def most_recent_day(df: pd.DataFrame) -> Optional[date]:
    days = df[DAY_COL].dropna()
    return max(days) if len(days) else None


def straight_line_expected(impression_goal: float,
                           start_date: date,
                           end_date: date,
                           reference: date) -> Tuple[int, float]:
    """Days into the inclusive flight as of `reference` and the impressions due by then."""
    total_days = days_between(start_date, end_date) + 1
    if total_days <= 0:
        return 0, 0.0
    days_into = int(clamp(days_between(start_date, reference), 0, total_days))
    return days_into, impression_goal / total_days * days_into


def calculate_campaign_metrics(
    contract_row: Mapping[str, Any],
    delivery_rows: Rows,
    global_most_recent_date: Optional[date] = None,
    unfiltered_delivery_rows: Optional[Rows] = None,
    context: Optional[ScoringContext] = None,
) -> CampaignMetrics:
    """
    Straight-line pacing for one contract against its delivery.

    "Today" is the campaign's own latest delivery day when it has one, then the
    global latest day, then the context's calendar day. Cumulative impressions
    come from the unfiltered rows when given so that a date-range filter does
    not shrink the total. Raises CampaignSkipped on unusable contract terms.
    """
    ctx = context or ScoringContext()
    terms = parse_contract_terms(contract_row)
    name = terms.name

    filtered = campaign_frame(delivery_frame(delivery_rows), name)
    reference = most_recent_day(filtered) or global_most_recent_date or ctx.today

    total_days = terms.total_days
    days_into, expected = straight_line_expected(terms.impression_goal, terms.start_date, terms.end_date, reference)
    days_until_end = max(0, days_between(reference, terms.end_date))

    full = delivery_frame(unfiltered_delivery_rows) if unfiltered_delivery_rows is not None else filtered
    actual = float(campaign_frame(full, name)[IMPRESSIONS_COL].sum())

    current_pacing = safe_div(actual, expected)
    if current_pacing == 0 and actual > 0:
        ctx.note(log, name, f"zero pacing with {actual:.0f} impressions delivered; "
                            f"expected={expected:.0f} days_into={days_into}/{total_days}")

    remaining = max(0.0, terms.impression_goal - actual)
    remaining_avg = remaining / days_until_end if days_until_end > 0 else 0.0

    # The most recent day may still be filling in; "yesterday" is the one before it
    per_day = daily_totals(full, name, IMPRESSIONS_COL)
    yesterday = float(per_day.iloc[-2]) if len(per_day) > 1 else 0.0
    yesterday_vs_needed = safe_div(yesterday, remaining_avg)

    return CampaignMetrics(
        campaign_name=name,
        budget=terms.budget,
        cpm=terms.cpm,
        impression_goal=terms.impression_goal,
        start_date=terms.start_date,
        end_date=terms.end_date,
        days_into_campaign=days_into,
        days_until_end=days_until_end,
        expected_impressions=expected,
        actual_impressions=actual,
        current_pacing=current_pacing,
        remaining_impressions=remaining,
        remaining_average_needed=remaining_avg,
        yesterday_impressions=yesterday,
        yesterday_vs_needed=yesterday_vs_needed,
    )


def process_campaigns(
    contract_rows: Iterable[Mapping[str, Any]],
    delivery_rows: Rows,
    unfiltered_delivery_rows: Optional[Rows] = None,
    context: Optional[ScoringContext] = None,
) -> PacingReport:
    """Run the pacing calculator over every contract; bad contracts are skipped, not fatal."""
    ctx = context or ScoringContext()
    filtered = delivery_frame(delivery_rows)
    unfiltered = delivery_frame(unfiltered_delivery_rows) if unfiltered_delivery_rows is not None else None

    global_latest = most_recent_day(unfiltered if unfiltered is not None else filtered) or ctx.today
    log.info(f"Global most recent delivery date: {global_latest.isoformat()}")

    processed: List[ProcessedCampaign] = []
    skipped: List[SkippedCampaign] = []
    for row in contract_rows:
        try:
            metrics = calculate_campaign_metrics(row, filtered, global_latest, unfiltered, ctx)
        except CampaignSkipped as e:
            log.warning(f"Skipping campaign \"{e.campaign_name}\": {e.reason}")
            skipped.append(SkippedCampaign(e.campaign_name, e.reason))
            continue

        own = campaign_frame(filtered, metrics.campaign_name)
        processed.append(ProcessedCampaign(
            name=metrics.campaign_name,
            contract_terms=row,
            delivery_data=own.drop(columns=[DAY_COL]).to_dict("records"),
            metrics=metrics,
        ))

    if skipped:
        log.info(f"Processed {len(processed)} campaigns. Skipped {len(skipped)} with errors: "
                 f"{', '.join(s.campaign_name for s in skipped)}")
    return PacingReport(campaigns=processed, skipped=skipped)


def severity_level(pacing: float, rules: ScoringRules = RULES) -> str:
    return rules.severity_level(pacing)


def severity_summary(campaigns: List[ProcessedCampaign],
                     metric: str = "current_pacing",
                     rules: ScoringRules = RULES) -> Dict[str, Any]:
    """Counts and shares of campaigns per severity level for the chosen ratio."""
    if metric not in ("current_pacing", "yesterday_vs_needed"):
        raise ValueError(f"Unsupported pacing metric: {metric}")

    levels = rules.severity_levels()
    counts = {lvl: 0 for lvl in levels}
    for c in campaigns:
        counts[rules.severity_level(getattr(c.metrics, metric))] += 1

    total = len(campaigns)
    return {
        "metric": metric,
        "total_campaigns": total,
        "counts": counts,
        "percentages": {lvl: round(safe_div(n, total) * 100, 1) for lvl, n in counts.items()},
        "labels": {lvl: rules.severity_label(lvl) for lvl in levels},
    }
