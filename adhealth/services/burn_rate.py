# adhealth/services/burn_rate.py
from __future__ import annotations
from typing import Optional
import logging

import pandas as pd

from adhealth.config import IMPRESSIONS_COL, SPEND_COL
from adhealth.context import ScoringContext
from adhealth.data.ingest import Rows, daily_totals, delivery_frame
from adhealth.models.types import BurnRateData, SpendBurnRate
from adhealth.scoring.rules import RULES, ScoringRules
from adhealth.utils.math import safe_div

log = logging.getLogger("burn_rate")

CONFIDENCE_RATE_FIELD = {
    "7-day": "seven_day_rate",
    "3-day": "three_day_rate",
    "1-day": "one_day_rate",
}


def trailing_window(per_day: pd.Series, window: int) -> pd.Series:
    """Drop the most recent (possibly partial) day, keep up to `window` days before it."""
    if len(per_day) <= 1:
        return per_day.iloc[0:0]
    return per_day.iloc[:-1].iloc[-window:]


def _confidence(n_days: int) -> str:
    if n_days >= 7:
        return "7-day"
    if n_days >= 3:
        return "3-day"
    if n_days >= 1:
        return "1-day"
    return "no-data"


def calculate_burn_rate(rows: Rows,
                        campaign_name: str,
                        required_daily_impressions: float = 0.0,
                        rules: ScoringRules = RULES) -> BurnRateData:
    """1/3/7-day trailing impression rates for a campaign, excluding its latest day."""
    per_day = daily_totals(delivery_frame(rows), campaign_name, IMPRESSIONS_COL)
    recent = trailing_window(per_day, rules.burn_window_days)
    n = len(recent)

    one_day = float(recent.iloc[-1]) if n >= 1 else 0.0
    three_day = float(recent.iloc[-3:].sum()) / 3 if n >= 3 else 0.0
    seven_day = float(recent.iloc[-7:].sum()) / 7 if n >= 7 else 0.0

    def pct(rate: float) -> float:
        return safe_div(rate, required_daily_impressions) * 100 if required_daily_impressions > 0 else 0.0

    return BurnRateData(
        one_day_rate=one_day,
        three_day_rate=three_day,
        seven_day_rate=seven_day,
        confidence=_confidence(n),
        one_day_percentage=pct(one_day),
        three_day_percentage=pct(three_day),
        seven_day_percentage=pct(seven_day),
    )


def best_rate(burn: BurnRateData) -> float:
    """Rate matching the confidence tier; 0 when there is none."""
    field = CONFIDENCE_RATE_FIELD.get(burn.confidence)
    return getattr(burn, field) if field else 0.0


def calculate_burn_rate_score(burn: BurnRateData,
                              required_daily_impressions: float,
                              rules: ScoringRules = RULES) -> float:
    if not required_daily_impressions or burn.confidence not in CONFIDENCE_RATE_FIELD:
        return 0.0
    ratio = best_rate(burn) / required_daily_impressions
    return rules.burn_rate_points(ratio)


def calculate_spend_burn_rate(rows: Rows,
                              campaign_name: str,
                              total_spend: float = 0.0,
                              days_into_flight: int = 0,
                              context: Optional[ScoringContext] = None,
                              rules: ScoringRules = RULES) -> SpendBurnRate:
    """
    Trailing daily spend with two guards against bad exports:
      - a window average that strays from the campaign-to-date average by more
        than 2x (3x for a single day) is replaced by that average, tagged -capped
      - the final rate never exceeds 2x the campaign-to-date average
    """
    ctx = context or ScoringContext()
    per_day = daily_totals(delivery_frame(rows), campaign_name, SPEND_COL)
    if per_day.empty:
        ctx.note(log, campaign_name, "no spend data found")
        return SpendBurnRate(0.0, "no-data")

    overall = safe_div(total_spend, days_into_flight) if total_spend > 0 else 0.0
    recent = trailing_window(per_day, rules.burn_window_days)
    n = len(recent)

    def guarded(value: float, multiple: float, tag: str) -> SpendBurnRate:
        if overall > 0 and abs(value - overall) > overall * multiple:
            ctx.note(log, campaign_name, f"{tag} spend ${value:.2f} looks anomalous vs "
                                         f"${overall:.2f}/day average; using the average")
            return SpendBurnRate(overall, f"{tag}-capped")
        return SpendBurnRate(value, tag)

    if n >= 7:
        out = guarded(float(recent.iloc[-7:].mean()), rules.spend_anomaly("window_multiple"), "7-day")
    elif n >= 3:
        out = guarded(float(recent.iloc[-3:].mean()), rules.spend_anomaly("window_multiple"), "3-day")
    elif n >= 1:
        out = guarded(float(recent.iloc[-1]), rules.spend_anomaly("one_day_multiple"), "1-day")
    elif overall > 0:
        out = SpendBurnRate(overall, "overall-average")
    else:
        out = SpendBurnRate(0.0, "no-data")

    if overall > 0:
        ceiling = overall * rules.spend_anomaly("max_rate_multiple")
        if out.daily_rate > ceiling:
            ctx.note(log, campaign_name, f"daily spend ${out.daily_rate:.2f} capped at ${ceiling:.2f}")
            confidence = out.confidence if out.confidence.endswith("-capped") else f"{out.confidence}-capped"
            out = SpendBurnRate(ceiling, confidence)

    ctx.note(log, campaign_name, f"daily spend rate ${out.daily_rate:.2f} ({out.confidence})")
    return out
