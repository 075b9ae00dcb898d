# adhealth/services/overspend.py
from __future__ import annotations
from typing import Optional
import logging

from adhealth.models.types import OverspendProjection
from adhealth.scoring.rules import RULES, ScoringRules
from adhealth.utils.math import r1, safe_div

log = logging.getLogger("overspend")


def calculate_overspend_score(current_spend: float,
                              budget: Optional[float],
                              daily_spend_rate: float,
                              days_left: Optional[float],
                              confidence: str,
                              rules: ScoringRules = RULES) -> float:
    """
    0-10 risk score for finishing the flight over budget (10 = on track).
    0 when the budget is unknown, the flight has ended, or the spend rate
    confidence carries no usable rate.
    """
    if not budget or budget <= 0 or days_left is None or days_left < 0:
        return 0.0

    projected_total = current_spend + daily_spend_rate * days_left
    overspend_pct = safe_div(max(0.0, projected_total - budget), budget) * 100

    multiplier = rules.confidence_multiplier(confidence or "")
    if multiplier is None:
        log.debug(f"Unknown spend confidence '{confidence}', overspend score forced to 0")
        return 0.0

    return r1(rules.overspend_points(overspend_pct) * multiplier)


def project_overspend(current_spend: float,
                      budget: Optional[float],
                      daily_spend_rate: float,
                      days_left: Optional[float],
                      confidence: str,
                      rules: ScoringRules = RULES) -> OverspendProjection:
    """Projected end-of-flight spend and overshoot, alongside the risk score."""
    remaining_days = max(0.0, days_left or 0.0)
    projected_total = current_spend + daily_spend_rate * remaining_days
    budget = budget or 0.0
    projected_overspend = max(0.0, projected_total - budget)
    return OverspendProjection(
        projected_total=projected_total,
        projected_overspend=projected_overspend,
        overspend_pct=safe_div(projected_overspend, budget) * 100,
        score=calculate_overspend_score(current_spend, budget, daily_spend_rate, days_left, confidence, rules),
    )
