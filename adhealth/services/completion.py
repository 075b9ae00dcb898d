# adhealth/services/completion.py
from __future__ import annotations
from typing import Any, Iterable, Mapping, Optional
import logging

from adhealth.config import START_DATE_COL, END_DATE_COL
from adhealth.context import ScoringContext
from adhealth.data.ingest import find_contract_row
from adhealth.utils.dates import days_between, parse_campaign_date
from adhealth.utils.math import clamp

log = logging.getLogger("completion")


def calculate_completion_percentage(contract_rows: Iterable[Mapping[str, Any]],
                                    campaign_name: str,
                                    context: Optional[ScoringContext] = None) -> float:
    """
    Share of the contracted flight elapsed as of the context's calendar day,
    in [0, 100]. 0 means no usable contract terms: the campaign is ineligible
    for health scoring, not "just started".

    Deliberately uses the calendar day rather than the latest delivery date
    the pacing calculator uses.
    """
    ctx = context or ScoringContext()
    row = find_contract_row(contract_rows, campaign_name)
    if row is None:
        ctx.note(log, campaign_name, "no contract terms found")
        return 0.0

    try:
        start = parse_campaign_date(row.get(START_DATE_COL))
        end = parse_campaign_date(row.get(END_DATE_COL))
    except ValueError as e:
        log.warning(f"Error calculating completion percentage for \"{campaign_name}\": {e}")
        return 0.0

    total_days = days_between(start, end) + 1
    if total_days <= 0:
        return 0.0
    days_into = clamp(days_between(start, ctx.today), 0, total_days)
    pct = clamp(days_into / total_days * 100, 0.0, 100.0)
    ctx.note(log, campaign_name, f"completion {pct:.1f}%")
    return pct
