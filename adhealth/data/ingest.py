from __future__ import annotations
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from adhealth.config import (
    DATE_COL, CAMPAIGN_COL, METRIC_COLS, TOTALS_SENTINEL,
    CAMPAIGN_NAME_FIELDS, BUDGET_FIELDS, BUDGET_KEYWORDS,
    START_DATE_COL, END_DATE_COL, BUDGET_COL, CPM_COL, IMPRESSIONS_GOAL_COL,
    PACING_CAMPAIGN_COL,
)
from adhealth.models.types import ContractTerms
from adhealth.utils.dates import parse_date
from adhealth.utils.math import num, to_float

Rows = Union[Iterable[Mapping[str, Any]], pd.DataFrame]

# Parsed calendar day of each delivery row
DAY_COL = "_day"


class CampaignSkipped(ValueError):
    """A campaign's contract terms failed validation; exclude it and carry on."""

    def __init__(self, campaign_name: str, reason: str):
        super().__init__(f"{campaign_name}: {reason}")
        self.campaign_name = campaign_name
        self.reason = reason


def delivery_frame(rows: Rows) -> pd.DataFrame:
    """
    Delivery rows as a DataFrame: Totals row dropped, metric columns coerced
    to floats (0 when missing), and a parsed `_day` column added.
    Already-built frames pass through untouched.
    """
    if isinstance(rows, pd.DataFrame) and DAY_COL in rows.columns:
        return rows

    df = rows.copy() if isinstance(rows, pd.DataFrame) else pd.DataFrame(list(rows))
    for col in [DATE_COL, CAMPAIGN_COL] + METRIC_COLS:
        if col not in df.columns:
            df[col] = None

    df = df[df[DATE_COL].astype(str).str.strip() != TOTALS_SENTINEL].copy()
    for col in METRIC_COLS:
        df[col] = df[col].map(num).astype(float)
    df[METRIC_COLS] = df[METRIC_COLS].replace([np.inf, -np.inf], 0.0)
    df[DAY_COL] = df[DATE_COL].map(parse_date)
    return df.reset_index(drop=True)


def campaign_frame(df: pd.DataFrame, campaign_name: str) -> pd.DataFrame:
    # Join key is an exact string match on the delivery export's campaign name
    return df[df[CAMPAIGN_COL] == campaign_name]


def daily_totals(df: pd.DataFrame, campaign_name: str, column: str) -> pd.Series:
    """Per-day sums of `column` for one campaign, oldest first."""
    d = campaign_frame(df, campaign_name)
    d = d[d[DAY_COL].notna()]
    if d.empty:
        return pd.Series(dtype=float)
    return d.groupby(DAY_COL)[column].sum().sort_index()


def campaign_names(df: pd.DataFrame) -> List[str]:
    """Distinct non-empty campaign names in first-seen order."""
    names = df[CAMPAIGN_COL].dropna().astype(str)
    return [n for n in names.unique() if n.strip()]


def campaign_name_of(row: Mapping[str, Any], fields: Sequence[str] = CAMPAIGN_NAME_FIELDS) -> Optional[str]:
    for field in fields:
        value = row.get(field)
        if value is None:
            continue
        s = str(value).strip()
        if s and s.lower() != "nan":
            return s
    return None


def find_contract_row(contract_rows: Iterable[Mapping[str, Any]],
                      campaign_name: str,
                      fields: Sequence[str] = CAMPAIGN_NAME_FIELDS) -> Optional[Mapping[str, Any]]:
    """First contract row where any candidate name field matches exactly (trimmed)."""
    target = str(campaign_name).strip()
    for row in contract_rows:
        for field in fields:
            value = row.get(field)
            if value and str(value).strip() == target:
                return row
    return None


def find_pacing_row(pacing_rows: Iterable[Mapping[str, Any]], campaign_name: str) -> Optional[Mapping[str, Any]]:
    target = str(campaign_name or "").strip()
    for row in pacing_rows:
        if str(row.get(PACING_CAMPAIGN_COL) or "").strip() == target:
            return row
    return None


def find_budget(row: Mapping[str, Any]) -> float:
    """
    Budget from a contract row: known column names first, then any column
    whose name mentions budget/total/amount. 0 when nothing positive is found.
    """
    for field in BUDGET_FIELDS:
        if field in row:
            v = to_float(row[field])
            if v is not None and v > 0:
                return v
    for field, value in row.items():
        if any(k in str(field).lower() for k in BUDGET_KEYWORDS):
            v = to_float(value)
            if v is not None and v > 0:
                return v
    return 0.0


def parse_contract_terms(row: Mapping[str, Any]) -> ContractTerms:
    """Validate one contract-terms row; raises CampaignSkipped on any bad field."""
    name = campaign_name_of(row) or ""
    if not name:
        raise CampaignSkipped("<unnamed>", "Contract terms row has no campaign name")

    raw = {k: row.get(k) for k in (BUDGET_COL, CPM_COL, IMPRESSIONS_GOAL_COL)}
    if any(v is None or str(v).strip() == "" for v in raw.values()):
        raise CampaignSkipped(name, "Missing required fields in contract terms")

    budget = to_float(raw[BUDGET_COL])
    cpm = to_float(raw[CPM_COL])
    goal = to_float(raw[IMPRESSIONS_GOAL_COL])
    if budget is None or cpm is None or goal is None:
        raise CampaignSkipped(
            name,
            f"Invalid numeric values - Budget: {raw[BUDGET_COL]}, CPM: {raw[CPM_COL]}, "
            f"Impressions Goal: {raw[IMPRESSIONS_GOAL_COL]}",
        )

    start = parse_date(row.get(START_DATE_COL))
    end = parse_date(row.get(END_DATE_COL))
    if start is None or end is None:
        raise CampaignSkipped(
            name, f"Invalid date format - Start: {row.get(START_DATE_COL)}, End: {row.get(END_DATE_COL)}"
        )
    if start > end:
        raise CampaignSkipped(name, f"Start date {start} is after end date {end}")

    return ContractTerms(
        name=name, start_date=start, end_date=end,
        budget=budget, cpm=cpm, impression_goal=int(goal),
    )
