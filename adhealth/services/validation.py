# adhealth/services/validation.py
from __future__ import annotations
from typing import Any, Iterable, Mapping

from adhealth.config import CAMPAIGN_COL, IMPRESSIONS_COL, SPEND_COL, REVENUE_COL
from adhealth.data.ingest import Rows, campaign_name_of, delivery_frame
from adhealth.models.types import ContractTermsValidation, MissingContractTerms


def validate_contract_terms(delivery_rows: Rows,
                            contract_rows: Iterable[Mapping[str, Any]]) -> ContractTermsValidation:
    """
    Campaigns that delivered impressions but have no contract-terms row,
    most active first. Only the first non-empty name field of each contract
    row counts as its name.
    """
    df = delivery_frame(delivery_rows)
    active = df[df[CAMPAIGN_COL].notna() & (df[CAMPAIGN_COL].astype(str).str.strip() != "")
                & (df[IMPRESSIONS_COL] > 0)]

    contracted = {name for name in (campaign_name_of(r) for r in contract_rows) if name}

    totals = active.groupby(CAMPAIGN_COL)[[IMPRESSIONS_COL, SPEND_COL, REVENUE_COL]].sum()
    missing = [
        MissingContractTerms(
            campaign_name=str(name),
            total_impressions=float(t[IMPRESSIONS_COL]),
            total_spend=float(t[SPEND_COL]),
            total_revenue=float(t[REVENUE_COL]),
        )
        for name, t in totals.iterrows()
        if str(name) not in contracted
    ]
    missing.sort(key=lambda m: m.total_impressions, reverse=True)
    return ContractTermsValidation(missing_campaigns=missing)
