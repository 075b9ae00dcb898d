from __future__ import annotations
from dataclasses import asdict
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from adhealth.config import ALGO_VERSION, CAMPAIGN_COL, DATE_COL, TOTALS_SENTINEL
from adhealth.context import ScoringContext
from adhealth.models.io import HealthIn, HealthOut
from adhealth.scoring.rules import RULES
from adhealth.services.health import build_health_overview, calculate_campaign_health

router = APIRouter(prefix="/api/health", tags=["health"])


def _context(req: HealthIn) -> ScoringContext:
    return ScoringContext(today=req.today) if req.today else ScoringContext()


def overview_payload(req: HealthIn) -> Dict[str, Any]:
    excluded = {n.strip() for n in req.exclude_campaigns}
    overview = build_health_overview(
        req.delivery, req.pacing, req.contract_terms,
        context=_context(req),
        exclude=(lambda name: name.strip() in excluded) if excluded else None,
    )
    # Worst first, the order the health table opens in
    ranked = sorted(overview["campaigns"], key=lambda r: r.health_score)
    return {
        "campaigns": [r.to_dict() for r in ranked],
        "summary": overview["summary"],
        "missing_contract_terms": [asdict(m) for m in overview["contract_terms_validation"].missing_campaigns],
        "missing_pacing_campaigns": overview["missing_pacing_campaigns"],
        "meta": {"algo_version": ALGO_VERSION, "rules_version": RULES.version},
    }


@router.post("/campaigns", response_model=HealthOut)
def health_campaigns(req: HealthIn) -> Dict[str, Any]:
    return overview_payload(req)


@router.post("/campaign/{campaign_name}")
def health_campaign(campaign_name: str, req: HealthIn) -> Dict[str, Any]:
    has_rows = any(
        r.get(CAMPAIGN_COL) == campaign_name and str(r.get(DATE_COL)).strip() != TOTALS_SENTINEL
        for r in req.delivery
    )
    if not has_rows:
        raise HTTPException(status_code=404, detail="Campaign has no delivery data")
    record = calculate_campaign_health(req.delivery, campaign_name, req.pacing, req.contract_terms,
                                       context=_context(req))
    return {**record.to_dict(), "excluded": record.is_excluded}
