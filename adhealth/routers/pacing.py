from __future__ import annotations
from dataclasses import asdict
from typing import Any, Dict

from fastapi import APIRouter

from adhealth.context import ScoringContext
from adhealth.models.io import PacingIn, PacingOut
from adhealth.services.pacing import process_campaigns, severity_level, severity_summary

router = APIRouter(prefix="/api/pacing", tags=["pacing"])


def _context(req: PacingIn) -> ScoringContext:
    return ScoringContext(today=req.today) if req.today else ScoringContext()


@router.post("/campaigns", response_model=PacingOut)
def pacing_campaigns(req: PacingIn) -> Dict[str, Any]:
    report = process_campaigns(req.contract_terms, req.delivery, req.unfiltered_delivery, _context(req))
    return {
        "campaigns": [
            {
                "name": c.name,
                "severity": severity_level(getattr(c.metrics, req.metric)),
                "metrics": c.metrics.to_dict(),
            }
            for c in report.campaigns
        ],
        "skipped": [asdict(s) for s in report.skipped],
        "skipped_count": report.skipped_count,
        "summary": severity_summary(report.campaigns, metric=req.metric),
    }


@router.post("/summary")
def pacing_summary(req: PacingIn) -> Dict[str, Any]:
    report = process_campaigns(req.contract_terms, req.delivery, req.unfiltered_delivery, _context(req))
    return {**severity_summary(report.campaigns, metric=req.metric), "skipped_count": report.skipped_count}
