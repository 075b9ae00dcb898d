from datetime import date
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, Field

Row = Dict[str, Any]
PacingMetric = Literal["current_pacing", "yesterday_vs_needed"]


class PacingIn(BaseModel):
    contract_terms: List[Row] = Field(default_factory=list)
    delivery: List[Row] = Field(default_factory=list)
    unfiltered_delivery: Optional[List[Row]] = None  # true cumulative totals when the UI filters dates
    today: Optional[date] = None
    metric: PacingMetric = "current_pacing"


class PacingCampaignOut(BaseModel):
    name: str
    severity: str
    metrics: Dict[str, Any]


class PacingOut(BaseModel):
    campaigns: List[PacingCampaignOut]
    skipped: List[Dict[str, str]]
    skipped_count: int
    summary: Dict[str, Any]


class HealthIn(BaseModel):
    delivery: List[Row]
    pacing: List[Row] = Field(default_factory=list)
    contract_terms: List[Row] = Field(default_factory=list)
    today: Optional[date] = None
    exclude_campaigns: List[str] = Field(default_factory=list)


class HealthOut(BaseModel):
    campaigns: List[Dict[str, Any]]
    summary: Dict[str, Any]
    missing_contract_terms: List[Dict[str, Any]]
    missing_pacing_campaigns: List[str]
    meta: Dict[str, Any]
