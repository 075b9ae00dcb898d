from __future__ import annotations
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class ContractTerms:
    name: str
    start_date: date
    end_date: date
    budget: float
    cpm: float
    impression_goal: int

    @property
    def total_days(self) -> int:
        # inclusive of both start and end
        return (self.end_date - self.start_date).days + 1


@dataclass(frozen=True)
class CampaignMetrics:
    campaign_name: str
    budget: float
    cpm: float
    impression_goal: int
    start_date: date
    end_date: date
    days_into_campaign: int
    days_until_end: int
    expected_impressions: float
    actual_impressions: float
    current_pacing: float
    remaining_impressions: float
    remaining_average_needed: float
    yesterday_impressions: float
    yesterday_vs_needed: float

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["start_date"] = self.start_date.isoformat()
        d["end_date"] = self.end_date.isoformat()
        return d


@dataclass(frozen=True)
class ProcessedCampaign:
    name: str
    contract_terms: Mapping[str, Any]
    delivery_data: List[Mapping[str, Any]]
    metrics: CampaignMetrics


@dataclass(frozen=True)
class SkippedCampaign:
    campaign_name: str
    reason: str


@dataclass(frozen=True)
class PacingReport:
    campaigns: List[ProcessedCampaign]
    # one entry per rejected contract row, names may repeat
    skipped: List[SkippedCampaign] = field(default_factory=list)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


@dataclass(frozen=True)
class BurnRateData:
    one_day_rate: float = 0.0
    three_day_rate: float = 0.0
    seven_day_rate: float = 0.0
    confidence: str = "no-data"
    one_day_percentage: float = 0.0
    three_day_percentage: float = 0.0
    seven_day_percentage: float = 0.0


@dataclass(frozen=True)
class SpendBurnRate:
    daily_rate: float = 0.0
    confidence: str = "no-data"


@dataclass(frozen=True)
class OverspendProjection:
    projected_total: float
    projected_overspend: float
    overspend_pct: float
    score: float


@dataclass(frozen=True)
class CampaignHealthData:
    campaign_name: str
    spend: float = 0.0
    impressions: float = 0.0
    clicks: float = 0.0
    revenue: float = 0.0
    transactions: float = 0.0
    roas_score: float = 0.0
    delivery_pacing_score: float = 0.0
    burn_rate_score: float = 0.0
    ctr_score: float = 0.0
    overspend_score: float = 0.0
    health_score: float = 0.0
    burn_rate_confidence: str = "no-data"
    spend_rate_confidence: str = "no-data"
    ctr: float = 0.0
    roas: float = 0.0
    completion_percentage: float = 0.0
    delivery_pacing: float = 0.0
    burn_rate: float = 0.0
    overspend: float = 0.0
    burn_rate_data: BurnRateData = field(default_factory=BurnRateData)
    required_daily_impressions: float = 0.0
    burn_rate_percentage: float = 0.0
    budget: Optional[float] = None
    expected_impressions: Optional[float] = None
    days_left: Optional[int] = None
    pace: Optional[float] = None

    @property
    def is_excluded(self) -> bool:
        """Zero score with nothing delivered is the 'do not display' sentinel."""
        return self.health_score == 0 and self.spend == 0 and self.impressions == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class MissingContractTerms:
    campaign_name: str
    total_impressions: float
    total_spend: float
    total_revenue: float


@dataclass(frozen=True)
class ContractTermsValidation:
    missing_campaigns: List[MissingContractTerms]

    @property
    def total_missing_campaigns(self) -> int:
        return len(self.missing_campaigns)

    @property
    def has_active_campaigns_missing(self) -> bool:
        return bool(self.missing_campaigns)
