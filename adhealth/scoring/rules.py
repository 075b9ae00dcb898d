from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

CFG_PATH = Path(__file__).with_name("health_rules.yaml")


@dataclass
class ScoringRules:
    cfg: Dict[str, Any]
    version: str

    @classmethod
    def load(cls, path: Path = CFG_PATH) -> "ScoringRules":
        with open(path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f)
        return cls(cfg=cfg, version=str(cfg.get("version", "v1")))

    @property
    def weights(self) -> Dict[str, float]:
        return {k: float(v) for k, v in self.cfg["weights"].items()}

    @property
    def ctr_benchmark(self) -> float:
        return float(self.cfg["ctr_benchmark_pct"])

    @property
    def burn_window_days(self) -> int:
        return int(self.cfg["burn_window_days"])

    def roas_points(self, roas: float) -> float:
        for min_roas, pts in self.cfg["roas_bands"]:
            if roas >= min_roas:
                return float(pts)
        return float(self.cfg["roas_floor_points"]) if roas > 0 else 0.0

    def delivery_pacing_points(self, pacing_pct: float) -> float:
        for band in self.cfg["delivery_pacing_bands"]:
            if band["low"] <= pacing_pct <= band["high"]:
                return float(band["points"])
        return float(self.cfg["delivery_pacing_fallback_points"])

    def burn_rate_points(self, ratio: float) -> float:
        for band in self.cfg["burn_rate_bands"]:
            if band["low"] <= ratio <= band["high"]:
                return float(band["points"])
        return float(self.cfg["burn_rate_fallback_points"])

    def ctr_points(self, deviation: float) -> float:
        tol = float(self.cfg["ctr_tolerance"])
        pts = self.cfg["ctr_points"]
        if deviation > tol:
            return float(pts["above"])
        if deviation >= -tol:
            return float(pts["within"])
        return float(pts["below"])

    def overspend_points(self, overspend_pct: float) -> float:
        for max_pct, pts in self.cfg["overspend_bands"]:
            if overspend_pct <= max_pct:
                return float(pts)
        return float(self.cfg["overspend_fallback_points"])

    def confidence_multiplier(self, confidence: str) -> Optional[float]:
        """None for tags that carry no usable rate."""
        base = confidence[: -len("-capped")] if confidence.endswith("-capped") else confidence
        m = self.cfg["confidence_multipliers"].get(base)
        if m is None:
            return None
        m = float(m)
        if "capped" in confidence:
            m *= float(self.cfg["capped_penalty"])
        return m

    def spend_anomaly(self, key: str) -> float:
        return float(self.cfg["spend_anomaly"][key])

    def health_band(self, score: float) -> str:
        bands = self.cfg["health_bands"]
        if score >= float(bands["healthy"]):
            return "healthy"
        if score >= float(bands["warning"]):
            return "warning"
        return "critical"

    def severity_levels(self) -> List[str]:
        return list(self.cfg["severity_levels"].keys())

    def severity_level(self, pacing: float) -> str:
        levels = self.cfg["severity_levels"]
        for key in ("on-target", "minor", "moderate"):
            band = levels[key]
            if float(band["min"]) <= pacing <= float(band["max"]):
                return key
        return "major"

    def severity_label(self, level: str) -> str:
        return str(self.cfg["severity_levels"][level]["label"])


RULES = ScoringRules.load()
