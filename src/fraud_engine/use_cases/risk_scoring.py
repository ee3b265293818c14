"""Composite fraud risk score.

Score = average weight of the active indicators x total flagged count, clamped
to [0, 10] and rounded to 2 decimals. Only indicators with count > 0 enter the
average; the total count sums every indicator.

Tiers (lower bound inclusive):
- 0 <= score < 3   Medium  (yellow)
- 3 <= score < 6   High    (orange)
- 6 <= score <= 10 Highest (red)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from src.fraud_engine.use_cases.indicator_checks import IndicatorFinding

MAX_RISK_SCORE = 10.0
HIGH_RISK_THRESHOLD = 3.0
HIGHEST_RISK_THRESHOLD = 6.0


class RiskLevel(str, Enum):
    MEDIUM = "Medium"
    HIGH = "High"
    HIGHEST = "Highest"


class RiskColor(str, Enum):
    YELLOW = "yellow"
    ORANGE = "orange"
    RED = "red"


@dataclass(frozen=True, slots=True)
class RiskTier:
    level: RiskLevel
    color: RiskColor


@dataclass(frozen=True, slots=True)
class RiskAssessment:
    score: float
    level: RiskLevel
    color: RiskColor
    average_weight: float
    total_count: int


def _average_active_weight(indicators: list[IndicatorFinding]) -> float:
    active = [i for i in indicators if i.active]
    if not active:
        return 0.0
    return sum(i.weight for i in active) / len(active)


def calculate_fraud_risk_score(indicators: Iterable[IndicatorFinding]) -> float:
    indicators = list(indicators)
    if not any(i.active for i in indicators):
        return 0.0

    avg_weight = _average_active_weight(indicators)
    total_count = sum(i.count for i in indicators)
    raw = avg_weight * total_count
    return round(min(MAX_RISK_SCORE, max(0.0, raw)), 2)


def get_risk_level(score: float) -> RiskTier:
    if score >= HIGHEST_RISK_THRESHOLD:
        return RiskTier(level=RiskLevel.HIGHEST, color=RiskColor.RED)
    if score >= HIGH_RISK_THRESHOLD:
        return RiskTier(level=RiskLevel.HIGH, color=RiskColor.ORANGE)
    return RiskTier(level=RiskLevel.MEDIUM, color=RiskColor.YELLOW)


def assess_risk(indicators: Iterable[IndicatorFinding]) -> RiskAssessment:
    indicators = list(indicators)
    score = calculate_fraud_risk_score(indicators)
    tier = get_risk_level(score)
    return RiskAssessment(
        score=score,
        level=tier.level,
        color=tier.color,
        average_weight=round(_average_active_weight(indicators), 4),
        total_count=sum(i.count for i in indicators),
    )
