"""Fraud-indicator analysis engine.

Goal
- Run every registered indicator check over one parsed table and package the
  findings plus the composite risk score into an AnalysisResult.
- Stay pure: no file or network IO, no shared state between calls.

This module intentionally avoids FastAPI types/exceptions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from src.fraud_engine.config.settings import DEFAULT_SETTINGS, INDICATOR_KEYS, EngineSettings
from src.fraud_engine.integrations.csv_reader import ParsedTable, parse_csv
from src.fraud_engine.use_cases.column_roles import ColumnClassifier
from src.fraud_engine.use_cases.indicator_checks import (
    IndicatorFinding,
    check_duplicate_ids,
    check_duplicate_invoices,
    check_manual_entries,
    check_round_numbers,
    check_weekend_dates,
)
from src.fraud_engine.use_cases.risk_scoring import RiskColor, RiskLevel, assess_risk

logger = logging.getLogger(__name__)


IndicatorCheck = Callable[..., IndicatorFinding]


@dataclass(frozen=True, slots=True)
class AnalysisResult:
    indicators: tuple[IndicatorFinding, ...]
    total_indicators: int
    risk_score: float
    risk_level: RiskLevel
    risk_color: RiskColor
    total_rows: int

    def indicator(self, key: str) -> IndicatorFinding:
        for finding in self.indicators:
            if finding.key == key:
                return finding
        raise KeyError(key)

    def to_dict(self) -> dict[str, Any]:
        return {
            "indicators": [i.to_dict() for i in self.indicators],
            "totalIndicators": self.total_indicators,
            "riskScore": self.risk_score,
            "riskLevel": self.risk_level.value,
            "riskColor": self.risk_color.value,
            "totalRows": self.total_rows,
        }


class IndicatorRegistry:
    def __init__(self) -> None:
        self._checks: dict[str, IndicatorCheck] = {}

    def register(self, indicator_key: str) -> Callable[[IndicatorCheck], IndicatorCheck]:
        def _decorator(fn: IndicatorCheck) -> IndicatorCheck:
            self._checks[indicator_key] = fn
            return fn

        return _decorator

    def get(self, indicator_key: str) -> IndicatorCheck | None:
        return self._checks.get(indicator_key)

    def implemented_keys(self) -> set[str]:
        return set(self._checks.keys())


def _default_registry() -> IndicatorRegistry:
    reg = IndicatorRegistry()
    reg.register("duplicate_ids")(check_duplicate_ids)
    reg.register("manual_entries")(check_manual_entries)
    reg.register("round_numbers")(check_round_numbers)
    reg.register("weekend_dates")(check_weekend_dates)
    reg.register("duplicate_invoices")(check_duplicate_invoices)
    return reg


class FraudIndicatorEngine:
    """Evaluate the five fraud indicators for a ParsedTable."""

    def __init__(
        self,
        settings: EngineSettings | None = None,
        registry: IndicatorRegistry | None = None,
    ) -> None:
        self._settings = settings or DEFAULT_SETTINGS
        self._registry = registry or _default_registry()
        self._classifier = ColumnClassifier(self._settings.role_patterns)

        implemented = self._registry.implemented_keys()
        self._unimplemented = tuple(k for k in INDICATOR_KEYS if k not in implemented)
        if self._unimplemented:
            logger.warning(
                f"No check registered for indicators {list(self._unimplemented)}; they will report zero"
            )

    def analyze(self, table: ParsedTable) -> AnalysisResult:
        headers = list(table.headers)
        rows = table.rows

        indicators: list[IndicatorFinding] = []
        for key in INDICATOR_KEYS:
            check = self._registry.get(key)
            if check is None:
                # Keep the fixed five-slot layout even with a trimmed registry.
                finding = IndicatorFinding(
                    key=key,
                    label=self._settings.label_for(key),
                    count=0,
                    weight=self._settings.weight_for(key),
                    flagged_rows=(),
                    details=(),
                )
            else:
                finding = check(
                    headers, rows, classifier=self._classifier, settings=self._settings
                )
            logger.debug(f"Indicator {key}: count={finding.count} weight={finding.weight}")
            indicators.append(finding)

        risk = assess_risk(indicators)
        result = AnalysisResult(
            indicators=tuple(indicators),
            total_indicators=risk.total_count,
            risk_score=risk.score,
            risk_level=risk.level,
            risk_color=risk.color,
            total_rows=len(rows),
        )

        logger.info(
            f"Fraud analysis completed: {result.total_rows} rows, "
            f"{result.total_indicators} indicators, score={result.risk_score} ({result.risk_level.value})"
        )
        return result


def analyze_fraud_indicators(
    table: ParsedTable, settings: EngineSettings | None = None
) -> AnalysisResult:
    return FraudIndicatorEngine(settings=settings).analyze(table)


def analyze_csv_text(text: str | None, settings: EngineSettings | None = None) -> AnalysisResult:
    """parse_csv + analyze_fraud_indicators in one call."""

    return analyze_fraud_indicators(parse_csv(text), settings=settings)
