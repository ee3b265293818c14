"""Fraud Analysis API Router.

Thin HTTP adapter over the analysis engine for the case-creation workflow.
Callers send already-decoded CSV text (or an already-parsed table); the
router does not handle file uploads and does not persist anything.
"""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from src.fraud_engine.config.settings import (
    EngineSettings,
    RulebookError,
    settings_from_env,
)
from src.fraud_engine.integrations.csv_reader import ParsedTable, normalize_rows, parse_csv
from src.fraud_engine.use_cases.column_roles import ColumnClassifier
from src.fraud_engine.use_cases.fraud_analysis import FraudIndicatorEngine

logger = logging.getLogger(__name__)

analysis_router = APIRouter(tags=["Fraud Analysis"])


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------


class CSVAnalysisRequest(BaseModel):
    csv_text: str
    rulebook_path: str | None = None


class TableAnalysisRequest(BaseModel):
    headers: list[str]
    rows: list[dict[str, Any]] = Field(default_factory=list)
    rulebook_path: str | None = None


# ---------------------------------------------------------------------------
# Helper Functions
# ---------------------------------------------------------------------------


def _load_settings(rulebook_path: str | None) -> EngineSettings:
    try:
        return settings_from_env(rulebook_path)
    except RulebookError as e:
        logger.error(f"Rulebook rejected: {e}")
        raise HTTPException(status_code=400, detail=str(e))


def _analysis_payload(table: ParsedTable, settings: EngineSettings) -> dict[str, Any]:
    result = FraudIndicatorEngine(settings=settings).analyze(table)
    roles = ColumnClassifier(settings.role_patterns).classify(table.headers)
    return {
        "rulebook": {
            "id": settings.rulebook_id,
            "version": settings.rulebook_version,
            "path": settings.source_path,
        },
        "table": {
            "headers": table.headers,
            "total_rows": len(table.rows),
            "column_roles": roles.as_dict(),
        },
        "empty": table.is_empty,
        "analysis": result.to_dict(),
    }


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@analysis_router.post("/analysis/csv")
async def analyze_csv(body: CSVAnalysisRequest):
    """Parse raw CSV text and run the five fraud indicators.

    An empty or unparseable file is not an error: the response carries
    `empty: true` and a zero-valued analysis.
    """

    settings = _load_settings(body.rulebook_path)
    table = parse_csv(body.csv_text)
    if table.is_empty:
        logger.info("CSV contained no data rows; returning zero-valued analysis")
    return _analysis_payload(table, settings)


@analysis_router.post("/analysis/table")
async def analyze_table(body: TableAnalysisRequest):
    """Run the fraud indicators over a table the caller has already parsed."""

    settings = _load_settings(body.rulebook_path)
    headers = [h.strip() for h in body.headers]
    table = ParsedTable(headers=headers, rows=normalize_rows(headers, body.rows))
    return _analysis_payload(table, settings)


@analysis_router.get("/analysis/rulebook")
async def get_rulebook(rulebook_path: str | None = None):
    """Return the active indicator weights and column-role patterns."""

    return _load_settings(rulebook_path).describe()
