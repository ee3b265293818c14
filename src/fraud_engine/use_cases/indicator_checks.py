"""Deterministic fraud-indicator checks over a parsed CSV table.

Each check has the same shape:

    check_xxx(headers, rows, *, classifier=None, settings=None) -> IndicatorFinding

Checks are independent of each other, never mutate their inputs and never raise
on cell content: blanks, garbage numbers and unparseable dates are skipped.

Amounts are parsed to Decimal, not float. Results only differ from a float
parse past float precision: "100.0000000000000001" is 100 as a float (round)
but stays fractional as a Decimal (not round).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from src.fraud_engine.config.settings import DEFAULT_SETTINGS, EngineSettings
from src.fraud_engine.use_cases.column_roles import ColumnClassifier, ColumnRole

MAX_DETAIL_LINES = 15
ROUND_NUMBER_DIVISOR = 100


@dataclass(frozen=True, slots=True)
class IndicatorFinding:
    key: str
    label: str
    count: int
    weight: float
    flagged_rows: tuple[int, ...]
    details: tuple[str, ...]

    @property
    def active(self) -> bool:
        return self.count > 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "count": self.count,
            "weight": self.weight,
            "flaggedRows": list(self.flagged_rows),
            "details": list(self.details),
        }


def _finding(
    key: str, flagged: set[int], details: list[str], settings: EngineSettings
) -> IndicatorFinding:
    return IndicatorFinding(
        key=key,
        label=settings.label_for(key),
        count=len(flagged),
        weight=settings.weight_for(key),
        flagged_rows=tuple(sorted(flagged)),
        details=tuple(details[:MAX_DETAIL_LINES]),
    )


def _resolve(
    classifier: ColumnClassifier | None, settings: EngineSettings | None
) -> tuple[ColumnClassifier, EngineSettings]:
    settings = settings or DEFAULT_SETTINGS
    return classifier or ColumnClassifier(settings.role_patterns), settings


# ---------------------------------------------------------------------------
# Best-effort cell parsing
# ---------------------------------------------------------------------------

_NUMERIC_PREFIX = re.compile(r"-?(?:\d+\.?\d*|\.\d+)")


def parse_amount(value: str | None) -> Decimal | None:
    """Parse an amount cell after stripping everything but digits, '.' and '-'.

    Only the leading numeric prefix is used ("12.5.3" -> 12.5, "1,000" -> 1000).
    Returns None for blanks and values with no numeric prefix.
    """

    if value is None:
        return None
    cleaned = re.sub(r"[^0-9.\-]", "", str(value))
    m = _NUMERIC_PREFIX.match(cleaned)
    if not m:
        return None
    try:
        return Decimal(m.group(0))
    except InvalidOperation:
        return None


def is_round_amount(amount: Decimal, *, divisor: int = ROUND_NUMBER_DIVISOR) -> bool:
    if amount != amount.to_integral_value():
        return False
    return int(amount) % divisor == 0


_MONTHS = {
    "jan": 1,
    "feb": 2,
    "mar": 3,
    "apr": 4,
    "may": 5,
    "jun": 6,
    "jul": 7,
    "aug": 8,
    "sep": 9,
    "sept": 9,
    "oct": 10,
    "nov": 11,
    "dec": 12,
}

_ISO_DATE = re.compile(r"^(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})(?:[t\s].*)?$")
_NUMERIC_DATE = re.compile(r"^(\d{1,2})[-/.](\d{1,2})[-/.](\d{4}|\d{2})(?:[t\s].*)?$")
_MONTH_FIRST = re.compile(
    r"^(?:[a-z]+,?\s+)?([a-z]{3,9})\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})\b"
)
_DAY_FIRST = re.compile(r"^(\d{1,2})(?:st|nd|rd|th)?[\s\-]+([a-z]{3,9})\.?[\s\-,]+(\d{4})\b")


def _safe_date(year: int, month: int, day: int) -> date | None:
    try:
        return date(year, month, day)
    except ValueError:
        return None


def _month_from_token(token: str) -> int | None:
    return _MONTHS.get(token[:4] if token.startswith("sept") else token[:3])


def _expand_year(token: str) -> int:
    year = int(token)
    if len(token) == 2:
        year += 2000 if year < 50 else 1900
    return year


def parse_calendar_date(value: str | None) -> date | None:
    """Parse a date cell into a calendar date without consulting the locale.

    Supported shapes:
    - ISO: 2024-01-06, 2024/01/06, 2024-01-06T10:00:00Z
    - Numeric: 01/06/2024 (month first), 13/01/2024 (day first when month > 12), 01/06/24
    - Month names: Jan 6, 2024 / Saturday, January 6, 2024 / 6 Jan 2024 / 06-Jan-2024
    """

    if value is None:
        return None
    s = str(value).strip().lower()
    if not s:
        return None

    m = _ISO_DATE.match(s)
    if m:
        return _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3)))

    m = _NUMERIC_DATE.match(s)
    if m:
        first, second = int(m.group(1)), int(m.group(2))
        year = _expand_year(m.group(3))
        return _safe_date(year, first, second) or _safe_date(year, second, first)

    m = _MONTH_FIRST.match(s)
    if m:
        month = _month_from_token(m.group(1))
        if month:
            return _safe_date(int(m.group(3)), month, int(m.group(2)))

    m = _DAY_FIRST.match(s)
    if m:
        month = _month_from_token(m.group(2))
        if month:
            return _safe_date(int(m.group(3)), month, int(m.group(1)))

    return None


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def _group_row_indices(rows: list[dict[str, str]], col: str) -> dict[str, list[int]]:
    """Group row indices by trimmed, lowercased non-blank value of `col`."""

    seen: dict[str, list[int]] = {}
    for idx, row in enumerate(rows):
        val = row.get(col)
        if val and val.strip():
            seen.setdefault(val.strip().lower(), []).append(idx)
    return seen


def _check_duplicate_values(
    *,
    key: str,
    columns: Iterable[str],
    rows: list[dict[str, str]],
    settings: EngineSettings,
    detail_template: str,
) -> IndicatorFinding:
    flagged: set[int] = set()
    details: list[str] = []

    for col in columns:
        for val, indices in _group_row_indices(rows, col).items():
            if len(indices) > 1:
                flagged.update(indices)
                details.append(detail_template.format(value=val, n=len(indices), col=col))

    return _finding(key, flagged, details, settings)


def check_duplicate_ids(
    headers: list[str],
    rows: list[dict[str, str]],
    *,
    classifier: ColumnClassifier | None = None,
    settings: EngineSettings | None = None,
) -> IndicatorFinding:
    """Rows sharing an identifier value (case-insensitive) within an ID column."""

    classifier, settings = _resolve(classifier, settings)
    return _check_duplicate_values(
        key="duplicate_ids",
        columns=classifier.columns_for(ColumnRole.IDENTIFIER, headers),
        rows=rows,
        settings=settings,
        detail_template='"{value}" appears {n}× in column "{col}"',
    )


def check_manual_entries(
    headers: list[str],
    rows: list[dict[str, str]],
    *,
    classifier: ColumnClassifier | None = None,
    settings: EngineSettings | None = None,
) -> IndicatorFinding:
    """Rows whose source column is blank or names a manual channel.

    Independently of source columns, any cell containing the word "manual"
    flags its row. Each row is flagged (and described) at most once.
    """

    classifier, settings = _resolve(classifier, settings)
    source_cols = classifier.columns_for(ColumnRole.SOURCE, headers)
    markers = [re.compile(p, re.IGNORECASE) for p in settings.manual_markers]
    manual_word = re.compile(r"\bmanual\b", re.IGNORECASE)

    flagged: set[int] = set()
    details: list[str] = []

    for idx, row in enumerate(rows):
        for col in source_cols:
            val = row.get(col)
            if val is None or val.strip() == "":
                flagged.add(idx)
                details.append(f'Row {idx + 1}: blank "{col}"')
                break
            if any(p.search(val) for p in markers):
                flagged.add(idx)
                details.append(f'Row {idx + 1}: "{val}" in "{col}"')
                break

        if idx in flagged:
            continue

        for col in headers:
            val = row.get(col)
            if val and manual_word.search(val):
                flagged.add(idx)
                details.append(f'Row {idx + 1}: "{val}" in "{col}"')
                break

    return _finding("manual_entries", flagged, details, settings)


def check_round_numbers(
    headers: list[str],
    rows: list[dict[str, str]],
    *,
    classifier: ColumnClassifier | None = None,
    settings: EngineSettings | None = None,
) -> IndicatorFinding:
    """Non-zero amounts that are exact multiples of 100."""

    classifier, settings = _resolve(classifier, settings)
    flagged: set[int] = set()
    details: list[str] = []

    for col in classifier.columns_for(ColumnRole.AMOUNT, headers):
        for idx, row in enumerate(rows):
            raw = row.get(col)
            if not raw:
                continue
            amount = parse_amount(raw)
            if amount is None or amount == 0:
                continue
            if is_round_amount(amount):
                flagged.add(idx)
                details.append(f'Row {idx + 1}: {raw} in "{col}"')

    return _finding("round_numbers", flagged, details, settings)


_WEEKEND_NAMES = {5: "Saturday", 6: "Sunday"}


def check_weekend_dates(
    headers: list[str],
    rows: list[dict[str, str]],
    *,
    classifier: ColumnClassifier | None = None,
    settings: EngineSettings | None = None,
) -> IndicatorFinding:
    """Dates that fall on a Saturday or Sunday."""

    classifier, settings = _resolve(classifier, settings)
    flagged: set[int] = set()
    details: list[str] = []

    for col in classifier.columns_for(ColumnRole.DATE, headers):
        for idx, row in enumerate(rows):
            raw = row.get(col)
            if not raw or not raw.strip():
                continue
            parsed = parse_calendar_date(raw)
            if parsed is None:
                continue
            day_name = _WEEKEND_NAMES.get(parsed.weekday())
            if day_name:
                flagged.add(idx)
                details.append(f'Row {idx + 1}: {raw} ({day_name}) in "{col}"')

    return _finding("weekend_dates", flagged, details, settings)


def check_duplicate_invoices(
    headers: list[str],
    rows: list[dict[str, str]],
    *,
    classifier: ColumnClassifier | None = None,
    settings: EngineSettings | None = None,
) -> IndicatorFinding:
    classifier, settings = _resolve(classifier, settings)
    return _check_duplicate_values(
        key="duplicate_invoices",
        columns=classifier.columns_for(ColumnRole.INVOICE, headers),
        rows=rows,
        settings=settings,
        detail_template='Invoice "{value}" appears {n}× in "{col}"',
    )
