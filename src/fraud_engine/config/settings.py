"""Configuration for the CSV fraud-indicator engine.

Defaults live in code so the engine works without touching the filesystem.
A YAML rulebook (see data/fraud_rulebooks/csv_fraud_indicators.yaml) can
override indicator weights/labels, column-role patterns and manual-entry markers.

Environment:
- FRAUD_RULEBOOK_PATH      rulebook YAML (relative paths resolve from repo root)
- FRAUD_ENGINE_LOG_LEVEL   logging level for the API app (default INFO)
- FRAUD_ENGINE_API_PREFIX  router prefix for the API app (default /api/v1)
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml
from dotenv import load_dotenv

from src.fraud_engine.use_cases.column_roles import DEFAULT_ROLE_PATTERNS, ColumnRole

load_dotenv()

logger = logging.getLogger(__name__)


INDICATOR_KEYS: tuple[str, ...] = (
    "duplicate_ids",
    "manual_entries",
    "round_numbers",
    "weekend_dates",
    "duplicate_invoices",
)

DEFAULT_INDICATOR_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "duplicate_ids": "Duplicate IDs",
        "manual_entries": "Manual Entries",
        "round_numbers": "Round Numbers",
        "weekend_dates": "Weekend Dates",
        "duplicate_invoices": "Duplicate Invoices",
    }
)

DEFAULT_INDICATOR_WEIGHTS: Mapping[str, float] = MappingProxyType(
    {
        "duplicate_ids": 0.5,
        "manual_entries": 0.5,
        "round_numbers": 0.9,
        "weekend_dates": 0.5,
        "duplicate_invoices": 0.7,
    }
)

DEFAULT_MANUAL_MARKERS: tuple[str, ...] = ("manual", "hand", "keyed", "typed")

DEFAULT_RULEBOOK_RELATIVE_PATH = Path("data") / "fraud_rulebooks" / "csv_fraud_indicators.yaml"


class RulebookError(ValueError):
    """Raised when a rulebook file cannot be read or fails validation."""


def repo_root() -> Path:
    """settings.py lives at src/fraud_engine/config/settings.py."""
    return Path(__file__).resolve().parents[3]


@dataclass(frozen=True, slots=True)
class EngineSettings:
    rulebook_id: str = "csv-fraud-indicators"
    rulebook_version: str = "builtin"
    weights: Mapping[str, float] = field(default_factory=lambda: DEFAULT_INDICATOR_WEIGHTS)
    labels: Mapping[str, str] = field(default_factory=lambda: DEFAULT_INDICATOR_LABELS)
    role_patterns: Mapping[ColumnRole, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType(dict(DEFAULT_ROLE_PATTERNS))
    )
    manual_markers: tuple[str, ...] = DEFAULT_MANUAL_MARKERS
    source_path: str | None = None

    def weight_for(self, indicator_key: str) -> float:
        return float(self.weights.get(indicator_key, DEFAULT_INDICATOR_WEIGHTS[indicator_key]))

    def label_for(self, indicator_key: str) -> str:
        return self.labels.get(indicator_key) or DEFAULT_INDICATOR_LABELS[indicator_key]

    def describe(self) -> dict[str, Any]:
        return {
            "id": self.rulebook_id,
            "version": self.rulebook_version,
            "path": self.source_path,
            "indicators": {
                key: {"label": self.label_for(key), "weight": self.weight_for(key)}
                for key in INDICATOR_KEYS
            },
            "column_roles": {role.value: list(self.role_patterns.get(role, ())) for role in ColumnRole},
            "manual_markers": list(self.manual_markers),
        }


DEFAULT_SETTINGS = EngineSettings()


def _validated_patterns(raw: Any, *, where: str) -> tuple[str, ...]:
    if not isinstance(raw, list) or not raw:
        raise RulebookError(f"{where} must be a non-empty list of regex strings")
    out: list[str] = []
    for p in raw:
        if not isinstance(p, str) or not p.strip():
            raise RulebookError(f"{where} contains an empty or non-string pattern")
        try:
            re.compile(p)
        except re.error as e:
            raise RulebookError(f"{where} has invalid regex {p!r}: {e}") from e
        out.append(p)
    return tuple(out)


def settings_from_rulebook(doc: Any, *, source_path: str | None = None) -> EngineSettings:
    """Build EngineSettings from a parsed rulebook document.

    Sections that are absent keep the built-in defaults.
    """

    if doc is None:
        doc = {}
    if not isinstance(doc, dict):
        raise RulebookError("Rulebook YAML must parse to a mapping (dict)")

    meta = doc.get("rulebook") or {}
    if not isinstance(meta, dict):
        raise RulebookError("rulebook must be a mapping")

    weights = dict(DEFAULT_INDICATOR_WEIGHTS)
    labels = dict(DEFAULT_INDICATOR_LABELS)
    indicators = doc.get("indicators") or {}
    if not isinstance(indicators, dict):
        raise RulebookError("indicators must be a mapping of indicator key -> settings")
    for key, cfg in indicators.items():
        if key not in DEFAULT_INDICATOR_WEIGHTS:
            raise RulebookError(f"Unknown indicator key: {key}")
        cfg = cfg or {}
        if not isinstance(cfg, dict):
            raise RulebookError(f"indicators.{key} must be a mapping")
        if "weight" in cfg:
            try:
                weight = float(cfg["weight"])
            except (TypeError, ValueError) as e:
                raise RulebookError(f"indicators.{key}.weight must be numeric") from e
            if weight < 0:
                raise RulebookError(f"indicators.{key}.weight must be >= 0")
            weights[key] = weight
        if cfg.get("label"):
            labels[key] = str(cfg["label"])

    role_patterns = dict(DEFAULT_ROLE_PATTERNS)
    column_roles = doc.get("column_roles") or {}
    if not isinstance(column_roles, dict):
        raise RulebookError("column_roles must be a mapping of role -> patterns")
    for role_name, patterns in column_roles.items():
        try:
            role = ColumnRole(str(role_name).lower())
        except ValueError as e:
            raise RulebookError(f"Unknown column role: {role_name}") from e
        role_patterns[role] = _validated_patterns(patterns, where=f"column_roles.{role.value}")

    manual_markers = DEFAULT_MANUAL_MARKERS
    if doc.get("manual_markers") is not None:
        manual_markers = _validated_patterns(doc.get("manual_markers"), where="manual_markers")

    return EngineSettings(
        rulebook_id=str(meta.get("id") or DEFAULT_SETTINGS.rulebook_id),
        rulebook_version=str(meta.get("version") or DEFAULT_SETTINGS.rulebook_version),
        weights=MappingProxyType(weights),
        labels=MappingProxyType(labels),
        role_patterns=MappingProxyType(role_patterns),
        manual_markers=manual_markers,
        source_path=source_path,
    )


def load_rulebook(path: str | Path) -> EngineSettings:
    """Load and validate a rulebook YAML file."""

    p = Path(path)
    if not p.exists():
        logger.error(f"Rulebook file not found: {p}")
        raise RulebookError(f"Rulebook file not found: {p}")
    try:
        with open(p, "r", encoding="utf-8") as f:
            doc = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to load rulebook {p}: {e}")
        raise RulebookError(f"Failed to parse rulebook YAML: {e}") from e

    settings = settings_from_rulebook(doc, source_path=str(p))
    logger.info(
        f"Loaded fraud rulebook {settings.rulebook_id} v{settings.rulebook_version} from {p}"
    )
    return settings


def resolve_rulebook_path(explicit: str | None = None) -> Path | None:
    """Pick the rulebook path: explicit value, then FRAUD_RULEBOOK_PATH, then the shipped file."""

    root = repo_root()
    candidate = explicit or os.environ.get("FRAUD_RULEBOOK_PATH")
    if candidate:
        p = Path(candidate).expanduser()
        return p if p.is_absolute() else (root / p).resolve()

    default = root / DEFAULT_RULEBOOK_RELATIVE_PATH
    return default if default.exists() else None


def settings_from_env(rulebook_path: str | None = None) -> EngineSettings:
    path = resolve_rulebook_path(rulebook_path)
    if path is None:
        return DEFAULT_SETTINGS
    return load_rulebook(path)


def log_level_from_env() -> int:
    name = os.environ.get("FRAUD_ENGINE_LOG_LEVEL", "INFO").upper()
    return getattr(logging, name, logging.INFO)


def api_prefix_from_env() -> str:
    prefix = os.environ.get("FRAUD_ENGINE_API_PREFIX", "/api/v1").strip()
    return "/" + prefix.strip("/") if prefix.strip("/") else ""
