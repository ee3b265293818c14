"""Smoke test: validate the CSV fraud-indicator YAML rulebook.

This is intentionally lightweight and does NOT analyse any data.
It catches common issues (unknown indicator keys, bad regexes, non-numeric
weights) so you can iterate on the rulebook quickly.

Run:
  python scripts/fraud_rulebook_smoke.py

Optional env vars:
  FRAUD_RULEBOOK_PATH  (default: data/fraud_rulebooks/csv_fraud_indicators.yaml)
"""

from __future__ import annotations

import sys
from pathlib import Path

from dotenv import load_dotenv

# Allow running as: `python scripts/fraud_rulebook_smoke.py`
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

load_dotenv(override=False)

from src.fraud_engine.config.settings import (
    INDICATOR_KEYS,
    RulebookError,
    load_rulebook,
    resolve_rulebook_path,
)


def _fail(msg: str) -> int:
    print(f"ERROR: {msg}", file=sys.stderr)
    return 1


def main() -> int:
    path = resolve_rulebook_path()
    if path is None:
        return _fail("No rulebook found (set FRAUD_RULEBOOK_PATH or add the default file)")

    try:
        settings = load_rulebook(path)
    except RulebookError as e:
        return _fail(str(e))

    print("✅ Rulebook parsed")
    print(f"- Path: {path}")
    print(f"- Rulebook ID: {settings.rulebook_id}")
    print(f"- Version: {settings.rulebook_version}")
    for key in INDICATOR_KEYS:
        print(f"- {settings.label_for(key)}: weight {settings.weight_for(key)}")
    for role, patterns in settings.role_patterns.items():
        print(f"- Column role {role.value}: {len(patterns)} patterns")
    print(f"- Manual markers: {', '.join(settings.manual_markers)}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
