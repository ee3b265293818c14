"""Run the fraud-indicator analysis over a local CSV file.

Prints the analysis JSON (camelCase, same shape the API returns under
"analysis") plus a short summary on stderr.

Run:
  python scripts/csv_fraud_scan.py path/to/ledger.csv
  python scripts/csv_fraud_scan.py ledger.csv --rulebook data/fraud_rulebooks/csv_fraud_indicators.yaml -o out.json
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from dotenv import load_dotenv


# Ensure `import src.*` works when running as `python scripts/...` from repo root.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.fraud_engine.config.settings import RulebookError, settings_from_env
from src.fraud_engine.integrations.csv_reader import read_csv_file
from src.fraud_engine.use_cases.fraud_analysis import analyze_fraud_indicators


def _fail(msg: str) -> int:
    print(f"ERROR: {msg}", file=sys.stderr)
    return 1


def main() -> int:
    parser = argparse.ArgumentParser(description="CSV fraud indicator scan")
    parser.add_argument("input", help="CSV file to analyse")
    parser.add_argument("--rulebook", help="Rulebook YAML (defaults to FRAUD_RULEBOOK_PATH or the shipped rulebook)")
    parser.add_argument("--encoding", default="utf-8-sig", help="File encoding (default: utf-8-sig)")
    parser.add_argument("-o", "--out", help="Write JSON here instead of stdout")
    args = parser.parse_args()

    load_dotenv(dotenv_path=".env", override=False)

    try:
        settings = settings_from_env(args.rulebook)
    except RulebookError as e:
        return _fail(str(e))

    try:
        table = read_csv_file(args.input, encoding=args.encoding)
    except (OSError, UnicodeDecodeError) as e:
        return _fail(f"Could not read {args.input}: {e}")

    if table.is_empty:
        print("⚠️ The CSV file has no data rows.", file=sys.stderr)

    result = analyze_fraud_indicators(table, settings=settings)
    payload = json.dumps(result.to_dict(), indent=2, ensure_ascii=False)

    if args.out:
        with open(args.out, "w", encoding="utf-8") as f:
            f.write(payload)
    else:
        print(payload)

    print(
        f"- Rows: {result.total_rows} | Indicators: {result.total_indicators} | "
        f"Risk score: {result.risk_score} ({result.risk_level.value})",
        file=sys.stderr,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
