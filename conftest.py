"""Pytest configuration.

Ensures local packages can be imported consistently during test collection.
"""

import sys
from pathlib import Path

import pytest


def _prepend_sys_path(path: Path) -> None:
    resolved = str(path.resolve())
    if resolved not in sys.path:
        sys.path.insert(0, resolved)


REPO_ROOT = Path(__file__).resolve().parent

# Allow importing `src.*` package explicitly.
_prepend_sys_path(REPO_ROOT)


@pytest.fixture(autouse=True)
def _isolated_rulebook_env(monkeypatch):
    """Keep developer .env overrides out of the tests."""
    monkeypatch.delenv("FRAUD_RULEBOOK_PATH", raising=False)
    monkeypatch.delenv("FRAUD_ENGINE_API_PREFIX", raising=False)


@pytest.fixture
def ledger_csv() -> str:
    """A small general-ledger export exercising every indicator."""
    return (
        "Transaction ID,Invoice No,Date,Debit,Credit,Source,Memo\n"
        "T-1,INV-100,2024-01-05,125.40,,Bank Feed,Office supplies\n"
        "T-2,INV-101,2024-01-06,500.00,,Manual,Consulting\n"
        "T-2,INV-101,2024-01-08,,75.10,Bank Feed,Refund\n"
        "T-4,INV-103,2024-01-09,980.25,,,Travel\n"
        "T-5,INV-104,2024-01-10,12.00,,Bank Feed,manual adjustment\n"
    )
