from __future__ import annotations

from datetime import date
from decimal import Decimal

from src.fraud_engine.integrations.csv_reader import parse_csv
from src.fraud_engine.use_cases.indicator_checks import (
    MAX_DETAIL_LINES,
    check_duplicate_ids,
    check_duplicate_invoices,
    check_manual_entries,
    check_round_numbers,
    check_weekend_dates,
    is_round_amount,
    parse_amount,
    parse_calendar_date,
)


def _table(text: str):
    t = parse_csv(text)
    return t.headers, t.rows


def test_parse_amount() -> None:
    assert parse_amount("1,234.56") == Decimal("1234.56")
    assert parse_amount("$1,000.00") == Decimal("1000.00")
    assert parse_amount("-200") == Decimal("-200")
    assert parse_amount("12.5.3") == Decimal("12.5")
    assert parse_amount("USD") is None
    assert parse_amount("") is None
    assert parse_amount("--5") is None
    assert parse_amount(None) is None


def test_is_round_amount() -> None:
    assert is_round_amount(Decimal("100"))
    assert is_round_amount(Decimal("1000.00"))
    assert is_round_amount(Decimal("-300"))
    assert not is_round_amount(Decimal("250"))
    assert not is_round_amount(Decimal("100.50"))
    assert is_round_amount(Decimal("1" + "0" * 40))
    assert not is_round_amount(parse_amount("100.0000000000000001"))


def test_parse_calendar_date_formats() -> None:
    assert parse_calendar_date("2024-01-06") == date(2024, 1, 6)
    assert parse_calendar_date("2024/1/6") == date(2024, 1, 6)
    assert parse_calendar_date("2024-01-06T23:30:00Z") == date(2024, 1, 6)
    assert parse_calendar_date("01/06/2024") == date(2024, 1, 6)
    assert parse_calendar_date("13/01/2024") == date(2024, 1, 13)
    assert parse_calendar_date("01/06/24") == date(2024, 1, 6)
    assert parse_calendar_date("Jan 6, 2024") == date(2024, 1, 6)
    assert parse_calendar_date("Saturday, January 6, 2024") == date(2024, 1, 6)
    assert parse_calendar_date("6 Jan 2024") == date(2024, 1, 6)
    assert parse_calendar_date("06-Sept-2024") == date(2024, 9, 6)


def test_parse_calendar_date_rejects_garbage() -> None:
    assert parse_calendar_date("") is None
    assert parse_calendar_date("not a date") is None
    assert parse_calendar_date("2024-02-30") is None
    assert parse_calendar_date("99/99/2024") is None
    assert parse_calendar_date(None) is None


def test_duplicate_ids_flags_every_member_case_insensitive() -> None:
    headers, rows = _table("id,amount\nA1,10\na1 ,20\nB2,30\nA1,40")
    finding = check_duplicate_ids(headers, rows)

    assert finding.label == "Duplicate IDs"
    assert finding.weight == 0.5
    assert finding.count == 3
    assert finding.flagged_rows == (0, 1, 3)
    assert finding.details == ('"a1" appears 3× in column "id"',)


def test_duplicate_ids_ignores_blank_values() -> None:
    headers, rows = _table("id,amount\n,10\n,20\n1,30")
    assert check_duplicate_ids(headers, rows).count == 0


def test_duplicate_ids_uses_first_column_fallback() -> None:
    headers, rows = _table("vendor,amount\nAcme,10\nAcme,20")
    finding = check_duplicate_ids(headers, rows)

    assert finding.count == 2
    assert finding.details == ('"acme" appears 2× in column "vendor"',)


def test_duplicate_ids_dedupes_rows_across_columns() -> None:
    headers, rows = _table("id,key\n1,k\n1,k\n2,z")
    finding = check_duplicate_ids(headers, rows)

    assert finding.count == 2
    assert finding.flagged_rows == (0, 1)
    assert len(finding.details) == 2


def test_manual_entries_blank_and_marker_and_free_text() -> None:
    text = (
        "id,source,memo\n"
        "1,Bank Feed,ok\n"
        "2,,ok\n"
        "3,Hand Keyed,ok\n"
        "4,API,Manual override\n"
        "5,API,manually fixed\n"
    )
    headers, rows = _table(text)
    finding = check_manual_entries(headers, rows)

    assert finding.flagged_rows == (1, 2, 3)
    assert finding.count == 3
    assert finding.details == (
        'Row 2: blank "source"',
        'Row 3: "Hand Keyed" in "source"',
        'Row 4: "Manual override" in "memo"',
    )


def test_manual_entries_flags_a_row_once() -> None:
    headers, rows = _table("source,channel,memo\nmanual,,manual\n")
    finding = check_manual_entries(headers, rows)

    assert finding.count == 1
    assert finding.details == ('Row 1: "manual" in "source"',)


def test_manual_entries_without_source_columns_scans_for_word() -> None:
    headers, rows = _table("id,memo\n1,posted MANUAL\n2,manualized\n")
    finding = check_manual_entries(headers, rows)

    assert finding.flagged_rows == (0,)


def test_round_numbers() -> None:
    headers, rows = _table('id,debit,credit\n1,100,\n2,"$1,500.00",200\n3,250,0\n4,abc,-300\n5,0,\n')
    finding = check_round_numbers(headers, rows)

    assert finding.weight == 0.9
    assert finding.flagged_rows == (0, 1, 3)
    assert finding.count == 3
    assert finding.details == (
        'Row 1: 100 in "debit"',
        'Row 2: $1,500.00 in "debit"',
        'Row 2: 200 in "credit"',
        'Row 4: -300 in "credit"',
    )


def test_weekend_dates() -> None:
    headers, rows = _table("id,date\n1,2024-01-06\n2,2024-01-07\n3,2024-01-08\n4,garbage\n5,\n")
    finding = check_weekend_dates(headers, rows)

    assert finding.flagged_rows == (0, 1)
    assert finding.details == (
        'Row 1: 2024-01-06 (Saturday) in "date"',
        'Row 2: 2024-01-07 (Sunday) in "date"',
    )


def test_duplicate_invoices() -> None:
    headers, rows = _table("invoice\nINV-1\nINV-1\nINV-2")
    finding = check_duplicate_invoices(headers, rows)

    assert finding.label == "Duplicate Invoices"
    assert finding.weight == 0.7
    assert finding.count == 2
    assert finding.flagged_rows == (0, 1)
    assert finding.details == ('Invoice "inv-1" appears 2× in "invoice"',)


def test_details_are_capped_but_counts_are_exact() -> None:
    lines = ["id,amount"] + [f"{i},{(i + 1) * 100}" for i in range(40)]
    headers, rows = _table("\n".join(lines))
    finding = check_round_numbers(headers, rows)

    assert finding.count == 40
    assert len(finding.flagged_rows) == 40
    assert len(finding.details) == MAX_DETAIL_LINES


def test_checks_without_matching_columns_find_nothing() -> None:
    headers, rows = _table("vendor,notes\nAcme,hello\nGlobex,world")

    assert check_round_numbers(headers, rows).count == 0
    assert check_weekend_dates(headers, rows).count == 0
    assert check_duplicate_invoices(headers, rows).count == 0
    assert check_manual_entries(headers, rows).count == 0


def test_checks_do_not_mutate_input() -> None:
    headers, rows = _table("id,amount,date\n1,100,2024-01-06\n1,100,2024-01-06")
    snapshot = [dict(r) for r in rows]

    for check in (
        check_duplicate_ids,
        check_manual_entries,
        check_round_numbers,
        check_weekend_dates,
        check_duplicate_invoices,
    ):
        check(headers, rows)

    assert rows == snapshot
    assert headers == ["id", "amount", "date"]
