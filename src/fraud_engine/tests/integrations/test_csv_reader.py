from __future__ import annotations

import pytest

from src.fraud_engine.integrations.csv_reader import (
    ParsedTable,
    normalize_rows,
    parse_csv,
    read_csv_file,
)


def test_parse_csv_happy_path() -> None:
    table = parse_csv("id,amount\n1,100\n2,250")

    assert table.headers == ["id", "amount"]
    assert table.rows == [{"id": "1", "amount": "100"}, {"id": "2", "amount": "250"}]


def test_parse_csv_empty_and_blank_input() -> None:
    assert parse_csv("") == ParsedTable(headers=[], rows=[])
    assert parse_csv("   \n\r\n  \n") == ParsedTable(headers=[], rows=[])
    assert parse_csv(None).is_empty


def test_parse_csv_header_only() -> None:
    table = parse_csv("id,amount\n")
    assert table.headers == ["id", "amount"]
    assert table.rows == []


def test_parse_csv_quoted_comma_is_not_a_delimiter() -> None:
    table = parse_csv('id,note\n1,"hello, world"')

    assert len(table.rows) == 1
    assert table.rows[0]["note"] == "hello, world"


def test_parse_csv_quoted_newline_and_escaped_quote() -> None:
    text = 'id,note\n1,"line one\nline two"\n2,"she said ""hi"""\n'
    table = parse_csv(text)

    assert [r["id"] for r in table.rows] == ["1", "2"]
    assert table.rows[0]["note"] == "line one\nline two"
    assert table.rows[1]["note"] == 'she said "hi"'


def test_parse_csv_line_terminators_and_blank_lines() -> None:
    text = "id,name\r\n1,a\r\n\r\n2,b\r3,c\n\n   \n"
    table = parse_csv(text)

    assert [r["id"] for r in table.rows] == ["1", "2", "3"]
    assert [r["name"] for r in table.rows] == ["a", "b", "c"]


def test_parse_csv_trims_and_pads_and_drops_extra_fields() -> None:
    table = parse_csv(" id , amount ,note\n 1 ,  20 \n2,30,x,extra,more")

    assert table.headers == ["id", "amount", "note"]
    assert table.rows[0] == {"id": "1", "amount": "20", "note": ""}
    assert table.rows[1] == {"id": "2", "amount": "30", "note": "x"}


def test_parse_csv_every_row_has_header_key_set() -> None:
    table = parse_csv("a,b,c\n1\n1,2\n1,2,3")
    for row in table.rows:
        assert set(row) == {"a", "b", "c"}


def test_parse_csv_duplicate_headers_last_value_wins() -> None:
    table = parse_csv("id,value,value\n1,first,second")

    assert table.headers == ["id", "value", "value"]
    assert table.rows[0] == {"id": "1", "value": "second"}


def test_parse_csv_drops_leading_bom() -> None:
    table = parse_csv("\ufeffid,amount\n1,100")

    assert table.headers == ["id", "amount"]
    assert table.rows == [{"id": "1", "amount": "100"}]


def test_parse_csv_never_raises_on_unbalanced_quotes() -> None:
    table = parse_csv('id,note\n1,"never closed\n2,x')
    assert table.headers == ["id", "note"]
    assert len(table.rows) == 1


def test_normalize_rows_coerces_to_header_key_set() -> None:
    rows = normalize_rows(["id", "amount"], [{"id": 7, "amount": None, "extra": "x"}, {}])
    assert rows == [{"id": "7", "amount": ""}, {"id": "", "amount": ""}]


def test_read_csv_file_strips_bom(tmp_path) -> None:
    path = tmp_path / "export.csv"
    path.write_bytes("\ufeffid,amount\n1,100\n".encode("utf-8"))

    table = read_csv_file(path)
    assert table.headers == ["id", "amount"]
    assert table.rows == [{"id": "1", "amount": "100"}]


def test_read_csv_file_missing_file_propagates(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        read_csv_file(tmp_path / "missing.csv")
