"""Tolerant CSV reader for arbitrary transactional exports.

Goals
- Turn raw CSV text into headers + row mappings in a single pass.
- Never raise on malformed content: worst case is an empty table.

Quote handling is RFC-4180-like (simplified): quoted fields may contain commas
and newlines, and `""` inside a quoted field is a literal quote. Only commas
delimit fields; there is no delimiter sniffing or type inference.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True, slots=True)
class ParsedTable:
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rows


def _split_csv_lines(text: str) -> list[str]:
    """Split content into logical lines; newlines inside quotes stay in the line.

    Quote characters are kept so the row splitter can resolve them. Lines that
    are blank after trimming are dropped.
    """

    lines: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(text)

    while i < n:
        ch = text[i]
        if ch == '"':
            in_quotes = not in_quotes
            current.append(ch)
        elif ch in "\r\n" and not in_quotes:
            if ch == "\r" and i + 1 < n and text[i + 1] == "\n":
                i += 1
            line = "".join(current)
            if line.strip():
                lines.append(line)
            current = []
        else:
            current.append(ch)
        i += 1

    line = "".join(current)
    if line.strip():
        lines.append(line)
    return lines


def _split_csv_row(line: str) -> list[str]:
    values: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)

    while i < n:
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            values.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1

    values.append("".join(current))
    return values


def parse_csv(text: str | None) -> ParsedTable:
    """Parse raw CSV text into a ParsedTable.

    - First non-blank line is the header row (trimmed, not deduplicated).
    - Every row maps each header to a trimmed value; short rows are padded with
      "" and extra fields are dropped.
    - Duplicate header names collide: the last column with that name wins.
    - A leading UTF-8 byte-order mark is dropped, as `read_csv_file` does.
    """

    text = (text or "").removeprefix("\ufeff")
    lines = _split_csv_lines(text)
    if not lines:
        return ParsedTable(headers=[], rows=[])

    headers = [h.strip() for h in _split_csv_row(lines[0])]
    rows: list[dict[str, str]] = []

    for line in lines[1:]:
        values = _split_csv_row(line)
        if len(values) == 1 and values[0].strip() == "":
            continue
        row: dict[str, str] = {}
        for idx, header in enumerate(headers):
            row[header] = values[idx].strip() if idx < len(values) else ""
        rows.append(row)

    return ParsedTable(headers=headers, rows=rows)


def normalize_rows(headers: list[str], rows: list[dict[str, object]]) -> list[dict[str, str]]:
    """Coerce caller-supplied row mappings to the ParsedTable shape.

    Keys outside `headers` are dropped, missing keys become "" and values are
    stringified and trimmed (None becomes "").
    """

    out: list[dict[str, str]] = []
    for r in rows:
        row: dict[str, str] = {}
        for h in headers:
            v = r.get(h) if isinstance(r, dict) else None
            row[h] = "" if v is None else str(v).strip()
        out.append(row)
    return out


def read_csv_file(path: str | Path, *, encoding: str = "utf-8-sig") -> ParsedTable:
    """Read a CSV file from disk and parse it.

    IO errors propagate to the caller; decoding uses `encoding` (the default
    strips a UTF-8 BOM, common in spreadsheet exports).
    """

    with open(Path(path).expanduser(), "r", encoding=encoding, newline="") as f:
        return parse_csv(f.read())
