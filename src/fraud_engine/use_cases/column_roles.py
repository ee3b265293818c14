"""Heuristic column-role classification for arbitrary CSV exports.

Third-party exports name the same concept many different ways ("Txn ID",
"transaction_id", "Ref Id", ...). Each role owns a list of regex patterns that
are searched against the lowercased header text. Roles are matched
independently, so one header can land in several roles (e.g. "invoice_date"
is both an invoice column and a date column).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping


class ColumnRole(str, Enum):
    IDENTIFIER = "identifier"
    INVOICE = "invoice"
    AMOUNT = "amount"
    DATE = "date"
    SOURCE = "source"


DEFAULT_ROLE_PATTERNS: Mapping[ColumnRole, tuple[str, ...]] = MappingProxyType({
    # Identifier patterns are anchored: "id" must be the whole header.
    ColumnRole.IDENTIFIER: (
        r"^id$",
        r"^record.?id$",
        r"^transaction.?id$",
        r"^trans.?id$",
        r"^entry.?id$",
        r"^ref.?id$",
        r"^reference.?id$",
        r"^unique.?id$",
        r"^row.?id$",
        r"^key$",
    ),
    ColumnRole.INVOICE: (
        r"invoice",
        r"inv.?no",
        r"inv.?num",
        r"inv.?#",
        r"bill.?no",
        r"bill.?num",
        r"document.?no",
        r"doc.?no",
        r"voucher",
    ),
    ColumnRole.AMOUNT: (
        r"debit",
        r"credit",
        r"amount",
        r"value",
        r"total",
        r"balance",
        r"sum",
        r"payment",
        r"price",
        r"cost",
    ),
    ColumnRole.DATE: (
        r"date",
        r"created.?at",
        r"updated.?at",
        r"timestamp",
        r"posted",
        r"trans.?date",
        r"entry.?date",
        r"effective",
        r"due",
    ),
    ColumnRole.SOURCE: (
        r"source",
        r"origin",
        r"entry.?type",
        r"input.?type",
        r"entry.?method",
        r"method",
        r"channel",
        r"type",
    ),
})


@dataclass(frozen=True, slots=True)
class ColumnRoles:
    identifier: tuple[str, ...]
    invoice: tuple[str, ...]
    amount: tuple[str, ...]
    date: tuple[str, ...]
    source: tuple[str, ...]

    def for_role(self, role: ColumnRole) -> tuple[str, ...]:
        return getattr(self, role.value)

    def as_dict(self) -> dict[str, list[str]]:
        return {role.value: list(self.for_role(role)) for role in ColumnRole}


class ColumnClassifier:
    """Assign headers to semantic roles using per-role regex patterns."""

    def __init__(
        self, role_patterns: Mapping[ColumnRole, Iterable[str]] | None = None
    ) -> None:
        patterns = role_patterns if role_patterns is not None else DEFAULT_ROLE_PATTERNS
        self._compiled: dict[ColumnRole, tuple[re.Pattern[str], ...]] = {
            role: tuple(re.compile(p) for p in patterns.get(role, ()))
            for role in ColumnRole
        }

    def matching_columns(self, role: ColumnRole, headers: Iterable[str]) -> list[str]:
        """Headers (in table order) whose lowercased text matches any pattern of `role`."""

        compiled = self._compiled[role]
        out: list[str] = []
        for h in headers:
            lower = (h or "").lower()
            if any(p.search(lower) for p in compiled):
                out.append(h)
        return out

    def identifier_columns(self, headers: list[str]) -> list[str]:
        """Identifier columns, falling back to the first header.

        The fallback is dropped when the first header is an invoice column, which
        the duplicate-invoice check already scans with its own weight.
        """

        matched = self.matching_columns(ColumnRole.IDENTIFIER, headers)
        if matched or not headers:
            return matched

        if self.matching_columns(ColumnRole.INVOICE, headers[:1]):
            return []
        return [headers[0]]

    def columns_for(self, role: ColumnRole, headers: list[str]) -> list[str]:
        if role is ColumnRole.IDENTIFIER:
            return self.identifier_columns(headers)
        return self.matching_columns(role, headers)

    def classify(self, headers: list[str]) -> ColumnRoles:
        return ColumnRoles(
            **{role.value: tuple(self.columns_for(role, headers)) for role in ColumnRole}
        )
