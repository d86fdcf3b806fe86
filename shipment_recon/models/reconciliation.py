from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

"""Reconciliation domain models.

PrimaryTable is what the workbook reader hands to the engine, Reconciliation
is what the engine hands to the report writer. Both are immutable; every
engine step produces new collections.
"""

__all__ = [
    "Row",
    "PrimaryTable",
    "CustomerReportRow",
    "Reconciliation",
]

# One record of the primary table (cell values in header order)
Row = tuple[Any, ...]


@dataclass(frozen=True)
class PrimaryTable:
    """Primary dataset after header resolution.

    key_column_index is resolved once from the configured key column name,
    so downstream code never looks columns up by display name per row.
    """
    columns: tuple[str, ...]
    rows: tuple[Row, ...]
    key_column_index: int = 0

    @classmethod
    def from_rows(
        cls, columns: Sequence[str], rows: Sequence[Sequence[Any]], key_column_index: int = 0
    ) -> PrimaryTable:
        return cls(
            columns=tuple(columns),
            rows=tuple(tuple(r) for r in rows),
            key_column_index=key_column_index,
        )

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class CustomerReportRow:
    """A primary record reshaped onto the report schema.

    values holds every target field in schema order; fields that are not
    filled by this tool are None and are completed manually downstream.
    """
    key: str
    customer_code: str
    values: dict[str, Any]

    def as_list(self) -> list[Any]:
        return list(self.values.values())


@dataclass(frozen=True)
class Reconciliation:
    """Result of one in-memory reconciliation run."""
    primary_keys: tuple[str, ...]
    reference_keys: frozenset[str]
    matched: tuple[str, ...]
    unmatched: tuple[str, ...]
    customers: tuple[str, ...]  # first-seen order over unmatched keys
    unmatched_records: tuple[Row, ...]  # rows of unmatched keys that have a customer code
    groups: dict[str, list[CustomerReportRow]] = field(default_factory=dict)
    target_schema: tuple[str, ...] = ()
    primary_fields: frozenset[str] = frozenset()

    @property
    def report_row_count(self) -> int:
        return sum(len(rows) for rows in self.groups.values())
