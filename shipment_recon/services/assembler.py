from __future__ import annotations

import logging
from collections.abc import Collection, Sequence
from typing import Any

from ..logging.error_log import ErrorLogBuffer
from ..models.reconciliation import CustomerReportRow
from .customers import KeyTooShortError, extract_customer
from .keys import ValueConversionError, normalize_key

"""Report assembly: group unmatched records by customer and reshape them.

Each record is mapped field-by-field using the source column order, then
projected onto the target report schema. Only primary fields are copied;
every other target field stays blank for manual completion downstream.
"""

__all__ = [
    "MissingKeyError",
    "assemble",
    "build_report_row",
]

logger = logging.getLogger(__name__)


class MissingKeyError(ValueError):
    """Raised when a record to assemble has no usable key."""


def build_report_row(
    key: str,
    customer_code: str,
    record: Sequence[Any],
    source_columns: Sequence[str],
    target_schema: Sequence[str],
    primary_fields: Collection[str],
) -> CustomerReportRow:
    """Reshape one record onto target_schema (blank = None)."""
    # zip stops at the shorter side; missing trailing cells stay unmapped
    field_values = dict(zip(source_columns, record))
    values: dict[str, Any] = {}
    for name in target_schema:
        if name in primary_fields and name in field_values:
            values[name] = field_values[name]
        else:
            values[name] = None
    return CustomerReportRow(key=key, customer_code=customer_code, values=values)


def assemble(
    records: Sequence[Sequence[Any]],
    source_columns: Sequence[str],
    target_schema: Sequence[str],
    primary_fields: Collection[str],
    *,
    key_column_index: int = 0,
    customer_start: int = 0,
    customer_end: int = 3,
    errors: ErrorLogBuffer | None = None,
) -> dict[str, list[CustomerReportRow]]:
    """Group records by customer code as report rows.

    Groups are created on first use and keep the order in which records were
    processed; no precomputed customer list is required.

    Raises (strict mode only, i.e. errors is None):
        MissingKeyError: record key cell is absent or out of range
        ValueConversionError: record key cell cannot be converted
        KeyTooShortError: key shorter than customer_end
    """
    groups: dict[str, list[CustomerReportRow]] = {}
    for pos, record in enumerate(records):
        try:
            if key_column_index >= len(record):
                raise MissingKeyError(f"record {pos} has no column {key_column_index}")
            key = normalize_key(record[key_column_index])
            if key is None:
                raise MissingKeyError(f"record {pos} has an empty key")
            code = extract_customer(key, customer_start, customer_end)
        except (MissingKeyError, ValueConversionError, KeyTooShortError) as e:
            if errors is None:
                raise
            errors.record("report", pos, e)
            logger.warning(f"report[{pos}]: {e} (skipped)")
            continue
        row = build_report_row(key, code, record, source_columns, target_schema, primary_fields)
        groups.setdefault(code, []).append(row)

    logger.debug(f"assemble: {len(records)} records -> {len(groups)} customer groups")
    return groups
