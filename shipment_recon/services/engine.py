from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ReconSettings
from ..models.reconciliation import PrimaryTable, Reconciliation
from .assembler import assemble
from .comparator import partition
from .customers import extract_customers
from .keys import collect_keys, dedupe
from .projector import project

"""In-memory reconciliation engine.

Runs the whole pipeline over caller-supplied data:

    primary rows ─ collect_keys ─ dedupe ─┐
                                          ├─ partition ─ unmatched ─┬─ extract_customers
    reference cells ─ collect_keys ─ set ─┘                         └─ project ─ assemble

No I/O happens here; reading the workbook and writing the report are the
orchestrator's job.
"""

__all__ = [
    "reconcile",
]

logger = logging.getLogger(__name__)


def reconcile(
    table: PrimaryTable,
    reference_values: Iterable[Any],
    settings: ReconSettings | None = None,
    *,
    errors: ErrorLogBuffer | None = None,
) -> Reconciliation:
    """Reconcile the primary table against reference values.

    Args:
        table: Primary rows with the resolved key column index
        reference_values: Flat cell values of the reference range
        settings: Customer offsets and report schema (defaults if None)
        errors: Collect per-item errors here and continue; None = strict

    Returns:
        Reconciliation with keys, partitions, customers and report groups
    """
    settings = settings or ReconSettings()
    key_idx = table.key_column_index

    raw_primary = [row[key_idx] if key_idx < len(row) else None for row in table.rows]
    primary_keys = dedupe(collect_keys(raw_primary, source="primary", errors=errors))
    reference_keys = frozenset(
        dedupe(collect_keys(reference_values, source="reference", errors=errors), preserve_order=False)
    )
    logger.info(f"keys: primary={len(primary_keys)} reference={len(reference_keys)}")

    matched, unmatched = partition(primary_keys, reference_keys)
    logger.info(f"compare: matched={len(matched)} unmatched={len(unmatched)}")

    customers = extract_customers(
        unmatched, settings.customer_start, settings.customer_end, errors=errors
    )
    logger.debug(f"customers: {customers}")

    # a key without a customer code was already recorded by extract_customers
    reportable = [k for k in unmatched if len(k) >= settings.customer_end]
    records = project(table.rows, key_idx, reportable)
    source_columns = settings.source_columns or table.columns
    groups = assemble(
        records,
        source_columns,
        settings.target_schema,
        settings.primary_fields,
        key_column_index=key_idx,
        customer_start=settings.customer_start,
        customer_end=settings.customer_end,
        errors=errors,
    )
    logger.info(f"report: customers={len(groups)} rows={sum(len(v) for v in groups.values())}")

    return Reconciliation(
        primary_keys=tuple(primary_keys),
        reference_keys=reference_keys,
        matched=tuple(matched),
        unmatched=tuple(unmatched),
        customers=tuple(customers),
        unmatched_records=tuple(records),
        groups=groups,
        target_schema=tuple(settings.target_schema),
        primary_fields=frozenset(settings.primary_fields),
    )
