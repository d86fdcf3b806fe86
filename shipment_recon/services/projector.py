from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any

from ..models.reconciliation import Row
from .keys import ValueConversionError, dedupe, normalize_key

"""Record projection: full primary rows for a set of target keys."""

__all__ = [
    "build_key_index",
    "project",
]

logger = logging.getLogger(__name__)


def build_key_index(table: Sequence[Sequence[Any]], key_column_index: int) -> dict[str, int]:
    """Map each key to the position of the first row carrying it.

    Later rows with the same key are ignored (first seen wins). Rows whose key
    cell is absent, unconvertible or out of range are not indexed.
    """
    index: dict[str, int] = {}
    for pos, row in enumerate(table):
        if key_column_index >= len(row):
            continue
        try:
            key = normalize_key(row[key_column_index])
        except ValueConversionError:
            logger.debug(f"project: row {pos} key not convertible, not indexed")
            continue
        if key is not None and key not in index:
            index[key] = pos
    return index


def project(
    table: Sequence[Sequence[Any]],
    key_column_index: int,
    target_keys: Iterable[str],
) -> list[Row]:
    """Return the first full row for each (deduplicated) target key.

    Output follows target_keys order. Keys absent from the table are skipped.
    """
    index = build_key_index(table, key_column_index)
    rows: list[Row] = []
    for key in dedupe(target_keys):
        pos = index.get(key)
        if pos is None:
            logger.debug(f"project: key {key!r} not found in table (skipped)")
            continue
        rows.append(tuple(table[pos]))
    return rows
