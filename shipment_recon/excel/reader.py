from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

import pandas as pd

from ..models.config_models import PrimarySheetConfig, ReferenceSheetConfig
from ..models.reconciliation import PrimaryTable
from ..services.keys import flatten_reference

"""Workbook reader (tabular data source).

Primary sheet: `skip_rows` title rows, then the header row, then data rows.
Configured columns are dropped and the key column name is resolved to an
index once. Reference sheet: `skip_rows` header rows, then an arbitrary
rectangle of key cells that is flattened row-major.

Sheets are read with dtype=object so integer cells stay integers; empty cells
(NaN/NaT) become None.
"""

__all__ = [
    "SheetNotFoundError",
    "SheetHeaderError",
    "MissingColumnsError",
    "read_excel_file",
    "get_column_index",
    "normalize_primary",
    "normalize_reference",
    "read_workbook",
]


class SheetNotFoundError(Exception):
    """Raised when a configured sheet does not exist in the workbook."""

class SheetHeaderError(Exception):
    """Raised when the header row is missing."""

class MissingColumnsError(Exception):
    """Raised when an expected column is missing in the sheet header."""


def read_excel_file(path: Path, target_sheets: Iterable[str]) -> dict[str, pd.DataFrame]:
    """Read the named sheets without header inference.

    Raises:
        SheetNotFoundError: one of target_sheets is not in the workbook
    """
    wanted = list(dict.fromkeys(target_sheets))
    dfs: dict[str, pd.DataFrame] = {}
    with pd.ExcelFile(path) as xls:
        available = [str(n) for n in xls.sheet_names]
        missing = [s for s in wanted if s not in available]
        if missing:
            raise SheetNotFoundError(
                f"{path.name}: sheet(s) not found: {missing} (available: {available})"
            )
        for name in wanted:
            dfs[name] = xls.parse(name, header=None, dtype=object)
    return dfs


def _clean(value: Any) -> Any:
    if value is None:
        return None
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):  # list-like cell, keep as is
        return value
    return value


def get_column_index(column_name: str, columns: Sequence[str]) -> int:
    """Index of column_name in columns.

    Raises:
        MissingColumnsError: column not present
    """
    try:
        return list(columns).index(column_name)
    except ValueError:
        raise MissingColumnsError(
            f"column '{column_name}' not found in header: {list(columns)}"
        ) from None


def normalize_primary(df: pd.DataFrame, cfg: PrimarySheetConfig) -> PrimaryTable:
    """Turn the raw primary sheet into a PrimaryTable.

    Steps:
    1. Skip cfg.skip_rows title rows; the next row is the header
    2. Drop cfg.drop_columns (when present)
    3. Skip rows whose cells are all empty
    4. Resolve cfg.key_column to its index
    """
    if df.shape[0] <= cfg.skip_rows:
        raise SheetHeaderError(
            f"sheet '{cfg.sheet_name}' has no header row after {cfg.skip_rows} title rows"
        )
    header = [
        "" if _clean(c) is None else str(c).strip()
        for c in df.iloc[cfg.skip_rows].tolist()
    ]
    drop = set(cfg.drop_columns)
    keep = [i for i, name in enumerate(header) if name not in drop]
    columns = [header[i] for i in keep]

    rows: list[tuple[Any, ...]] = []
    for raw in df.iloc[cfg.skip_rows + 1:].itertuples(index=False, name=None):
        values = tuple(_clean(raw[i]) for i in keep)
        if all(v is None for v in values):
            continue
        rows.append(values)

    key_idx = get_column_index(cfg.key_column, columns)
    return PrimaryTable.from_rows(columns, rows, key_column_index=key_idx)


def normalize_reference(df: pd.DataFrame, cfg: ReferenceSheetConfig) -> list[Any]:
    """Flatten the reference sheet below its header rows."""
    data = df.iloc[cfg.skip_rows:]
    rows = [[_clean(v) for v in raw] for raw in data.itertuples(index=False, name=None)]
    return flatten_reference(rows)


def read_workbook(
    path: Path, primary: PrimarySheetConfig, reference: ReferenceSheetConfig
) -> tuple[PrimaryTable, list[Any]]:
    """Read both datasets from one workbook."""
    dfs = read_excel_file(path, [primary.sheet_name, reference.sheet_name])
    table = normalize_primary(dfs[primary.sheet_name], primary)
    values = normalize_reference(dfs[reference.sheet_name], reference)
    return table, values
