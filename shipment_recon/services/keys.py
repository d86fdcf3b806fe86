from __future__ import annotations

import logging
import math
import numbers
from collections.abc import Iterable, Sequence
from typing import Any

from ..logging.error_log import ErrorLogBuffer

"""Key normalization & deduplication.

Cell values coming from a spreadsheet may be absent, numeric, boolean or
text. They are turned into trimmed string keys; empty results are absent.
Keys compare by exact string equality (no case folding).
"""

__all__ = [
    "ValueConversionError",
    "InputShapeError",
    "normalize_key",
    "collect_keys",
    "dedupe",
    "flatten_reference",
]

logger = logging.getLogger(__name__)


class ValueConversionError(ValueError):
    """Raised when a cell value cannot be turned into a string key."""

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(
            f"cannot convert value {value!r} of type {type(value).__name__} to a key"
        )


class InputShapeError(Exception):
    """Raised for malformed input shape (fatal for the run)."""


def normalize_key(raw: Any) -> str | None:
    """Convert a raw cell value to a key.

    Returns None for absent values and for values that are empty after
    trimming. Booleans render as "true"/"false" and integral floats lose
    their fraction (42.0 -> "42") so that a numeric key read from a sheet
    with blanks in the same column matches its text form.

    Raises:
        ValueConversionError: unsupported type or non-finite number
    """
    if raw is None:
        return None
    # bool is an Integral; check it first
    if isinstance(raw, bool):
        return "true" if raw else "false"
    if isinstance(raw, str):
        text = raw.strip()
    elif isinstance(raw, numbers.Integral):
        text = str(int(raw))
    elif isinstance(raw, numbers.Real):
        f = float(raw)
        if math.isnan(f):  # pandas missing marker
            return None
        if math.isinf(f):
            raise ValueConversionError(raw)
        text = str(int(f)) if f.is_integer() else repr(f)
    else:
        raise ValueConversionError(raw)
    return text or None


def collect_keys(
    values: Iterable[Any],
    *,
    source: str,
    errors: ErrorLogBuffer | None = None,
) -> list[str]:
    """Normalize values to keys, dropping absent ones (duplicates are kept).

    A value that fails conversion is recorded in `errors` and treated as
    absent. Without an error buffer the ValueConversionError propagates.
    """
    keys: list[str] = []
    for pos, raw in enumerate(values):
        try:
            key = normalize_key(raw)
        except ValueConversionError as e:
            if errors is None:
                raise
            errors.record(source, pos, e)
            logger.warning(f"{source}[{pos}]: {e} (skipped)")
            continue
        if key is not None:
            keys.append(key)
    return keys


def dedupe(keys: Iterable[str], preserve_order: bool = True) -> list[str]:
    """Return unique keys in O(n).

    preserve_order=True keeps first-occurrence order (primary keys); with
    False the order is unspecified (reference keys, membership only).
    """
    if preserve_order:
        return list(dict.fromkeys(keys))
    return list(set(keys))


def flatten_reference(rows: Sequence[Sequence[Any]]) -> list[Any]:
    """Flatten a rectangular range of cells row-major.

    Raises:
        InputShapeError: rows of differing length
    """
    if not rows:
        return []
    width = len(rows[0])
    flat: list[Any] = []
    for i, row in enumerate(rows):
        if len(row) != width:
            raise InputShapeError(
                f"reference range is not rectangular: row {i} has {len(row)} cells, expected {width}"
            )
        flat.extend(row)
    return flat
