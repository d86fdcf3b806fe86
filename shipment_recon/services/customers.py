from __future__ import annotations

import logging
from collections.abc import Iterable

from ..logging.error_log import ErrorLogBuffer

"""Customer code extraction.

The customer code is a fixed-offset slice of the shipment key (the first three
characters by default). Keys shorter than the end offset are rejected instead
of silently producing a shorter code.
"""

__all__ = [
    "KeyTooShortError",
    "extract_customer",
    "extract_customers",
]

logger = logging.getLogger(__name__)


class KeyTooShortError(ValueError):
    """Raised when a key is shorter than the customer-code end offset."""

    def __init__(self, key: str, required: int) -> None:
        self.key = key
        self.required = required
        super().__init__(
            f"key {key!r} has {len(key)} characters, customer code needs at least {required}"
        )


def _check_offsets(start: int, end: int) -> None:
    if start < 0 or end <= start:
        raise ValueError(f"invalid customer code offsets: start={start} end={end}")


def extract_customer(key: str, start: int = 0, end: int = 3) -> str:
    """Return key[start:end].

    Raises:
        KeyTooShortError: len(key) < end
        ValueError: start < 0 or end <= start
    """
    _check_offsets(start, end)
    if len(key) < end:
        raise KeyTooShortError(key, end)
    return key[start:end]


def extract_customers(
    keys: Iterable[str],
    start: int = 0,
    end: int = 3,
    *,
    errors: ErrorLogBuffer | None = None,
) -> list[str]:
    """Unique customer codes over keys, in first-seen order.

    Too-short keys are recorded in `errors` and skipped; without an error
    buffer the KeyTooShortError propagates.
    """
    _check_offsets(start, end)
    codes: dict[str, None] = {}
    for pos, key in enumerate(keys):
        try:
            code = extract_customer(key, start, end)
        except KeyTooShortError as e:
            if errors is None:
                raise
            errors.record("customer", pos, e)
            logger.warning(f"customer[{pos}]: {e} (skipped)")
            continue
        codes.setdefault(code, None)
    return list(codes)
