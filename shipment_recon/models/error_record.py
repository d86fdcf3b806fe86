from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for per-item error logging.

Reconciliation runs in "collect all errors, continue processing" mode by
default: a malformed cell or a too-short key is recorded as an ErrorRecord and
the item is skipped instead of aborting the whole run.

row is the 0-based position of the offending item within its source
(primary table row, flattened reference cell, unmatched key, report row).
Use -1 when the position is unknown or the error is not tied to one item.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: Where the item came from (primary, reference, customer, report, sink)
        row: 0-based item position, -1 if unknown
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable description
    """
    timestamp: str
    source: str
    row: int
    error_type: str
    message: str

    @staticmethod
    def create(source: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            source=source,
            row=row,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_exception(source: str, row: int, exc: Exception) -> ErrorRecord:
        """Build a record whose error_type is derived from the exception class.

        KeyTooShortError -> KEY_TOO_SHORT, ValueConversionError -> VALUE_CONVERSION
        """
        return ErrorRecord.create(source, row, _error_type_for(exc), str(exc))

    def to_json_line(self) -> str:
        # dataclass -> dict keeps the key set fixed
        return json.dumps(asdict(self), ensure_ascii=False, default=str)


def _error_type_for(exc: Exception) -> str:
    name = type(exc).__name__
    if name.endswith("Error"):
        name = name[: -len("Error")]
    out: list[str] = []
    for i, ch in enumerate(name):
        if ch.isupper() and i > 0 and not name[i - 1].isupper():
            out.append("_")
        out.append(ch.upper())
    return "".join(out) or "UNKNOWN"
