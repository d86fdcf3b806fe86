from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from shipment_recon.models.error_record import ErrorRecord

"""Per-item error collection & JSON Lines error log.

- Fixed JSON Lines schema (timestamp, source, row, error_type, message)
- One `logs/errors-YYYYMMDD-HHMMSS.log` (UTC) per run, created on first flush
- Records are buffered in memory and written once at the end of a run

Engine functions accept an optional ErrorLogBuffer: when one is given they
record the failing item and continue, otherwise they raise (strict mode).
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    Single-threaded use only. The file path is fixed on first access.
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._file_path: Path | None = None
        self._total = 0

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)
        self._total += 1

    def record(self, source: str, row: int, exc: Exception) -> ErrorRecord:
        """Append a record built from an exception and return it."""
        rec = ErrorRecord.from_exception(source, row, exc)
        self.append(rec)
        return rec

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    @property
    def total(self) -> int:
        """Records appended since creation, including already flushed ones."""
        return self._total

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write pending records; returns None when nothing was ever recorded."""
        if not self._records:
            return self._file_path
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
