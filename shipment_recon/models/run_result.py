from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Run result model for the shipment reconciliation tool.

RunResult carries everything the SUMMARY line and the CLI exit code need.
"""

__all__ = [
    "RunResult",
]


@dataclass(frozen=True)
class RunResult:
    """Aggregated metrics for one reconciliation run."""
    primary_rows: int  # data rows read from the primary sheet
    primary_keys: int  # unique primary keys
    reference_keys: int  # unique reference keys
    matched: int
    unmatched: int
    customers: int  # customer codes found among unmatched keys
    report_rows: int
    written_sheets: int  # customer sheets actually written
    errors: int  # per-item errors collected during the run
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    output_path: str | None = None
    error_log_path: str | None = None

    @property
    def has_errors(self) -> bool:
        return self.errors > 0
