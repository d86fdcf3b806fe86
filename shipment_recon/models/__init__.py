"""Domain models for the shipment reconciliation tool.

This package contains the configuration, reconciliation and run-result
models shared by the reader, the engine, the report writer and the CLI.
"""

from .config_models import (
    PrimarySheetConfig,
    ReconConfig,
    ReconSettings,
    ReferenceSheetConfig,
    ReportConfig,
)
from .error_record import ErrorRecord
from .reconciliation import CustomerReportRow, PrimaryTable, Reconciliation, Row
from .run_result import RunResult

__all__ = [
    # Configuration models
    "PrimarySheetConfig",
    "ReconConfig",
    "ReconSettings",
    "ReferenceSheetConfig",
    "ReportConfig",
    # Processing models
    "CustomerReportRow",
    "ErrorRecord",
    "PrimaryTable",
    "Reconciliation",
    "Row",
    "RunResult",
]
