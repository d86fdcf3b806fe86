from __future__ import annotations

import logging
import zipfile
from datetime import UTC, datetime
from pathlib import Path

from ..excel.reader import MissingColumnsError, SheetHeaderError, SheetNotFoundError, read_workbook
from ..excel.writer import WorksheetNameError, write_report
from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ReconConfig
from ..models.run_result import RunResult
from .assembler import MissingKeyError
from .customers import KeyTooShortError
from .engine import reconcile
from .keys import InputShapeError, ValueConversionError

"""Run orchestration: read workbook -> reconcile -> write report.

I/O happens only here, strictly before and after the in-memory engine.
Per-item errors are collected in an ErrorLogBuffer (flushed once per run)
unless config.fail_fast is set, in which case the first one aborts the run.
"""

__all__ = [
    "ReconciliationError",
    "run",
]

logger = logging.getLogger(__name__)

# per-item errors that abort the run only in fail-fast mode
_ITEM_ERRORS = (ValueConversionError, KeyTooShortError, MissingKeyError, WorksheetNameError)


class ReconciliationError(Exception):
    """Fatal error that prevents a run from producing a report."""


def run(
    config: ReconConfig,
    input_path: Path | None = None,
    output_path: Path | None = None,
    *,
    logs_dir: Path | None = None,
) -> RunResult:
    """Execute one reconciliation run.

    Args:
        config: Loaded configuration
        input_path: Workbook to read (falls back to config.input_path)
        output_path: Report workbook (falls back to config.output_path)
        logs_dir: Directory for the JSON Lines error log (default ./logs)

    Raises:
        ReconciliationError: input missing or malformed, output not writable,
            or a per-item error in fail-fast mode
    """
    start_time = datetime.now(UTC)

    if input_path is None:
        if not config.input_path:
            raise ReconciliationError("no input workbook given (use --input or input_path)")
        input_path = Path(config.input_path)
    if output_path is None:
        output_path = Path(config.output_path)
    if not input_path.exists():
        raise ReconciliationError(f"input workbook not found: {input_path}")

    errors = None if config.fail_fast else ErrorLogBuffer(logs_dir)

    logger.info(f"reading {input_path.name}")
    try:
        table, reference_values = read_workbook(input_path, config.primary, config.reference)
    except (SheetNotFoundError, SheetHeaderError, MissingColumnsError, InputShapeError) as e:
        raise ReconciliationError(str(e)) from e
    except (OSError, ValueError, zipfile.BadZipFile) as e:
        raise ReconciliationError(f"cannot read {input_path}: {e}") from e
    logger.info(
        f"primary sheet '{config.primary.sheet_name}': rows={len(table)} "
        f"key_column='{config.primary.key_column}'"
    )

    try:
        result = reconcile(table, reference_values, config.settings, errors=errors)
        written = write_report(output_path, result, config.report, errors=errors)
    except _ITEM_ERRORS as e:
        raise ReconciliationError(f"fail-fast: {e}") from e
    except OSError as e:
        raise ReconciliationError(f"cannot write {output_path}: {e}") from e

    error_log_path = None
    error_count = 0
    if errors is not None:
        error_count = errors.total
        if error_count:
            try:
                error_log_path = errors.flush()
            except OSError as e:
                logger.warning(f"error log flush failed: {e}")
            else:
                logger.warning(f"{error_count} item error(s) logged to {error_log_path}")

    end_time = datetime.now(UTC)
    return RunResult(
        primary_rows=len(table),
        primary_keys=len(result.primary_keys),
        reference_keys=len(result.reference_keys),
        matched=len(result.matched),
        unmatched=len(result.unmatched),
        customers=len(result.customers),
        report_rows=result.report_row_count,
        written_sheets=len(written),
        errors=error_count,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        output_path=str(output_path),
        error_log_path=str(error_log_path) if error_log_path else None,
    )
