from __future__ import annotations

import logging
import re
from collections.abc import Collection, Sequence
from pathlib import Path

import pandas as pd

from ..logging.error_log import ErrorLogBuffer
from ..models.config_models import ReportConfig
from ..models.reconciliation import CustomerReportRow, Reconciliation
from ..services.progress import ProgressTracker

"""Report workbook writer (tabular data sink).

Output layout:
- summary sheet: matched / unmatched keys in two side-by-side columns
- one sheet per customer code: target-schema header + report rows
- columns sheet: every target field with its role (primary/secondary/manual)

Only values are written. Colours, borders, number formats and formulas are
left to whoever consumes the workbook.
"""

__all__ = [
    "WorksheetNameError",
    "DuplicateWorksheetNameError",
    "MAX_SHEET_NAME_LENGTH",
    "SheetNameRegistry",
    "summary_frame",
    "customer_frame",
    "columns_frame",
    "write_report",
]

logger = logging.getLogger(__name__)

MAX_SHEET_NAME_LENGTH = 31
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")


class WorksheetNameError(ValueError):
    """Raised when a sheet name is not acceptable to Excel."""


class DuplicateWorksheetNameError(WorksheetNameError):
    """Raised when a sheet name collides (case-insensitively) with an existing one."""


class SheetNameRegistry:
    """Tracks sheet names already used in the output workbook."""

    def __init__(self, reserved: Collection[str] = ()) -> None:
        self._used: dict[str, str] = {}
        for name in reserved:
            self.claim(name)

    def claim(self, name: str) -> str:
        """Validate and reserve name.

        Raises:
            WorksheetNameError: empty, too long or with forbidden characters
            DuplicateWorksheetNameError: already used (case-insensitive)
        """
        if not name or not name.strip():
            raise WorksheetNameError("worksheet name is empty")
        if len(name) > MAX_SHEET_NAME_LENGTH:
            raise WorksheetNameError(
                f"worksheet name {name!r} exceeds {MAX_SHEET_NAME_LENGTH} characters"
            )
        if _INVALID_SHEET_CHARS.search(name) or name.startswith("'") or name.endswith("'"):
            raise WorksheetNameError(f"worksheet name {name!r} contains forbidden characters")
        folded = name.casefold()
        if folded in self._used:
            raise DuplicateWorksheetNameError(
                f"worksheet name {name!r} already used by {self._used[folded]!r}"
            )
        self._used[folded] = name
        return name


def summary_frame(
    matched: Sequence[str], unmatched: Sequence[str], found_header: str, not_found_header: str
) -> pd.DataFrame:
    """Two columns of unequal length, padded with None."""
    height = max(len(matched), len(unmatched))
    return pd.DataFrame(
        {
            found_header: list(matched) + [None] * (height - len(matched)),
            not_found_header: list(unmatched) + [None] * (height - len(unmatched)),
        },
        dtype=object,
    )


def customer_frame(rows: Sequence[CustomerReportRow], target_schema: Sequence[str]) -> pd.DataFrame:
    return pd.DataFrame([r.as_list() for r in rows], columns=list(target_schema))


def columns_frame(
    target_schema: Sequence[str],
    primary_fields: Collection[str],
    secondary_fields: Collection[str],
) -> pd.DataFrame:
    """Field classification; primary wins when a field is listed in both."""
    roles = []
    for name in target_schema:
        if name in primary_fields:
            roles.append("primary")
        elif name in secondary_fields:
            roles.append("secondary")
        else:
            roles.append("manual")
    return pd.DataFrame({"Field": list(target_schema), "Role": roles})


def _write_sheets(
    writer: pd.ExcelWriter,
    result: Reconciliation,
    report: ReportConfig,
    errors: ErrorLogBuffer | None,
    progress_enabled: bool,
) -> list[str]:
    registry = SheetNameRegistry(reserved=[report.summary_sheet, report.columns_sheet])
    written: list[str] = []

    summary_frame(
        result.matched, result.unmatched, report.found_header, report.not_found_header
    ).to_excel(writer, sheet_name=report.summary_sheet, index=False)

    with ProgressTracker(
        len(result.groups), description="Writing customer sheets", enabled=progress_enabled
    ) as progress:
        for pos, (code, rows) in enumerate(result.groups.items()):
            progress.start_group(code)
            try:
                sheet = registry.claim(code)
            except WorksheetNameError as e:
                if errors is None:
                    raise
                errors.record("sink", pos, e)
                logger.warning(f"sheet for customer {code!r} skipped: {e}")
                progress.finish_group(success=False)
                continue
            customer_frame(rows, result.target_schema).to_excel(
                writer, sheet_name=sheet, index=False
            )
            written.append(sheet)
            progress.finish_group(success=True)
            logger.debug(f"sheet {sheet!r}: {len(rows)} rows")

    columns_frame(
        result.target_schema, result.primary_fields, report.secondary_fields
    ).to_excel(writer, sheet_name=report.columns_sheet, index=False)
    return written


def write_report(
    path: Path,
    result: Reconciliation,
    report: ReportConfig,
    *,
    errors: ErrorLogBuffer | None = None,
    progress: bool = True,
) -> list[str]:
    """Write the report workbook and return the customer sheets written.

    A customer whose code is not a usable sheet name is recorded in `errors`
    and skipped; without an error buffer the WorksheetNameError propagates.

    The workbook is built in a sibling temp file and moved onto `path` only
    when complete, so an aborted write leaves `path` untouched.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.stem}.partial{path.suffix}")
    try:
        with pd.ExcelWriter(tmp_path, engine="openpyxl") as writer:
            written = _write_sheets(writer, result, report, errors, progress)
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise

    logger.info(f"report written: {path} sheets={len(written)}")
    return written
