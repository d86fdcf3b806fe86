from __future__ import annotations

from ..models.run_result import RunResult

"""SUMMARY line rendering.

Format:
SUMMARY primary_keys={n} reference_keys={n} matched={n} unmatched={n}
customers={n} report_rows={n} errors={n} elapsed_sec={x}
"""

__all__ = [
    "format_seconds",
    "render_summary_line",
]


def format_seconds(seconds: float) -> str:
    """Render seconds without scientific notation or a trailing '.0'."""
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: RunResult) -> str:
    """Render the SUMMARY line for a run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> result = RunResult(
        ...     primary_rows=4, primary_keys=3, reference_keys=1, matched=1,
        ...     unmatched=2, customers=2, report_rows=2, written_sheets=2,
        ...     errors=0, start_time=t, end_time=t, elapsed_seconds=1.5,
        ... )
        >>> render_summary_line(result)
        'SUMMARY primary_keys=3 reference_keys=1 matched=1 unmatched=2 customers=2 report_rows=2 errors=0 elapsed_sec=1.5'
    """
    return (
        f"SUMMARY primary_keys={result.primary_keys} "
        f"reference_keys={result.reference_keys} "
        f"matched={result.matched} "
        f"unmatched={result.unmatched} "
        f"customers={result.customers} "
        f"report_rows={result.report_rows} "
        f"errors={result.errors} "
        f"elapsed_sec={format_seconds(result.elapsed_seconds)}"
    )
