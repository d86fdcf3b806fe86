from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display with tqdm (TTY only).

A single tqdm bar tracks customer sheets while the report is written. In
non-TTY environments (CI, redirected output) no bar is created so the log
stays free of control sequences.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """True if stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class ProgressTracker:
    """Progress bar over customer groups."""

    def __init__(
        self, total_groups: int, *, description: str = "Processing customers", enabled: bool = True
    ) -> None:
        self.total_groups = total_groups
        self.description = description
        self.current_group = 0
        self.failed_groups = 0

        self.enabled = enabled and is_tty_enabled() and total_groups > 0
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_groups,
                desc=description,
                unit="sheet",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_group(self, customer_code: str) -> None:
        self.current_group += 1
        if self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({customer_code})")

    def finish_group(self, success: bool = True) -> None:
        if not success:
            self.failed_groups += 1
        if self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_postfix(failed=self.failed_groups)
            self.pbar.set_description(self.description)

    def close(self) -> None:
        if self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
