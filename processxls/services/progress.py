from __future__ import annotations

import sys
from collections.abc import Callable
from types import TracebackType

from tqdm import tqdm

"""Row progress for export runs.

Two sinks per finished row: a tqdm bar on interactive terminals (skipped
when stdout is redirected, e.g. CI logs) and an optional callback that lets
the session repaint its status line.
"""

__all__ = [
    "ProgressCallback",
    "ProgressTracker",
    "is_tty_enabled",
]

# (rows done, total rows, label of the row just finished)
ProgressCallback = Callable[[int, int, str], None]

BAR_WIDTH = 80


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class ProgressTracker:
    """Counts finished rows and reports each one.

    Args:
        total_rows: rows in the batch
        description: bar caption
        callback: called as ``callback(done, total, label)`` after every row
    """

    def __init__(
        self,
        total_rows: int,
        *,
        description: str = "Rendering rows",
        callback: ProgressCallback | None = None,
    ) -> None:
        self.total_rows = total_rows
        self.callback = callback
        self.current_row = 0
        self.enabled = is_tty_enabled()
        self.pbar: tqdm | None = (
            tqdm(total=total_rows, desc=description, unit="row", leave=True, ncols=BAR_WIDTH, ascii=True)
            if self.enabled
            else None
        )

    def finish_row(self, label: str = "") -> None:
        self.current_row += 1
        if self.pbar is not None:
            self.pbar.update(1)
            if label:
                self.pbar.set_postfix_str(label)
        if self.callback is not None:
            self.callback(self.current_row, self.total_rows, label)

    def close(self) -> None:
        """Close the bar; safe to call twice."""
        bar, self.pbar = self.pbar, None
        if bar is not None:
            bar.close()

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
