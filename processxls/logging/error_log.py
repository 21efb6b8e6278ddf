from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Error log file for fatal session failures.

Records are kept in memory until ``flush``; the first flush that has
something to write names the file ``errors-YYYYMMDD-HHMMSS.log`` (UTC) and
later flushes append to it. Nothing is created for a clean session.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

DEFAULT_LOGS_DIR = Path("./logs")


class ErrorLogBuffer:
    def __init__(self, logs_dir: Path | None = None) -> None:
        self.logs_dir = logs_dir or DEFAULT_LOGS_DIR
        self._pending: list[ErrorRecord] = []
        self._path: Path | None = None

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def file_path(self) -> Path | None:
        """Log file of this buffer, or None before the first write."""
        return self._path

    def _open_target(self) -> Path:
        if self._path is None:
            self.logs_dir.mkdir(parents=True, exist_ok=True)
            self._path = self.logs_dir / f"errors-{datetime.now(UTC):%Y%m%d-%H%M%S}.log"
        return self._path

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)

    def flush(self) -> Path | None:
        """Write pending records; returns the file, or None when nothing was pending."""
        if not self._pending:
            return None
        target = self._open_target()
        with target.open("a", encoding="utf-8") as fh:
            fh.writelines(f"{rec.to_json_line()}\n" for rec in self._pending)
        self._pending = []
        return target
