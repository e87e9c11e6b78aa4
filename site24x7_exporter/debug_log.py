"""Append-only debug log of exporter progress.

Lines written here are purely observational: nothing reads them back. Every
line is also sent to the module logger at DEBUG level, so the file is
optional.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TextIO

logger = logging.getLogger(__name__)


class DebugLog:
    """Human-readable progress lines written to a file."""

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else None
        self._file: TextIO | None = None

    def open(self) -> None:
        """Open (and truncate) the file. No-op without a path or when already open."""
        if self.path is None or self._file is not None:
            return
        self._file = self.path.open("w", encoding="utf-8")

    def write(self, message: str) -> None:
        logger.debug(message)
        if self._file is None:
            return
        timestamp = datetime.now(timezone.utc).isoformat()
        self._file.write(f"{timestamp} {message}\n")
        self._file.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    @property
    def is_open(self) -> bool:
        return self._file is not None
