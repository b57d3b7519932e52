"""Structured JSON logging for the WeShare backend.

Remote store calls, sync transitions and errors are logged as single-line
JSON so a session's persistence history can be replayed from the log.
"""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "data"):
            entry["data"] = record.data  # type: ignore[attr-defined]
        if record.exc_info and record.exc_info[1]:
            entry["error"] = str(record.exc_info[1])
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(
    log_dir: Path | str | None = None,
    level: int | str = logging.INFO,
) -> logging.Logger:
    """Configure structured logging for the ``weshare`` logger tree.

    Args:
        log_dir: Directory for the JSON-lines log file. If None, logs to stderr only.
        level: Logging level.

    Returns:
        The root 'weshare' logger.
    """
    logger = logging.getLogger("weshare")
    logger.setLevel(level)

    # Repeated calls must not stack handlers
    if logger.handlers:
        return logger

    fmt = JSONFormatter()

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path / "weshare.jsonl", encoding="utf-8")
        fh.setFormatter(fmt)
        fh.setLevel(level)
        logger.addHandler(fh)

    sh = logging.StreamHandler()
    sh.setFormatter(fmt)
    sh.setLevel(logging.WARNING)
    logger.addHandler(sh)

    return logger


class StoreCallLogger:
    """Context manager for logging a single remote store call."""

    def __init__(self, backend: str, operation: str, **context: Any):
        self.backend = backend
        self.operation = operation
        self.context = context
        self.start_time = 0.0
        self._logger = logging.getLogger("weshare.store")

    def __enter__(self) -> StoreCallLogger:
        self.start_time = time.monotonic()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        elapsed = time.monotonic() - self.start_time
        data = {
            "backend": self.backend,
            "operation": self.operation,
            "elapsed_s": round(elapsed, 3),
            **self.context,
        }
        if exc is None:
            self._logger.info("store_call", extra={"data": data})
            return
        data["error"] = f"{type(exc).__name__}: {exc}"
        self._logger.warning("store_call_error", extra={"data": data})


def log_sync_transition(site_key: str, previous: str | None, current: str) -> None:
    """Log a per-site sync state change."""
    logger = logging.getLogger("weshare.sync")
    logger.debug(
        "sync_transition",
        extra={"data": {
            "site": site_key,
            "from": previous,
            "to": current,
        }},
    )
