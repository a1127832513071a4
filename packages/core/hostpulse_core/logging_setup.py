"""Structured local logging and crash hook setup."""

from __future__ import annotations

import faulthandler
import json
import logging
import logging.handlers
import sys
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .config import config_root


_LOGGER_NAME = "hostpulse"
_EXTRA_FIELDS = ("event", "operation", "crash_id", "error")


def log_dir() -> Path:
    path = config_root() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        for key in _EXTRA_FIELDS:
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        return json.dumps(payload, ensure_ascii=True)


def configure_logging(keep_files: int = 7, console: bool = True, level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    path = log_dir() / "hostpulse.log"
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(path),
        when="midnight",
        backupCount=max(2, keep_files),
        encoding="utf-8",
    )
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    if console:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))
        logger.addHandler(stream_handler)

    logger.info("logging configured", extra={"event": "logging_configured"})
    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


_fault_file = None


def _install_fault_handler(logger: logging.Logger) -> None:
    global _fault_file
    if _fault_file is None:
        _fault_file = (log_dir() / "fault.log").open("a", encoding="utf-8")
    faulthandler.enable(file=_fault_file, all_threads=True)
    logger.info("fault handler enabled", extra={"event": "fault_handler_enabled"})


def _log_crash(logger: logging.Logger, event: str, exc_info: tuple[Any, Any, Any]) -> None:
    crash_id = str(uuid.uuid4())
    logger.critical(
        f"{event.replace('_', ' ')} crash_id={crash_id}",
        exc_info=exc_info,
        extra={"event": event, "crash_id": crash_id},
    )


def install_crash_hooks() -> None:
    """Route uncaught main-thread and worker-thread exceptions into the log."""
    logger = get_logger()

    sys.excepthook = lambda exc_type, exc_value, exc_tb: _log_crash(
        logger, "uncaught_exception", (exc_type, exc_value, exc_tb)
    )
    threading.excepthook = lambda args: _log_crash(
        logger, "thread_exception", (args.exc_type, args.exc_value, args.exc_traceback)
    )
    _install_fault_handler(logger)
