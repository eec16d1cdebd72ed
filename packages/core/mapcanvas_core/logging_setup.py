"""JSON file logging for the mapcanvas logger tree and process crash hooks."""

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
from typing import Any, TextIO

from .config import config_root


_LOGGER_NAME = "mapcanvas"
_LOG_FILE = "mapcanvas.log"
_FAULT_FILE = "fault.log"

# Extra record attributes copied into the JSON payload when present.
_CONTEXT_FIELDS = ("event", "kind", "crash_id", "thread")

_fault_file: TextIO | None = None
_previous_hooks: tuple[Any, Any] | None = None


def log_dir() -> Path:
    path = config_root() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


class JsonFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts_utc": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        for name in _CONTEXT_FIELDS:
            if hasattr(record, name):
                payload[name] = getattr(record, name)
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=str)


def configure_logging(
    keep_files: int = 7,
    console: bool = True,
    directory: Path | None = None,
    level: int = logging.INFO,
    name: str = _LOGGER_NAME,
) -> logging.Logger:
    """Attach the rotating JSON file handler once. Later calls return the configured logger."""
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    folder = directory or log_dir()
    folder.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(folder / _LOG_FILE),
        when="midnight",
        backupCount=max(2, keep_files),
        encoding="utf-8",
    )
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s %(message)s"))
        logger.addHandler(stream_handler)

    logger.info("logging configured dir=%s", folder, extra={"event": "logging_configured"})
    return logger


def reset_logging(name: str = _LOGGER_NAME) -> None:
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME)


def install_crash_hooks(directory: Path | None = None) -> None:
    """Route uncaught exceptions (main and worker threads such as the tick driver) to the log.

    The fault log handle stays open until ``uninstall_crash_hooks``; faulthandler
    writes to it from signal context and cannot reopen it.
    """
    global _fault_file, _previous_hooks
    if _fault_file is not None:
        return
    logger = get_logger("crash")

    def _log_uncaught(exc_type, exc_value, exc_tb) -> None:
        crash_id = str(uuid.uuid4())
        logger.critical(
            "uncaught %s crash_id=%s",
            exc_type.__name__,
            crash_id,
            exc_info=(exc_type, exc_value, exc_tb),
            extra={"event": "uncaught_exception", "crash_id": crash_id},
        )

    def _thread_hook(args: threading.ExceptHookArgs) -> None:
        crash_id = str(uuid.uuid4())
        thread_name = args.thread.name if args.thread is not None else None
        logger.critical(
            "uncaught %s in thread %s crash_id=%s",
            args.exc_type.__name__,
            thread_name,
            crash_id,
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
            extra={"event": "thread_exception", "crash_id": crash_id, "thread": thread_name},
        )

    folder = directory or log_dir()
    folder.mkdir(parents=True, exist_ok=True)
    _fault_file = (folder / _FAULT_FILE).open("a", encoding="utf-8")
    faulthandler.enable(file=_fault_file, all_threads=True)

    _previous_hooks = (sys.excepthook, threading.excepthook)
    sys.excepthook = _log_uncaught
    threading.excepthook = _thread_hook
    logger.info("crash hooks installed", extra={"event": "crash_hooks_installed"})


def uninstall_crash_hooks() -> None:
    global _fault_file, _previous_hooks
    if _previous_hooks is not None:
        sys.excepthook, threading.excepthook = _previous_hooks
        _previous_hooks = None
    if _fault_file is not None:
        faulthandler.disable()
        _fault_file.close()
        _fault_file = None
