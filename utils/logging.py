"""
Structured logging for the guild client.

Records are rendered as one JSON object per line and shipped through a queue
so request handling never blocks on disk I/O. Three sinks hang off the queue
listener: the main log (rotated daily), an errors-only JSONL file under
``<log dir>/errors/`` and the console.

Nothing is configured at import time; the entry point calls ``setup_logging``
and ``shutdown_logging``.
"""

import atexit
import json
import logging
import logging.handlers
import queue
from pathlib import Path

from config.config_loader import ConfigLoader
from utils.log_context import get_call_id

DEFAULT_LOG_FILE = "logs/client.log"
RETENTION_DAYS = 30

_listener: logging.handlers.QueueListener | None = None
_atexit_hooked = False

# Attributes copied from ``extra=`` into the JSON line when present
_CONTEXT_FIELDS = (
    "user_id",
    "guild_id",
    "target_id",
    "action",
    "method",
    "path",
    "status",
)


class ErrorLevelFilter(logging.Filter):
    """Pass ERROR and above only."""

    def filter(self, record: logging.LogRecord) -> bool:  # pragma: no cover - trivial
        return record.levelno >= logging.ERROR


class CustomJsonFormatter(logging.Formatter):
    """One JSON object per record, with the active call id and request context."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "module": record.name,
            "funcName": record.funcName,
            "lineno": record.lineno,
            "message": record.getMessage(),
        }

        call_id = get_call_id()
        if call_id:
            payload["call_id"] = call_id

        payload.update(
            (name, getattr(record, name))
            for name in _CONTEXT_FIELDS
            if hasattr(record, name)
        )

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        # Korean UI messages stay readable in the files
        return json.dumps(payload, ensure_ascii=False, default=str)


def _configured_level_and_file() -> tuple[int, str]:
    section = ConfigLoader.load_config().get("logging") or {}
    level = getattr(logging, str(section.get("level", "INFO")).upper(), logging.INFO)
    return level, str(section.get("file", DEFAULT_LOG_FILE))


def _daily_json_file(path: Path, level: int) -> logging.handlers.TimedRotatingFileHandler:
    handler = logging.handlers.TimedRotatingFileHandler(
        filename=str(path),
        when="midnight",
        interval=1,
        backupCount=RETENTION_DAYS,
        utc=True,
        encoding="utf-8",
    )
    handler.suffix = "%Y-%m-%d"
    handler.setLevel(level)
    return handler


def _error_log_namer(default_name: str) -> str:
    """``errors.jsonl.2024-05-01`` -> ``errors_2024-05-01.jsonl``."""
    stem, date_part = default_name.rsplit(".", 1)
    return str(Path(stem).with_name(f"errors_{date_part}.jsonl"))


def _build_listener(
    records: "queue.Queue[logging.LogRecord]", level: int, log_path: Path
) -> logging.handlers.QueueListener:
    formatter = CustomJsonFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    main_file = _daily_json_file(log_path, level)

    error_file = _daily_json_file(log_path.parent / "errors" / "errors.jsonl", logging.ERROR)
    error_file.namer = _error_log_namer  # type: ignore[assignment]
    error_file.addFilter(ErrorLevelFilter())

    console = logging.StreamHandler()
    console.setLevel(level)

    sinks = (main_file, console, error_file)
    for sink in sinks:
        sink.setFormatter(formatter)
    return logging.handlers.QueueListener(records, *sinks, respect_handler_level=True)


def setup_logging(log_file: str | None = None) -> None:
    """
    Route all logging through a queue to the JSON sinks.

    Safe to call again (tests do): existing root handlers and any running
    listener are replaced.

    Args:
        log_file: Main log path. Defaults to ``logging.file`` in the config,
            then ``logs/client.log``.
    """
    global _listener

    level, configured_file = _configured_level_and_file()
    log_path = Path(log_file or configured_file)
    (log_path.parent / "errors").mkdir(parents=True, exist_ok=True)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    if _listener is not None:
        _listener.stop()
        _listener = None

    records: queue.Queue[logging.LogRecord] = queue.Queue(maxsize=1000)
    queue_handler = logging.handlers.QueueHandler(records)
    queue_handler.setLevel(level)
    root.addHandler(queue_handler)

    _listener = _build_listener(records, level, log_path)
    _listener.start()
    _hook_atexit()

    # aiohttp logs every connection at DEBUG
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def _hook_atexit() -> None:
    global _atexit_hooked
    if not _atexit_hooked:
        atexit.register(shutdown_logging)
        _atexit_hooked = True


def shutdown_logging() -> None:
    """Drain the queue and stop the listener."""
    global _listener
    if _listener is not None:
        _listener.stop()
        _listener = None


def get_logger(name: str) -> logging.Logger:
    """
    Convenience method for retrieving a logger
    """
    return logging.getLogger(name)
