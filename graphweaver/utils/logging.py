"""
Logging configuration for graphweaver.

Console output goes through rich on stderr so that CLI results on stdout stay
clean; an optional file log receives one JSON document per record. Fields set
with ``LogContext`` (e.g. the size of the input being ingested) are attached
to every record emitted inside the block.
"""

import functools
import json
import logging
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

from graphweaver.config import get_settings

# Attributes every LogRecord carries; anything else came in through `extra`
_RECORD_ATTRS = frozenset(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}

_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "rdflib", "pyshacl")


class StructuredFormatter(logging.Formatter):
    """Render a record and its extra fields as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        document: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        document.update(
            (key, value) for key, value in record.__dict__.items() if key not in _RECORD_ATTRS
        )
        if record.exc_info:
            document["exception"] = self.formatException(record.exc_info)
        return json.dumps(document, default=str)


class ContextFilter(logging.Filter):
    """Copies the current run context onto each record."""

    def __init__(self) -> None:
        super().__init__()
        self.context: Dict[str, Any] = {}

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.context.items():
            setattr(record, key, value)
        return True


context_filter = ContextFilter()


def setup_logging(
    log_level: Optional[str] = None,
    log_file_path: Optional[Path] = None,
    json_file: bool = True,
) -> None:
    """
    Configure the root logger.

    Args:
        log_level: Level name, LOG_LEVEL by default
        log_file_path: Extra file destination, LOG_FILE_PATH by default
        json_file: Write the file log as JSON lines instead of plain text
    """
    settings = get_settings()
    log_level = log_level or settings.log_level
    log_file_path = log_file_path or settings.get_log_file_path()

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()

    console_handler = RichHandler(
        console=Console(stderr=True),
        show_time=False,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=settings.dev_mode,
    )
    console_handler.addFilter(context_filter)
    root.addHandler(console_handler)

    if log_file_path:
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.addFilter(context_filter)
        file_handler.setFormatter(
            StructuredFormatter()
            if json_file
            else logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root.addHandler(file_handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class LogContext:
    """Attach fields to every record logged inside the block; nesting restores outer values."""

    def __init__(self, **fields: Any) -> None:
        self.fields = fields
        self._previous: Dict[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._previous = dict(context_filter.context)
        context_filter.context.update(self.fields)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        context_filter.context = self._previous


def log_performance(func):
    """
    Log how long a coroutine function took, and whether it failed.

    Usage:
        @log_performance
        async def run(self, text: str) -> PipelineResult:
            ...
    """
    logger = get_logger(func.__module__)

    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        started = time.perf_counter()
        with LogContext(function=func.__name__):
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"{func.__name__} failed after {time.perf_counter() - started:.2f}s: {e}"
                )
                raise
            logger.info(f"{func.__name__} finished in {time.perf_counter() - started:.2f}s")
            return result

    return wrapper
