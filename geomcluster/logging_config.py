"""
Structured logging configuration for the geomcluster package.

Provides:
- JSON formatter for machine-readable log output
- Console formatter for human-readable output
- Timing helpers for classification runs
- Centralized logging setup

Usage:
    import logging

    from geomcluster.logging_config import setup_logging

    # Setup at application start
    setup_logging(level=logging.INFO, json_file="geomcluster.log.json")

    # Get logger in any module
    logger = logging.getLogger(__name__)
    logger.info("Classified points", extra={"n_entities": 120, "n_classes": 37})
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar, Token
from datetime import datetime
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional, Tuple, TypeVar, Union

F = TypeVar('F', bound=Callable[..., Any])

PACKAGE_LOGGER = "geomcluster"

# Attributes every LogRecord carries; anything else came in through `extra=`
_RESERVED_KEYS = frozenset({
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'exc_info', 'exc_text', 'thread', 'threadName',
    'message', 'asctime', 'taskName',
})


def _extra_fields(record: logging.LogRecord) -> Iterator[Tuple[str, Any]]:
    """Yield (key, value) pairs attached to a record via `extra=`."""
    for key, value in record.__dict__.items():
        if key not in _RESERVED_KEYS:
            yield key, value


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging.

    Outputs each log record as a single JSON line. Extra fields passed
    via `extra={}` (tolerance, entity counts, issue codes) are included.

    Output format:
        {"timestamp": "...", "level": "INFO", "logger": "...", "message": "...", ...}
    """

    def __init__(self, include_extra: bool = True):
        super().__init__()
        self.include_extra = include_extra

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.levelno >= logging.WARNING or record.levelno <= logging.DEBUG:
            log_entry["location"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        if self.include_extra:
            for key, value in _extra_fields(record):
                try:
                    json.dumps(value)
                    log_entry[key] = value
                except (TypeError, ValueError):
                    log_entry[key] = str(value)

        return json.dumps(log_entry, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Human-readable console formatter with optional colors.

    Format: [TIME] LEVEL logger: message [extra_key=value ...]
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m',
    }

    def __init__(self, use_colors: bool = True, show_extra: bool = True):
        super().__init__()
        self.use_colors = use_colors
        self.show_extra = show_extra

    @staticmethod
    def _format_value(value: Any) -> str:
        if isinstance(value, float):
            return f"{value:.3g}"
        if isinstance(value, (list, tuple)) and len(value) > 3:
            return f"[...{len(value)} items]"
        return str(value)

    def format(self, record: logging.LogRecord) -> str:
        time_str = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level_str = f"{self.COLORS[level]}{level:8}{self.COLORS['RESET']}"
        else:
            level_str = f"{level:8}"

        logger_name = record.name
        prefix = PACKAGE_LOGGER + "."
        if logger_name.startswith(prefix):
            logger_name = logger_name[len(prefix):]

        extra_str = ""
        if self.show_extra:
            extras = [f"{key}={self._format_value(value)}"
                      for key, value in _extra_fields(record)]
            if extras:
                extra_str = " [" + ", ".join(extras) + "]"

        result = f"[{time_str}] {level_str} {logger_name}: {record.getMessage()}{extra_str}"

        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)

        return result


def setup_logging(
    level: int = logging.INFO,
    json_file: Optional[Union[str, Path]] = None,
    console: bool = True,
    use_colors: bool = True,
    root_logger: bool = False,
) -> logging.Logger:
    """Configure logging for the geomcluster package.

    Sets up a console handler (human-readable) and optionally a JSON
    file handler (machine-readable).

    Args:
        level: Minimum log level (default INFO)
        json_file: Optional path for JSON log file
        console: Enable console output (default True)
        use_colors: Use ANSI colors in console (default True)
        root_logger: Configure root logger instead of geomcluster

    Returns:
        Configured logger instance
    """
    logger_name = "" if root_logger else PACKAGE_LOGGER
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.handlers.clear()

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(ConsoleFormatter(use_colors=use_colors))
        logger.addHandler(console_handler)

    if json_file:
        json_handler = logging.FileHandler(Path(json_file), encoding='utf-8')
        json_handler.setLevel(level)
        json_handler.setFormatter(JSONFormatter())
        logger.addHandler(json_handler)

    if not root_logger:
        logger.propagate = False
        _install_context_filter(logger)

    return logger

@contextmanager
def log_timing(
    logger: logging.Logger,
    operation: str,
    level: int = logging.DEBUG,
    **extra_fields: Any
):
    """Context manager to log operation timing.

    Example:
        with log_timing(logger, "Classifying curves", n_entities=len(curves)):
            result = classify(curves, tol, curves_equivalent)

    Yields:
        dict that can be updated with additional fields for the completion record
    """
    timing_info: Dict[str, Any] = {}
    start_time = time.perf_counter()

    logger.log(level, f"Starting: {operation}", extra={
        "event": "start",
        "operation": operation,
        **extra_fields
    })

    try:
        yield timing_info
    except Exception as e:
        elapsed = time.perf_counter() - start_time
        logger.error(f"Failed: {operation} ({elapsed:.3f}s) - {e}", extra={
            "event": "error",
            "operation": operation,
            "elapsed_seconds": elapsed,
            "error": str(e),
            **extra_fields
        })
        raise

    elapsed = time.perf_counter() - start_time
    timing_info['elapsed_seconds'] = elapsed
    logger.log(level, f"Completed: {operation} ({elapsed:.3f}s)", extra={
        "event": "complete",
        "operation": operation,
        **extra_fields,
        **timing_info
    })


def timed(
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG,
    operation: Optional[str] = None,
) -> Callable[[F], F]:
    """Decorator to log function execution time.

    Args:
        logger: Logger instance (uses function's module logger if None)
        level: Log level (default DEBUG)
        operation: Operation name (uses function name if None)

    Example:
        @timed(level=logging.INFO)
        def unique_curves(curves, tolerance):
            ...
    """
    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            func_logger = logger or logging.getLogger(func.__module__)
            op_name = operation or func.__name__

            with log_timing(func_logger, op_name, level):
                return func(*args, **kwargs)

        return wrapper  # type: ignore
    return decorator


class ContextFilter(logging.Filter):
    """Copies the fields of the active LogContext onto each record.

    Fields live in a context variable, so each thread (and each asyncio
    task) sees only the context it entered. Fields passed via `extra=`
    take precedence.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _context_fields.get().items():
            record.__dict__.setdefault(key, value)
        return True


_context_fields: ContextVar[Dict[str, Any]] = ContextVar("geomcluster_log_context", default={})
_context_filter = ContextFilter()


def _install_context_filter(logger: logging.Logger) -> None:
    # Logger filters only see records logged on that exact logger;
    # handler filters also see records propagated from module loggers.
    # addFilter ignores a filter that is already installed.
    logger.addFilter(_context_filter)
    for handler in logger.handlers:
        handler.addFilter(_context_filter)


class LogContext:
    """Context holder for adding common fields to log records.

    Used by the batch runner to tag every record with the job it belongs to.
    Nested contexts add to the fields of the enclosing one.

    Example:
        with LogContext(job="facade_panels.json", operation="modules"):
            logger.info("Grouping faces")  # includes job, operation
    """

    def __init__(self, **fields: Any):
        self.fields = fields
        self._token: Optional[Token] = None

    def __enter__(self) -> 'LogContext':
        self._token = _context_fields.set({**_context_fields.get(), **self.fields})
        _install_context_filter(logging.getLogger(PACKAGE_LOGGER))
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._token is not None:
            _context_fields.reset(self._token)
            self._token = None
