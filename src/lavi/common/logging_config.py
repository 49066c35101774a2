"""
Logging configuration for the Lavi library.

Library modules obtain loggers with ``get_logger(__name__)``, which places
them under the ``lavi`` hierarchy. Nothing is emitted until an application
calls ``setup_logging()`` (or configures the standard library itself).

Unset ``setup_logging()`` arguments fall back to environment variables:

====================  ==========================================
LAVI_LOG_LEVEL        DEBUG, INFO (default), WARNING, ...
LAVI_LOG_FILE         log file path
LAVI_LOG_DIR          directory for ``lavi.log`` if no file given
LAVI_LOG_FORMAT       ``logging.Formatter`` format string
LAVI_LOG_CONSOLE      true/false, log to stdout (default true)
LAVI_LOG_JSON         true/false, one JSON object per line
====================  ==========================================

Long-running operations (imports, analysis runs) are timed with
``LoggingTimer``, which reports on the ``lavi.performance`` logger.
"""

import json
import logging
import logging.handlers
import os
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any, List


ROOT_LOGGER_NAME = "lavi"
PERFORMANCE_LOGGER_NAME = "lavi.performance"
DEBUG_LOGGER_NAME = "lavi.debug"

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_LOG_FILE_NAME = "lavi.log"
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
DEFAULT_BACKUP_COUNT = 5

ENV_LOG_LEVEL = "LAVI_LOG_LEVEL"
ENV_LOG_FILE = "LAVI_LOG_FILE"
ENV_LOG_DIR = "LAVI_LOG_DIR"
ENV_LOG_FORMAT = "LAVI_LOG_FORMAT"
ENV_LOG_CONSOLE = "LAVI_LOG_CONSOLE"
ENV_LOG_JSON = "LAVI_LOG_JSON"

_TRUE_VALUES = ("true", "yes", "1", "on")
_FALSE_VALUES = ("false", "no", "0", "off")

# Attributes every LogRecord has; anything else came in through ``extra``
_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object, ``extra`` fields included."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        payload.update(
            (key, value) for key, value in vars(record).items()
            if key not in _STANDARD_RECORD_ATTRS
        )
        return json.dumps(payload, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Return the logger for a module.

    Examples
    --------
    >>> logger = get_logger(__name__)
    >>> logger.debug("Analysis step: %d", 3)
    """
    return logging.getLogger(name)


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_dir: Optional[str] = None,
    console: Optional[bool] = None,
    json_format: Optional[bool] = None,
    format_string: Optional[str] = None,
    date_format: Optional[str] = None,
    max_file_size: Optional[int] = None,
    backup_count: Optional[int] = None,
    force_setup: bool = False
) -> logging.Logger:
    """
    Configure the ``lavi`` root logger.

    Parameters
    ----------
    level : str, optional
        Level name; defaults to LAVI_LOG_LEVEL, then INFO
    log_file : str, optional
        Log file path; defaults to LAVI_LOG_FILE
    log_dir : str, optional
        Directory for ``lavi.log`` when no file is given; defaults to LAVI_LOG_DIR
    console : bool, optional
        Log to stdout; defaults to LAVI_LOG_CONSOLE, then True
    json_format : bool, optional
        Emit JSON lines; defaults to LAVI_LOG_JSON, then False
    format_string, date_format : str, optional
        Formatter settings for plain-text output
    max_file_size, backup_count : int, optional
        Rotation settings for the log file (10MB, 5 backups)
    force_setup : bool, default False
        Replace existing handlers; otherwise an already configured logger is
        returned unchanged

    Returns
    -------
    logging.Logger
        The ``lavi`` root logger

    Raises
    ------
    ValueError
        For an unknown level name

    Examples
    --------
    >>> setup_logging(level="DEBUG")
    >>> setup_logging(log_dir="/tmp/lavi-logs", console=False, force_setup=True)
    """
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    if root_logger.handlers and not force_setup:
        return root_logger

    config = _resolve_logging_config(
        level=level,
        log_file=log_file,
        log_dir=log_dir,
        console=console,
        json_format=json_format,
        format_string=format_string,
        date_format=date_format,
        max_file_size=max_file_size,
        backup_count=backup_count
    )
    log_level = logging.getLevelName(str(config["level"]).upper())
    if not isinstance(log_level, int):
        raise ValueError(f"Invalid logging level: {config['level']}")

    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)
    for handler in _build_handlers(config):
        root_logger.addHandler(handler)
    root_logger.propagate = False

    root_logger.info(
        "Logging configured: level=%s, console=%s, file=%s, json=%s",
        config["level"], config["console"], config["log_file"], config["json_format"]
    )
    return root_logger


def _build_handlers(config: Dict[str, Any]) -> List[logging.Handler]:
    if config["json_format"]:
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(config["format_string"], config["date_format"])

    handlers: List[logging.Handler] = []
    if config["console"]:
        handlers.append(logging.StreamHandler(sys.stdout))
    if config["log_file"]:
        log_path = Path(config["log_file"])
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.handlers.RotatingFileHandler(
            log_path,
            maxBytes=config["max_file_size"],
            backupCount=config["backup_count"],
            encoding="utf-8"
        ))
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name, "").strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


def _resolve_logging_config(**kwargs) -> Dict[str, Any]:
    """Merge explicit arguments, environment variables and defaults, in that order."""
    log_file = kwargs.get("log_file") or os.environ.get(ENV_LOG_FILE)
    log_dir = kwargs.get("log_dir") or os.environ.get(ENV_LOG_DIR)
    if not log_file and log_dir:
        log_file = str(Path(log_dir) / DEFAULT_LOG_FILE_NAME)

    console = kwargs.get("console")
    json_format = kwargs.get("json_format")

    return {
        "level": kwargs.get("level") or os.environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL),
        "log_file": log_file or None,
        "console": _env_flag(ENV_LOG_CONSOLE, True) if console is None else console,
        "json_format": _env_flag(ENV_LOG_JSON, False) if json_format is None else json_format,
        "format_string": kwargs.get("format_string") or os.environ.get(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT),
        "date_format": kwargs.get("date_format") or DEFAULT_DATE_FORMAT,
        "max_file_size": kwargs.get("max_file_size") or DEFAULT_MAX_FILE_SIZE,
        "backup_count": kwargs.get("backup_count") or DEFAULT_BACKUP_COUNT,
    }


def log_function_entry(func_name: str, **kwargs) -> None:
    """Log a call with its arguments on ``lavi.debug`` when DEBUG is enabled."""
    logger = get_logger(DEBUG_LOGGER_NAME)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Entering %s(%s)", func_name, ", ".join(f"{k}={v}" for k, v in kwargs.items()))


def log_performance_metric(
    operation: str,
    duration: float,
    details: Optional[Dict[str, Any]] = None
) -> None:
    """
    Report how long ``operation`` took on the ``lavi.performance`` logger.

    ``details`` (act count, frames analysed, ...) are appended to the message
    and attached to the record for structured output.
    """
    details = details or {}
    message = f"Performance: {operation} completed in {duration:.3f}s"
    if details:
        message += " (" + ", ".join(f"{k}={v}" for k, v in details.items()) + ")"
    get_logger(PERFORMANCE_LOGGER_NAME).info(
        message, extra={"operation": operation, "duration": duration, **details}
    )


class LoggingTimer:
    """
    Context manager that times its block and logs the duration on exit.

    ``details`` may be updated inside the block; the final values are logged.
    The duration is logged even when the block raises.

    Examples
    --------
    >>> with LoggingTimer("frame_analysis", {"acts": 1200}) as timer:
    ...     timer.details["frames"] = 19
    >>> timer.duration
    0.0123
    """

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        self.operation = operation
        self.details = details or {}
        self.duration: Optional[float] = None
        self._started: Optional[float] = None

    def __enter__(self) -> "LoggingTimer":
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._started is None:
            return
        self.duration = time.perf_counter() - self._started
        log_performance_metric(self.operation, self.duration, self.details)
