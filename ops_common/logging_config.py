# -*- coding: utf-8 -*-
"""
Logging configuration for the host operations scripts.

Console output is human-readable and carries the configured log prefix.
An optional log file receives JSON-structured records so an operator can
keep a machine-readable trail of what a redeploy actually ran.
"""

import json
import logging
import os
import socket
import sys
from datetime import datetime, timezone
from typing import Optional

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED_RECORD_ATTRS = frozenset(
    [
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "getMessage",
        "exc_info",
        "exc_text",
        "stack_info",
    ]
)


class JSONFormatter(logging.Formatter):
    """
    Formats log records as one JSON object per line with timestamp, level,
    service, logger, message and any extra fields.
    """

    def __init__(self, service_name: str = "hostops"):
        super().__init__()
        self.service_name = service_name
        self.hostname = socket.gethostname()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "service": self.service_name,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "process": record.process,
            "hostname": self.hostname,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        extra_fields = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_ATTRS
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def resolve_log_level(log_level: Optional[str] = None) -> int:
    """
    Turn a level name into a logging level, reading LOGLEVEL when no name is
    given. Unknown names fall back to INFO.
    """
    if log_level is None:
        log_level = os.environ.get("LOGLEVEL", "INFO")
    numeric_level = getattr(logging, log_level.upper(), None)
    if not isinstance(numeric_level, int):
        print(
            f"Warning: Invalid log level '{log_level}'. Defaulting to INFO.",
            file=sys.stderr,
        )
        return logging.INFO
    return numeric_level


def setup_logging(
    log_prefix: str,
    log_level: Optional[str] = None,
    log_file_path: Optional[str] = None,
    service_name: str = "hostops",
) -> logging.Logger:
    """
    Set up root logging for a run of the scripts.

    Args:
        log_prefix: Prefix placed in front of every console line.
        log_level: Level name (DEBUG, INFO, ...). Defaults to $LOGLEVEL or INFO.
        log_file_path: If given, also write JSON records to this file.
        service_name: Name recorded in JSON records and used for the
            returned logger.

    Returns:
        The logger for service_name.
    """
    numeric_level = resolve_log_level(log_level)

    console_formatter = logging.Formatter(
        f"{log_prefix} %(asctime)s - [%(levelname)s] - %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(console_formatter)
    root_logger.addHandler(console_handler)

    if log_file_path:
        file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(JSONFormatter(service_name))
        root_logger.addHandler(file_handler)

    logger = logging.getLogger(service_name)
    logger.debug(
        "Logging initialized",
        extra={
            "log_level": logging.getLevelName(numeric_level),
            "file_enabled": bool(log_file_path),
        },
    )
    return logger
