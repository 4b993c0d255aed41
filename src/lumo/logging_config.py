"""
Logging configuration for Lumo.

Configures the root logger with console and rotating file handlers based
on application settings. Each process context (daemon, cli) writes to its
own log file in the log directory.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone

from lumo.config import settings

STANDARD_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_configured_contexts: set[str] = set()


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


class _MaxLevelFilter(logging.Filter):
    """Only pass records strictly below a level (keeps stdout free of errors)."""

    def __init__(self, level: int):
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def _build_formatter() -> logging.Formatter:
    if settings.log_format == "json":
        return JsonFormatter()
    return logging.Formatter(fmt=STANDARD_FORMAT, datefmt=DATE_FORMAT)


def setup_logging(context: str = "daemon") -> None:
    """
    Configure root logging for a process context.

    INFO/DEBUG go to stdout, WARNING and above to stderr, and everything at
    the configured level to ``<log_dir>/<context>.log``. Calling this more
    than once for the same context is a no-op.

    Args:
        context: Name of the running process (e.g. 'daemon', 'cli')

    Raises:
        PermissionError: If the log directory cannot be created
    """
    if context in _configured_contexts:
        return

    root = logging.getLogger()
    root.setLevel(settings.log_level.upper())
    formatter = _build_formatter()

    if settings.log_console_enabled:
        stdout_handler = logging.StreamHandler(sys.stdout)
        stdout_handler.setLevel(logging.DEBUG)
        stdout_handler.addFilter(_MaxLevelFilter(logging.WARNING))
        stdout_handler.setFormatter(formatter)
        root.addHandler(stdout_handler)

        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(logging.WARNING)
        stderr_handler.setFormatter(formatter)
        root.addHandler(stderr_handler)

    if settings.log_file_enabled:
        log_dir = settings.log_directory
        log_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            log_dir / f"{context}.log",
            maxBytes=settings.log_max_bytes,
            backupCount=settings.log_backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    _configured_contexts.add(context)
