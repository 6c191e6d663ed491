"""
Structured JSON Logging Module.

One JSON object per log record, written to stdout and (optionally) a
rotating file.  Request handlers, services and the audit trail all log
through ``StructuredLogger`` instances handed out by ``get_logger``.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, TextIO, Union

JsonScalar = Union[str, int, float, bool, None]


class JSONFormatter(logging.Formatter):
    """Formats log records as structured JSON objects.

    Each log entry contains:
        - timestamp    (ISO-8601, UTC)
        - level        (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        - logger_name
        - message
        - extra        (fields passed via ``extra=``; JSON scalars keep their
                        type, anything else is stringified)
        - exception    (formatted traceback, when ``exc_info`` is set)
    """

    # Standard LogRecord attribute names, computed once.
    _STANDARD_ATTRS: frozenset[str] = frozenset(
        logging.LogRecord(
            name="", level=0, pathname="", lineno=0, msg="", args=(), exc_info=None
        ).__dict__.keys()
    ) | {"message", "asctime", "taskName"}

    @staticmethod
    def _scalar(value: object) -> JsonScalar:
        if value is None or isinstance(value, (str, int, float, bool)):
            return value
        return str(value)

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger_name": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, JsonScalar] = {
            key: self._scalar(value)
            for key, value in record.__dict__.items()
            if key not in self._STANDARD_ATTRS
        }
        if extra_fields:
            entry["extra"] = extra_fields

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            entry["exception"] = record.exc_text

        return json.dumps(entry, ensure_ascii=False, default=str)


class StructuredLogger:
    """Injectable logger.

    Wraps a named ``logging.Logger`` whose handlers are attached on first
    use of that name; later instances with the same name share them.
    Level, log file and rotation default to the ``LOG_*`` settings of
    :class:`~app.config.AppConfig`.  An empty ``LOG_FILE`` means console
    only.

    Usage::

        log = StructuredLogger(name="dashboard")
        log.info("Listening", extra={"port": 8000})

    Dependency Injection::

        class SomeService:
            def __init__(self, logger: StructuredLogger) -> None:
                self._logger = logger
    """

    def __init__(
        self,
        name: str = "dashboard",
        level: Optional[int] = None,
        stream: Union[TextIO, None] = None,
        log_file: Optional[str] = None,
        max_bytes: Optional[int] = None,
        backup_count: Optional[int] = None,
    ) -> None:
        # Lazy import: app.config logs through the stdlib at import time
        from app.config import get_config
        _cfg = get_config()

        resolved_level = level if level is not None else logging.getLevelName(
            _cfg.LOG_LEVEL.upper()
        )
        if not isinstance(resolved_level, int):
            resolved_level = logging.INFO

        self._logger: logging.Logger = logging.getLogger(name)
        self._logger.setLevel(resolved_level)

        if self._logger.handlers:
            return

        formatter = JSONFormatter()

        console = logging.StreamHandler(stream or sys.stdout)
        console.setLevel(resolved_level)
        console.setFormatter(formatter)
        self._logger.addHandler(console)

        target: str = log_file if log_file is not None else _cfg.LOG_FILE
        if not target:
            return
        try:
            path = Path(target)
            path.parent.mkdir(parents=True, exist_ok=True)
            rotating = RotatingFileHandler(
                filename=str(path),
                maxBytes=max_bytes if max_bytes is not None else _cfg.LOG_MAX_BYTES,
                backupCount=(
                    backup_count if backup_count is not None else _cfg.LOG_BACKUP_COUNT
                ),
                encoding="utf-8",
            )
        except OSError as exc:
            self._logger.warning(
                "Could not open log file '%s': %s. Logging to console only.",
                target,
                exc,
            )
            return
        rotating.setLevel(resolved_level)
        rotating.setFormatter(formatter)
        self._logger.addHandler(rotating)

    @property
    def logger(self) -> logging.Logger:
        """The underlying ``logging.Logger``."""
        return self._logger

    # -- Delegates ------------------------------------------------------------

    def debug(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.debug(msg, *args, **kwargs)

    def info(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.info(msg, *args, **kwargs)

    def warning(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.warning(msg, *args, **kwargs)

    def error(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.error(msg, *args, **kwargs)

    def exception(self, msg: str, *args: object, **kwargs: object) -> None:
        """ERROR record with the active exception's traceback attached."""
        self._logger.exception(msg, *args, **kwargs)

    def critical(self, msg: str, *args: object, **kwargs: object) -> None:
        self._logger.critical(msg, *args, **kwargs)


def get_logger(name: str = "dashboard") -> StructuredLogger:
    """``StructuredLogger`` for *name* with level and file from the config."""
    return StructuredLogger(name=name)
