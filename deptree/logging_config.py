"""Logging setup for the deptree service.

Console output is either a plain text line or single-line JSON (JSONL), which
Grafana Loki, OpenSearch, ELK and Fluentd ingest directly. Fields passed via
``extra=`` (``package``, ``version``, ``constraint`` ...) become JSON keys.
"""

import datetime
import json
import logging
import sys
from typing import Any, Dict, Optional

from deptree.config import Settings

TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


class JsonLogFormatter(logging.Formatter):
    """Formats log records as single-line JSON."""

    _SKIP_FIELDS = frozenset({
        "name", "msg", "args", "created", "relativeCreated",
        "exc_info", "exc_text", "stack_info", "lineno", "funcName",
        "filename", "module", "levelno", "levelname", "pathname",
        "thread", "threadName", "process", "processName",
        "message", "msecs", "taskName", "color_message",
    })

    def __init__(self, service: str = "deptree", **kwargs):
        super().__init__(**kwargs)
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        record.message = record.getMessage()

        log_dict: Dict[str, Any] = {
            "timestamp": datetime.datetime.fromtimestamp(
                record.created, tz=datetime.timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "name": record.name,
            "filename": record.filename,
            "lineno": record.lineno,
            "funcName": record.funcName,
            "message": record.message,
        }
        if self.service:
            log_dict["service"] = self.service

        # Merge extra fields (package, version, constraint, ...)
        for key, value in record.__dict__.items():
            if key not in self._SKIP_FIELDS and not key.startswith("_"):
                try:
                    json.dumps(value)
                    log_dict[key] = value
                except (TypeError, ValueError):
                    log_dict[key] = str(value)

        if record.exc_info and not record.exc_text:
            record.exc_text = self.formatException(record.exc_info)
        if record.exc_text:
            log_dict["exception"] = record.exc_text
        if record.stack_info:
            log_dict["stack"] = record.stack_info

        return json.dumps(log_dict, ensure_ascii=False, default=str)


def setup_logging(settings: Settings, stream: Optional[Any] = None) -> logging.Logger:
    """Install one console handler on the root logger.

    Calling it again replaces the handler it installed before, so it is safe
    to call from tests and from the entry point.

    Args:
        settings: Application settings (``log_level``, ``log_format``, ``debug``).
        stream: Output stream, defaults to stdout.

    Returns:
        The configured root logger.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_deptree_handler", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler._deptree_handler = True  # type: ignore[attr-defined]
    if settings.log_format == "json":
        handler.setFormatter(JsonLogFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    root.addHandler(handler)

    level = "DEBUG" if settings.debug else settings.log_level
    root.setLevel(level)
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return root
