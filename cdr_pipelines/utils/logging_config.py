"""Logging configuration for the extract loader."""

import json
import logging
import os
from contextlib import contextmanager
from datetime import datetime, timezone

TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

_CONTEXT_FIELDS = ("source_file", "record_type")


class JSONFormatter(logging.Formatter):
    """Log formatter that outputs JSON-structured log lines."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # Add extract context if available
        for name in _CONTEXT_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)

        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(level: str = None, fmt: str = None):
    """Configure console logging for the application.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR).
            Defaults to the CDR_LOG_LEVEL env var or INFO.
        fmt: ``json`` or ``text``. Defaults to the CDR_LOG_FORMAT env var or text.
    """
    if level is None:
        level = os.environ.get("CDR_LOG_LEVEL", "INFO")
    if fmt is None:
        fmt = os.environ.get("CDR_LOG_FORMAT", "text")

    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    if fmt.lower() == "json":
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    # Avoid adding duplicate handlers
    if not any(isinstance(h, logging.StreamHandler) for h in root_logger.handlers):
        root_logger.addHandler(console_handler)


@contextmanager
def extract_logging_context(source_file: str, record_type: str = None):
    """Context manager that adds the current extract file to all log records.

    Usage:
        with extract_logging_context("cdr20240101", "cdr"):
            log.info("This message includes the source file")
    """
    old_factory = logging.getLogRecordFactory()

    def record_factory(*args, **kwargs):
        record = old_factory(*args, **kwargs)
        record.source_file = source_file
        if record_type:
            record.record_type = record_type
        return record

    logging.setLogRecordFactory(record_factory)
    try:
        yield
    finally:
        logging.setLogRecordFactory(old_factory)
