"""Shared utility functions for the extract loader."""

from cdr_pipelines.utils.postgres_client import get_postgres_connection, run_connection, table_exists
from cdr_pipelines.utils.logging_config import extract_logging_context, setup_logging
from cdr_pipelines.utils.alerting import format_ingestion_failure_alert, send_alert

__all__ = [
    "get_postgres_connection",
    "run_connection",
    "table_exists",
    "extract_logging_context",
    "setup_logging",
    "format_ingestion_failure_alert",
    "send_alert",
]
