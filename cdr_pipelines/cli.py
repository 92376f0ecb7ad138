"""Command-line entry point for a single extract loader run.

Usage:
    cdr-loader
    cdr-loader --config /etc/cdr-loader/config.yaml --scan-path /data/extracts
"""

import argparse
import logging
import os
import sys

from cdr_pipelines.config.pipeline_config import get_config
from cdr_pipelines.ingestion import ConfigurationError, IngestionError, run_ingestion
from cdr_pipelines.utils.alerting import format_ingestion_failure_alert, send_alert
from cdr_pipelines.utils.logging_config import setup_logging
from cdr_pipelines.utils.postgres_client import get_postgres_connection

log = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        description="Load call-record extract files into the database and archive them"
    )
    parser.add_argument(
        "--config",
        default=os.getenv("CDR_CONFIG_PATH"),
        help="Path to the YAML configuration file (default: ./config.yaml if present)",
    )
    parser.add_argument(
        "--scan-path",
        help="Directory to scan for extract files (overrides the config file)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (DEBUG, INFO, WARNING, ERROR)",
    )
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    try:
        config = get_config(args.config, scan_path=args.scan_path)
    except ConfigurationError as exc:
        log.error("%s", exc)
        send_alert(format_ingestion_failure_alert(exc))
        return 1

    if args.log_level is None:
        logging.getLogger().setLevel(getattr(logging, config.log_level.upper(), logging.INFO))

    engine = get_postgres_connection(config.postgres.connection_string)
    try:
        run_ingestion(config, engine)
    except IngestionError as exc:
        log.error("Ingestion aborted: %s", exc)
        send_alert(format_ingestion_failure_alert(exc))
        return 1
    finally:
        engine.dispose()

    log.info("Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
