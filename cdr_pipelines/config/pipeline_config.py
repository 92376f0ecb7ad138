"""Configuration management for the extract loader.

Provides typed configuration classes populated from an optional YAML file
(``config.yaml``) with environment variables filling anything the file
leaves out.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from cdr_pipelines.ingestion.errors import ConfigurationError

log = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "config.yaml"

# Filename prefix -> target table
DEFAULT_RECORD_TABLES = {
    "cdr": "cdr",
    "cmr": "cmr",
}

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


@dataclass
class PostgresConfig:
    """PostgreSQL connection configuration."""

    host: str = ""
    port: int = 0
    user: str = ""
    password: str = ""
    database: str = ""
    url: str = ""

    def __post_init__(self):
        self.host = self.host or os.environ.get("POSTGRES_HOST", "localhost")
        self.port = int(self.port or os.environ.get("POSTGRES_PORT", "5432"))
        self.user = self.user or os.environ.get("POSTGRES_USER", "postgres")
        self.password = self.password or os.environ.get("POSTGRES_PASSWORD", "")
        self.database = self.database or os.environ.get("POSTGRES_DB", "postgres")
        self.url = self.url or os.environ.get("CDR_DATABASE_URL", "")

    @property
    def connection_string(self) -> str:
        if self.url:
            return self.url
        return f"postgresql+psycopg2://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"


@dataclass
class PipelineConfig:
    """Top-level loader configuration."""

    scan_path: str = ""
    postgres: PostgresConfig = field(default_factory=PostgresConfig)
    tables: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_RECORD_TABLES))
    table_name: Optional[str] = None
    insert_batch_size: int = 0
    log_level: str = ""

    def __post_init__(self):
        self.scan_path = self.scan_path or os.environ.get("CDR_SCAN_PATH", "")
        self.insert_batch_size = int(
            self.insert_batch_size or os.environ.get("CDR_INSERT_BATCH_SIZE", "1000")
        )
        self.log_level = self.log_level or os.environ.get("CDR_LOG_LEVEL", "INFO")

    @property
    def record_tables(self) -> Dict[str, str]:
        """Prefix -> table map; a legacy ``table_name`` sends every prefix to one table."""
        tables = {prefix.lower(): name for prefix, name in self.tables.items()}
        if self.table_name:
            return {prefix: self.table_name for prefix in tables}
        return tables

    def validate(self) -> list:
        """Validate required configuration parameters.

        Returns:
            List of validation error messages (empty if valid).
        """
        errors = []

        if not self.scan_path:
            errors.append("Scan path is required")
        elif not os.path.isdir(self.scan_path):
            errors.append(f"Scan path '{self.scan_path}' is not a directory")
        if not self.tables:
            errors.append("At least one record type table is required")
        for prefix, table_name in self.record_tables.items():
            if len(prefix) != 3:
                errors.append(f"Record type prefix '{prefix}' must be 3 characters")
            if not _IDENTIFIER_PATTERN.match(table_name or ""):
                errors.append(f"Invalid table name '{table_name}' for prefix '{prefix}'")
        if self.insert_batch_size < 1:
            errors.append("Insert batch size must be positive")

        return errors


def load_config_file(config_path: str) -> Dict[str, Any]:
    """Read a YAML configuration file into a dict.

    Raises:
        ConfigurationError: If the file is missing, unparseable, or not a mapping.
    """
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config file '{config_path}': {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Cannot parse config file '{config_path}': {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file '{config_path}' must contain a mapping")
    return data


def config_from_dict(data: Dict[str, Any]) -> PipelineConfig:
    """Build a PipelineConfig from a parsed config mapping.

    Accepts both ``scanPath``/``tableName`` and ``scan_path``/``table_name`` keys.
    """
    database = data.get("database") or {}
    if not isinstance(database, dict):
        raise ConfigurationError("'database' must be a mapping of connection parameters")

    postgres = PostgresConfig(
        host=database.get("host", ""),
        port=int(database.get("port") or 0),
        user=database.get("user", ""),
        password=database.get("password", ""),
        database=database.get("database", ""),
        url=database.get("url", ""),
    )

    tables = data.get("tables") or dict(DEFAULT_RECORD_TABLES)
    if not isinstance(tables, dict):
        raise ConfigurationError("'tables' must map record type prefixes to table names")

    return PipelineConfig(
        scan_path=data.get("scanPath") or data.get("scan_path") or "",
        postgres=postgres,
        tables={str(prefix): str(name) for prefix, name in tables.items()},
        table_name=data.get("tableName") or data.get("table_name"),
        insert_batch_size=int(data.get("insertBatchSize") or data.get("insert_batch_size") or 0),
        log_level=data.get("logLevel") or data.get("log_level") or "",
    )


def get_config(config_path: Optional[str] = None, scan_path: Optional[str] = None) -> PipelineConfig:
    """Create and validate the loader configuration.

    An explicit ``config_path`` (or ``CDR_CONFIG_PATH``) must exist; otherwise
    ``config.yaml`` in the working directory is used when present.

    Returns:
        Validated PipelineConfig instance.

    Raises:
        ConfigurationError: If the file is unusable or required values are missing.
    """
    config_path = config_path or os.environ.get("CDR_CONFIG_PATH")
    if config_path is None and os.path.exists(DEFAULT_CONFIG_FILE):
        config_path = DEFAULT_CONFIG_FILE

    data = load_config_file(config_path) if config_path else {}
    try:
        config = config_from_dict(data)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid configuration value: {exc}") from exc

    if scan_path:
        config.scan_path = scan_path

    errors = config.validate()
    if errors:
        raise ConfigurationError(f"Configuration errors: {'; '.join(errors)}")

    log.info("Loaded configuration (scan_path=%s, tables=%s)", config.scan_path, config.record_tables)
    return config
