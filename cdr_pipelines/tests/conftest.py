"""Pytest configuration and shared fixtures for loader tests."""

import os
import sys
from unittest.mock import patch

import pytest
from sqlalchemy import create_engine

# Ensure the cdr_pipelines package is importable without installation
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from cdr_pipelines.config.pipeline_config import PipelineConfig, PostgresConfig  # noqa: E402


CDR_CONTENT = (
    '"pkid","callId","callingPartyNumber","duration"\n'
    "UNIQUEIDENTIFIER,INT,VARCHAR(50),INT\n"
    '"0b7c5a3e-1f2d-4c1a-9e5b-6f0a1b2c3d4e",3000000001,"5551234",42\n'
    '"1c8d6b4f-2e3a-4d2b-8f6c-7a1b2c3d4e5f",3000000002,"5555678",\n'
)

CMR_CONTENT = (
    '"pkid","callId","jitter"\n'
    "UNIQUEIDENTIFIER,INT,INT\n"
    '"2d9e7c5a-3f4b-4e3c-9a7d-8b2c3d4e5f60",3000000001,7\n'
)


def write_extract(directory, name, content):
    """Write an extract file into ``directory`` and return its path."""
    path = os.path.join(str(directory), name)
    with open(path, "w", newline="") as f:
        f.write(content)
    return path


@pytest.fixture
def make_extract():
    """Factory fixture: ``make_extract(directory, name, content) -> path``."""
    return write_extract


@pytest.fixture
def cdr_content():
    """Contents of a well-formed call detail record extract (2 rows)."""
    return CDR_CONTENT


@pytest.fixture
def cmr_content():
    """Contents of a well-formed call management record extract (1 row)."""
    return CMR_CONTENT


@pytest.fixture
def scan_dir(tmp_path):
    """An empty scan directory."""
    path = tmp_path / "scan"
    path.mkdir()
    return path


@pytest.fixture
def sqlite_engine(tmp_path):
    """A file-backed SQLite engine standing in for the PostgreSQL store."""
    engine = create_engine(f"sqlite:///{tmp_path / 'store.db'}")
    yield engine
    engine.dispose()


@pytest.fixture
def loader_config(scan_dir, tmp_path):
    """A PipelineConfig pointing at the temporary scan directory and SQLite store."""
    return PipelineConfig(
        scan_path=str(scan_dir),
        postgres=PostgresConfig(url=f"sqlite:///{tmp_path / 'store.db'}"),
        insert_batch_size=1000,
    )


@pytest.fixture
def clean_env():
    """Remove loader environment variables for the duration of a test."""
    names = [
        "CDR_SCAN_PATH",
        "CDR_CONFIG_PATH",
        "CDR_DATABASE_URL",
        "CDR_INSERT_BATCH_SIZE",
        "CDR_LOG_LEVEL",
        "POSTGRES_HOST",
        "POSTGRES_PORT",
        "POSTGRES_USER",
        "POSTGRES_PASSWORD",
        "POSTGRES_DB",
    ]
    env = {k: v for k, v in os.environ.items() if k not in names}
    with patch.dict(os.environ, env, clear=True):
        yield


@pytest.fixture
def postgres_env():
    """Set PostgreSQL environment variables for testing."""
    env_vars = {
        "POSTGRES_USER": "test-user",
        "POSTGRES_PASSWORD": "test-password",
        "POSTGRES_HOST": "db.internal",
        "POSTGRES_PORT": "6543",
        "POSTGRES_DB": "telephony",
    }
    with patch.dict(os.environ, env_vars):
        yield env_vars
