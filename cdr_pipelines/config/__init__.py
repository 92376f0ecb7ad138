"""Configuration for the extract loader."""

from cdr_pipelines.config.pipeline_config import PipelineConfig, PostgresConfig, get_config

__all__ = ["PipelineConfig", "PostgresConfig", "get_config"]
