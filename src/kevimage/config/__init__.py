"""Configuration — defaults, YAML and env sources, validated ServiceConfig."""

from kevimage.config.schema import ServiceConfig, load_service_config

__all__ = ["ServiceConfig", "load_service_config"]
