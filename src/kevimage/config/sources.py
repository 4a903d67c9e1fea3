"""YAML settings source for ServiceConfig.

Reads the global file (~/.kevimage/config.yaml) and then the project file
(./kevimage.yaml); keys from the project file win. Environment and runtime
values are layered on top by pydantic-settings.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from kevimage.config.defaults import DEFAULT_HOME

logger = logging.getLogger(__name__)

_GLOBAL_CONFIG_PATH = DEFAULT_HOME / "config.yaml"
_PROJECT_CONFIG_NAME = "kevimage.yaml"


def config_file_paths() -> list[Path]:
    """YAML files consulted, lowest priority first."""
    return [_GLOBAL_CONFIG_PATH, Path.cwd() / _PROJECT_CONFIG_NAME]


class YamlConfigSource(PydanticBaseSettingsSource):
    """Merged contents of the YAML config files, restricted to known fields."""

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls)

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        # Values are produced in bulk by __call__
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        known = self.settings_cls.model_fields
        merged: dict[str, Any] = {}
        for path in config_file_paths():
            data = read_yaml_mapping(path)
            if not data:
                continue
            unknown = sorted(k for k in data if k not in known)
            if unknown:
                logger.warning("Ignoring unknown keys in %s: %s", path, ", ".join(unknown))
            merged.update({k: v for k, v in data.items() if k in known})
            logger.debug("Loaded config from %s", path)
        return merged


def read_yaml_mapping(path: Path) -> dict[str, Any] | None:
    """Load a YAML mapping, or None if the file is absent or unusable."""
    if not path.is_file():
        return None
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Failed to load config %s: %s", path, e)
        return None
    if data is None:
        return None
    if not isinstance(data, dict):
        logger.warning("Config file %s is not a mapping, ignoring", path)
        return None
    return data
