"""Service configuration, resolved by pydantic-settings.

Precedence (later overrides earlier):
  1. Field defaults
  2. YAML files (~/.kevimage/config.yaml, then ./kevimage.yaml)
  3. Environment variables (KEVIMAGE_*, plus PORT)
  4. Runtime arguments
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from kevimage.config import defaults
from kevimage.config.sources import YamlConfigSource


class ServiceConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="KEVIMAGE_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = defaults.DEFAULT_HOST
    # PORT is the conventional platform variable; KEVIMAGE_PORT also works
    port: int = Field(
        default=defaults.DEFAULT_PORT,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("port", "kevimage_port"),
    )
    cache_dir: Path = defaults.DEFAULT_CACHE_DIR
    index_path: Path = defaults.DEFAULT_INDEX_PATH
    quality: int = Field(default=defaults.DEFAULT_QUALITY, ge=1, le=95)
    fetch_timeout: float = Field(default=defaults.DEFAULT_FETCH_TIMEOUT, gt=0)
    max_download_mb: float = Field(default=defaults.DEFAULT_MAX_DOWNLOAD_MB, gt=0)
    user_agent: str = defaults.DEFAULT_USER_AGENT
    log_level: str = defaults.DEFAULT_LOG_LEVEL

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, YamlConfigSource(settings_cls)

    @field_validator("cache_dir", "index_path", mode="before")
    @classmethod
    def _expand_user(cls, value: Any) -> Any:
        if isinstance(value, str):
            return Path(value).expanduser()
        return value

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()


def load_service_config(**runtime_overrides: Any) -> ServiceConfig:
    """Resolve every layer; runtime arguments left as None do not override."""
    explicit = {k: v for k, v in runtime_overrides.items() if v is not None}
    return ServiceConfig(**explicit)
