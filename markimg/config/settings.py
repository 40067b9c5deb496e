"""Configuration settings using pydantic-settings."""

from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, YamlConfigSettingsSource

from markimg.config.constants import (
    ALIGN_OPTIONS,
    DEFAULT_ALIGN,
    DEFAULT_CONFIG_FILE,
    DEFAULT_LOCATION,
    DEFAULT_LOG_DIR,
    DEFAULT_PATTERN,
)
from markimg.exceptions import ConfigurationError

Align = Literal["left", "center", "right"]


@dataclass(frozen=True)
class OrganizerConfig:
    """Immutable configuration snapshot consumed by one organize pass."""

    auto_organize: bool = False
    location: str = DEFAULT_LOCATION
    pattern: str = DEFAULT_PATTERN
    align: Align = DEFAULT_ALIGN

    def __post_init__(self) -> None:
        if self.align not in ALIGN_OPTIONS:
            raise ConfigurationError(
                f"Invalid alignment '{self.align}'. Options: {', '.join(ALIGN_OPTIONS)}"
            )


class UploadsConfig(BaseModel):
    """Image upload and organization configuration."""

    auto_organize: bool = False  # Rename/relocate images on save
    location: str = DEFAULT_LOCATION  # Managed directory, relative to the document
    pattern: str = DEFAULT_PATTERN
    align: Align = DEFAULT_ALIGN

    @field_validator("location")
    @classmethod
    def _location_not_blank(cls, value: str) -> str:
        return value.strip() or DEFAULT_LOCATION

    def to_organizer_config(self) -> OrganizerConfig:
        """Snapshot the current values for a single pass."""
        return OrganizerConfig(
            auto_organize=self.auto_organize,
            location=self.location,
            pattern=self.pattern,
            align=self.align,
        )


class MarkimgSettings(BaseSettings):
    """Main configuration class for MarkImg."""

    model_config = SettingsConfigDict(
        env_prefix="MARKIMG_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls, settings_cls, init_settings, env_settings, dotenv_settings, file_secret_settings
    ):
        """Customize settings sources to include YAML file."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls, yaml_file=DEFAULT_CONFIG_FILE),
            file_secret_settings,
        )

    uploads: UploadsConfig = Field(default_factory=UploadsConfig)

    # Global settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_dir: str = DEFAULT_LOG_DIR


@lru_cache
def get_settings() -> MarkimgSettings:
    """Get cached settings instance."""
    return MarkimgSettings()


def reload_settings() -> MarkimgSettings:
    """Force reload settings (clear cache)."""
    get_settings.cache_clear()
    return get_settings()
