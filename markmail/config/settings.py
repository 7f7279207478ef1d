"""Configuration settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict, YamlConfigSettingsSource

from markmail.config.constants import (
    BOUNDARY_PATTERN,
    CONFIG_LOCATIONS,
    DEFAULT_BOUNDARY,
    DEFAULT_IMAGE_WORKERS,
)


class MailConfig(BaseModel):
    """Mail assembly and default header configuration."""

    boundary: str = Field(
        default=DEFAULT_BOUNDARY, min_length=1, max_length=70, pattern=BOUNDARY_PATTERN
    )
    sender: str | None = None  # Default From: header
    subject: str | None = None
    crlf: bool = False  # Use CRLF line endings instead of LF


class ImageConfig(BaseModel):
    """Image processing configuration."""

    backend: Literal["pillow", "magick"] = "pillow"
    resample: Literal["nearest", "bilinear", "bicubic", "lanczos"] = "lanczos"
    magick_binary: str | None = None  # Defaults to `magick`, falling back to `convert`


class ConcurrencyConfig(BaseModel):
    """Concurrency configuration."""

    image_workers: int = Field(default=DEFAULT_IMAGE_WORKERS, ge=1)


class ConversionConfig(BaseModel):
    """Source format conversion configuration."""

    pandoc_path: str | None = None
    extra_args: list[str] = Field(default_factory=list)


class MarkmailSettings(BaseSettings):
    """Main configuration class for MarkMail."""

    model_config = SettingsConfigDict(
        env_prefix="MARKMAIL_",
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
            YamlConfigSettingsSource(
                settings_cls, yaml_file=list(reversed(CONFIG_LOCATIONS))
            ),
            file_secret_settings,
        )

    # Sub-configurations
    mail: MailConfig = Field(default_factory=MailConfig)
    image: ImageConfig = Field(default_factory=ImageConfig)
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig)
    conversion: ConversionConfig = Field(default_factory=ConversionConfig)

    # Global settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    log_file: str | None = None


@lru_cache
def get_settings() -> MarkmailSettings:
    """Get cached settings instance."""
    return MarkmailSettings()


def reload_settings() -> MarkmailSettings:
    """Force reload settings (clear cache)."""
    get_settings.cache_clear()
    return get_settings()
