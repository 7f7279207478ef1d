"""Configuration module for MarkMail."""

from markmail.config.settings import (
    ConcurrencyConfig,
    ConversionConfig,
    ImageConfig,
    MailConfig,
    MarkmailSettings,
    get_settings,
    reload_settings,
)

__all__ = [
    "MarkmailSettings",
    "MailConfig",
    "ImageConfig",
    "ConcurrencyConfig",
    "ConversionConfig",
    "get_settings",
    "reload_settings",
]
