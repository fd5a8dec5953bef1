"""Configuration loading for GitPanel."""

from gitpanel.config.config_loader import (
	ConfigError,
	ConfigFileNotFoundError,
	ConfigLoader,
	ConfigParsingError,
)
from gitpanel.config.config_schema import AppConfigSchema

__all__ = [
	"AppConfigSchema",
	"ConfigError",
	"ConfigFileNotFoundError",
	"ConfigLoader",
	"ConfigParsingError",
]
