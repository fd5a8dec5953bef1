"""
Configuration loader for GitPanel.

Settings live in a YAML file validated by ``AppConfigSchema``. Without a file
every setting takes its schema default.

"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError
from xdg.BaseDirectory import xdg_config_home

from gitpanel.config.config_schema import AppConfigSchema

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".gitpanel.yml"


class ConfigError(Exception):
	"""Exception raised for configuration errors."""


class ConfigFileNotFoundError(ConfigError):
	"""An explicitly requested configuration file does not exist."""


class ConfigParsingError(ConfigError):
	"""The configuration file is unreadable, not a YAML mapping, or fails validation."""


def default_config_candidates() -> list[Path]:
	"""Files consulted, in order, when no configuration file is given."""
	return [
		Path(CONFIG_FILE_NAME),
		Path(xdg_config_home) / "gitpanel" / "config.yml",
		Path.home() / ".gitpanel" / "config.yml",
	]


class ConfigLoader:
	"""
	Loads configuration for GitPanel into a Pydantic schema.

	The library never reads configuration itself; the CLI builds a loader and
	passes the values it needs into ``GitService``.

	"""

	_instance: ConfigLoader | None = None

	@classmethod
	def get_instance(cls, config_file: Path | None = None, reload: bool = False) -> ConfigLoader:
		"""Return the shared loader, creating it on first use."""
		if cls._instance is None:
			cls._instance = cls(config_file)
		elif reload:
			cls._instance.reload_config(config_file)
		return cls._instance

	def __init__(self, config_file: Path | None = None) -> None:
		"""
		Load configuration immediately.

		Args:
			config_file: Explicit file; when omitted the default candidates are searched.

		Raises:
			ConfigFileNotFoundError: If ``config_file`` is given but missing.
			ConfigParsingError: If the file cannot be read or validated.

		"""
		self._config_file = config_file
		self._resolved_config_file: Path | None = None
		self._app_config = AppConfigSchema()
		self.reload_config()

	def reload_config(self, config_file: Path | None = None) -> None:
		"""Load configuration again, optionally switching to another file."""
		if config_file is not None:
			self._config_file = config_file
		self._resolved_config_file = self._resolve_config_file(self._config_file)
		self._app_config = self._load_config(self._resolved_config_file)

	@staticmethod
	def _resolve_config_file(config_file: Path | None) -> Path | None:
		if config_file is not None:
			path = config_file.expanduser().resolve()
			if not path.is_file():
				msg = f"Configuration file not found: {path}"
				raise ConfigFileNotFoundError(msg)
			return path
		return next((candidate for candidate in default_config_candidates() if candidate.is_file()), None)

	@staticmethod
	def _read_mapping(file_path: Path) -> dict[str, Any]:
		try:
			with file_path.open(encoding="utf-8") as f:
				content = yaml.safe_load(f)
		except yaml.YAMLError as e:
			msg = f"Configuration file {file_path} is not valid YAML"
			logger.exception(msg)
			raise ConfigParsingError(msg) from e
		except OSError as e:
			msg = f"Error reading configuration file {file_path}: {e}"
			logger.exception(msg)
			raise ConfigParsingError(msg) from e

		if content is None:
			return {}
		if not isinstance(content, dict):
			msg = f"Configuration file {file_path} must contain a mapping at the top level"
			raise ConfigParsingError(msg)
		return content

	def _load_config(self, file_path: Path | None) -> AppConfigSchema:
		if file_path is None:
			logger.debug("No configuration file found, using defaults")
			return AppConfigSchema()

		values = self._read_mapping(file_path)
		try:
			config = AppConfigSchema(**values)
		except ValidationError as e:
			msg = f"Invalid configuration in {file_path}: {e}"
			logger.exception(msg)
			raise ConfigParsingError(msg) from e
		logger.debug("Loaded configuration from %s", file_path)
		return config

	@property
	def config_file(self) -> Path | None:
		"""The file the configuration was read from, if any."""
		return self._resolved_config_file

	@property
	def get(self) -> AppConfigSchema:
		"""The current application configuration."""
		return self._app_config
