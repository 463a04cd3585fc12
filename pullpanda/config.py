"""Configuration loading for the pullpanda tool."""

import os
import re
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError

from pullpanda.models import ReportConfig
from pullpanda.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"

_ENV_VAR_PATTERN = re.compile(r"\$\{(?P<braced>[^}]+)\}|\$(?P<bare>[A-Z_][A-Z0-9_]*)")


class ConfigError(Exception):
    """Configuration error."""
    pass


class ConfigLoader:
    """Loads the YAML report configuration with environment variable support."""

    def __init__(self, path: Union[str, Path] = DEFAULT_CONFIG_PATH):
        """Initialize configuration loader.

        Args:
            path: Path to the YAML configuration file
        """
        self.path = Path(path)

    def _expand_env_vars(self, data: Any) -> Any:
        """Recursively expand environment variables in string values.

        Supports ``${VAR}``, ``${VAR:-default}`` and ``$VAR``. Unknown
        variables without a default are left as written.
        """
        if isinstance(data, dict):
            return {key: self._expand_env_vars(value) for key, value in data.items()}
        if isinstance(data, list):
            return [self._expand_env_vars(item) for item in data]
        if not isinstance(data, str):
            return data

        def substitute(match):
            name, has_default, default = (match.group("braced") or match.group("bare")).partition(":-")
            value = os.getenv(name)
            if value is not None:
                return value
            if has_default:
                return default
            logger.warning(f"Environment variable '{name}' not found")
            return match.group(0)

        return _ENV_VAR_PATTERN.sub(substitute, data)

    def _load_yaml_file(self) -> Dict[str, Any]:
        """Load and parse the YAML configuration file.

        Returns:
            Parsed configuration data

        Raises:
            ConfigError: If file cannot be read or parsed
        """
        logger.debug(f"Loading config file: {self.path}")

        try:
            with open(self.path, "r") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML file {self.path}: {e}") from e
        except OSError as e:
            raise ConfigError(f"Failed to read config file {self.path}: {e}") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file {self.path} must contain a mapping, got {type(data).__name__}"
            )

        data = self._expand_env_vars(data)
        logger.debug(f"Loaded config with keys: {list(data.keys())}")
        return data

    def load_config(self) -> ReportConfig:
        """Load and validate the configuration.

        Returns:
            Validated report configuration

        Raises:
            ConfigError: If the file is unreadable, malformed or invalid
        """
        data = self._load_yaml_file()

        try:
            config = ReportConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration in {self.path}: {e}") from e

        if config.orgs and config.repos:
            logger.warning("Both orgs and repos are configured; repos are ignored")
        if not config.handles:
            logger.warning(f"No handles configured in {self.path}")

        return config


def load_config(path: Union[str, Path] = DEFAULT_CONFIG_PATH) -> ReportConfig:
    """Load the report configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file

    Returns:
        Validated report configuration
    """
    return ConfigLoader(path).load_config()
