"""Unified configuration loading utility for the listing scraper."""

import json
import logging
import os
import re
from pathlib import Path
from typing import Dict, Any

from pydantic import ValidationError

from core.types import ScraperSettings
from utils.error_handling import ConfigurationError


REQUIRED_KEYS = (
    "app.baseurl",
    "selector.pages",
    "selector.product",
    "selector.product.content",
    "selector.product.extra",
)


class ConfigLoader:
    """Centralized configuration loader with caching and validation."""

    ENV_PATTERN = re.compile(r"\$\{([A-Z0-9_]+)\}")

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self._config_cache: Dict[str, Dict[str, Any]] = {}
        self._missing_env_vars: set[str] = set()

    def load_config(self, config_path: str) -> Dict[str, Any]:
        """Load and cache JSON configuration with unified error handling.

        Args:
            config_path: Path to configuration file

        Returns:
            Configuration dictionary

        Raises:
            ConfigurationError: If file not found or JSON invalid
        """
        config_path = str(config_path)
        if config_path in self._config_cache:
            return self._config_cache[config_path]

        config_file = Path(config_path)
        if not config_file.exists():
            error_msg = f"Configuration file not found: {config_path}"
            self.logger.error(error_msg)
            raise ConfigurationError(error_msg)

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            error_msg = f"Invalid JSON in configuration {config_path}: {e}"
            self.logger.error(error_msg)
            raise ConfigurationError(error_msg) from e
        except OSError as e:
            error_msg = f"Error reading configuration {config_path}: {e}"
            self.logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

        if not isinstance(config, dict):
            raise ConfigurationError(
                f"Configuration {config_path} must contain a JSON object"
            )

        config = self._substitute_env_variables(config)

        self._config_cache[config_path] = config
        self.logger.debug(f"Configuration loaded successfully: {config_path}")
        return config

    def get_nested_value(self, config: Dict[str, Any], key_path: str,
                         default: Any = None) -> Any:
        """Get configuration value by dotted key.

        A literal flat key (``"selector.product.content"``) wins over
        nested lookup, so both styles of settings file are accepted.

        Example:
            >>> config = {'app': {'baseurl': 'https://example.com'}}
            >>> loader.get_nested_value(config, 'app.baseurl')
            'https://example.com'
        """
        if key_path in config:
            return config[key_path]

        value = config
        for key in key_path.split('.'):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value

    def validate_required_keys(self, config: Dict[str, Any],
                               required_keys=REQUIRED_KEYS) -> None:
        """Validate that all required configuration keys are present.

        Raises:
            ConfigurationError: If any required key is missing
        """
        missing_keys = [
            key_path
            for key_path in required_keys
            if self.get_nested_value(config, key_path) is None
        ]

        if missing_keys:
            error_msg = f"Missing required configuration keys: {missing_keys}"
            self.logger.error(error_msg)
            raise ConfigurationError(error_msg)

    def load_settings(self, config_path: str) -> ScraperSettings:
        """Load a settings file and validate it into ``ScraperSettings``."""
        config = self.load_config(config_path)
        self.validate_required_keys(config)

        values = {
            field.alias: self.get_nested_value(config, field.alias)
            for field in ScraperSettings.model_fields.values()
        }
        values = {key: value for key, value in values.items() if value is not None}

        try:
            return ScraperSettings.model_validate(values)
        except ValidationError as e:
            error_msg = f"Invalid configuration {config_path}: {e}"
            self.logger.error(error_msg)
            raise ConfigurationError(error_msg) from e

    def _substitute_env_variables(self, value: Any) -> Any:
        if isinstance(value, dict):
            return {k: self._substitute_env_variables(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._substitute_env_variables(item) for item in value]
        if isinstance(value, str):
            def replace(match: re.Match[str]) -> str:
                env_name = match.group(1)
                env_value = os.getenv(env_name)
                if env_value is None:
                    if env_name not in self._missing_env_vars:
                        self.logger.warning(
                            "Environment variable %s is not set; substituting empty string",
                            env_name,
                        )
                        self._missing_env_vars.add(env_name)
                    return ""
                return env_value

            return self.ENV_PATTERN.sub(replace, value)
        return value


# Global instance for application-wide use
config_loader = ConfigLoader()


def load_settings(config_path: str = "config/settings.json") -> ScraperSettings:
    """Load scraper settings using the global config loader instance."""
    return config_loader.load_settings(config_path)
