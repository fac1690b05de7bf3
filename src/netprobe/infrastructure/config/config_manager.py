"""Configuration manager for loading and validating .netprobe.yml"""

import copy
import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml
from pydantic import ValidationError

from netprobe.domain.config import AppConfig, EndpointConfig, RetryConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".netprobe.yml"

# (environment variable, section, key, converter)
ENV_OVERRIDES = [
    ("NETPROBE_HOST", "endpoint", "host", str),
    ("NETPROBE_PORT", "endpoint", "port", int),
    ("NETPROBE_TIMEOUT", "endpoint", "timeout", float),
    ("NETPROBE_MAX_RETRIES", "retry", "max_retries", int),
    ("NETPROBE_BASE_DELAY", "retry", "base_delay", float),
]


class ConfigurationError(Exception):
    """Configuration validation error."""

    pass


class ConfigManager:
    """Manages configuration from .netprobe.yml and environment variables

    Configuration priority:
    1. Default values
    2. .netprobe.yml file (searched from current directory upwards)
    3. Environment variables (NETPROBE_*)
    4. CLI arguments (handled by CLI layer)
    """

    DEFAULT_CONFIG = {
        "endpoint": {
            "host": "example.com",
            "port": 443,
            "timeout": 2.0,
        },
        "retry": {
            "max_retries": 2,
            "base_delay": 0.5,
            "max_delay": None,
        },
    }

    def __init__(
        self,
        config_path: Optional[Path] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        """Initialize config manager

        Args:
            config_path: Path to .netprobe.yml (searches from current dir if None)
            overrides: Highest-priority values, e.g. from CLI options

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        self.overrides = overrides or {}
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            errors = []
            for error in e.errors():
                field = ".".join(str(x) for x in error["loc"])
                msg = error["msg"]
                errors.append(f"  - {field}: {msg}")
            raise ConfigurationError(
                "Configuration validation failed:\n" + "\n".join(errors)
            ) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .netprobe.yml starting from current directory

        Returns:
            Path to config file or None if not found
        """
        current = Path.cwd()
        for parent in [current] + list(current.parents):
            config_file = parent / CONFIG_FILE_NAME
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return config_file
        logger.debug(f"No {CONFIG_FILE_NAME} found, using defaults")
        return None

    def _load_config(self) -> AppConfig:
        """Load configuration from file, environment and overrides

        Returns:
            Validated AppConfig instance

        Raises:
            ValidationError: If configuration is invalid
            ConfigurationError: If an environment variable cannot be parsed
        """
        config_dict = copy.deepcopy(self.DEFAULT_CONFIG)

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
                config_dict = self._merge_config(config_dict, file_config)
                logger.info(f"Loaded configuration from {self.config_path}")
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}")
                logger.info("Using default configuration")

        config_dict = self._apply_env_overrides(config_dict)
        config_dict = self._merge_config(config_dict, self.overrides)

        return AppConfig(**config_dict)

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge configuration dictionaries

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply NETPROBE_* environment variable overrides

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with env overrides applied
        """
        for env_name, section, key, convert in ENV_OVERRIDES:
            raw = os.getenv(env_name)
            if not raw:
                continue
            config.setdefault(section, {})[key] = _convert_env(env_name, raw, convert)
        return config

    def get_endpoint_config(self) -> EndpointConfig:
        """Get endpoint configuration

        Returns:
            Endpoint configuration model
        """
        return self.config.endpoint

    def get_retry_config(self) -> RetryConfig:
        """Get retry configuration

        Returns:
            Retry configuration model
        """
        return self.config.retry

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)

        Args:
            key: Configuration key (e.g., "endpoint.host" or "retry")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split(".")
        value = self.config.model_dump()
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value


def _convert_env(env_name: str, raw: str, convert: Callable[[str], Any]) -> Any:
    try:
        return convert(raw)
    except ValueError as e:
        raise ConfigurationError(f"Invalid value for {env_name}: {raw!r}") from e
