"""Configuration manager for loading and validating .retry-timeouts.yml"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import ValidationError

from retry_timeouts.domain.config import (
    AppConfig,
    ConfigurationError,
    RetryTimeoutsConfig,
    format_validation_error,
)

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".retry-timeouts.yml"
ENV_PREFIX = "RETRY_TIMEOUTS_"


class ConfigManager:
    """Manages configuration from .retry-timeouts.yml and environment variables

    Loads configuration with validation using Pydantic models. Configuration priority:
    1. Default values (defined in Pydantic models)
    2. .retry-timeouts.yml file (searched from current directory)
    3. Environment variables (RETRY_TIMEOUTS_<FIELD>, e.g. RETRY_TIMEOUTS_MAX_ATTEMPTS)
    4. CLI arguments (handled by CLI layer)
    """

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize config manager

        Args:
            config_path: Path to .retry-timeouts.yml (searches from current dir if None)

        Raises:
            ConfigurationError: If configuration validation fails
        """
        if isinstance(config_path, str):
            config_path = Path(config_path)
        self.config_path = config_path or self._find_config_file()
        try:
            self.config: AppConfig = self._load_config()
        except ValidationError as e:
            raise ConfigurationError(format_validation_error(e)) from e

    def _find_config_file(self) -> Optional[Path]:
        """Find .retry-timeouts.yml starting from current directory

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
        """Load configuration from file and validate with Pydantic

        Returns:
            Validated AppConfig instance

        Raises:
            ValidationError: If configuration is invalid
        """
        config_dict: Dict[str, Any] = {"retry": {}}

        if self.config_path and self.config_path.exists():
            try:
                with open(self.config_path, "r", encoding="utf-8") as f:
                    file_config = yaml.safe_load(f) or {}
                if not isinstance(file_config, dict):
                    raise ValueError("top level must be a mapping")
                config_dict = self._merge_config(config_dict, file_config)
                logger.info(f"Loaded configuration from {self.config_path}")
            except (OSError, yaml.YAMLError, ValueError) as e:
                logger.warning(f"Failed to load config from {self.config_path}: {e}")
                logger.info("Using default configuration")

        config_dict = self._apply_env_overrides(config_dict)

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
        """Apply RETRY_TIMEOUTS_<FIELD> environment variable overrides

        Values are passed through as strings; Pydantic coerces them.

        Args:
            config: Configuration dictionary

        Returns:
            Configuration with env overrides applied
        """
        retry = config.get("retry")
        if not isinstance(retry, dict):
            # Leave it for Pydantic to reject
            return config

        for field in RetryTimeoutsConfig.model_fields:
            value = os.getenv(f"{ENV_PREFIX}{field.upper()}")
            if value is None:
                continue
            if field == "max_delay" and value.strip().lower() in ("", "none", "null"):
                retry[field] = None
            else:
                retry[field] = value
            logger.debug(f"Overriding retry.{field} from environment")
        return config

    def get_retry_config(self) -> RetryTimeoutsConfig:
        """Get retry configuration

        Returns:
            Retry configuration model
        """
        return self.config.retry

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)

        Args:
            key: Configuration key (e.g., "retry.max_attempts" or "retry")
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
