"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - Hierarchical YAML configuration loading
    - Environment variable override (WAITS_ELEMENT_TIMEOUT overrides waits.element_timeout)
    - Dot notation path access
    - Default value support
    - WaitSettings: the timeouts every wait in uimap falls back to

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger


# Default configuration file path
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (WAITS_ELEMENT_TIMEOUT)
        2. YAML configuration file
        3. Default values

    Usage:
        >>> config = ConfigLoader()
        >>> config.get("waits.element_timeout", 5000)
        5000

    Environment Variable Mapping:
        - waits.element_timeout -> WAITS_ELEMENT_TIMEOUT
        - logging.level -> LOGGING_LEVEL
        - ui.base_url -> UI_BASE_URL
    """

    _instance: Optional["ConfigLoader"] = None
    _config: Dict[str, Any] = {}

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        """Singleton pattern - return existing instance if available."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize configuration loader.

        Args:
            config_path: Path to YAML configuration file.
                        Uses DEFAULT_CONFIG_PATH if not specified.
        """
        if getattr(self, "_initialized", False):
            return

        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._load_config()
        self._initialized = True

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self._config_path.exists():
            logger.warning(
                f"Configuration file not found: {self._config_path}. "
                f"Using defaults and environment variables only."
            )
            self._config = {}
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                self._config = yaml.safe_load(f) or {}
            logger.debug(f"Loaded configuration from: {self._config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {e}"
            ) from e

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        First checks environment variables, then YAML config, then default.

        Args:
            key: Dot-notation path (e.g., "waits.interval")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        env_key = key.upper().replace(".", "_")
        env_value = os.environ.get(env_key)
        if env_value is not None:
            return self._convert_type(env_value, default)

        value = self._config
        for part in key.split("."):
            if isinstance(value, dict):
                value = value.get(part)
            else:
                value = None

            if value is None:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get entire configuration section.

        Args:
            section: Section name (e.g., "waits", "logging")

        Returns:
            Section dictionary or empty dict if not found
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()
        logger.info(f"Configuration reloaded from: {self._config_path}")

    def _convert_type(self, value: str, reference: Any) -> Any:
        """
        Convert string value to match reference type.

        Used for environment variables which are always strings.
        """
        if reference is None:
            return value

        if isinstance(reference, bool):
            return value.lower() in ("true", "1", "yes", "on")
        if isinstance(reference, int):
            try:
                return int(value)
            except ValueError:
                return value
        if isinstance(reference, float):
            try:
                return float(value)
            except ValueError:
                return value

        return value

    @classmethod
    def reset(cls) -> None:
        """
        Reset singleton instance.

        Useful for testing when configuration needs to be reloaded
        with different settings.
        """
        cls._instance = None
        cls._config = {}


@dataclass
class WaitSettings:
    """
    Timeouts and intervals used by implicit waits, in milliseconds.

    Attributes:
        element_timeout: How long an element lookup retries before giving up
        interval: Delay between two polls
        window_timeout: How long to wait for a window to appear or close
        modal_dialog_delay: Tick interval of the modal dialog observer
        modal_dialog_timeout: How long wait_for_modal_dialog() waits
        page_load_timeout: How long to wait for a page to finish loading
    """
    element_timeout: int = 5000
    interval: int = 100
    window_timeout: int = 5000
    modal_dialog_delay: int = 100
    modal_dialog_timeout: int = 5000
    page_load_timeout: int = 30000

    @classmethod
    def from_config(cls, loader: Optional[ConfigLoader] = None) -> "WaitSettings":
        """
        Build settings from the `waits` configuration section.

        Args:
            loader: ConfigLoader to read from. Uses the shared instance if omitted.

        Returns:
            WaitSettings with configured values over the defaults
        """
        loader = loader or ConfigLoader()
        defaults = cls()
        values = {
            f.name: loader.get(f"waits.{f.name}", getattr(defaults, f.name))
            for f in fields(cls)
        }
        return cls(**values)


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "WaitSettings",
    "DEFAULT_CONFIG_PATH",
]
