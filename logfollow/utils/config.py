"""
Configuration management for logfollow.

Handles loading and merging configuration from:
- Default configuration file
- A user-supplied configuration file
- Environment variables

Command-line flags are applied on top by the CLI.
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


class Config:
    """Configuration manager for logfollow."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file. If None, uses default.
        """
        self._config: Dict[str, Any] = {}
        self._load_default_config()

        if config_file:
            self._load_config_file(config_file)

        self._apply_env_overrides()

    def _load_default_config(self) -> None:
        """Load default configuration."""
        default_config_path = Path(__file__).parent.parent.parent / "config" / "default.yaml"
        if default_config_path.exists():
            self._load_config_file(str(default_config_path))

    def _load_config_file(self, config_file: str) -> None:
        """
        Load configuration from YAML file.

        Args:
            config_file: Path to YAML configuration file
        """
        with open(config_file, "r") as f:
            file_config = yaml.safe_load(f)
        if file_config:
            self._merge_config(file_config)

    def _merge_config(self, new_config: Dict[str, Any]) -> None:
        """Deep merge new configuration into existing configuration."""
        self._config = self._deep_merge(self._config, new_config)

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep merge two dictionaries.

        Args:
            base: Base dictionary
            override: Override dictionary

        Returns:
            Merged dictionary
        """
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        if poll_interval := os.getenv("LOGFOLLOW_POLL_INTERVAL"):
            self.set("follow.poll_interval", float(poll_interval))

        if chunk_size := os.getenv("LOGFOLLOW_CHUNK_SIZE"):
            self.set("display.chunk_size", int(chunk_size))

        if window_size := os.getenv("LOGFOLLOW_WINDOW_SIZE"):
            self.set("scan.window_size", int(window_size))

        if log_level := os.getenv("LOG_LEVEL"):
            self.set("logging.level", log_level)

        if log_format := os.getenv("LOG_FORMAT"):
            self.set("logging.format", log_format)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "follow.poll_interval")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key in dot notation
            value: Value to set
        """
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value

