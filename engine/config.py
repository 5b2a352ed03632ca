"""
Configuration manager for Crypto Portfolio Tracker.

Handles loading and managing application configuration from YAML files.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Any, List, Optional

import yaml
from utils.constants import TICK_INTERVAL_SECONDS
from utils.paths import CONFIG_PATH, LOG_DIR, PORTFOLIO_PATH


class ConfigError(Exception):
    """Configuration file exists but cannot be read or parsed."""
    pass


class ConfigManager:
    """Manages application configuration."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration manager."""
        self.logger = logging.getLogger(__name__)

        if config_path:
            self.config_path = Path(config_path)
        else:
            self.config_path = CONFIG_PATH

        self._config = None

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            self.logger.warning(f"Config file not found at {self.config_path}, using defaults")
            self._config = self.get_default_config()
            return self._config

        try:
            with self.config_path.open('r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self.logger.error(f"Invalid YAML in {self.config_path}: {e}")
            raise ConfigError(f"Invalid YAML in {self.config_path}: {e}") from e
        except OSError as e:
            self.logger.error(f"Failed to read configuration: {e}")
            raise ConfigError(f"Cannot read {self.config_path}: {e}") from e

        if config is None:
            config = {}
        if not isinstance(config, dict):
            raise ConfigError(f"Top level of {self.config_path} must be a mapping")

        # Merge with defaults to ensure all required keys exist
        default_config = self.get_default_config()
        self._config = self._merge_configs(default_config, config)
        self.logger.info(f"Configuration loaded from {self.config_path}")

        return self._config

    def get_config(self) -> Dict[str, Any]:
        """Get current configuration, loading if necessary."""
        if self._config is None:
            return self.load_config()
        return self._config

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value by key (supports dot notation)."""
        config = self.get_config()

        keys = key.split('.')
        value = config

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set(self, key: str, value: Any):
        """Set configuration value by key (supports dot notation)."""
        config = self.get_config()

        keys = key.split('.')
        current = config

        # Navigate to the parent of the target key
        for k in keys[:-1]:
            if k not in current:
                current[k] = {}
            current = current[k]

        current[keys[-1]] = value

    def save_config(self, config: Optional[Dict[str, Any]] = None, config_path: Optional[str] = None):
        """Save configuration to YAML file."""
        if config is not None:
            self._config = config

        if not self._config:
            self.logger.warning("No configuration to save")
            return

        save_path = Path(config_path) if config_path else self.config_path

        try:
            save_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = save_path.with_suffix(save_path.suffix + ".tmp")
            with open(tmp_path, 'w', encoding='utf-8') as f:
                yaml.dump(self._config, f, default_flow_style=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, save_path)

            self.logger.info(f"Configuration saved to {save_path}")

        except OSError as e:
            self.logger.error(f"Failed to save configuration: {e}")
            raise

    def get_default_config(self) -> Dict[str, Any]:
        """Return default configuration values."""
        return {
            'refresh': {
                'interval_seconds': TICK_INTERVAL_SECONDS,
            },
            'quotes': {
                'base_url': "https://min-api.cryptocompare.com",
                'currency': "USD",
                'timeout_seconds': 10,
            },
            'portfolio': {
                'path': str(PORTFOLIO_PATH),
            },
            'app': {
                'name': "Crypto Portfolio Tracker",
                'version': "1.0.0",
                'description': "Live value of a crypto portfolio",
            },
            'logging': {
                'level': "INFO",
                'file': str(LOG_DIR / "app.log"),
            },
            'ui': {
                'window_width': 800,
                'window_height': 400,
            },
        }

    def _merge_configs(self, default: Dict[str, Any], user: Dict[str, Any]) -> Dict[str, Any]:
        """Merge user configuration with defaults."""
        result = default.copy()

        for key, value in user.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result

    def get_refresh_interval(self) -> float:
        """Get seconds between timer driven quote refreshes."""
        return float(self.get('refresh.interval_seconds', TICK_INTERVAL_SECONDS))

    def get_portfolio_path(self) -> Path:
        """Get path of the portfolio YAML file."""
        return Path(self.get('portfolio.path', str(PORTFOLIO_PATH))).expanduser()

    def get_quotes_config(self) -> Dict[str, Any]:
        """Get quote service configuration."""
        return self.get('quotes', {})

    def validate_config(self) -> List[str]:
        """Validate configuration and return list of errors."""
        errors = []
        config = self.get_config()

        for section in ('refresh', 'quotes', 'portfolio'):
            if section not in config:
                errors.append(f"Missing required section: {section}")

        try:
            if self.get_refresh_interval() <= 0:
                errors.append("Refresh interval must be positive")
        except (TypeError, ValueError):
            errors.append("Refresh interval must be a number")

        quotes_config = self.get_quotes_config()
        if not quotes_config.get('base_url'):
            errors.append("Quote service base_url not configured")
        if not quotes_config.get('currency'):
            errors.append("Quote currency not configured")

        return errors
