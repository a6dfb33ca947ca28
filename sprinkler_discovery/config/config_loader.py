"""
Configuration loader for Sprinkler Discovery Module.
Handles loading and validation of the YAML configuration file with fallback to defaults.
"""

import yaml
from typing import Any, Optional
from dataclasses import dataclass, asdict
from pathlib import Path

from ..utils.logger import Logger, get_logger


DEFAULT_CONFIG_FILE = "discovery_config.yml"


@dataclass
class DiscoveryConfig:
    """Configuration for a discovery run."""
    pool_size: int = 15
    default_port: int = 80
    default_password: str = "opendoor"
    default_refresh_interval: int = 60
    connect_timeout: float = 0.5
    http_timeout: float = 5.0

    def to_dict(self) -> dict:
        data = asdict(self)
        data["default_password"] = "***"
        return data


class ConfigLoader:
    """
    Loads and validates the YAML configuration file for sprinkler discovery.
    Provides fallback to default configuration when the file is missing or invalid.
    """

    def __init__(self, config_dir: Optional[str] = None, logger: Optional[Logger] = None):
        """
        Initialize ConfigLoader.

        Args:
            config_dir: Directory containing configuration files.
                       Defaults to the config directory relative to this file.
        """
        if config_dir is None:
            self.config_dir = Path(__file__).parent
        else:
            self.config_dir = Path(config_dir)

        self.logger = logger or get_logger(__name__)

    def load_discovery_config(self, config_file: str = DEFAULT_CONFIG_FILE) -> DiscoveryConfig:
        """
        Load discovery configuration from YAML file.

        Args:
            config_file: Name of the configuration file

        Returns:
            DiscoveryConfig object with loaded or default configuration
        """
        config_path = self.config_dir / config_file
        defaults = DiscoveryConfig()

        if not config_path.exists():
            self.logger.warning(f"Discovery config file not found at {config_path}. Using default configuration.")
            return defaults

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            self.logger.error(f"Error parsing discovery config file {config_path}: {e}")
            self.logger.warning("Using default discovery configuration.")
            return defaults
        except OSError as e:
            self.logger.error(f"Could not read discovery config file {config_path}: {e}")
            self.logger.warning("Using default discovery configuration.")
            return defaults

        if not isinstance(config_data, dict) or not isinstance(config_data.get('discovery'), dict):
            self.logger.warning(f"Invalid discovery config structure in {config_path}. Using default configuration.")
            return defaults

        data = config_data['discovery']

        return DiscoveryConfig(
            pool_size=self._validate_positive_int(
                data.get('pool_size', defaults.pool_size), 'pool_size', defaults.pool_size),
            default_port=self._validate_port(
                data.get('default_port', defaults.default_port), defaults.default_port),
            default_password=self._validate_password(
                data.get('default_password', defaults.default_password), defaults.default_password),
            default_refresh_interval=self._validate_positive_int(
                data.get('default_refresh_interval', defaults.default_refresh_interval),
                'default_refresh_interval', defaults.default_refresh_interval),
            connect_timeout=self._validate_positive_float(
                data.get('connect_timeout', defaults.connect_timeout), 'connect_timeout', defaults.connect_timeout),
            http_timeout=self._validate_positive_float(
                data.get('http_timeout', defaults.http_timeout), 'http_timeout', defaults.http_timeout),
        )

    def _validate_positive_int(self, value: Any, field_name: str, default: int) -> int:
        """
        Validate that a value is a positive integer.

        Args:
            value: Value to validate
            field_name: Name of the field for error messages
            default: Default value to use if validation fails

        Returns:
            Validated integer value or default
        """
        if isinstance(value, bool):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default
        try:
            int_value = int(value)
            if int_value <= 0:
                self.logger.warning(f"Invalid {field_name}: {value}. Must be positive. Using default: {default}")
                return default
            return int_value
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be an integer. Using default: {default}")
            return default

    def _validate_positive_float(self, value: Any, field_name: str, default: float) -> float:
        if isinstance(value, bool):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be a number. Using default: {default}")
            return default
        try:
            float_value = float(value)
            if float_value <= 0:
                self.logger.warning(f"Invalid {field_name}: {value}. Must be positive. Using default: {default}")
                return default
            return float_value
        except (ValueError, TypeError):
            self.logger.warning(f"Invalid {field_name}: {value}. Must be a number. Using default: {default}")
            return default

    def _validate_port(self, value: Any, default: int) -> int:
        port = self._validate_positive_int(value, 'default_port', default)
        if port > 65535:
            self.logger.warning(f"Invalid default_port: {value}. Must be at most 65535. Using default: {default}")
            return default
        return port

    def _validate_password(self, value: Any, default: str) -> str:
        if value is None:
            return default
        if not isinstance(value, (str, int)):
            self.logger.warning(f"Invalid default_password type: {type(value).__name__}. Using default.")
            return default
        return str(value)

    def create_default_config(self) -> Path:
        """
        Create the default configuration file if it doesn't exist.

        Returns:
            Path of the configuration file
        """
        config_path = self.config_dir / DEFAULT_CONFIG_FILE
        if config_path.exists():
            return config_path

        default_config = {'discovery': asdict(DiscoveryConfig())}

        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(config_path, 'w', encoding='utf-8') as f:
                yaml.dump(default_config, f, default_flow_style=False, indent=2, sort_keys=False)
            self.logger.info(f"Created default discovery config at {config_path}")
        except OSError as e:
            self.logger.error(f"Failed to create default discovery config: {e}")
        return config_path
