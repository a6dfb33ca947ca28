"""
Configuration module for Sprinkler Discovery.
Provides configuration loading and validation for discovery runs.
"""

from .config_loader import ConfigLoader, DiscoveryConfig, DEFAULT_CONFIG_FILE

__all__ = ['ConfigLoader', 'DiscoveryConfig', 'DEFAULT_CONFIG_FILE']
