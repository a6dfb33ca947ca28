"""
Utility functions and helper classes.
"""

from .logger import Logger, LogLevel, logger, set_log_level, get_logger
from .error_handler import (
    SprinklerDiscoveryError, HostResolutionError, InterfaceLookupError,
    ProbeFailure, ScanInProgressError, ConfigurationError, troubleshooting_hints
)
from . import network_utils

__all__ = [
    'Logger',
    'LogLevel',
    'logger',
    'set_log_level',
    'get_logger',
    'SprinklerDiscoveryError',
    'HostResolutionError',
    'InterfaceLookupError',
    'ProbeFailure',
    'ScanInProgressError',
    'ConfigurationError',
    'troubleshooting_hints',
    'network_utils'
]
