"""
Error taxonomy for the Sprinkler Discovery Module.

Enumeration failures (host resolution, interface lookup) are fatal to a
discovery run and propagate to the caller of ``start_scan``. Probe failures
are expected for almost every address of a subnet and never leave the job
that raised them.
"""

from typing import List, Optional


class SprinklerDiscoveryError(Exception):
    """Base exception class for Sprinkler Discovery Module."""

    def __init__(self, message: str, address: Optional[str] = None):
        super().__init__(message)
        self.address = address


class HostResolutionError(SprinklerDiscoveryError):
    """The primary local address of this machine could not be resolved."""
    pass


class InterfaceLookupError(SprinklerDiscoveryError):
    """No network interface owns the resolved local address."""
    pass


class ProbeFailure(SprinklerDiscoveryError):
    """An address did not answer like an OpenSprinkler controller."""
    pass


class ScanInProgressError(SprinklerDiscoveryError):
    """A discovery run was requested while the previous one is still draining."""
    pass


class ConfigurationError(SprinklerDiscoveryError):
    """Exception for configuration-related errors."""
    pass


def troubleshooting_hints(error: Exception) -> List[str]:
    """
    Provide user-facing suggestions for a failed discovery run.

    Args:
        error: The exception that aborted the run

    Returns:
        List[str]: Suggestions to print, empty if none apply
    """
    if isinstance(error, HostResolutionError):
        return [
            "Check that the hostname resolves: getent hosts $(hostname)",
            "Make sure a network interface is up and has an IPv4 address",
            "Check /etc/hosts for a hostname mapped only to 127.0.1.1",
        ]
    if isinstance(error, InterfaceLookupError):
        return [
            "List interfaces and their addresses: ip addr show",
            "The resolved local address must be configured on a local interface",
            "VPN or container setups may resolve to an address no interface owns",
            "Check the interface netmask: ip -4 addr show",
        ]
    if isinstance(error, ScanInProgressError):
        return ["Wait for the running discovery to finish before starting another"]
    if isinstance(error, ConfigurationError):
        return [
            "Check that --config-dir points to an existing directory",
            "Pool size and port overrides must be positive integers",
        ]
    return []
