"""
Base probe interface for Sprinkler Discovery Module.

A probe answers one question about one address: is the device we are looking
for listening there? Probes are called concurrently from the dispatcher's
worker threads and must bound their own network wait.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..utils.error_handler import ProbeFailure
from ..utils.logger import Logger
from ..utils.network_utils import is_valid_ip


class BaseProbe(ABC):
    """
    Abstract base class for device probes.

    Instances are callables usable directly as the dispatcher's probe.
    """

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger

    def __call__(self, address: str) -> bool:
        """
        Probe an address.

        Args:
            address: IPv4 address to probe

        Returns:
            bool: True if the device signature matched

        Raises:
            ProbeFailure: If the address is not IPv4, is unreachable, or
                answers like something else
        """
        address = (address or "").strip()
        if not address:
            raise ProbeFailure("Empty address", address=address)
        if not is_valid_ip(address):
            raise ProbeFailure(f"Not an IPv4 address: {address}", address=address)
        return self.probe(address)

    @abstractmethod
    def probe(self, address: str) -> bool:
        """
        Check a single IPv4 address.

        This method must be implemented by all concrete probe classes.
        """
        pass

    def _log_debug(self, message: str) -> None:
        """Log a debug message if logger is available."""
        if self.logger:
            self.logger.debug(message)
