"""
Discovery sinks that turn a responding address into a discovered device.
"""

import threading
from typing import Callable, Dict, List, Optional, Protocol

from .data_models import DiscoveryResult
from ..utils.logger import Logger, get_logger
from ..utils.network_utils import ip_sort_key


class DiscoverySink(Protocol):
    """Anything that accepts the address of a responding device."""

    def report(self, address: str) -> None:
        ...


class DiscoveryInbox:
    """
    In-memory sink keyed by address.

    Reporting the same address again is a no-op, so retried jobs and
    overlapping subnets never produce duplicate devices. Safe to call from
    probe worker threads.
    """

    def __init__(
        self,
        port: int,
        password: str,
        refresh_interval: int,
        on_discovered: Optional[Callable[[DiscoveryResult], None]] = None,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize the inbox.

        Args:
            port: Default API port recorded for every device
            password: Default admin password recorded for every device
            refresh_interval: Default refresh interval in seconds
            on_discovered: Called once for every newly discovered device
            logger: Logger instance (default: module logger)
        """
        self.port = port
        self.password = password
        self.refresh_interval = refresh_interval
        self.on_discovered = on_discovered
        self.logger = logger or get_logger(__name__)
        self._results: Dict[str, DiscoveryResult] = {}
        self._lock = threading.Lock()

    def report(self, address: str) -> None:
        with self._lock:
            if address in self._results:
                self.logger.debug(f"Device at {address} already discovered")
                return
            result = DiscoveryResult(
                hostname=address,
                port=self.port,
                password=self.password,
                refresh_interval=self.refresh_interval,
            )
            self._results[address] = result

        self.logger.success(f"Discovered {result.label} at {address}")
        if self.on_discovered:
            self.on_discovered(result)

    def results(self) -> List[DiscoveryResult]:
        with self._lock:
            results = list(self._results.values())
        return sorted(results, key=lambda r: ip_sort_key(r.hostname))

    def clear(self) -> None:
        with self._lock:
            self._results.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def __contains__(self, address: object) -> bool:
        with self._lock:
            return address in self._results
