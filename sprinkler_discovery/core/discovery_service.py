"""
Sprinkler Discovery Service.

This module provides the SprinklerDiscoveryService class that runs one
discovery: enumerate the local subnet, dispatch a probe per address and
collect responding controllers in a sink.
"""

import threading
from typing import List, Optional

from .data_models import DiscoveryResult, ScanRun
from .discovery_sink import DiscoveryInbox, DiscoverySink
from .scan_dispatcher import Probe, ScanDispatcher
from .subnet_enumerator import SubnetEnumerator
from ..config.config_loader import DiscoveryConfig
from ..probes.opensprinkler_probe import OpenSprinklerProbe
from ..utils.error_handler import ScanInProgressError
from ..utils.logger import Logger, get_logger


class SprinklerDiscoveryService:
    """
    Discovers OpenSprinkler controllers on the local subnet.

    Collaborators are passed in explicitly; anything left out is built from
    the configuration. Runs are serialized: a new run can only start once
    the previous one has drained.
    """

    def __init__(
        self,
        config: Optional[DiscoveryConfig] = None,
        enumerator: Optional[SubnetEnumerator] = None,
        dispatcher: Optional[ScanDispatcher] = None,
        probe: Optional[Probe] = None,
        sink: Optional[DiscoverySink] = None,
        logger: Optional[Logger] = None,
    ):
        """
        Initialize the discovery service.

        Args:
            config: Discovery configuration (default: built-in defaults)
            enumerator: Produces the scan targets
            dispatcher: Runs the probe jobs
            probe: Callable deciding whether an address is a controller
            sink: Receives every responding address
            logger: Logger instance (default: module logger)
        """
        self.config = config or DiscoveryConfig()
        self.logger = logger or get_logger(__name__)

        self.enumerator = enumerator or SubnetEnumerator(self.logger)
        self.dispatcher = dispatcher or ScanDispatcher(self.config.pool_size, self.logger)
        self.probe = probe or OpenSprinklerProbe(
            port=self.config.default_port,
            password=self.config.default_password,
            connect_timeout=self.config.connect_timeout,
            http_timeout=self.config.http_timeout,
            logger=self.logger,
        )
        self.sink = sink if sink is not None else DiscoveryInbox(
            port=self.config.default_port,
            password=self.config.default_password,
            refresh_interval=self.config.default_refresh_interval,
            logger=self.logger,
        )

        self._run_lock = threading.Lock()
        self.current_run: Optional[ScanRun] = None

    def start_scan(self) -> ScanRun:
        """
        Start one discovery run.

        Returns as soon as every probe job has been submitted; call
        ``wait()`` on the returned run to block until the pool drains.

        Returns:
            ScanRun: Handle on the dispatched run

        Raises:
            HostResolutionError: If the local address cannot be resolved
            InterfaceLookupError: If no interface owns the local address
            ScanInProgressError: If the previous run is still draining
        """
        with self._run_lock:
            if self.current_run is not None and not self.current_run.done():
                raise ScanInProgressError(
                    f"Discovery already running ({self.current_run.completed_count}/"
                    f"{self.current_run.dispatched_count} probes finished)"
                )

            self.logger.debug("Starting discovery of OpenSprinkler devices.")
            # Enumeration errors propagate before any job is submitted
            targets = self.enumerator.enumerate_scan_targets()

            self.current_run = self.dispatcher.run_scan(
                targets, self.probe, self.submit_discovery_result
            )

        self.logger.debug("Dispatched discovery of OpenSprinkler devices.")
        return self.current_run

    def submit_discovery_result(self, address: str) -> None:
        """
        Hand a responding address to the sink.

        Args:
            address: IPv4 address of the OpenSprinkler device
        """
        self.sink.report(address)

    def scan_and_wait(self, timeout: Optional[float] = None) -> List[DiscoveryResult]:
        """
        Run a discovery and block until it drains.

        Args:
            timeout: Maximum seconds to wait for the probes (None waits forever)

        Returns:
            List[DiscoveryResult]: Devices held by the sink, when it is a
            DiscoveryInbox; an empty list for other sinks
        """
        scan_run = self.start_scan()
        if not scan_run.wait(timeout):
            self.logger.warning(
                f"Discovery still running after {timeout}s "
                f"({scan_run.completed_count}/{scan_run.dispatched_count} probes finished)"
            )
        return self.discovered()

    def discovered(self) -> List[DiscoveryResult]:
        if isinstance(self.sink, DiscoveryInbox):
            return self.sink.results()
        return []
