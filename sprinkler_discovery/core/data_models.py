"""
Core data models and enums for the Sprinkler Discovery Module.

This module defines the data structures passed between the subnet enumerator,
the scan dispatcher and the discovery sink during a discovery run.
"""

import socket
import threading
from concurrent.futures import Future, wait
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Set


DEVICE_LABEL = "OpenSprinkler"


class AddressFamily(Enum):
    """Enumeration of address families found on a network interface."""
    IPV4 = "IPv4"
    IPV6 = "IPv6"
    OTHER = "Other"


class ScanStatus(Enum):
    """Enumeration of possible scan statuses."""
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class NetworkAddress:
    """
    An address read from a local network interface.

    Attributes:
        address: Textual form of the address
        family: Address family tag
    """
    address: str
    family: AddressFamily

    @classmethod
    def from_interface_address(cls, interface_address: Any) -> "NetworkAddress":
        """
        Build a NetworkAddress from a psutil interface address entry.

        Args:
            interface_address: Entry returned by psutil.net_if_addrs()

        Returns:
            NetworkAddress: Address tagged with its family
        """
        if interface_address.family == socket.AF_INET:
            family = AddressFamily.IPV4
        elif interface_address.family == socket.AF_INET6:
            family = AddressFamily.IPV6
        else:
            family = AddressFamily.OTHER
        return cls(address=interface_address.address, family=family)


@dataclass(frozen=True)
class SubnetDescriptor:
    """
    An IPv4 subnet derived from one interface address.

    Attributes:
        base_address: Interface address the subnet was derived from
        prefix_length: Network prefix length (0-32)
    """
    base_address: str
    prefix_length: int

    def __post_init__(self):
        if not 0 <= self.prefix_length <= 32:
            raise ValueError(f"Invalid IPv4 prefix length: {self.prefix_length}")

    @property
    def cidr(self) -> str:
        return f"{self.base_address}/{self.prefix_length}"


@dataclass(frozen=True)
class DiscoveryResult:
    """
    A discovered device with its default connection properties.

    The address is the natural key: two results for the same hostname
    describe the same device.

    Attributes:
        hostname: IPv4 address of the device
        port: HTTP API port
        password: Admin password used to talk to the device
        refresh_interval: Polling interval in seconds
    """
    hostname: str
    port: int
    password: str
    refresh_interval: int

    @property
    def thing_uid(self) -> str:
        return self.hostname.replace(".", "_")

    @property
    def label(self) -> str:
        return DEVICE_LABEL

    def to_properties(self) -> Dict[str, Any]:
        return {
            "hostname": self.hostname,
            "port": self.port,
            "password": self.password,
            "refresh": self.refresh_interval,
        }


@dataclass
class ScanRun:
    """
    Handle on one dispatched discovery run.

    Dispatch returns this handle as soon as every job has been submitted.
    ``wait()`` is the drain barrier: it returns once every submitted job
    has finished or been cancelled with ``cancel_pending()``.

    Attributes:
        targets: Addresses a job was submitted for, in submission order
        pool_size: Number of worker threads used for the run
        started_at: When dispatch began
        futures: One future per submitted job
    """
    targets: List[str]
    pool_size: int
    started_at: datetime = field(default_factory=datetime.now)
    futures: List[Future] = field(default_factory=list, repr=False)
    finished_at: Optional[datetime] = None
    discovered: Set[str] = field(default_factory=set)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def dispatched_count(self) -> int:
        return len(self.futures)

    @property
    def completed_count(self) -> int:
        return sum(1 for future in self.futures if future.done())

    @property
    def cancelled_count(self) -> int:
        return sum(1 for future in self.futures if future.cancelled())

    @property
    def discovered_count(self) -> int:
        with self._lock:
            return len(self.discovered)

    @property
    def status(self) -> ScanStatus:
        if self.done():
            return ScanStatus.COMPLETED
        return ScanStatus.IN_PROGRESS

    @property
    def duration(self) -> float:
        end = self.finished_at or datetime.now()
        return (end - self.started_at).total_seconds()

    def done(self) -> bool:
        return all(future.done() for future in self.futures)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """
        Block until every submitted job has finished.

        Args:
            timeout: Maximum number of seconds to wait (None waits forever)

        Returns:
            bool: True if the run drained, False if the timeout expired first
        """
        _, not_done = wait(self.futures, timeout=timeout)
        if not_done:
            return False
        with self._lock:
            if self.finished_at is None:
                self.finished_at = datetime.now()
        return True

    def cancel_pending(self) -> int:
        """
        Cancel every job that has not started yet.

        Jobs already running finish normally; their probes bound their own
        network wait.

        Returns:
            int: Number of jobs cancelled
        """
        return sum(
            1 for future in self.futures if not future.cancelled() and future.cancel()
        )

    def record_discovery(self, address: str) -> bool:
        """
        Count a discovered address once per run.

        Returns:
            bool: True if the address had not been recorded before
        """
        with self._lock:
            if address in self.discovered:
                return False
            self.discovered.add(address)
            return True
