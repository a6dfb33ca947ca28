"""
Subnet enumeration for building the list of addresses to probe.

This module provides the SubnetEnumerator class which resolves the host's
primary local address, finds the network interface that owns it and expands
every IPv4 address configured on that interface into the host addresses of
its subnet.
"""

import socket
from typing import Callable, Dict, List, Optional, Tuple

import psutil

from .data_models import AddressFamily, NetworkAddress, SubnetDescriptor
from ..utils.error_handler import HostResolutionError, InterfaceLookupError
from ..utils.logger import Logger, get_logger
from ..utils.network_utils import (
    expand_subnet,
    host_count,
    is_loopback_ip,
    netmask_to_prefix,
)

# Any routable address works: connecting a UDP socket sends nothing
_ROUTE_PROBE_ADDRESS = ("8.8.8.8", 80)


class SubnetEnumerator:
    """
    Computes the scan targets for one discovery run.

    Only the interface that owns the primary local address is scanned.
    IPv6 and link-layer addresses on that interface are reported in the
    debug log and skipped.
    """

    def __init__(
        self,
        logger: Optional[Logger] = None,
        interface_provider: Optional[Callable[[], Dict[str, list]]] = None,
    ):
        """
        Initialize the SubnetEnumerator.

        Args:
            logger: Logger instance (default: module logger)
            interface_provider: Callable returning interface name -> addresses,
                shaped like psutil.net_if_addrs() (default: psutil.net_if_addrs)
        """
        self.logger = logger or get_logger(__name__)
        self.interface_provider = interface_provider or psutil.net_if_addrs

        # Details of the last enumeration, for reporting
        self.host_ip: Optional[str] = None
        self.interface_name: Optional[str] = None
        self.subnets: List[SubnetDescriptor] = []

    def enumerate_scan_targets(self) -> List[str]:
        """
        Build the ordered list of IPv4 addresses to probe.

        Returns:
            List[str]: Host addresses of every IPv4 subnet on the interface,
            each listed once, in interface-address order

        Raises:
            HostResolutionError: If the local address cannot be resolved
            InterfaceLookupError: If no interface owns the local address or
                it reports an unusable netmask
        """
        self.subnets = []
        host_ip = self.resolve_local_address()
        interface_name, addresses = self.find_interface(host_ip)
        self.host_ip = host_ip
        self.interface_name = interface_name
        self.logger.info(f"Detected interface {interface_name} for local address {host_ip}")

        results: List[str] = []
        for interface_address in addresses:
            address = NetworkAddress.from_interface_address(interface_address)

            if address.family == AddressFamily.IPV4:
                try:
                    prefix_length = netmask_to_prefix(interface_address.netmask)
                except ValueError as e:
                    raise InterfaceLookupError(
                        f"Interface {interface_name} reports an invalid netmask "
                        f"{interface_address.netmask!r} for {address.address}",
                        address=address.address,
                    ) from e
                subnet = SubnetDescriptor(
                    base_address=address.address, prefix_length=prefix_length
                )
                self.logger.debug(
                    f"Found interface IPv4 address to scan: {subnet.cidr} "
                    f"({host_count(prefix_length)} hosts)"
                )
                self.subnets.append(subnet)
                results.extend(expand_subnet(subnet.cidr))
            elif address.family == AddressFamily.IPV6:
                self.logger.debug(
                    f"Found interface IPv6 address, skipping: {address.address}"
                )
            else:
                self.logger.debug(
                    f"Found interface address of unknown type, skipping: {address.address}"
                )

        # Addresses in the same subnet expand to the same hosts
        targets = list(dict.fromkeys(results))
        self.logger.info(
            f"Scan range: {len(targets)} addresses across {len(self.subnets)} subnet(s)"
        )
        return targets

    def resolve_local_address(self) -> str:
        """
        Resolve the machine's primary IPv4 address.

        The hostname is tried first. Many hosts map their name to a loopback
        address, in which case the address of the default route is used.

        Returns:
            str: Primary local IPv4 address

        Raises:
            HostResolutionError: If neither method yields a usable address
        """
        hostname = socket.gethostname()
        try:
            address = socket.gethostbyname(hostname)
        except OSError as e:
            self.logger.debug(f"Could not resolve hostname {hostname}: {e}")
            return self._get_address_via_socket()

        if is_loopback_ip(address):
            self.logger.debug(
                f"Hostname {hostname} resolves to loopback {address}, using default route"
            )
            return self._get_address_via_socket()

        return address

    def _get_address_via_socket(self) -> str:
        """
        Fallback method to get the local address using a UDP socket.

        Connecting a datagram socket picks the outgoing interface without
        sending any packet.
        """
        try:
            with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as s:
                s.connect(_ROUTE_PROBE_ADDRESS)
                local_ip = s.getsockname()[0]
        except OSError as e:
            raise HostResolutionError(f"Could not resolve local host address: {e}")

        if not local_ip or is_loopback_ip(local_ip) or local_ip == "0.0.0.0":
            raise HostResolutionError(
                f"Could not resolve local host address: got {local_ip!r}",
                address=local_ip,
            )
        return local_ip

    def find_interface(self, host_ip: str) -> Tuple[str, list]:
        """
        Find the network interface that owns an address.

        Args:
            host_ip: Local IPv4 address

        Returns:
            Tuple[str, list]: Interface name and all of its addresses

        Raises:
            InterfaceLookupError: If no interface carries the address
        """
        try:
            interfaces = self.interface_provider()
        except (OSError, RuntimeError) as e:
            raise InterfaceLookupError(
                f"Could not list network interfaces: {e}", address=host_ip
            )

        for name, addresses in interfaces.items():
            for interface_address in addresses:
                if (
                    interface_address.family == socket.AF_INET
                    and interface_address.address == host_ip
                ):
                    return name, list(addresses)

        raise InterfaceLookupError(
            f"No network interface owns address {host_ip}", address=host_ip
        )
