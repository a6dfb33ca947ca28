"""
Network utility functions for IP address calculations.

This module provides helper functions for IP address validation, netmask
conversion and CIDR expansion into scan targets.
"""

import ipaddress
from typing import List, Optional


def is_valid_ip(ip_address: str) -> bool:
    """
    Check if a string represents a valid IPv4 address.

    Args:
        ip_address: String to validate as IPv4 address

    Returns:
        bool: True if valid IPv4 address, False otherwise
    """
    try:
        ipaddress.IPv4Address(ip_address)
        return True
    except ipaddress.AddressValueError:
        return False


def is_loopback_ip(ip_address: str) -> bool:
    try:
        return ipaddress.IPv4Address(ip_address).is_loopback
    except ipaddress.AddressValueError:
        return False


def netmask_to_prefix(netmask: Optional[str]) -> int:
    """
    Convert a netmask to a prefix length.

    Accepts dotted decimal ("255.255.255.0"), hex ("0xffffff00") and bare
    prefix ("24") forms. A missing netmask describes a single host.

    Args:
        netmask: Netmask as reported by the interface

    Returns:
        int: Prefix length (0-32)

    Raises:
        ValueError: If netmask is invalid
    """
    if not netmask:
        return 32

    try:
        if netmask.startswith("0x"):
            netmask = str(ipaddress.IPv4Address(int(netmask, 16)))
        network = ipaddress.IPv4Network(f"0.0.0.0/{netmask}")
        return network.prefixlen
    except (ipaddress.AddressValueError, ipaddress.NetmaskValueError, ValueError) as e:
        raise ValueError(f"Invalid netmask: {netmask}") from e


def host_count(prefix_length: int) -> int:
    """
    Number of usable host addresses for a prefix length.

    Args:
        prefix_length: CIDR prefix length (0-32)

    Returns:
        int: 0 for /31, 1 for /32, 2^(32-prefix) - 2 otherwise
    """
    if not 0 <= prefix_length <= 32:
        raise ValueError(f"CIDR must be between 0 and 32, got {prefix_length}")
    if prefix_length == 32:
        return 1
    return max(2 ** (32 - prefix_length) - 2, 0)


def expand_subnet(cidr: str) -> List[str]:
    """
    Expand a CIDR string into every usable host address of its subnet.

    Hosts are the addresses strictly between the network and broadcast
    addresses. A /31 therefore yields no host and a /32 yields the single
    address it names.

    Args:
        cidr: Interface address with prefix (e.g., "192.168.1.10/24")

    Returns:
        List[str]: Host addresses in ascending order

    Raises:
        ValueError: If cidr is invalid
    """
    try:
        network = ipaddress.IPv4Network(cidr, strict=False)
    except ValueError as e:
        raise ValueError(f"Invalid network: {cidr}") from e

    if network.prefixlen == 32:
        return [str(network.network_address)]

    first = int(network.network_address) + 1
    last = int(network.broadcast_address) - 1
    return [str(ipaddress.IPv4Address(value)) for value in range(first, last + 1)]


def ip_sort_key(ip_address: str) -> tuple:
    """
    Generate sort key for IP address to enable proper sorting.

    Args:
        ip_address: IP address string

    Returns:
        tuple: Sort key for IP address
    """
    try:
        return tuple(int(part) for part in ip_address.split("."))
    except (ValueError, AttributeError):
        return (999, 999, 999, 999)
