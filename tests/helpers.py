"""Interface address builders shaped like psutil.net_if_addrs() entries."""

import socket
from collections import namedtuple

import psutil

InterfaceAddress = namedtuple(
    "InterfaceAddress", ["family", "address", "netmask", "broadcast", "ptp"]
)


def ipv4(address, netmask="255.255.255.0"):
    return InterfaceAddress(socket.AF_INET, address, netmask, None, None)


def ipv6(address, netmask="ffff:ffff:ffff:ffff::"):
    return InterfaceAddress(socket.AF_INET6, address, netmask, None, None)


def link(address="aa:bb:cc:dd:ee:ff"):
    return InterfaceAddress(psutil.AF_LINK, address, None, None, None)
