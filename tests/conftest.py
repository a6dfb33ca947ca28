"""Shared fixtures for sprinkler discovery tests."""

import pytest

from sprinkler_discovery.utils.logger import Logger, LogLevel
from tests.helpers import ipv4, ipv6, link


@pytest.fixture
def quiet_logger():
    """Logger that only prints errors."""
    return Logger("test", min_level=LogLevel.ERROR)


@pytest.fixture
def interfaces():
    """A host with loopback and one LAN interface carrying IPv4, IPv6 and MAC."""
    return {
        "lo": [ipv4("127.0.0.1", "255.0.0.0"), ipv6("::1", "ffff:ffff:ffff:ffff:ffff:ffff:ffff:ffff")],
        "eth0": [
            link(),
            ipv4("192.168.1.10", "255.255.255.0"),
            ipv6("fe80::1"),
        ],
    }
