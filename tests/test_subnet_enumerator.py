"""Tests for the subnet enumerator."""

import socket

import pytest

from sprinkler_discovery.core import subnet_enumerator
from sprinkler_discovery.core.subnet_enumerator import SubnetEnumerator
from sprinkler_discovery.utils.error_handler import (
    HostResolutionError,
    InterfaceLookupError,
)
from tests.helpers import ipv4, ipv6


class FakeUdpSocket:
    """Stands in for socket.socket in the default-route fallback."""

    local_ip = "192.168.1.10"
    fail = False

    def __init__(self, *args, **kwargs):
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def connect(self, address):
        if self.fail:
            raise OSError("Network is unreachable")

    def getsockname(self):
        return (self.local_ip, 54321)


class FailingUdpSocket(FakeUdpSocket):
    fail = True


@pytest.fixture
def resolve_to(monkeypatch):
    """Make hostname resolution return a fixed address."""
    def _resolve_to(address):
        monkeypatch.setattr(subnet_enumerator.socket, "gethostname", lambda: "controller-host")
        monkeypatch.setattr(subnet_enumerator.socket, "gethostbyname", lambda name: address)
    return _resolve_to


class TestEnumerateScanTargets:
    """Tests for building the scan target list."""

    def test_ipv4_subnet_expanded(self, interfaces, resolve_to, quiet_logger):
        """Should expand the IPv4 subnet of the owning interface."""
        resolve_to("192.168.1.10")
        enumerator = SubnetEnumerator(quiet_logger, interface_provider=lambda: interfaces)

        targets = enumerator.enumerate_scan_targets()

        assert len(targets) == 254
        assert targets[0] == "192.168.1.1"
        assert targets[-1] == "192.168.1.254"
        assert "192.168.1.0" not in targets
        assert "192.168.1.255" not in targets
        assert enumerator.interface_name == "eth0"
        assert enumerator.host_ip == "192.168.1.10"
        assert [s.cidr for s in enumerator.subnets] == ["192.168.1.10/24"]

    def test_ipv6_never_targeted(self, interfaces, resolve_to, quiet_logger):
        """IPv6 addresses on the interface are skipped."""
        resolve_to("192.168.1.10")
        enumerator = SubnetEnumerator(quiet_logger, interface_provider=lambda: interfaces)

        targets = enumerator.enumerate_scan_targets()

        assert all(":" not in target for target in targets)
        for target in targets:
            socket.inet_aton(target)

    def test_other_interfaces_ignored(self, resolve_to, quiet_logger):
        """Only the interface owning the local address is scanned."""
        resolve_to("10.0.0.5")
        provider = lambda: {
            "eth0": [ipv4("10.0.0.5", "255.255.255.252")],
            "wlan0": [ipv4("192.168.50.2", "255.255.255.0")],
        }
        enumerator = SubnetEnumerator(quiet_logger, interface_provider=provider)

        assert enumerator.enumerate_scan_targets() == ["10.0.0.5", "10.0.0.6"]

    def test_multiple_ipv4_addresses_concatenated(self, resolve_to, quiet_logger):
        """Every IPv4 address of the interface contributes, in interface order."""
        resolve_to("10.0.0.5")
        provider = lambda: {
            "eth0": [
                ipv4("10.0.0.5", "255.255.255.252"),
                ipv6("fe80::2"),
                ipv4("172.16.0.1", "255.255.255.255"),
                ipv4("172.16.1.1", "255.255.255.254"),
            ],
        }
        enumerator = SubnetEnumerator(quiet_logger, interface_provider=provider)

        targets = enumerator.enumerate_scan_targets()

        assert targets == ["10.0.0.5", "10.0.0.6", "172.16.0.1"]
        assert len(enumerator.subnets) == 3

    def test_secondary_address_in_same_subnet(self, resolve_to, quiet_logger):
        """Two addresses in one /24 yield each host once, in order."""
        resolve_to("192.168.1.10")
        provider = lambda: {
            "eth0": [ipv4("192.168.1.10"), ipv4("192.168.1.20"), ipv4("10.9.0.1", "255.255.255.252")],
        }
        enumerator = SubnetEnumerator(quiet_logger, interface_provider=provider)

        targets = enumerator.enumerate_scan_targets()

        assert len(targets) == 256
        assert len(set(targets)) == len(targets)
        assert targets[:2] == ["192.168.1.1", "192.168.1.2"]
        assert targets[-2:] == ["10.9.0.1", "10.9.0.2"]
        assert [s.cidr for s in enumerator.subnets] == [
            "192.168.1.10/24", "192.168.1.20/24", "10.9.0.1/30",
        ]

    @pytest.mark.parametrize("netmask", ["255.0.255.0", "not-a-mask"])
    def test_invalid_netmask(self, resolve_to, quiet_logger, netmask):
        """An unusable netmask is an interface lookup error, not a ValueError."""
        resolve_to("192.168.1.10")
        provider = lambda: {"eth0": [ipv4("192.168.1.10", netmask)]}
        enumerator = SubnetEnumerator(quiet_logger, interface_provider=provider)

        with pytest.raises(InterfaceLookupError) as exc_info:
            enumerator.enumerate_scan_targets()
        assert exc_info.value.address == "192.168.1.10"

    def test_loopback_resolution_uses_default_route(self, monkeypatch, interfaces, resolve_to, quiet_logger):
        """A hostname mapped to 127.0.1.1 falls back to the default route address."""
        resolve_to("127.0.1.1")
        monkeypatch.setattr(subnet_enumerator.socket, "socket", FakeUdpSocket)
        enumerator = SubnetEnumerator(quiet_logger, interface_provider=lambda: interfaces)

        targets = enumerator.enumerate_scan_targets()

        assert enumerator.host_ip == "192.168.1.10"
        assert len(targets) == 254


class TestEnumerationFailures:
    """Tests for fatal enumeration errors."""

    def test_host_resolution_failure(self, monkeypatch, interfaces, quiet_logger):
        """Should raise HostResolutionError when no method yields an address."""
        def fail(name):
            raise socket.gaierror("Name or service not known")

        monkeypatch.setattr(subnet_enumerator.socket, "gethostname", lambda: "nowhere")
        monkeypatch.setattr(subnet_enumerator.socket, "gethostbyname", fail)
        monkeypatch.setattr(subnet_enumerator.socket, "socket", FailingUdpSocket)
        enumerator = SubnetEnumerator(quiet_logger, interface_provider=lambda: interfaces)

        with pytest.raises(HostResolutionError):
            enumerator.enumerate_scan_targets()

    def test_unresolvable_name_falls_back_to_route(self, monkeypatch, interfaces, quiet_logger):
        """A failed hostname lookup is not fatal while the route lookup works."""
        def fail(name):
            raise socket.gaierror("Name or service not known")

        monkeypatch.setattr(subnet_enumerator.socket, "gethostname", lambda: "nowhere")
        monkeypatch.setattr(subnet_enumerator.socket, "gethostbyname", fail)
        monkeypatch.setattr(subnet_enumerator.socket, "socket", FakeUdpSocket)
        enumerator = SubnetEnumerator(quiet_logger, interface_provider=lambda: interfaces)

        assert enumerator.resolve_local_address() == "192.168.1.10"

    def test_no_owning_interface(self, interfaces, resolve_to, quiet_logger):
        """Should raise InterfaceLookupError when the address is on no interface."""
        resolve_to("10.99.99.99")
        enumerator = SubnetEnumerator(quiet_logger, interface_provider=lambda: interfaces)

        with pytest.raises(InterfaceLookupError) as exc_info:
            enumerator.enumerate_scan_targets()

        assert exc_info.value.address == "10.99.99.99"

    def test_interface_listing_failure(self, resolve_to, quiet_logger):
        """An OS error while listing interfaces is an InterfaceLookupError."""
        resolve_to("192.168.1.10")

        def broken():
            raise OSError("permission denied")

        enumerator = SubnetEnumerator(quiet_logger, interface_provider=broken)

        with pytest.raises(InterfaceLookupError):
            enumerator.enumerate_scan_targets()
