"""
Core components for sprinkler discovery functionality.
"""

from .data_models import (
    AddressFamily,
    ScanStatus,
    NetworkAddress,
    SubnetDescriptor,
    DiscoveryResult,
    ScanRun,
)
from .subnet_enumerator import SubnetEnumerator
from .scan_dispatcher import ScanDispatcher, ScanJob
from .discovery_sink import DiscoverySink, DiscoveryInbox
from .discovery_service import SprinklerDiscoveryService

__all__ = [
    'AddressFamily',
    'ScanStatus',
    'NetworkAddress',
    'SubnetDescriptor',
    'DiscoveryResult',
    'ScanRun',
    'SubnetEnumerator',
    'ScanDispatcher',
    'ScanJob',
    'DiscoverySink',
    'DiscoveryInbox',
    'SprinklerDiscoveryService',
]
