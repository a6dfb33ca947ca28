"""
Device probes used by the scan dispatcher.
"""

from .base_probe import BaseProbe
from .opensprinkler_probe import OpenSprinklerProbe, hash_password

__all__ = ['BaseProbe', 'OpenSprinklerProbe', 'hash_password']
