"""
Sprinkler Discovery Module

Finds OpenSprinkler irrigation controllers on the local subnet by probing
every host address of the machine's primary interface in parallel.
"""

__version__ = "1.0.0"
__author__ = "Sprinkler Discovery Team"
