"""
Entry point for running sprinkler_discovery as a module.

This allows the package to be executed with: python -m sprinkler_discovery
"""

from .main import main

if __name__ == "__main__":
    raise SystemExit(main())
