"""Inventory and verification of Sims 4 mod folders."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("simsmods")
except PackageNotFoundError:
    # Running from a source tree that was never installed.
    __version__ = "0.0.0"

__all__ = ["__version__"]
