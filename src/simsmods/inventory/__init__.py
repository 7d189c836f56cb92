"""Filesystem inventory: mod discovery and content fingerprints."""

from .discovery import (
    DEFAULT_EXTENSIONS,
    DEFAULT_IGNORED_DIRECTORIES,
    InventoryScanner,
    ModInventory,
)
from .errors import InventoryError, ModRootError
from .hashing import ContentHasher, fingerprint_bytes

__all__ = [
    "ContentHasher",
    "DEFAULT_EXTENSIONS",
    "DEFAULT_IGNORED_DIRECTORIES",
    "InventoryError",
    "InventoryScanner",
    "ModInventory",
    "ModRootError",
    "fingerprint_bytes",
]
