"""Inventory scanning errors."""


class InventoryError(Exception):
    """Base exception for inventory scanning operations."""


class ModRootError(InventoryError):
    """Raised when the configured mod root cannot be located or listed."""
