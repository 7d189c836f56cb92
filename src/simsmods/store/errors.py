"""Persistent store errors."""


class StoreError(Exception):
    """Base exception for inventory database operations."""


class MissingStoreError(StoreError):
    """Raised when no inventory database exists yet."""


class StoreExistsError(StoreError):
    """Raised when initializing over an existing database without forcing."""


class ConstraintError(StoreError):
    """Raised when a write violates a uniqueness or reference constraint."""


class ModNotFoundError(StoreError):
    """Raised when a mod id does not reference a recorded mod."""


class TagNotFoundError(StoreError):
    """Raised when a tag label does not exist."""
