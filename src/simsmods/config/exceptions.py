"""Errors raised while loading simsmods configuration."""


class ConfigError(Exception):
    """Raised when a configuration source holds invalid or conflicting values."""
