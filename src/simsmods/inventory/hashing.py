"""Content fingerprints for package files."""

from __future__ import annotations

import logging
from pathlib import Path

import xxhash

LOGGER = logging.getLogger(__name__)

FINGERPRINT_WIDTH = 16


def fingerprint_bytes(data: bytes) -> str:
    """Return the fingerprint for raw bytes.

    The fingerprint is the XXH3 64-bit digest rendered as ``0x`` followed by
    sixteen zero-padded lowercase hex digits.
    """
    return f"0x{xxhash.xxh3_64_intdigest(data):0{FINGERPRINT_WIDTH}x}"


class ContentHasher:
    """Compute fast, deterministic content fingerprints for files."""

    def compute(self, path: Path) -> str:
        """Return the fingerprint of the file at ``path``.

        Raises:
            OSError: If the file cannot be read.
        """
        LOGGER.debug("Generating checksum for %s", path)
        return fingerprint_bytes(path.read_bytes())


__all__ = ["ContentHasher", "FINGERPRINT_WIDTH", "fingerprint_bytes"]
