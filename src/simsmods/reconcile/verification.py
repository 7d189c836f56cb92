"""Comparison of recorded file fingerprints against a fresh scan."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping

from pydantic import BaseModel, Field

from simsmods.inventory import InventoryScanner

from .setdiff import SetDiff

LOGGER = logging.getLogger(__name__)


class VerificationReport(BaseModel):
    """Classification of every file path seen in a recorded or scanned inventory.

    Each path of the union lands in exactly one bucket.

    Attributes:
        matching: Paths present on both sides with equal fingerprints.
        missing: Paths recorded but no longer present on disk.
        new: Paths present on disk but not recorded, with their fingerprints.
        changed: Paths present on both sides whose fingerprint differs, mapped to
            the fingerprint currently on disk.
    """

    matching: List[str] = Field(default_factory=list)
    missing: List[str] = Field(default_factory=list)
    new: Dict[str, str] = Field(default_factory=dict)
    changed: Dict[str, str] = Field(default_factory=dict)

    @property
    def passed(self) -> bool:
        """Return True when the only non-empty bucket is ``matching``."""
        return not self.new and not self.missing and not self.changed

    def resynced(self, recorded: Mapping[str, str]) -> dict[str, str]:
        """Return ``recorded`` with this report's deltas applied.

        Missing paths are dropped, changed and new paths take the fingerprint
        found on disk.
        """
        hashes = {path: value for path, value in recorded.items() if path not in self.missing}
        hashes.update(self.changed)
        hashes.update(self.new)
        return hashes

    def counts(self) -> dict[str, int]:
        return {
            "matching": len(self.matching),
            "missing": len(self.missing),
            "new": len(self.new),
            "changed": len(self.changed),
        }


def verify(recorded: Mapping[str, str], scanned: Mapping[str, str]) -> VerificationReport:
    """Classify every path of ``recorded`` and ``scanned`` into the report buckets.

    Args:
        recorded: Fingerprints recorded at the last known-good state.
        scanned: Fingerprints read from disk now.

    Returns:
        VerificationReport: Buckets with deterministic (sorted) ordering.
    """
    diff = SetDiff.between(recorded.keys(), scanned.keys())
    common = sorted(diff.common)
    return VerificationReport(
        matching=[path for path in common if recorded[path] == scanned[path]],
        missing=sorted(diff.removed),
        new={path: scanned[path] for path in sorted(diff.added)},
        changed={path: scanned[path] for path in common if recorded[path] != scanned[path]},
    )


def verify_directory(
    directory: Path,
    recorded: Mapping[str, str],
    scanner: InventoryScanner,
) -> VerificationReport:
    """Scan ``directory`` and verify it against ``recorded``.

    Raises:
        InventoryError: If the directory cannot be listed.
        OSError: If a package file cannot be read.
    """
    LOGGER.debug("Verifying mod directory %s", directory)
    inventory = scanner.scan(directory)
    return verify(recorded, inventory.hashes)


__all__ = ["VerificationReport", "verify", "verify_directory"]
