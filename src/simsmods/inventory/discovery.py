"""Discovery of mod directories and the package files inside them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from .errors import InventoryError, ModRootError
from .hashing import ContentHasher

LOGGER = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".package", ".ts4script")
DEFAULT_IGNORED_DIRECTORIES = ("mod_data",)


def _is_hidden(name: str) -> bool:
    return name.startswith(".")


@dataclass(slots=True)
class ModInventory:
    """Package files found directly inside one mod directory.

    Attributes:
        directory: Absolute path of the scanned mod directory.
        hashes: Mapping of file name (relative to ``directory``) to fingerprint.
    """

    directory: Path
    hashes: dict[str, str] = field(default_factory=dict)

    @property
    def files(self) -> frozenset[str]:
        """Return the set of recognized file names."""
        return frozenset(self.hashes)


class InventoryScanner:
    """Enumerate mod directories under a root and fingerprint their package files."""

    def __init__(
        self,
        *,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        ignored_directories: Iterable[str] = DEFAULT_IGNORED_DIRECTORIES,
        hasher: ContentHasher | None = None,
    ) -> None:
        self.extensions = frozenset(ext.lower() for ext in extensions)
        self.ignored_directories = frozenset(ignored_directories)
        self.hasher = hasher or ContentHasher()

    def list_mod_directories(self, root: Path) -> set[str]:
        """Return the names of the immediate subdirectories of ``root`` that hold mods.

        Raises:
            ModRootError: If the root is missing or cannot be listed.
        """
        if not root.is_dir():
            raise ModRootError(f"Could not locate mod directory at {root}")
        LOGGER.debug("Reading current mod directory list from %s", root)
        try:
            return {
                entry.name
                for entry in root.iterdir()
                if entry.is_dir()
                and not _is_hidden(entry.name)
                and entry.name not in self.ignored_directories
            }
        except OSError as exc:
            raise ModRootError(f"Unable to list mod directory {root}: {exc}") from exc

    def scan(self, directory: Path) -> ModInventory:
        """Fingerprint every recognized package file directly inside ``directory``.

        Raises:
            InventoryError: If the directory cannot be listed.
            OSError: If a package file cannot be read.
        """
        LOGGER.debug("Scanning files in %s", directory)
        packages = sorted(self._iter_packages(directory))
        LOGGER.debug("Gathering checksums for %d files", len(packages))
        return ModInventory(
            directory=directory,
            hashes={path.name: self.hasher.compute(path) for path in packages},
        )

    def _iter_packages(self, directory: Path) -> Iterator[Path]:
        try:
            entries = list(directory.iterdir())
        except OSError as exc:
            raise InventoryError(f"Unable to list mod directory {directory}: {exc}") from exc

        for entry in entries:
            if _is_hidden(entry.name) or not entry.is_file():
                continue
            if entry.suffix.lower() in self.extensions:
                yield entry


__all__ = [
    "DEFAULT_EXTENSIONS",
    "DEFAULT_IGNORED_DIRECTORIES",
    "InventoryScanner",
    "ModInventory",
]
