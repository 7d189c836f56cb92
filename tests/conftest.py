"""Shared fixtures for simsmods tests."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

import pytest

from simsmods.store import ModStore


@pytest.fixture
def mod_root(tmp_path: Path) -> Path:
    root = tmp_path / "Mods"
    root.mkdir()
    return root


@pytest.fixture
def store(tmp_path: Path) -> Iterator[ModStore]:
    store = ModStore.initialize(tmp_path / "mods.sqlite")
    yield store
    store.dispose()


@pytest.fixture
def cli_env(tmp_path: Path, mod_root: Path) -> dict[str, str]:
    """Return CLI environment variables rooted in ``tmp_path``."""
    env = dict(os.environ)
    env["HOME"] = str(tmp_path / "home")
    env["SIMSMODS__PATHS__MODS_DIR"] = str(mod_root)
    env["SIMSMODS__PATHS__DATABASE"] = str(tmp_path / "mods.sqlite")
    return env
