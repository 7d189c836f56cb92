"""Content fingerprint tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import xxhash

from simsmods.inventory import ContentHasher, fingerprint_bytes


def test_fingerprint_is_prefixed_zero_padded_hex() -> None:
    value = fingerprint_bytes(b"hello world")

    assert value == f"0x{xxhash.xxh3_64_intdigest(b'hello world'):016x}"
    assert value.startswith("0x")
    assert len(value) == 18
    assert value == value.lower()


def test_fingerprint_of_empty_content_is_stable() -> None:
    assert fingerprint_bytes(b"") == fingerprint_bytes(b"")
    assert len(fingerprint_bytes(b"")) == 18


def test_compute_hashes_file_content(tmp_path: Path) -> None:
    first = tmp_path / "a.package"
    second = tmp_path / "b.package"
    first.write_bytes(b"content")
    second.write_bytes(b"content")

    hasher = ContentHasher()

    assert hasher.compute(first) == fingerprint_bytes(b"content")
    # Identical bytes give identical fingerprints regardless of the file name.
    assert hasher.compute(first) == hasher.compute(second)


def test_compute_changes_with_content(tmp_path: Path) -> None:
    path = tmp_path / "a.package"
    path.write_bytes(b"one")
    hasher = ContentHasher()
    before = hasher.compute(path)

    path.write_bytes(b"two")

    assert hasher.compute(path) != before


def test_compute_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(OSError):
        ContentHasher().compute(tmp_path / "absent.package")
