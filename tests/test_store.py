"""Mod store persistence tests."""

from __future__ import annotations

from pathlib import Path

import pytest
from support import add_mod

from simsmods.store import (
    ConstraintError,
    MissingStoreError,
    ModNotFoundError,
    ModRecord,
    ModStore,
    StoreExistsError,
    TagNotFoundError,
    queries,
)


def test_initialize_creates_database(tmp_path: Path) -> None:
    database = tmp_path / "nested" / "mods.sqlite"

    store = ModStore.initialize(database)
    store.dispose()

    assert database.is_file()
    assert store.database_path == database


def test_initialize_refuses_existing_database(store: ModStore) -> None:
    with pytest.raises(StoreExistsError):
        ModStore.initialize(store.database_path)


def test_initialize_force_replaces_database(store: ModStore) -> None:
    add_mod(store, "Alpha")
    store.dispose()

    fresh = ModStore.initialize(store.database_path, force=True)
    with fresh.session() as session:
        assert queries.all_mods(session) == []
    fresh.dispose()


def test_open_missing_database_raises(tmp_path: Path) -> None:
    with pytest.raises(MissingStoreError, match="simsmods init"):
        ModStore.open(tmp_path / "absent.sqlite")


def test_transaction_rolls_back_on_error(store: ModStore) -> None:
    with pytest.raises(RuntimeError):
        with store.transaction() as session:
            session.add(ModRecord(name="Alpha", directory="Alpha"))
            session.flush()
            raise RuntimeError("abort")

    with store.session() as session:
        assert queries.all_mods(session) == []


def test_duplicate_name_raises_constraint_error(store: ModStore) -> None:
    add_mod(store, "Alpha")

    with pytest.raises(ConstraintError):
        add_mod(store, "Alpha", directory="Other")


def test_mods_for_tags_matches_any_tag(store: ModStore) -> None:
    add_mod(store, "Alpha", tags=["Body"])
    add_mod(store, "Beta", tags=["Hair", "Body"])
    add_mod(store, "Gamma", tags=["Build"])

    with store.session() as session:
        names = [record.name for record in queries.mods_for_tags(session, ["Body", "Hair"])]

    assert names == ["Alpha", "Beta"]


def test_delete_mod_removes_hashes_and_links(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha", tags=["Body"], hashes={"a.package": "0x01"})
    beta = add_mod(store, "Beta", tags=["Body"])

    with store.transaction() as session:
        queries.delete_mod(session, alpha)
        removed = queries.cleanup_tags(session)

    assert removed == []
    with store.session() as session:
        assert queries.hashes_for_mod(session, alpha) == {}
        assert queries.hash_owners(session, "0x01") == []
        tag = queries.require_tag(session, "Body")
        assert queries.tag_members(session, tag.id) == {beta}
        with pytest.raises(ModNotFoundError):
            queries.get_mod(session, alpha)


def test_cleanup_tags_removes_only_orphans(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha", tags=["Body", "Hair"])

    with store.transaction() as session:
        hair = queries.require_tag(session, "Hair")
        queries.unlink_tag(session, alpha, hair.id)
        removed = queries.cleanup_tags(session)

    assert removed == ["Hair"]
    with store.session() as session:
        assert [tag.tag for tag in queries.all_tags(session)] == ["Body"]


def test_delete_tag_keeps_mods(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha", tags=["Body"])

    with store.transaction() as session:
        tag = queries.require_tag(session, "Body")
        queries.delete_tag(session, tag.id)

    with store.session() as session:
        assert queries.get_mod(session, alpha).name == "Alpha"
        assert queries.tags_for_mod(session, alpha) == []
        with pytest.raises(TagNotFoundError):
            queries.require_tag(session, "Body")


def test_get_or_create_tag_reuses_existing(store: ModStore) -> None:
    with store.transaction() as session:
        first = queries.get_or_create_tag(session, "Body")
        second = queries.get_or_create_tag(session, "Body")

    assert first.id == second.id
