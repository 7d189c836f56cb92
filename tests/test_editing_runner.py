"""Interactive edit menu and one-shot edit tests."""

from __future__ import annotations

from datetime import datetime

import pytest
from support import CANCEL, DEFAULT, ScriptedPrompter, add_mod

from simsmods.editing import EditMenu, apply_mod_edit
from simsmods.editing.states import EditMod
from simsmods.store import ConstraintError, ModNotFoundError, ModStore, queries


def _menu(store: ModStore, answers: list) -> tuple[EditMenu, ScriptedPrompter, list[str]]:
    prompter = ScriptedPrompter(answers)
    notes: list[str] = []
    return EditMenu(store, prompter, notify=notes.append), prompter, notes


def test_cancel_on_main_menu_quits(store: ModStore) -> None:
    menu, prompter, notes = _menu(store, [CANCEL])

    menu.run()

    assert prompter.exhausted
    assert notes == ["Exiting..."]


def test_rename_mod_through_menus(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha")
    menu, prompter, _ = _menu(
        store,
        [
            "All mods",
            f"Alpha ({alpha})",
            "Name: Alpha",
            "Renamed",
            "Back",
            "Back to main menu",
            "Quit",
        ],
    )

    menu.run()

    assert prompter.exhausted
    with store.session() as session:
        assert queries.get_mod(session, alpha).name == "Renamed"


def test_cancelled_edit_returns_to_parent_without_saving(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha")
    menu, prompter, _ = _menu(store, ["Version: 1.0", CANCEL, "Back"])

    menu.run((EditMod(alpha),))

    assert prompter.exhausted
    assert ("text", "Version:") in prompter.asked
    with store.session() as session:
        assert queries.get_mod(session, alpha).version == "1.0"


def test_edit_source_and_version(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha")
    menu, _, _ = _menu(
        store,
        [
            "Source: https://example.com/alpha",
            "https://mods.example.org/alpha",
            "Version: 1.0",
            "2.5",
            "Back",
        ],
    )

    menu.run((EditMod(alpha),))

    with store.session() as session:
        record = queries.get_mod(session, alpha)
        assert record.source_url == "https://mods.example.org/alpha"
        assert record.version == "2.5"


def test_add_and_remove_tags(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha", tags=["Body"])
    menu, prompter, _ = _menu(
        store,
        [
            "Edit tags for Alpha",
            "Add tag",
            "Hair",
            "Delete tag Body",
            True,
            "Back to Alpha",
            "Back",
        ],
    )

    menu.run((EditMod(alpha),))

    assert prompter.exhausted
    with store.session() as session:
        assert [tag.tag for tag in queries.tags_for_mod(session, alpha)] == ["Hair"]
        assert queries.find_tag(session, "Body") is None


def test_adding_existing_tag_is_a_no_op(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha", tags=["Body"])
    menu, _, notes = _menu(
        store, ["Edit tags for Alpha", "Add tag", "Body", "Back to Alpha", "Back"]
    )

    menu.run((EditMod(alpha),))

    assert "Tag Body is already set." in notes
    with store.session() as session:
        assert [tag.tag for tag in queries.tags_for_mod(session, alpha)] == ["Body"]


def test_remove_tag_defaults_to_keeping_it(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha", tags=["Body"])
    menu, _, _ = _menu(
        store, ["Edit tags for Alpha", "Delete tag Body", DEFAULT, "Back to Alpha", "Back"]
    )

    menu.run((EditMod(alpha),))

    with store.session() as session:
        assert [tag.tag for tag in queries.tags_for_mod(session, alpha)] == ["Body"]


def test_bulk_retag_from_tag_view(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha", tags=["Body"])
    beta = add_mod(store, "Beta")
    menu, prompter, notes = _menu(
        store,
        [
            "Mods by tag",
            "Body",
            "Edit members of Body",
            [f"Beta ({beta})"],
            "Back to tags",
            "Back to main menu",
            "Quit",
        ],
    )

    menu.run()

    assert prompter.exhausted
    assert any("Tagged 1 and untagged 1" in note for note in notes)
    with store.session() as session:
        tag = queries.require_tag(session, "Body")
        assert queries.tag_members(session, tag.id) == {beta}
        assert queries.tags_for_mod(session, alpha) == []


def test_bulk_retag_emptying_tag_returns_to_tag_list(store: ModStore) -> None:
    add_mod(store, "Alpha", tags=["Body"])
    menu, prompter, notes = _menu(
        store, ["Mods by tag", "Body", "Edit members of Body", [], "Quit"]
    )

    menu.run()

    assert prompter.exhausted
    assert "No tags found!" in notes
    with store.session() as session:
        assert queries.all_tags(session) == []


def test_bulk_retag_unchanged_selection_reports_nothing_to_do(store: ModStore) -> None:
    add_mod(store, "Alpha", tags=["Body"])
    menu, _, notes = _menu(
        store,
        [
            "Mods by tag",
            "Body",
            "Edit members of Body",
            DEFAULT,
            "Back to tags",
            "Back to main menu",
            "Quit",
        ],
    )

    menu.run()

    assert "Nothing to do." in notes


def test_apply_mod_edit_updates_fields_and_tags(store: ModStore) -> None:
    alpha = add_mod(store, "Alpha", tags=["Body", "Hair"])
    with store.session() as session:
        before: datetime = queries.get_mod(session, alpha).updated

    record = apply_mod_edit(store, alpha, name="Alpha Prime", version="9", tags=["Hair", "New"])

    assert record.name == "Alpha Prime"
    with store.session() as session:
        stored = queries.get_mod(session, alpha)
        assert stored.version == "9"
        assert stored.source_url == "https://example.com/alpha"
        assert stored.updated >= before
        assert [tag.tag for tag in queries.tags_for_mod(session, alpha)] == ["Hair", "New"]
        assert queries.find_tag(session, "Body") is None


def test_apply_mod_edit_unknown_mod_raises(store: ModStore) -> None:
    with pytest.raises(ModNotFoundError):
        apply_mod_edit(store, 404, name="Nobody")


def test_apply_mod_edit_duplicate_name_rolls_back(store: ModStore) -> None:
    add_mod(store, "Alpha")
    beta = add_mod(store, "Beta", tags=["Body"])

    with pytest.raises(ConstraintError):
        apply_mod_edit(store, beta, name="Alpha", tags=[])

    with store.session() as session:
        assert queries.get_mod(session, beta).name == "Beta"
        assert [tag.tag for tag in queries.tags_for_mod(session, beta)] == ["Body"]
