"""Edit menu navigation tests."""

from __future__ import annotations

from simsmods.editing.states import (
    AddTag,
    AllMods,
    Back,
    BackTo,
    EditMod,
    EditModTags,
    Enter,
    Exit,
    MainMenu,
    ModSummary,
    RemoveTag,
    RetagMembers,
    TagList,
    TagMods,
    TagSummary,
    edit_mod_tags_options,
    initial_stack,
    main_menu_options,
    navigate,
    tag_mods_options,
)


def test_enter_pushes_and_back_pops() -> None:
    stack = navigate(initial_stack(), Enter(AllMods()))
    stack = navigate(stack, Enter(EditMod(7)))

    assert stack == (MainMenu(), AllMods(), EditMod(7))
    assert navigate(stack, Back()) == (MainMenu(), AllMods())


def test_navigate_does_not_mutate_input() -> None:
    stack = initial_stack()

    navigate(stack, Enter(TagList()))

    assert stack == (MainMenu(),)


def test_back_from_main_menu_quits() -> None:
    assert navigate(initial_stack(), Back()) == ()


def test_back_to_pops_to_nearest_kind() -> None:
    stack = (MainMenu(), TagList(), TagMods(1, "Body"), RetagMembers(1, "Body"))

    assert navigate(stack, BackTo(TagList)) == (MainMenu(), TagList())


def test_back_to_missing_kind_quits() -> None:
    stack = (MainMenu(), AllMods(), EditMod(3))

    assert navigate(stack, BackTo(TagList)) == ()


def test_exit_clears_the_stack() -> None:
    stack = (MainMenu(), AllMods(), EditMod(3), EditModTags(3))

    assert navigate(stack, Exit()) == ()


def test_main_menu_offers_quit() -> None:
    options = main_menu_options()

    assert [option.title for option in options] == ["Mods by tag", "All mods", "Quit"]
    assert isinstance(options[-1].value, Exit)


def test_tag_mods_options_lead_with_bulk_retag() -> None:
    tag = TagMods(4, "Hair")
    options = tag_mods_options(tag, [ModSummary(2, "Alpha")])

    assert options[0].value == Enter(RetagMembers(4, "Hair"))
    assert options[1].value == Enter(EditMod(2))
    assert isinstance(options[-1].value, Back)


def test_edit_mod_tags_options_offer_removal_and_add() -> None:
    mod = ModSummary(2, "Alpha")
    options = edit_mod_tags_options(mod, [TagSummary(9, "Body")])

    assert options[0].value == Enter(RemoveTag(2, 9, "Body"))
    assert options[1].value == Enter(AddTag(2))
    assert options[-1].title == "Back to Alpha"
