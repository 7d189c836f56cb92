"""Edit-menu states and the pure navigation over them.

The menu is a stack of immutable states. Selecting an option yields an action
that :func:`navigate` applies to the stack; an empty stack ends the session.
Nothing here touches the database or the terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Type, Union

from simsmods.prompts import Option


@dataclass(frozen=True)
class MainMenu:
    pass


@dataclass(frozen=True)
class TagList:
    pass


@dataclass(frozen=True)
class TagMods:
    tag_id: int
    label: str


@dataclass(frozen=True)
class RetagMembers:
    tag_id: int
    label: str


@dataclass(frozen=True)
class AllMods:
    pass


@dataclass(frozen=True)
class EditMod:
    mod_id: int


@dataclass(frozen=True)
class EditName:
    mod_id: int


@dataclass(frozen=True)
class EditSource:
    mod_id: int


@dataclass(frozen=True)
class EditVersion:
    mod_id: int


@dataclass(frozen=True)
class EditModTags:
    mod_id: int


@dataclass(frozen=True)
class AddTag:
    mod_id: int


@dataclass(frozen=True)
class RemoveTag:
    mod_id: int
    tag_id: int
    label: str


MenuState = Union[
    MainMenu,
    TagList,
    TagMods,
    RetagMembers,
    AllMods,
    EditMod,
    EditName,
    EditSource,
    EditVersion,
    EditModTags,
    AddTag,
    RemoveTag,
]
Stack = tuple[MenuState, ...]


@dataclass(frozen=True)
class Enter:
    """Open ``state`` on top of the current one."""

    state: MenuState


@dataclass(frozen=True)
class Back:
    """Return to the parent state."""


@dataclass(frozen=True)
class BackTo:
    """Return to the nearest state of ``kind``, or quit when there is none."""

    kind: Type[MenuState]


@dataclass(frozen=True)
class Exit:
    """Leave the menu entirely."""


Action = Union[Enter, Back, BackTo, Exit]


def initial_stack() -> Stack:
    return (MainMenu(),)


def navigate(stack: Stack, action: Action) -> Stack:
    """Return the stack that results from applying ``action``."""
    if isinstance(action, Enter):
        return stack + (action.state,)
    if isinstance(action, Back):
        return stack[:-1]
    if isinstance(action, BackTo):
        remaining = stack[:-1]
        while remaining and not isinstance(remaining[-1], action.kind):
            remaining = remaining[:-1]
        return remaining
    if isinstance(action, Exit):
        return ()
    raise TypeError(f"Unknown menu action: {action!r}")


@dataclass(frozen=True)
class ModSummary:
    """Fields of a mod shown by the menus."""

    mod_id: int
    name: str
    source_url: str = ""
    version: str = ""


@dataclass(frozen=True)
class TagSummary:
    tag_id: int
    label: str


def main_menu_options() -> list[Option[Action]]:
    return [
        Option("Mods by tag", Enter(TagList())),
        Option("All mods", Enter(AllMods())),
        Option("Quit", Exit()),
    ]


def tag_list_options(tags: Sequence[TagSummary]) -> list[Option[Action]]:
    options: list[Option[Action]] = [
        Option(tag.label, Enter(TagMods(tag.tag_id, tag.label))) for tag in tags
    ]
    options.append(Option("Back to main menu", Back()))
    return options


def tag_mods_options(tag: TagMods, members: Sequence[ModSummary]) -> list[Option[Action]]:
    options: list[Option[Action]] = [
        Option(f"Edit members of {tag.label}", Enter(RetagMembers(tag.tag_id, tag.label)))
    ]
    options.extend(_mod_option(mod) for mod in members)
    options.append(Option("Back to tags", Back()))
    return options


def all_mods_options(mods: Sequence[ModSummary]) -> list[Option[Action]]:
    options: list[Option[Action]] = [_mod_option(mod) for mod in mods]
    options.append(Option("Back to main menu", Back()))
    return options


def edit_mod_options(mod: ModSummary) -> list[Option[Action]]:
    return [
        Option(f"Name: {mod.name}", Enter(EditName(mod.mod_id))),
        Option(f"Source: {mod.source_url}", Enter(EditSource(mod.mod_id))),
        Option(f"Version: {mod.version}", Enter(EditVersion(mod.mod_id))),
        Option(f"Edit tags for {mod.name}", Enter(EditModTags(mod.mod_id))),
        Option("Back", Back()),
    ]


def edit_mod_tags_options(mod: ModSummary, tags: Sequence[TagSummary]) -> list[Option[Action]]:
    options: list[Option[Action]] = [
        Option(f"Delete tag {tag.label}", Enter(RemoveTag(mod.mod_id, tag.tag_id, tag.label)))
        for tag in tags
    ]
    options.append(Option("Add tag", Enter(AddTag(mod.mod_id))))
    options.append(Option(f"Back to {mod.name}", Back()))
    return options


def _mod_option(mod: ModSummary) -> Option[Action]:
    return Option(f"{mod.name} ({mod.mod_id})", Enter(EditMod(mod.mod_id)))


__all__ = [
    "Action",
    "AddTag",
    "AllMods",
    "Back",
    "BackTo",
    "EditMod",
    "EditModTags",
    "EditName",
    "EditSource",
    "EditVersion",
    "Enter",
    "Exit",
    "MainMenu",
    "MenuState",
    "ModSummary",
    "RemoveTag",
    "RetagMembers",
    "Stack",
    "TagList",
    "TagMods",
    "TagSummary",
    "all_mods_options",
    "edit_mod_options",
    "edit_mod_tags_options",
    "initial_stack",
    "main_menu_options",
    "navigate",
    "tag_list_options",
    "tag_mods_options",
]
