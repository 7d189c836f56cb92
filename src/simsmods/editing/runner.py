"""Database-backed execution of the edit menu and of one-shot mod edits."""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Optional

from simsmods.config.models import PromptSettings
from simsmods.forms import MetadataForm
from simsmods.prompts import Option, PromptCancelled, Prompter, TagCompleter, require_text
from simsmods.reconcile.tags import normalize_tags, replace_mod_tags, retag_members
from simsmods.store import ModRecord, ModStore, queries

from .states import (
    Action,
    AddTag,
    AllMods,
    Back,
    BackTo,
    EditMod,
    EditModTags,
    EditName,
    EditSource,
    EditVersion,
    MainMenu,
    MenuState,
    ModSummary,
    RemoveTag,
    RetagMembers,
    Stack,
    TagList,
    TagMods,
    TagSummary,
    all_mods_options,
    edit_mod_options,
    edit_mod_tags_options,
    initial_stack,
    main_menu_options,
    navigate,
    tag_list_options,
    tag_mods_options,
)

LOGGER = logging.getLogger(__name__)


def _summary(record: ModRecord) -> ModSummary:
    return ModSummary(record.id, record.name, record.source_url, record.version)


class EditMenu:
    """Run the interactive edit menu until the user quits."""

    def __init__(
        self,
        store: ModStore,
        prompter: Prompter,
        *,
        prompt_settings: Optional[PromptSettings] = None,
        notify: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.store = store
        self.prompter = prompter
        self.form = MetadataForm(prompter, prompt_settings)
        self._notify = notify or (lambda message: None)
        self._handlers: dict[type, Callable[..., Action]] = {
            MainMenu: self._main_menu,
            TagList: self._tag_list,
            TagMods: self._tag_mods,
            RetagMembers: self._retag_members,
            AllMods: self._all_mods,
            EditMod: self._edit_mod,
            EditName: self._edit_name,
            EditSource: self._edit_source,
            EditVersion: self._edit_version,
            EditModTags: self._edit_mod_tags,
            AddTag: self._add_tag,
            RemoveTag: self._remove_tag,
        }

    def run(self, stack: Optional[Stack] = None) -> None:
        """Drive the menu from ``stack`` (the main menu by default) until it empties."""
        stack = stack or initial_stack()
        while stack:
            stack = navigate(stack, self.step(stack[-1]))
        self._notify("Exiting...")

    def step(self, state: MenuState) -> Action:
        """Show ``state`` and return the action chosen; cancelling means going back."""
        try:
            return self._handlers[type(state)](state)
        except PromptCancelled:
            return Back()

    # Menus ------------------------------------------------------------

    def _main_menu(self, _: MainMenu) -> Action:
        return self.prompter.select("Main Menu:", main_menu_options())

    def _tag_list(self, _: TagList) -> Action:
        with self.store.session() as session:
            tags = [TagSummary(tag.id, tag.tag) for tag in queries.all_tags(session)]
        if not tags:
            self._notify("No tags found!")
            return Back()
        return self.prompter.select("Mods by tag:", tag_list_options(tags))

    def _tag_mods(self, state: TagMods) -> Action:
        with self.store.session() as session:
            if queries.find_tag(session, state.label) is None:
                return BackTo(TagList)
            members = [_summary(record) for record in queries.mods_for_tags(session, [state.label])]
        return self.prompter.select(
            f"Mods for tag {state.label}:", tag_mods_options(state, members)
        )

    def _all_mods(self, _: AllMods) -> Action:
        with self.store.session() as session:
            mods = [_summary(record) for record in queries.all_mods(session)]
        return self.prompter.select("All Mods:", all_mods_options(mods))

    def _edit_mod(self, state: EditMod) -> Action:
        mod = self._load(state.mod_id)
        if mod is None:
            return Back()
        return self.prompter.select(f"Edit mod {mod.name}:", edit_mod_options(mod))

    def _edit_mod_tags(self, state: EditModTags) -> Action:
        mod = self._load(state.mod_id)
        if mod is None:
            return BackTo(AllMods)
        with self.store.session() as session:
            tags = [
                TagSummary(tag.id, tag.tag) for tag in queries.tags_for_mod(session, mod.mod_id)
            ]
        return self.prompter.select(f"Edit tags for {mod.name}:", edit_mod_tags_options(mod, tags))

    # Forms ------------------------------------------------------------

    def _edit_name(self, state: EditName) -> Action:
        mod = self._load(state.mod_id)
        if mod is None:
            return Back()
        with self.store.session() as session:
            taken = [record.name for record in queries.all_mods(session)]
        name = self.form.name(mod.name, taken=taken, current=mod.name)
        self._save(mod.mod_id, name=name)
        return Back()

    def _edit_source(self, state: EditSource) -> Action:
        mod = self._load(state.mod_id)
        if mod is None:
            return Back()
        self._save(mod.mod_id, source_url=self.form.source_url(mod.source_url))
        return Back()

    def _edit_version(self, state: EditVersion) -> Action:
        mod = self._load(state.mod_id)
        if mod is None:
            return Back()
        self._save(mod.mod_id, version=self.form.version(mod.version))
        return Back()

    def _add_tag(self, state: AddTag) -> Action:
        with self.store.session() as session:
            existing = [tag.tag for tag in queries.tags_for_mod(session, state.mod_id)]
            known = [tag.tag for tag in queries.all_tags(session)]
        label = self.prompter.text(
            "Enter tag:",
            validate=require_text,
            completer=TagCompleter(known, exclude=existing),
        ).strip()
        if label in existing:
            self._notify(f"Tag {label} is already set.")
            return Back()
        with self.store.transaction() as session:
            tag = queries.get_or_create_tag(session, label)
            queries.link_tag(session, state.mod_id, tag.id)
            queries.get_mod(session, state.mod_id).touch()
        return Back()

    def _remove_tag(self, state: RemoveTag) -> Action:
        mod = self._load(state.mod_id)
        if mod is None:
            return Back()
        if self.prompter.confirm(f"Remove tag '{state.label}' from {mod.name}?", default=False):
            with self.store.transaction() as session:
                queries.unlink_tag(session, state.mod_id, state.tag_id)
                queries.get_mod(session, state.mod_id).touch()
                queries.cleanup_tags(session)
        return Back()

    def _retag_members(self, state: RetagMembers) -> Action:
        with self.store.session() as session:
            mods = [_summary(record) for record in queries.all_mods(session)]
            current = queries.tag_members(session, state.tag_id)
        options = [Option(f"{mod.name} ({mod.mod_id})", mod.mod_id) for mod in mods]
        selected = self.prompter.checkbox(
            f"Mods tagged {state.label}:", options, checked=sorted(current)
        )
        result = retag_members(self.store, state.tag_id, set(selected))
        if result.delta.is_empty:
            self._notify("Nothing to do.")
            return Back()
        self._notify(
            f"Tagged {len(result.delta.to_link)} and untagged {len(result.delta.to_unlink)} "
            f"mod(s) for {state.label}."
        )
        if state.label in result.removed_tags:
            return BackTo(TagList)
        return Back()

    # Internal helpers -------------------------------------------------

    def _load(self, mod_id: int) -> Optional[ModSummary]:
        with self.store.session() as session:
            record = session.get(ModRecord, mod_id)
            return _summary(record) if record is not None else None

    def _save(self, mod_id: int, **fields: str) -> None:
        with self.store.transaction() as session:
            record = queries.get_mod(session, mod_id)
            for key, value in fields.items():
                setattr(record, key, value)
            record.touch()
        LOGGER.info("Updated %s of mod %s", ", ".join(fields), mod_id)


def apply_mod_edit(
    store: ModStore,
    mod_id: int,
    *,
    name: Optional[str] = None,
    source_url: Optional[str] = None,
    version: Optional[str] = None,
    tags: Optional[Iterable[str]] = None,
) -> ModRecord:
    """Apply the given field changes to one mod in a single transaction.

    ``tags`` replaces the mod's whole tag set; tags left without mods are removed.

    Raises:
        ModNotFoundError: If ``mod_id`` is unknown.
        ConstraintError: If the new name is already taken.
    """
    with store.transaction() as session:
        record = queries.get_mod(session, mod_id)
        if name is not None:
            record.name = name
        if source_url is not None:
            record.source_url = source_url
        if version is not None:
            record.version = version
        if tags is not None:
            replace_mod_tags(session, mod_id, normalize_tags(tags))
        record.touch()
        session.flush()
        queries.cleanup_tags(session)
    return record


__all__ = ["EditMenu", "apply_mod_edit"]
