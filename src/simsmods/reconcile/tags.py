"""Minimal link/unlink deltas for retagging mods in bulk."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import AbstractSet, Iterable

from sqlalchemy.orm import Session

from simsmods.store import ModStore, queries

from .setdiff import SetDiff

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TagDelta:
    """Changes turning a tag's current members into the selected members.

    Attributes:
        to_link: Mod ids to associate with the tag.
        to_unlink: Mod ids to dissociate from the tag.
    """

    to_link: frozenset[int]
    to_unlink: frozenset[int]

    @property
    def is_empty(self) -> bool:
        return not self.to_link and not self.to_unlink


@dataclass(frozen=True, slots=True)
class TagApplyResult:
    """Outcome of applying a :class:`TagDelta`.

    Attributes:
        delta: The applied delta.
        removed_tags: Labels garbage-collected because they lost their last link.
    """

    delta: TagDelta
    removed_tags: tuple[str, ...] = ()


def compute_tag_delta(current: Iterable[int], target: Iterable[int]) -> TagDelta:
    """Return the delta taking ``current`` members to ``target`` members."""
    diff = SetDiff.between(current, target)
    return TagDelta(to_link=diff.added, to_unlink=diff.removed)


def apply_tag_delta(session: Session, tag_id: int, delta: TagDelta) -> list[str]:
    """Apply ``delta`` to ``tag_id`` inside ``session`` and collect orphaned tags.

    Every linked or unlinked mod has its last-updated timestamp refreshed.

    Returns:
        list[str]: Labels of tags removed because they no longer have links.
    """
    for mod_id in sorted(delta.to_link):
        queries.link_tag(session, mod_id, tag_id)
    for mod_id in sorted(delta.to_unlink):
        queries.unlink_tag(session, mod_id, tag_id)
    for mod_id in sorted(delta.to_link | delta.to_unlink):
        queries.get_mod(session, mod_id).touch()
    session.flush()
    return queries.cleanup_tags(session)


def retag_members(store: ModStore, tag_id: int, selected: AbstractSet[int]) -> TagApplyResult:
    """Make ``selected`` the exact member set of ``tag_id`` in one transaction.

    Returns:
        TagApplyResult: The delta (empty when nothing changed) and any tags removed.
    """
    with store.transaction() as session:
        delta = compute_tag_delta(queries.tag_members(session, tag_id), selected)
        if delta.is_empty:
            LOGGER.debug("Tag %s membership unchanged", tag_id)
            return TagApplyResult(delta=delta)
        LOGGER.info(
            "Retagging tag %s: linking %d, unlinking %d",
            tag_id,
            len(delta.to_link),
            len(delta.to_unlink),
        )
        removed = apply_tag_delta(session, tag_id, delta)
    return TagApplyResult(delta=delta, removed_tags=tuple(removed))


def replace_mod_tags(session: Session, mod_id: int, labels: Iterable[str]) -> list[str]:
    """Make ``labels`` the exact tag set of ``mod_id`` within ``session``.

    Tags are created on first use; tags left without links are removed.

    Returns:
        list[str]: Labels of tags removed because they no longer have links.
    """
    wanted = {queries.get_or_create_tag(session, label).id for label in normalize_tags(labels)}
    diff = SetDiff.between(queries.mod_tag_ids(session, mod_id), wanted)
    for tag_id in sorted(diff.added):
        queries.link_tag(session, mod_id, tag_id)
    for tag_id in sorted(diff.removed):
        queries.unlink_tag(session, mod_id, tag_id)
    return queries.cleanup_tags(session)


def normalize_tags(labels: Iterable[str]) -> list[str]:
    """Return trimmed, de-duplicated, non-empty labels in first-seen order."""
    seen: dict[str, None] = {}
    for label in labels:
        cleaned = label.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return list(seen)


def parse_tag_list(raw: str) -> list[str]:
    """Split a comma-separated tag entry into normalized labels."""
    return normalize_tags(raw.split(","))


__all__ = [
    "TagApplyResult",
    "TagDelta",
    "apply_tag_delta",
    "compute_tag_delta",
    "normalize_tags",
    "parse_tag_list",
    "replace_mod_tags",
    "retag_members",
]
