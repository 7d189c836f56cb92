"""Query and mutation helpers operating on a store session.

Every helper takes the session handed out by :class:`simsmods.store.ModStore`
so several of them can share one transaction.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from .errors import ModNotFoundError, TagNotFoundError
from .models import FileHash, ModRecord, Tag, mod_tag_relations

LOGGER = logging.getLogger(__name__)


def get_mod(session: Session, mod_id: int) -> ModRecord:
    """Return the mod with ``mod_id``.

    Raises:
        ModNotFoundError: If no such mod is recorded.
    """
    record = session.get(ModRecord, mod_id)
    if record is None:
        raise ModNotFoundError(f"No mod with mod ID {mod_id} found")
    return record


def all_mods(session: Session) -> list[ModRecord]:
    return list(session.scalars(select(ModRecord).order_by(ModRecord.name)))


def mods_for_tags(session: Session, labels: Iterable[str]) -> list[ModRecord]:
    """Return mods carrying at least one of ``labels``."""
    labels = list(labels)
    LOGGER.debug("Fetching mods for tags %s", labels)
    statement = (
        select(ModRecord)
        .join(mod_tag_relations, mod_tag_relations.c.mod_id == ModRecord.id)
        .join(Tag, Tag.id == mod_tag_relations.c.tag_id)
        .where(Tag.tag.in_(labels))
        .distinct()
        .order_by(ModRecord.name)
    )
    return list(session.scalars(statement))


def hashes_for_mod(session: Session, mod_id: int) -> dict[str, str]:
    rows = session.execute(select(FileHash.file, FileHash.hash).where(FileHash.mod_id == mod_id))
    return {file: fingerprint for file, fingerprint in rows}


def tags_for_mod(session: Session, mod_id: int) -> list[Tag]:
    statement = (
        select(Tag)
        .join(mod_tag_relations, mod_tag_relations.c.tag_id == Tag.id)
        .where(mod_tag_relations.c.mod_id == mod_id)
        .order_by(Tag.tag)
    )
    return list(session.scalars(statement))


def all_tags(session: Session, labels: Optional[Iterable[str]] = None) -> list[Tag]:
    """Return every tag, or only those whose label is in ``labels``."""
    statement = select(Tag).order_by(Tag.tag)
    if labels is not None:
        statement = statement.where(Tag.tag.in_(list(labels)))
    return list(session.scalars(statement))


def find_tag(session: Session, label: str) -> Tag | None:
    return session.scalars(select(Tag).where(Tag.tag == label)).first()


def require_tag(session: Session, label: str) -> Tag:
    """Return the tag named ``label``.

    Raises:
        TagNotFoundError: If the tag does not exist.
    """
    tag = find_tag(session, label)
    if tag is None:
        raise TagNotFoundError(f"Tag not found: {label}")
    return tag


def get_or_create_tag(session: Session, label: str) -> Tag:
    """Return the tag named ``label``, creating it on first use."""
    tag = find_tag(session, label)
    if tag is not None:
        LOGGER.debug("Existing tag ID for %s: %s", label, tag.id)
        return tag
    LOGGER.debug("Adding tag: %s", label)
    tag = Tag(tag=label)
    session.add(tag)
    session.flush()
    return tag


def tag_members(session: Session, tag_id: int) -> set[int]:
    """Return the ids of mods linked to ``tag_id``."""
    rows = session.scalars(
        select(mod_tag_relations.c.mod_id).where(mod_tag_relations.c.tag_id == tag_id)
    )
    return set(rows)


def mod_tag_ids(session: Session, mod_id: int) -> set[int]:
    """Return the ids of tags linked to ``mod_id``."""
    rows = session.scalars(
        select(mod_tag_relations.c.tag_id).where(mod_tag_relations.c.mod_id == mod_id)
    )
    return set(rows)


def link_tag(session: Session, mod_id: int, tag_id: int) -> None:
    session.execute(insert(mod_tag_relations).values(mod_id=mod_id, tag_id=tag_id))


def unlink_tag(session: Session, mod_id: int, tag_id: int) -> None:
    session.execute(
        delete(mod_tag_relations).where(
            mod_tag_relations.c.mod_id == mod_id, mod_tag_relations.c.tag_id == tag_id
        )
    )


def hash_owners(session: Session, fingerprint: str) -> list[tuple[FileHash, ModRecord]]:
    """Return every recorded file carrying ``fingerprint`` together with its mod."""
    statement = (
        select(FileHash, ModRecord)
        .join(ModRecord, ModRecord.id == FileHash.mod_id)
        .where(FileHash.hash == fingerprint)
        .order_by(ModRecord.name, FileHash.file)
    )
    return [(file_hash, record) for file_hash, record in session.execute(statement)]


def insert_hash(session: Session, mod_id: int, file: str, fingerprint: str) -> None:
    LOGGER.debug("Saving hash for %s (%s)", file, fingerprint)
    session.add(FileHash(mod_id=mod_id, file=file, hash=fingerprint))
    session.flush()


def clear_hashes(session: Session, mod_id: int) -> None:
    LOGGER.debug("Clearing existing hash data for mod %s", mod_id)
    session.execute(delete(FileHash).where(FileHash.mod_id == mod_id))


def delete_mod(session: Session, mod_id: int) -> None:
    """Delete a mod together with its hashes and tag links.

    Children are removed before the parent row so the outcome does not depend
    on foreign-key cascade support.
    """
    record = get_mod(session, mod_id)
    LOGGER.info("Deleting %s", record.name)
    session.execute(delete(mod_tag_relations).where(mod_tag_relations.c.mod_id == mod_id))
    clear_hashes(session, mod_id)
    session.execute(delete(ModRecord).where(ModRecord.id == mod_id))


def delete_tag(session: Session, tag_id: int) -> None:
    """Delete a tag and its links; the linked mods are left untouched."""
    session.execute(delete(mod_tag_relations).where(mod_tag_relations.c.tag_id == tag_id))
    session.execute(delete(Tag).where(Tag.id == tag_id))


def cleanup_tags(session: Session) -> list[str]:
    """Delete tags with no remaining links and return their labels."""
    linked = select(mod_tag_relations.c.tag_id).distinct()
    orphans = list(session.execute(select(Tag.id, Tag.tag).where(Tag.id.not_in(linked))))
    if orphans:
        session.execute(delete(Tag).where(Tag.id.in_([tag_id for tag_id, _ in orphans])))
    LOGGER.debug("Deleted %d unused tags", len(orphans))
    return [label for _, label in orphans]


__all__ = [
    "all_mods",
    "all_tags",
    "cleanup_tags",
    "clear_hashes",
    "delete_mod",
    "delete_tag",
    "find_tag",
    "get_mod",
    "get_or_create_tag",
    "hash_owners",
    "hashes_for_mod",
    "insert_hash",
    "link_tag",
    "mod_tag_ids",
    "mods_for_tags",
    "require_tag",
    "tag_members",
    "tags_for_mod",
    "unlink_tag",
]
