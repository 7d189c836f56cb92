"""Detection of identical fingerprints recorded for different mods."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.orm import Session

from simsmods.store import queries

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class HashCollision:
    """A fingerprint about to be recorded that another mod already owns.

    Attributes:
        fingerprint: Shared fingerprint value.
        mod_name: Mod receiving the new record.
        file: File of ``mod_name`` carrying the fingerprint.
        existing_mod: Mod that already recorded the fingerprint.
        existing_file: File of ``existing_mod`` carrying the fingerprint.
    """

    fingerprint: str
    mod_name: str
    file: str
    existing_mod: str
    existing_file: str


class CollisionDetector:
    """Flag fingerprints shared across mods without blocking the write.

    Collisions accumulate in ``collisions``; callers announce them after the
    enclosing transaction commits.
    """

    def __init__(self) -> None:
        self.collisions: list[HashCollision] = []

    def check(
        self,
        session: Session,
        *,
        mod_id: Optional[int],
        mod_name: str,
        file: str,
        fingerprint: str,
    ) -> list[HashCollision]:
        """Return collisions between ``fingerprint`` and files of other mods.

        Args:
            session: Session of the transaction persisting the fingerprint.
            mod_id: Id of the mod receiving the fingerprint, if already assigned.
            mod_name: Name of that mod.
            file: File name being recorded.
            fingerprint: Fingerprint being recorded.
        """
        found: list[HashCollision] = []
        for existing, owner in queries.hash_owners(session, fingerprint):
            if owner.id == mod_id:
                continue
            collision = HashCollision(
                fingerprint=fingerprint,
                mod_name=mod_name,
                file=file,
                existing_mod=owner.name,
                existing_file=existing.file,
            )
            LOGGER.warning(
                "Hash collision %s: %s/%s matches %s/%s",
                fingerprint,
                mod_name,
                file,
                owner.name,
                existing.file,
            )
            found.append(collision)
        self.collisions.extend(found)
        return found

    def record_hashes(
        self,
        session: Session,
        *,
        mod_id: int,
        mod_name: str,
        hashes: dict[str, str],
    ) -> None:
        """Insert ``hashes`` for ``mod_id``, checking each one for collisions first."""
        for file, fingerprint in sorted(hashes.items()):
            self.check(
                session, mod_id=mod_id, mod_name=mod_name, file=file, fingerprint=fingerprint
            )
            queries.insert_hash(session, mod_id, file, fingerprint)


__all__ = ["CollisionDetector", "HashCollision"]
