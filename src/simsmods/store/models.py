"""ORM models for the recorded mod inventory."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Table
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Declarative base for simsmods tables."""


# Composite primary key keeps each (mod, tag) pair unique.
mod_tag_relations = Table(
    "mod_tag_relations",
    Base.metadata,
    Column("mod_id", Integer, ForeignKey("mods.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class ModRecord(Base):
    """A registered mod directory and its metadata."""

    __tablename__ = "mods"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    directory: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    source_url: Mapped[str] = mapped_column(String, nullable=False, default="")
    version: Mapped[str] = mapped_column(String, nullable=False, default="")
    updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    hashes: Mapped[List["FileHash"]] = relationship(
        back_populates="mod", order_by="FileHash.file", passive_deletes=True
    )
    tags: Mapped[List["Tag"]] = relationship(
        secondary=mod_tag_relations, back_populates="mods", order_by="Tag.tag"
    )

    def touch(self) -> None:
        """Refresh the last-updated timestamp."""
        self.updated = utcnow()

    def __repr__(self) -> str:
        return f"ModRecord(id={self.id!r}, name={self.name!r}, directory={self.directory!r})"


class FileHash(Base):
    """Fingerprint of one package file recorded for a mod."""

    __tablename__ = "mod_hashes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    mod_id: Mapped[int] = mapped_column(
        ForeignKey("mods.id", ondelete="CASCADE"), nullable=False, index=True
    )
    file: Mapped[str] = mapped_column(String, nullable=False)
    # Indexed rather than unique: duplicates across mods are flagged, not rejected.
    hash: Mapped[str] = mapped_column(String, nullable=False, index=True)

    mod: Mapped[ModRecord] = relationship(back_populates="hashes")


class Tag(Base):
    """A label attached to any number of mods."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tag: Mapped[str] = mapped_column(String, unique=True, nullable=False)

    mods: Mapped[List[ModRecord]] = relationship(
        secondary=mod_tag_relations, back_populates="tags", order_by="ModRecord.name"
    )


__all__ = ["Base", "FileHash", "ModRecord", "Tag", "mod_tag_relations", "utcnow"]
