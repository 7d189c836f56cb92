"""Inventory persistence for simsmods."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .errors import (
    ConstraintError,
    MissingStoreError,
    ModNotFoundError,
    StoreError,
    StoreExistsError,
    TagNotFoundError,
)
from .models import Base, FileHash, ModRecord, Tag, mod_tag_relations

LOGGER = logging.getLogger(__name__)


def _configure_pragmas(dbapi_conn: Any, _connection_record: Any) -> None:
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class ModStore:
    """Own the inventory database and hand out transactional sessions."""

    def __init__(self, database_path: Path) -> None:
        """Bind the store to a SQLite database file.

        Args:
            database_path: Location of the SQLite database.
        """
        self._database_path = database_path
        self._engine = self._create_engine(database_path)
        self._sessions = sessionmaker(self._engine, expire_on_commit=False)

    @classmethod
    def initialize(cls, database_path: Path, *, force: bool = False) -> "ModStore":
        """Create a fresh database with the inventory schema.

        Args:
            database_path: Location of the SQLite database.
            force: Replace an existing database instead of refusing.

        Returns:
            ModStore: Store bound to the new database.

        Raises:
            StoreExistsError: If the database exists and ``force`` is false.
        """
        if database_path.is_file():
            if not force:
                raise StoreExistsError(f"Database file exists at {database_path}")
            LOGGER.info("Deleting existing database at %s", database_path)
            database_path.unlink()
        database_path.parent.mkdir(parents=True, exist_ok=True)

        store = cls(database_path)
        LOGGER.info("Initializing database at %s", database_path)
        try:
            Base.metadata.create_all(store._engine)
        except SQLAlchemyError as exc:
            raise StoreError(f"Unable to create database schema: {exc}") from exc
        return store

    @classmethod
    def open(cls, database_path: Path) -> "ModStore":
        """Open an existing database.

        Raises:
            MissingStoreError: If no database file is present.
        """
        if not database_path.is_file():
            raise MissingStoreError(
                f"No mod database found at {database_path}. Run `simsmods init` first."
            )
        LOGGER.debug("Opening mod database at %s", database_path)
        return cls(database_path)

    @property
    def database_path(self) -> Path:
        """Return the database file backing this store."""
        return self._database_path

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session for read-only queries."""
        with self._sessions() as session:
            try:
                yield session
            except SQLAlchemyError as exc:
                raise StoreError(f"Database query failed: {exc}") from exc

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Yield a session whose changes commit together or not at all.

        Raises:
            ConstraintError: If a write violates a uniqueness or reference constraint.
            StoreError: For any other database failure.
        """
        with self._sessions() as session:
            try:
                with session.begin():
                    yield session
            except IntegrityError as exc:
                raise ConstraintError(f"Constraint violated: {exc.orig}") from exc
            except SQLAlchemyError as exc:
                raise StoreError(f"Database transaction failed: {exc}") from exc

    def dispose(self) -> None:
        """Release pooled connections."""
        self._engine.dispose()

    def _create_engine(self, database_path: Path) -> Engine:
        engine = create_engine(f"sqlite:///{database_path}")
        event.listen(engine, "connect", _configure_pragmas)
        return engine


__all__ = [
    "ConstraintError",
    "FileHash",
    "MissingStoreError",
    "ModNotFoundError",
    "ModRecord",
    "ModStore",
    "StoreError",
    "StoreExistsError",
    "Tag",
    "TagNotFoundError",
    "mod_tag_relations",
]
