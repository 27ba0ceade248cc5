"""SQLAlchemy-backed store implementation."""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from spendwise.domain import errors
from spendwise.domain.errors import PersistenceError
from spendwise.store.base import Store
from spendwise.store.models import KeyValueEntry, create_session_factory

logger = logging.getLogger(__name__)


class SQLAlchemyStore(Store):
    """SQLAlchemy-based implementation of the Store interface."""

    def __init__(self, database_url: str):
        """Initialize SQLAlchemy store.

        Args:
            database_url: SQLAlchemy database URL (e.g., 'sqlite:///path/to.db')
        """
        self.database_url = database_url
        self.session_factory = create_session_factory(database_url)
        self._session: Optional[Session] = None

    def _get_session(self) -> Session:
        """Get current session, creating one if needed."""
        if self._session is None:
            self._session = self.session_factory()
        return self._session

    def connect(self) -> None:
        """Connect to the database."""
        # Connection is lazy, so this is a no-op
        pass

    def disconnect(self) -> None:
        """Disconnect from the database."""
        if self._session is not None:
            self._session.close()
            self._session = None

    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        # Schema is created automatically by create_session_factory
        pass

    def get(self, key: str) -> Optional[bytes]:
        """Get the value stored under ``key``."""
        session = self._get_session()
        try:
            entry = session.get(KeyValueEntry, key)
        except SQLAlchemyError as e:
            session.rollback()
            raise PersistenceError(errors.store_failure("read", key, e), key=key) from e
        if entry is None:
            return None
        return bytes(entry.value)

    def set(self, key: str, value: bytes) -> None:
        """Insert or replace the value under ``key``."""
        session = self._get_session()
        try:
            entry = session.get(KeyValueEntry, key)
            if entry is None:
                session.add(KeyValueEntry(key=key, value=value))
            else:
                entry.value = value
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.warning("Failed to write key %s: %s", key, e)
            raise PersistenceError(errors.store_failure("write", key, e), key=key) from e

    def delete(self, key: str) -> None:
        """Delete ``key`` if present."""
        session = self._get_session()
        try:
            entry = session.get(KeyValueEntry, key)
            if entry is not None:
                session.delete(entry)
                session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.warning("Failed to delete key %s: %s", key, e)
            raise PersistenceError(errors.store_failure("delete", key, e), key=key) from e
