"""Store factory functions for creating store instances."""

import os
from pathlib import Path
from typing import Optional

from spendwise.store.sqlalchemy_store import SQLAlchemyStore


def create_sqlite_store(database_path: Optional[str] = None) -> SQLAlchemyStore:
    """Create a SQLite-backed store.

    Args:
        database_path: Path to SQLite database file. If None, checks SPENDWISE_DB_PATH
            environment variable, then defaults to ~/.spendwise/spendwise.db

    Returns:
        SQLAlchemyStore instance configured for SQLite
    """
    if database_path is None:
        database_path = os.environ.get("SPENDWISE_DB_PATH")

    if database_path is None:
        db_dir = Path.home() / ".spendwise"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "spendwise.db")

    return SQLAlchemyStore(f"sqlite:///{database_path}")
