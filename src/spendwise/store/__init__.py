"""Persistence layer for spendwise application."""

from spendwise.store.base import Store
from spendwise.store.factories import create_sqlite_store
from spendwise.store.memory import MemoryStore

__all__ = ["Store", "create_sqlite_store", "MemoryStore"]
