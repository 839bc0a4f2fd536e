"""Persistence for entity collections."""
from league.store.base import STORAGE_KEYS, Kind, MemoryStore, Store
from league.store.sql import SqlStore

__all__ = ["STORAGE_KEYS", "Kind", "MemoryStore", "SqlStore", "Store"]
