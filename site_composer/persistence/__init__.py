"""Persistance : debounce, autosave, store distant, cache local."""
from .debouncer import Debouncer
from .local_cache import (
    LocalCache, MemoryLocalCache, FileLocalCache,
    cache_key, read_cached_record, write_cached_record,
)
from .store import PersistenceStore, SqlPersistenceStore, record_from_row, sync_pending_records
from .autosave import AutosaveController

__all__ = [
    "Debouncer",
    "LocalCache", "MemoryLocalCache", "FileLocalCache",
    "cache_key", "read_cached_record", "write_cached_record",
    "PersistenceStore", "SqlPersistenceStore", "record_from_row", "sync_pending_records",
    "AutosaveController",
]
