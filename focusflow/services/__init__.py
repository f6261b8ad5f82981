"""Service layer for FocusFlow."""

from .exceptions import FocusFlowError, StorageError, StorageReadError, StorageWriteError
from .kv_store import FileStore, KeyValueStore, MemoryStore

__all__ = [
    'FocusFlowError',
    'StorageError',
    'StorageReadError',
    'StorageWriteError',
    'KeyValueStore',
    'MemoryStore',
    'FileStore',
]
