"""
Storage Services Package

Provides the abstract record store interface and an in-memory
implementation. Designed so other backends can be swapped in.
"""

from household_ledger.services.storage.interface import (
    DuplicateError,
    NotFoundError,
    RecordStoreInterface,
    StorageError,
)
from household_ledger.services.storage.memory import InMemoryRecordStore

__all__ = [
    # Interfaces
    "RecordStoreInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryRecordStore",
]
