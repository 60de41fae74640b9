"""Exceptions raised by the persistence, import and backup layers."""
from __future__ import annotations


class InventoryError(Exception):
    """Base class for recoverable inventory failures."""


class StorageReadError(InventoryError):
    """The persisted slot exists but could not be read."""


class StorageCorruptError(StorageReadError):
    """The persisted slot does not hold serialized product data."""


class StorageWriteError(InventoryError):
    """The storage medium rejected a write."""


class ImportParseError(InventoryError):
    """An uploaded CSV file could not be turned into products."""


class BackupCreationError(InventoryError):
    """The backup envelope could not be serialized."""


__all__ = [
    "InventoryError",
    "StorageReadError",
    "StorageCorruptError",
    "StorageWriteError",
    "ImportParseError",
    "BackupCreationError",
]
