"""Device-local key-value storage backends."""

from pathlib import Path

from ..settings import StoreSettings
from .base import KeyValueStorage
from .file import FileStorage
from .memory import MemoryStorage
from .sqlite import SQLiteStorage


def create_storage(settings: StoreSettings) -> KeyValueStorage:
    """Build the backend selected by ``settings.backend``."""
    if settings.backend == "memory":
        return MemoryStorage()
    if settings.backend == "sqlite":
        path = Path(settings.path)
        if path.suffix != ".db":
            path = path / "sanad.db"
        return SQLiteStorage(path)
    return FileStorage(settings.path)


__all__ = [
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "SQLiteStorage",
    "create_storage",
]
