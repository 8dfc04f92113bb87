"""Key-value storage contract shared by all backends."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class KeyValueStorage(Protocol):
    """Device-local string key-value store.

    Every backend raises StorageError for I/O or database faults; a missing
    key is not an error and reads as None.
    """

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...
