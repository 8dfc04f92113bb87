"""One-file-per-key storage with atomic replacement."""

import logging
import os
import re
import tempfile
from pathlib import Path

from ..core.exceptions import StorageError

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileStorage:
    """Stores each key as ``<directory>/<key>.json``.

    Writes go to a temporary file in the same directory and are moved into
    place with os.replace, so a reader sees either the old or the new
    value, never a partial one.
    """

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageError(
                f"Cannot create storage directory {self.directory}: {e}",
                details={"path": str(self.directory)},
            ) from e

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise StorageError(f"Invalid storage key: {key!r}", details={"key": key})
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            raw = path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError(f"Failed to read {key}: {e}", details={"key": key}) from e
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            # Lossy decode; callers reject the result as unparseable
            logger.warning(f"{path} is not valid UTF-8: {e}")
            return raw.decode("utf-8", errors="replace")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_name: str | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(value)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise StorageError(f"Failed to write {key}: {e}", details={"key": key}) from e
        logger.debug(f"Wrote {len(value)} bytes to {path}")

    def delete(self, key: str) -> None:
        try:
            self._path(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to delete {key}: {e}", details={"key": key}) from e

    def clear(self) -> None:
        for path in self.directory.glob("*.json"):
            try:
                path.unlink()
            except OSError as e:
                raise StorageError(f"Failed to clear {path}: {e}") from e
