"""Tests for the key-value storage backends."""

from pathlib import Path
from unittest.mock import patch

import pytest

from sanad.core.exceptions import StorageError
from sanad.settings import StoreSettings
from sanad.storage import (
    FileStorage,
    KeyValueStorage,
    MemoryStorage,
    SQLiteStorage,
    create_storage,
)


@pytest.fixture(params=["memory", "file", "sqlite"])
def storage(request, tmp_path: Path) -> KeyValueStorage:
    if request.param == "memory":
        return MemoryStorage()
    if request.param == "file":
        return FileStorage(tmp_path / "kv")
    return SQLiteStorage(tmp_path / "kv.db")


@pytest.mark.unit
class TestContract:
    def test_satisfies_protocol(self, storage):
        assert isinstance(storage, KeyValueStorage)

    def test_missing_key_is_none(self, storage):
        assert storage.get("rides") is None

    def test_set_then_get(self, storage):
        storage.set("rides", '{"items": []}')
        assert storage.get("rides") == '{"items": []}'

    def test_overwrite(self, storage):
        storage.set("rides", "first")
        storage.set("rides", "second")
        assert storage.get("rides") == "second"

    def test_unicode_values(self, storage):
        storage.set("appointments", '{"title": "موعد المستشفى"}')
        assert storage.get("appointments") == '{"title": "موعد المستشفى"}'

    def test_delete_is_idempotent(self, storage):
        storage.set("auth_token", "abc")
        storage.delete("auth_token")
        storage.delete("auth_token")
        assert storage.get("auth_token") is None

    def test_clear(self, storage):
        storage.set("rides", "a")
        storage.set("appointments", "b")

        storage.clear()

        assert storage.get("rides") is None
        assert storage.get("appointments") is None


@pytest.mark.unit
class TestFileStorage:
    def test_one_file_per_key(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("rides", "[]")

        assert (tmp_path / "rides.json").read_text(encoding="utf-8") == "[]"

    def test_no_temp_files_left_behind(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("rides", "[]")
        storage.set("rides", "[1]")

        assert [p.name for p in tmp_path.iterdir()] == ["rides.json"]

    @pytest.mark.parametrize("key", ["../escape", "a/b", "", "rides json"])
    def test_unsafe_keys_rejected(self, tmp_path, key):
        with pytest.raises(StorageError, match="Invalid storage key"):
            FileStorage(tmp_path).set(key, "x")

    def test_failed_write_keeps_previous_value(self, tmp_path):
        storage = FileStorage(tmp_path)
        storage.set("rides", "old")

        with patch("sanad.storage.file.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(StorageError, match="Failed to write rides"):
                storage.set("rides", "new")

        assert storage.get("rides") == "old"
        assert [p.name for p in tmp_path.iterdir()] == ["rides.json"]

    def test_invalid_utf8_returned_lossily(self, tmp_path, caplog):
        storage = FileStorage(tmp_path)
        (tmp_path / "rides.json").write_bytes(b"\xff\xfe garbage")

        assert storage.get("rides") == "\ufffd\ufffd garbage"
        assert "not valid UTF-8" in caplog.text

    def test_unreadable_file_raises(self, tmp_path):
        storage = FileStorage(tmp_path)
        (tmp_path / "rides.json").mkdir()

        with pytest.raises(StorageError, match="Failed to read rides"):
            storage.get("rides")

    def test_vanished_directory_raises_storage_error(self, tmp_path):
        storage = FileStorage(tmp_path / "kv")
        (tmp_path / "kv").rmdir()

        with pytest.raises(StorageError, match="Failed to write rides"):
            storage.set("rides", "[]")


@pytest.mark.unit
class TestSQLiteStorage:
    def test_schema_version_stamped(self, tmp_path):
        storage = SQLiteStorage(tmp_path / "sanad.db")
        assert storage.schema_version() == "1.0.0"

    def test_values_survive_reopen(self, tmp_path):
        SQLiteStorage(tmp_path / "sanad.db").set("rides", "[]")

        assert SQLiteStorage(tmp_path / "sanad.db").get("rides") == "[]"

    def test_creates_parent_directory(self, tmp_path):
        SQLiteStorage(tmp_path / "nested" / "dir" / "sanad.db")
        assert (tmp_path / "nested" / "dir" / "sanad.db").exists()


@pytest.mark.unit
class TestCreateStorage:
    def test_memory(self):
        assert isinstance(create_storage(StoreSettings(backend="memory")), MemoryStorage)

    def test_file(self, tmp_path):
        storage = create_storage(StoreSettings(backend="file", path=str(tmp_path)))
        assert isinstance(storage, FileStorage)
        assert storage.directory == tmp_path

    def test_sqlite_file_path_used_as_is(self, tmp_path):
        storage = create_storage(StoreSettings(backend="sqlite", path=str(tmp_path / "app.db")))
        assert isinstance(storage, SQLiteStorage)
        assert storage.db_path == str(tmp_path / "app.db")
