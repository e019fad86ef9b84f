import json
import os
import stat

import pytest

from pkceflow.storage import backends
from pkceflow.storage.backends import JSONFileStorage, MemoryStorage


class TestMemoryStorage:
    def test_set_then_get(self) -> None:
        # Arrange
        storage = MemoryStorage("key")

        # Act
        storage.set_storage({"codeVerifier": "abc"})

        # Assert
        assert storage.get_storage() == {"codeVerifier": "abc"}

    def test_empty_storage_returns_empty_dict(self) -> None:
        assert MemoryStorage("key").get_storage() == {}

    def test_returned_record_is_a_copy(self) -> None:
        # Arrange
        storage = MemoryStorage("key")
        storage.set_storage({"codeVerifier": "abc"})

        # Act
        storage.get_storage()["codeVerifier"] = "changed"

        # Assert
        assert storage.get_storage() == {"codeVerifier": "abc"}

    def test_shared_store_is_visible_across_instances(self) -> None:
        # Arrange
        shared: dict = {}
        first = MemoryStorage("key", shared)
        second = MemoryStorage("key", shared)

        # Act
        first.set_storage({"codeVerifier": "abc"})

        # Assert
        assert second.get_storage() == {"codeVerifier": "abc"}

    def test_clear_is_idempotent(self) -> None:
        # Arrange
        storage = MemoryStorage("key")
        storage.set_storage({"codeVerifier": "abc"})

        # Act
        storage.clear_storage()
        storage.clear_storage()

        # Assert
        assert storage.get_storage() == {}


class TestJSONFileStorage:
    def test_record_survives_new_instance(self, tmp_path) -> None:
        # Arrange
        path = tmp_path / "storage.json"
        JSONFileStorage(path, "key").set_storage({"codeVerifier": "abc"})

        # Act
        record = JSONFileStorage(path, "key").get_storage()

        # Assert
        assert record == {"codeVerifier": "abc"}

    def test_keys_are_independent(self, tmp_path) -> None:
        # Arrange
        path = tmp_path / "storage.json"
        JSONFileStorage(path, "other").set_storage({"value": 1})
        storage = JSONFileStorage(path, "key")
        storage.set_storage({"codeVerifier": "abc"})

        # Act
        storage.clear_storage()

        # Assert
        assert json.loads(path.read_text()) == {"other": {"value": 1}}

    def test_missing_file_reads_as_empty(self, tmp_path) -> None:
        # Arrange
        storage = JSONFileStorage(tmp_path / "nested" / "storage.json", "key")

        # Act & Assert
        assert storage.get_storage() == {}
        storage.clear_storage()
        assert not storage.path.exists()

    def test_corrupt_file_reads_as_empty(self, tmp_path) -> None:
        # Arrange
        path = tmp_path / "storage.json"
        path.write_text("{not json")

        # Act & Assert
        assert JSONFileStorage(path, "key").get_storage() == {}

    def test_file_is_owner_only(self, tmp_path) -> None:
        # Arrange
        path = tmp_path / "storage.json"

        # Act
        JSONFileStorage(path, "key").set_storage({"codeVerifier": "abc"})

        # Assert
        if os.name == "posix":
            assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_temp_file_is_owner_only_before_replace(
        self, tmp_path, monkeypatch
    ) -> None:
        # Arrange
        if os.name != "posix":
            pytest.skip("POSIX permissions only")
        path = tmp_path / "storage.json"
        tmp = tmp_path / "storage.json.tmp"
        tmp.write_text("{}")
        tmp.chmod(0o644)

        def failing_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(backends.os, "replace", failing_replace)
        old_umask = os.umask(0)

        # Act
        try:
            with pytest.raises(OSError, match="disk full"):
                JSONFileStorage(path, "key").set_storage({"codeVerifier": "abc"})
        finally:
            os.umask(old_umask)

        # Assert
        assert stat.S_IMODE(tmp.stat().st_mode) == 0o600
        assert not path.exists()
