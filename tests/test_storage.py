"""
Unit tests: persisted session storage
"""
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from housing_console.infra.exceptions import StorageError
from housing_console.ports.storage import (
    TOKEN_KEY,
    USER_KEY,
    FileSessionStorage,
    MemorySessionStorage,
    browser_session_storage,
    is_browser_id,
    new_browser_id,
)


class TestFileSessionStorage:

    @pytest.fixture
    def storage(self, tmp_path):
        return FileSessionStorage(tmp_path / "session")

    def test_missing_key(self, storage):
        assert storage.get_item(USER_KEY) is None

    def test_set_get_remove(self, storage):
        storage.set_item(TOKEN_KEY, "abc")
        assert storage.get_item(TOKEN_KEY) == "abc"
        storage.remove_item(TOKEN_KEY)
        assert storage.get_item(TOKEN_KEY) is None
        storage.remove_item(TOKEN_KEY)  # already gone

    def test_survives_new_instance(self, tmp_path):
        FileSessionStorage(tmp_path).set_item(USER_KEY, '{"id": 1}')
        assert FileSessionStorage(tmp_path).get_item(USER_KEY) == '{"id": 1}'

    def test_overwrite_leaves_no_temp_files(self, storage):
        storage.set_item(USER_KEY, "one")
        storage.set_item(USER_KEY, "two")
        assert storage.get_item(USER_KEY) == "two"
        assert sorted(p.name for p in storage.base_dir.iterdir()) == [USER_KEY]

    @pytest.mark.parametrize("key", ["../escape", "a/b", ""])
    def test_rejects_unsafe_keys(self, storage, key):
        with pytest.raises(StorageError):
            storage.get_item(key)

    def test_unwritable_directory(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        storage = FileSessionStorage(blocker / "session")
        with pytest.raises(StorageError) as exc_info:
            storage.set_item(TOKEN_KEY, "abc")
        assert exc_info.value.details["operation"] == "write"


class TestMemorySessionStorage:

    def test_basic(self):
        storage = MemorySessionStorage({USER_KEY: "u"})
        storage.set_item(TOKEN_KEY, "t")
        assert storage.keys() == [TOKEN_KEY, USER_KEY]
        storage.remove_item(USER_KEY)
        assert storage.get_item(USER_KEY) is None


class TestBrowserScope:

    def test_new_ids_are_valid_and_distinct(self):
        first, second = new_browser_id(), new_browser_id()
        assert is_browser_id(first)
        assert first != second

    @pytest.mark.parametrize("value", [None, "", "short", "../" + "a" * 40, "a" * 31, "a" * 65])
    def test_rejects_bad_ids(self, value):
        assert not is_browser_id(value)

    def test_storage_lives_under_browser_directory(self, tmp_path):
        browser_id = new_browser_id()
        storage = browser_session_storage(tmp_path, browser_id)
        storage.set_item(TOKEN_KEY, "t")
        assert (tmp_path / browser_id / TOKEN_KEY).read_text(encoding="utf-8") == "t"

    def test_invalid_id_raises(self, tmp_path):
        with pytest.raises(StorageError):
            browser_session_storage(tmp_path, "../other")
