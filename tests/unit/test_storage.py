"""
Unit tests for key-value stores.
"""
import json
from pathlib import Path

import pytest
from sweeper import JsonFileStore, MemoryStore


# ============================================================================
# Memory Store Tests
# ============================================================================

class TestMemoryStore:
    """Test the dictionary-backed store."""

    def test_missing_key_is_none(self, store: MemoryStore) -> None:
        assert store.get("nothing") is None

    def test_set_then_get(self, store: MemoryStore) -> None:
        store.set("k", {"a": 1})
        assert store.get("k") == {"a": 1}
        assert "k" in store

    def test_set_replaces(self, store: MemoryStore) -> None:
        store.set("k", {"a": 1})
        store.set("k", {"a": 2})
        assert store.get("k") == {"a": 2}

    def test_remove(self, store: MemoryStore) -> None:
        store.set("k", {"a": 1})
        store.remove("k")
        assert store.get("k") is None

    def test_remove_missing_key(self, store: MemoryStore) -> None:
        store.remove("nothing")
        assert "nothing" not in store


# ============================================================================
# JSON File Store Tests
# ============================================================================

class TestJsonFileStore:
    """Test the one-file-per-key store."""

    def test_set_then_get(self, tmp_path: Path) -> None:
        store = JsonFileStore(tmp_path)
        store.set("game", {"w": 9, "cellBits": [[1, 2]]})
        assert store.get("game") == {"w": 9, "cellBits": [[1, 2]]}

    def test_writes_json_file(self, tmp_path: Path) -> None:
        JsonFileStore(tmp_path).set("game", {"w": 9})
        assert json.loads((tmp_path / "game.json").read_text()) == {"w": 9}

    def test_creates_directory(self, tmp_path: Path) -> None:
        store = JsonFileStore(tmp_path / "nested" / "dir")
        store.set("k", {"a": 1})
        assert (tmp_path / "nested" / "dir" / "k.json").exists()

    def test_missing_key_is_none(self, tmp_path: Path) -> None:
        assert JsonFileStore(tmp_path / "absent").get("k") is None

    def test_remove(self, tmp_path: Path) -> None:
        store = JsonFileStore(tmp_path)
        store.set("k", {"a": 1})
        store.remove("k")
        assert store.get("k") is None
        assert not (tmp_path / "k.json").exists()

    def test_remove_missing_key(self, tmp_path: Path) -> None:
        JsonFileStore(tmp_path).remove("k")

    def test_corrupt_file_reads_as_none(self, tmp_path: Path) -> None:
        (tmp_path / "k.json").write_text("{oops")
        assert JsonFileStore(tmp_path).get("k") is None

    def test_non_object_reads_as_none(self, tmp_path: Path) -> None:
        (tmp_path / "k.json").write_text("[1, 2]")
        assert JsonFileStore(tmp_path).get("k") is None

    @pytest.mark.parametrize("key", ["", "../escape", "a/b", "sp ace"])
    def test_invalid_key_raises(self, tmp_path: Path, key: str) -> None:
        with pytest.raises(ValueError, match="Invalid store key"):
            JsonFileStore(tmp_path).get(key)
