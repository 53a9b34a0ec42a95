"""Tests for command history and its JSON storage."""

from __future__ import annotations

import json

import pytest

from folioshell.shell.history import CommandHistory, LocalStorage


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(tmp_path / "state" / "storage.json")


class TestLocalStorage:
    def test_missing_file_reads_none(self, storage: LocalStorage) -> None:
        assert storage.get("anything") is None

    def test_set_then_get(self, storage: LocalStorage) -> None:
        storage.set("k", "v")
        assert storage.get("k") == "v"
        assert LocalStorage(storage._path).get("k") == "v"

    def test_corrupt_file_reads_empty(self, tmp_path) -> None:
        path = tmp_path / "storage.json"
        path.write_text("{not json", encoding="utf-8")
        assert LocalStorage(path).get("k") is None


class TestCommandHistory:
    def test_navigation_sequence(self) -> None:
        history = CommandHistory()
        for line in ("a", "b", "c"):
            history.append(line)

        assert history.previous() == "c"
        assert history.previous() == "b"
        assert history.next() == "c"
        assert history.next() == ""
        assert history.cursor == 3

    def test_previous_stops_at_oldest(self) -> None:
        history = CommandHistory()
        history.append("a")
        history.append("b")
        assert history.previous() == "b"
        assert history.previous() == "a"
        assert history.previous() == "a"
        assert history.cursor == 0

    def test_empty_history_recalls_nothing(self) -> None:
        history = CommandHistory()
        assert history.previous() is None
        assert history.next() is None

    def test_duplicate_of_last_entry_not_stored(self) -> None:
        history = CommandHistory()
        history.append("ls")
        history.append("ls")
        history.append("help")
        history.append("ls")
        assert history.entries == ["ls", "help", "ls"]

    def test_append_resets_cursor(self) -> None:
        history = CommandHistory()
        history.append("a")
        history.append("b")
        history.previous()
        history.previous()
        history.append("c")
        assert history.cursor == 3
        assert history.previous() == "c"

    def test_capacity_evicts_oldest(self) -> None:
        history = CommandHistory(capacity=3)
        for line in ("1", "2", "3", "4", "5"):
            history.append(line)
        assert history.entries == ["3", "4", "5"]
        assert len(history) == 3

    def test_invalid_capacity(self) -> None:
        with pytest.raises(ValueError):
            CommandHistory(capacity=0)

    def test_persists_under_key(self, storage: LocalStorage) -> None:
        history = CommandHistory(storage, key="hist", capacity=10)
        history.append("help")
        history.append("ls")

        assert json.loads(storage.get("hist")) == ["help", "ls"]
        restored = CommandHistory(storage, key="hist", capacity=10)
        assert restored.entries == ["help", "ls"]
        assert restored.cursor == 2

    def test_restore_truncates_to_capacity(self, storage: LocalStorage) -> None:
        storage.set("hist", json.dumps(["a", "b", "c", "d"]))
        history = CommandHistory(storage, key="hist", capacity=2)
        assert history.entries == ["c", "d"]

    def test_corrupt_history_discarded(self, storage: LocalStorage) -> None:
        storage.set("hist", "not-json")
        history = CommandHistory(storage, key="hist")
        assert history.entries == []

    def test_non_list_history_discarded(self, storage: LocalStorage) -> None:
        storage.set("hist", json.dumps({"a": 1}))
        assert CommandHistory(storage, key="hist").entries == []
