"""
Tests for the history store and its storage backends.

Run with: pytest tests/test_history.py -v
"""

import json

import pytest

from conftest import FailingStorage, make_record
from uztrans_llms.config import STORAGE_KEY
from uztrans_llms import history as history_module
from uztrans_llms.history import HistoryStore
from uztrans_llms.models import TargetLanguage, Tone, TranslationRecord
from uztrans_llms.storage import JsonFileStorage, MemoryStorage


class TestAppend:
    def test_newest_first(self, history):
        history.append(make_record(1))
        log = history.append(make_record(2))

        assert [r.original for r in log] == ["matn 2", "matn 1"]

    def test_evicts_oldest_at_capacity(self, storage):
        store = HistoryStore(storage, max_entries=3)
        for n in range(3):
            store.append(make_record(n))
        oldest = store.records[-1]

        new = make_record(99)
        log = store.append(new)

        assert len(log) == 3
        assert log[0] == new
        assert oldest not in log
        assert [r.original for r in log] == ["matn 99", "matn 2", "matn 1"]

    def test_persists_after_every_append(self, history, storage):
        record = make_record(1)
        history.append(record)

        payload = json.loads(storage.get(STORAGE_KEY))
        assert payload["version"] == 1
        assert payload["records"] == [record.to_dict()]

    def test_persisted_snapshot_is_capped(self, storage):
        store = HistoryStore(storage, max_entries=2)
        for n in range(5):
            store.append(make_record(n))

        payload = json.loads(storage.get(STORAGE_KEY))
        assert [r["original"] for r in payload["records"]] == ["matn 4", "matn 3"]

    def test_failed_write_leaves_log_unchanged(self):
        store = HistoryStore(FailingStorage())

        with pytest.raises(OSError):
            store.append(make_record(1))

        assert store.records == ()
        assert store.storage.get(STORAGE_KEY) is None

    def test_invalid_capacity(self, storage):
        with pytest.raises(ValueError):
            HistoryStore(storage, max_entries=0)


class TestLoad:
    def test_missing_data_gives_empty_log(self, storage):
        assert HistoryStore(storage).load() == ()

    def test_round_trip_across_restart(self, storage):
        record = TranslationRecord(
            original="Salom",
            translated="Привет",
            target=TargetLanguage.RUSSIAN,
            tone=Tone.FORMAL,
        )
        HistoryStore(storage).append(record)

        # A new process only shares the storage
        restored = HistoryStore(MemoryStorage({STORAGE_KEY: storage.get(STORAGE_KEY)})).load()

        assert restored[0] == record

    @pytest.mark.parametrize("raw", [
        "{not json",
        "42",
        '"just a string"',
        '{"version": 99, "records": []}',
        '{"version": 1, "records": {"a": 1}}',
        '{"version": 1, "records": [{"id": "x"}]}',
        '[{"id": "x", "original": 1, "translated": "t", "to": "RU", "timestamp": 1}]',
        '[{"id": "x", "original": "o", "translated": "t", "to": "FR", "timestamp": 1}]',
        '[{"id": "x", "original": "o", "translated": "t", "to": 5, "timestamp": 1}]',
        '[{"id": "x", "original": "o", "translated": "t", "to": "RU", "tone": 3, "timestamp": 1}]',
    ])
    def test_corrupt_payload_resets_to_empty(self, raw, caplog):
        store = HistoryStore(MemoryStorage({STORAGE_KEY: raw}))

        assert store.load() == ()
        assert len(store) == 0
        assert "corrupt history" in caplog.text

    def test_legacy_array_format(self):
        legacy = [{
            "id": "abc",
            "from": "UZ",
            "to": "EN",
            "original": "Rahmat",
            "translated": "Thank you",
            "tone": "formal",
            "timestamp": 1700000000000,
        }]
        store = HistoryStore(MemoryStorage({STORAGE_KEY: json.dumps(legacy)}))

        log = store.load()

        assert len(log) == 1
        assert log[0].target is TargetLanguage.ENGLISH
        assert log[0].tone is Tone.FORMAL
        assert log[0].source == "UZ"

    def test_load_keeps_newest_when_over_capacity(self, storage):
        HistoryStore(storage, max_entries=10).append(make_record(0))
        big = HistoryStore(storage, max_entries=10)
        big.load()
        for n in range(1, 10):
            big.append(make_record(n))

        small = HistoryStore(storage, max_entries=3)
        log = small.load()

        assert [r.original for r in log] == ["matn 9", "matn 8", "matn 7"]


class TestClear:
    def test_clear_removes_persisted_entry(self, history, storage):
        history.append(make_record(1))
        history.clear()

        assert history.records == ()
        assert STORAGE_KEY not in storage

    def test_clear_is_idempotent(self, history, storage):
        history.clear()
        history.clear()
        assert history.records == ()


class TestStats:
    def test_empty(self, history):
        stats = history.stats()
        assert stats.total == 0
        assert stats.last_timestamp is None

    def test_counts(self, history):
        history.append(make_record(1, TargetLanguage.RUSSIAN, Tone.NATURAL))
        history.append(make_record(2, TargetLanguage.ENGLISH, Tone.SLANG))
        history.append(make_record(3, TargetLanguage.RUSSIAN, Tone.SLANG))

        stats = history.stats()

        assert stats.total == 3
        assert stats.by_target == {"RU": 2, "EN": 1}
        assert stats.by_tone == {"natural": 1, "slang": 2}
        assert stats.characters == sum(len(f"matn {n}") for n in (1, 2, 3))
        assert stats.last_timestamp == make_record(3).timestamp


class TestJsonFileStorage:
    def test_set_get_remove(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "storage.json")

        assert storage.get("k") is None
        storage.set("k", "v")
        assert storage.get("k") == "v"
        storage.remove("k")
        assert storage.get("k") is None
        storage.remove("k")

    def test_values_survive_new_instance(self, tmp_path):
        path = tmp_path / "nested" / "storage.json"
        JsonFileStorage(path).set("k", "значение")

        assert JsonFileStorage(path).get("k") == "значение"
        assert not list(path.parent.glob(".storage-*.tmp"))

    def test_corrupt_file_reads_as_empty(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("{{{", encoding="utf-8")
        storage = JsonFileStorage(path)

        assert storage.get("k") is None
        storage.set("k", "v")
        assert storage.get("k") == "v"

    def test_history_on_disk(self, tmp_path):
        path = tmp_path / "storage.json"
        record = make_record(7)
        HistoryStore(JsonFileStorage(path)).append(record)

        assert HistoryStore(JsonFileStorage(path)).load() == (record,)


def test_module_has_docstring():
    assert history_module.__doc__.startswith("Persisted, capacity-bounded history")
