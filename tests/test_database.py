"""Tests for sqlite persistence of the global choice lists."""

import sqlite3
from datetime import datetime

from database import ChoiceListStore, get_db, init_db
from models import ChoiceListEntry
from registry import ChoiceRegistry


class TestChoiceListStore:

    def test_load_never_saved_returns_none(self, store):
        assert store.load() is None
        assert store.saved_at() is None

    def test_saved_empty_is_not_none(self, store):
        assert store.save([]) is True
        assert store.load() == []
        assert store.saved_at() is not None

    def test_round_trip_preserves_order(self, store):
        entries = [
            ChoiceListEntry(name="zeta", choices=["1", "2"]),
            ChoiceListEntry(name="alpha", choices=["发布", ""]),
            ChoiceListEntry(name="mid", choices=[]),
        ]
        assert store.save(entries)
        assert store.load() == entries

    def test_save_replaces_previous_rows(self, store):
        store.save([ChoiceListEntry(name="a"), ChoiceListEntry(name="b")])
        store.save([ChoiceListEntry(name="c")])
        assert [e.name for e in store.load()] == ["c"]

    def test_saved_at_is_timezone_aware(self, store):
        store.save([])
        assert datetime.fromisoformat(store.saved_at()).tzinfo is not None

    def test_save_failure_returns_false(self, tmp_path):
        # no tables created
        store = ChoiceListStore(str(tmp_path / "empty.db"))
        assert store.save([ChoiceListEntry(name="a")]) is False

    def test_init_db_is_idempotent(self, db_path):
        init_db(db_path)
        with get_db(db_path) as conn:
            names = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        assert {"choice_list_entries", "choice_list_meta", "job_choice_parameters"} <= names

    def test_get_db_rolls_back_on_error(self, db_path):
        try:
            with get_db(db_path) as conn:
                conn.execute("INSERT INTO choice_list_meta (key, value) VALUES ('k', 'v')")
                raise sqlite3.OperationalError("boom")
        except sqlite3.OperationalError:
            pass
        with get_db(db_path) as conn:
            assert conn.execute("SELECT COUNT(*) FROM choice_list_meta").fetchone()[0] == 0


class TestRegistryRestore:

    def test_restart_restores_registry(self, store):
        ChoiceRegistry(store).load().replace_all([
            ChoiceListEntry(name="env", choices=["dev", "prod"]),
            ChoiceListEntry(name="", choices=["x"]),
            ChoiceListEntry(name="region", choices=["cn", "us"]),
        ])
        restored = ChoiceRegistry(store).load()
        assert restored.list_names() == ["env", "region"]
        assert restored.get_choices("region") == ["cn", "us"]
