# SPDX-License-Identifier: MIT

"""Unit tests for the in-memory entry store."""

import pendulum

from insights.repository.entry import EntryStore
from tests.conftest import make_entry, make_metric_type

COFFEE = make_metric_type("coffee", "Coffee")
WATER = make_metric_type("water", "Water")
DAY = pendulum.date(2024, 1, 3)


class TestUpsert:
    def test_inserts_newest_first(self):
        store = EntryStore()
        store.upsert(make_entry(COFFEE, DAY, 1))
        store.upsert(make_entry(WATER, DAY, 2))

        assert [e["metric_type_id"] for e in store.snapshot()] == ["water", "coffee"]

    def test_same_id_replaces_in_place(self):
        store = EntryStore()
        store.upsert(make_entry(COFFEE, DAY, 1, id="a"))
        store.upsert(make_entry(WATER, DAY, 1, id="b"))
        store.upsert(make_entry(COFFEE, DAY, 5, id="a"))

        assert [e["id"] for e in store.snapshot()] == ["b", "a"]
        entry = store.lookup("coffee", DAY)
        assert entry is not None
        assert entry["value"] == 5

    def test_new_id_on_held_key_evicts_previous_holder(self):
        store = EntryStore()
        store.upsert(make_entry(COFFEE, DAY, 1, id="temp-1"))
        store.upsert(make_entry(COFFEE, DAY, 1, id="server-1"))

        assert len(store) == 1
        assert store.get("temp-1") is None
        assert store.get("server-1") is not None

    def test_moving_entry_onto_held_key_keeps_one_per_key(self):
        store = EntryStore()
        store.upsert(make_entry(COFFEE, DAY, 1, id="a"))
        store.upsert(make_entry(COFFEE, DAY.add(days=1), 2, id="b"))
        store.upsert(make_entry(COFFEE, DAY, 3, id="b"))

        assert len(store) == 1
        entry = store.lookup("coffee", DAY)
        assert entry is not None
        assert entry["id"] == "b"
        assert store.lookup("coffee", DAY.add(days=1)) is None

    def test_returned_records_are_copies(self):
        store = EntryStore()
        store.upsert(make_entry(COFFEE, DAY, 1, id="a"))

        entry = store.get("a")
        assert entry is not None
        entry["value"] = 99

        stored = store.get("a")
        assert stored is not None
        assert stored["value"] == 1


class TestRemove:
    def test_remove_unknown_id_is_silent(self):
        store = EntryStore()
        version = store.version
        store.remove("missing")

        assert store.version == version

    def test_remove_frees_key(self):
        store = EntryStore()
        store.upsert(make_entry(COFFEE, DAY, 1, id="a"))
        store.remove("a")

        assert store.lookup("coffee", DAY) is None
        assert len(store) == 0

    def test_remove_for_metric_type_returns_removed(self):
        store = EntryStore()
        store.upsert(make_entry(COFFEE, DAY, 1))
        store.upsert(make_entry(COFFEE, DAY.add(days=1), 2))
        store.upsert(make_entry(WATER, DAY, 3))

        removed = store.remove_for_metric_type("coffee")

        assert len(removed) == 2
        assert [e["metric_type_id"] for e in store.snapshot()] == ["water"]


class TestReplaceAll:
    def test_first_entry_per_key_wins(self):
        store = EntryStore()
        store.replace_all(
            [
                make_entry(COFFEE, DAY, 1, id="first"),
                make_entry(COFFEE, DAY, 2, id="second"),
            ]
        )

        assert len(store) == 1
        entry = store.lookup("coffee", DAY)
        assert entry is not None
        assert entry["id"] == "first"


class TestChangeNotification:
    def test_every_change_bumps_version_and_notifies(self):
        store = EntryStore()
        notified = []
        unsubscribe = store.changed.subscribe(lambda: notified.append(store.version))

        store.upsert(make_entry(COFFEE, DAY, 1, id="a"))
        store.remove("a")
        unsubscribe()
        store.upsert(make_entry(COFFEE, DAY, 1, id="a"))

        assert notified == [1, 2]
        assert store.version == 3
