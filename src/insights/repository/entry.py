# SPDX-License-Identifier: MIT

from copy import deepcopy
from typing import Iterable, Optional

import pendulum

from insights.model.entity_id import EntityId
from insights.model.entry import Entry, EntryKey, entry_key
from insights.signal import Signal


class EntryStore:
    """
    Canonical in-memory working set of metric entries.

    Holds at most one entry per (metric_type_id, date). Entries are kept in
    insertion-recency order, newest first. Every change bumps `version` and
    emits `changed`.
    """

    def __init__(self) -> None:
        self._entries: list[Entry] = []
        self._by_key: dict[EntryKey, Entry] = {}
        self.version = 0
        self.changed = Signal()

    def upsert(self, entry: Entry) -> None:
        entry = deepcopy(entry)
        index = self.__index_of(entry["id"])
        if index is not None:
            previous = self._entries[index]
            del self._by_key[entry_key(previous)]
            # a replacement may move the entry onto a key held by another one
            self.__drop_key(entry_key(entry), keep_id=entry["id"])
            index = self.__index_of(entry["id"])
            if index is None:
                raise ValueError()
            self._entries[index] = entry
        else:
            self.__drop_key(entry_key(entry))
            self._entries.insert(0, entry)
        self._by_key[entry_key(entry)] = entry
        self.__touch()

    def remove(self, id: EntityId) -> None:
        index = self.__index_of(id)
        if index is None:
            return
        removed = self._entries.pop(index)
        del self._by_key[entry_key(removed)]
        self.__touch()

    def remove_for_metric_type(self, metric_type_id: EntityId) -> list[Entry]:
        removed = [e for e in self._entries if e["metric_type_id"] == metric_type_id]
        if len(removed) == 0:
            return []
        self._entries = [
            e for e in self._entries if e["metric_type_id"] != metric_type_id
        ]
        for entry in removed:
            del self._by_key[entry_key(entry)]
        self.__touch()
        return deepcopy(removed)

    def replace_all(self, entries: Iterable[Entry]) -> None:
        self._entries = []
        self._by_key = {}
        # later duplicates lose to earlier ones so the invariant holds on load
        for entry in entries:
            key = entry_key(entry)
            if key in self._by_key:
                continue
            entry = deepcopy(entry)
            self._entries.append(entry)
            self._by_key[key] = entry
        self.__touch()

    def lookup(
        self, metric_type_id: EntityId, date: pendulum.Date
    ) -> Optional[Entry]:
        entry = self._by_key.get((metric_type_id, date))
        return deepcopy(entry) if entry is not None else None

    def get(self, id: EntityId) -> Optional[Entry]:
        index = self.__index_of(id)
        if index is None:
            return None
        return deepcopy(self._entries[index])

    def snapshot(self) -> list[Entry]:
        return deepcopy(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __index_of(self, id: EntityId) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry["id"] == id:
                return index
        return None

    def __drop_key(self, key: EntryKey, keep_id: Optional[EntityId] = None) -> None:
        existing = self._by_key.get(key)
        if existing is None or existing["id"] == keep_id:
            return
        self._entries = [e for e in self._entries if e["id"] != existing["id"]]
        del self._by_key[key]

    def __touch(self) -> None:
        self.version += 1
        self.changed.emit()
