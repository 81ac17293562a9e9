# SPDX-License-Identifier: MIT

import asyncio
import logging
from typing import Awaitable, Optional

import pendulum

from insights.model.entity_id import EntityId, generate_temporary_id, is_temporary_id
from insights.model.entry import Entry, EntryKey, entry_key
from insights.model.errors import ProgrammerError
from insights.model.metric_type import MetricType
from insights.model.result import Failure, MutationOutcome, MutationStatus, Result
from insights.remote.protocol import RemoteService
from insights.repository.entry import EntryStore
from insights.repository.metric_type import MetricTypeRegistry
from insights.service.message import MessageChannel

logger = logging.getLogger(__name__)


class MutationCoordinator:
    """
    Optimistic create/update/delete of entries against a remote store.

    Every public operation runs the same protocol:

    1. work out the local mutation from the current store contents
    2. apply it to the store before returning
    3. issue exactly one remote request
    4. on success, replace the optimistic record with the server record
    5. on failure, restore the pre-mutation snapshot and post an error

    Operations must be called from a running event loop. They return a future
    resolving to a MutationOutcome once the remote call has settled.

    While a key (metric_type_id, date) has a mutation in flight, or holds a
    temporary entry, further requests for that key are dropped, not queued.
    A request that resolves late still applies its result; nothing cancels it.
    """

    def __init__(
        self,
        store: EntryStore,
        registry: MetricTypeRegistry,
        remote: RemoteService,
        messages: MessageChannel,
    ) -> None:
        self._store = store
        self._registry = registry
        self._remote = remote
        self._messages = messages
        self._pending: set[EntryKey] = set()
        self._in_flight: set[asyncio.Task[MutationOutcome]] = set()

    # ─────────────────────────────────────────────────────────────
    # Public operations
    # ─────────────────────────────────────────────────────────────

    def log_value(
        self, metric_type_id: EntityId, date: pendulum.Date, value: int
    ) -> asyncio.Future[MutationOutcome]:
        """
        Set the value logged for a metric type on a day.

        Creates the entry when missing, updates it when present and deletes
        it when the value drops to zero. Zero for a missing entry is a no-op.
        """
        metric_type = self.__require_metric_type(metric_type_id)
        key = (metric_type_id, date)
        if self.__is_busy(key):
            return self.__dropped(key)

        if metric_type["kind"] == "Boolean" and value > 0:
            value = 1

        existing = self._store.lookup(metric_type_id, date)
        if existing is None:
            if value <= 0:
                return self.__settled("noop")
            return self.__create(metric_type, date, value)
        if value <= 0:
            return self.__delete(existing)
        if existing["value"] == value:
            return self.__settled("noop", existing)
        return self.__update(existing, value)

    def update_value(
        self, entry_id: EntityId, new_value: int
    ) -> asyncio.Future[MutationOutcome]:
        entry = self._store.get(entry_id)
        if entry is None:
            raise ProgrammerError(f"update_value: unknown entry id {entry_id}")
        metric_type = self.__require_metric_type(entry["metric_type_id"])
        key = entry_key(entry)
        if self.__is_busy(key):
            return self.__dropped(key)

        if metric_type["kind"] == "Boolean" and new_value > 0:
            new_value = 1
        if new_value <= 0:
            return self.__delete(entry)
        if entry["value"] == new_value:
            return self.__settled("noop", entry)
        return self.__update(entry, new_value)

    def delete_entry(self, entry_id: EntityId) -> asyncio.Future[MutationOutcome]:
        entry = self._store.get(entry_id)
        if entry is None:
            return self.__settled("noop")
        key = entry_key(entry)
        if self.__is_busy(key):
            return self.__dropped(key)
        return self.__delete(entry)

    def toggle_boolean(
        self, metric_type_id: EntityId, date: pendulum.Date
    ) -> asyncio.Future[MutationOutcome]:
        metric_type = self.__require_metric_type(metric_type_id)
        if metric_type["kind"] != "Boolean":
            raise ProgrammerError(
                f"toggle_boolean: metric type {metric_type['name']} is {metric_type['kind']}"
            )
        key = (metric_type_id, date)
        if self.__is_busy(key):
            return self.__dropped(key)

        existing = self._store.lookup(metric_type_id, date)
        if existing is None:
            return self.__create(metric_type, date, 1)
        return self.__delete(existing)

    def is_pending(self, metric_type_id: EntityId, date: pendulum.Date) -> bool:
        return self.__is_busy((metric_type_id, date))

    async def drain(self) -> None:
        """Wait until every in-flight remote request has settled."""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight))

    # ─────────────────────────────────────────────────────────────
    # Optimistic steps
    # ─────────────────────────────────────────────────────────────

    def __create(
        self, metric_type: MetricType, date: pendulum.Date, value: int
    ) -> asyncio.Future[MutationOutcome]:
        optimistic: Entry = {
            "id": generate_temporary_id(),
            "metric_type_id": metric_type["id"],
            "metric_type_name": metric_type["name"],
            "date": date,
            "value": value,
        }
        self._store.upsert(optimistic)
        request = self._remote.create_entry(metric_type["id"], date, value)
        return self.__issue(None, optimistic, request)

    def __update(self, snapshot: Entry, value: int) -> asyncio.Future[MutationOutcome]:
        optimistic: Entry = {**snapshot, "value": value}
        self._store.upsert(optimistic)
        request = self._remote.update_entry(snapshot["id"], value)
        return self.__issue(snapshot, optimistic, request)

    def __delete(self, snapshot: Entry) -> asyncio.Future[MutationOutcome]:
        self._store.remove(snapshot["id"])
        request = self._remote.delete_entry(snapshot["id"])
        return self.__issue(snapshot, None, request)

    def __issue(
        self,
        snapshot: Optional[Entry],
        optimistic: Optional[Entry],
        request: Awaitable[Result[Entry] | Result[None]],
    ) -> asyncio.Future[MutationOutcome]:
        source = optimistic if optimistic is not None else snapshot
        if source is None:
            raise ValueError()
        key = entry_key(source)
        self._pending.add(key)
        task = asyncio.ensure_future(self.__settle(key, snapshot, optimistic, request))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def __settle(
        self,
        key: EntryKey,
        snapshot: Optional[Entry],
        optimistic: Optional[Entry],
        request: Awaitable[Result[Entry] | Result[None]],
    ) -> MutationOutcome:
        try:
            result = await request
        finally:
            self._pending.discard(key)

        if isinstance(result, Failure):
            self.rollback(snapshot, optimistic)
            logger.warning("rolled back mutation for %s: %s", key, result.error)
            self._messages.error(result.error)
            return {"status": "rolled_back", "entry": snapshot, "error": result.error}

        confirmed = result.value
        if confirmed is None:
            return {"status": "confirmed", "entry": None, "error": None}

        if optimistic is not None and optimistic["id"] != confirmed["id"]:
            self._store.remove(optimistic["id"])
        self._store.upsert(confirmed)
        logger.debug("confirmed entry %s for %s", confirmed["id"], key)
        return {"status": "confirmed", "entry": confirmed, "error": None}

    def rollback(self, snapshot: Optional[Entry], optimistic: Optional[Entry]) -> None:
        """
        Restore the pre-mutation state of a key.

        snapshot is None for a create, in which case the optimistic record is
        removed; otherwise the snapshot is written back, which re-inserts a
        deleted entry and reverts an updated one.
        """
        if snapshot is None:
            if optimistic is not None:
                self._store.remove(optimistic["id"])
            return
        self._store.upsert(snapshot)

    # ─────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────

    def __is_busy(self, key: EntryKey) -> bool:
        if key in self._pending:
            return True
        existing = self._store.lookup(*key)
        return existing is not None and is_temporary_id(existing["id"])

    def __require_metric_type(self, metric_type_id: EntityId) -> MetricType:
        metric_type = self._registry.get(metric_type_id)
        if metric_type is None:
            raise ProgrammerError(f"unknown metric type id {metric_type_id}")
        return metric_type

    def __dropped(self, key: EntryKey) -> asyncio.Future[MutationOutcome]:
        logger.info("dropped mutation for %s: another one is in flight", key)
        return self.__settled("dropped", self._store.lookup(*key))

    def __settled(
        self, status: MutationStatus, entry: Optional[Entry] = None
    ) -> asyncio.Future[MutationOutcome]:
        future: asyncio.Future[MutationOutcome] = (
            asyncio.get_running_loop().create_future()
        )
        future.set_result({"status": status, "entry": entry, "error": None})
        return future
