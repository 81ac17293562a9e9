# SPDX-License-Identifier: MIT

import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Optional, cast

import pendulum
from yaml import dump, load

try:
    from yaml import CDumper as Dumper
    from yaml import CLoader as Loader
except ImportError:
    from yaml import Dumper, Loader  # type: ignore[assignment]

from insights import time
from insights.model.entity_id import EntityId, generate_entity_id
from insights.model.entry import Entry
from insights.model.errors import RemoteError
from insights.model.metric_type import MetricType
from insights.model.result import Failure, Result, Success
from insights.remote.protocol import MetricTypeDefinition
from insights.service.goal import clamp_goal_target

logger = logging.getLogger(__name__)


class FileRemoteService:
    """
    Remote store kept in YAML files under a data directory.

    Applies the same rules as the Insights server: one entry per metric type
    and day, entries require a known metric type, deleting a metric type
    deletes its entries. Files are rewritten after every change.
    """

    def __init__(self, data_path: Path) -> None:
        self.data_path = data_path
        self.metric_types_path = data_path / "metric_types.yaml"
        self.entries_path = data_path / "entries.yaml"
        self._metric_types: Optional[list[MetricType]] = None
        self._entries: Optional[list[Entry]] = None

    @property
    def metric_types(self) -> list[MetricType]:
        if self._metric_types is None:
            self.__load_data()
        if self._metric_types is None:
            raise ValueError()
        return self._metric_types

    @property
    def entries(self) -> list[Entry]:
        if self._entries is None:
            self.__load_data()
        if self._entries is None:
            raise ValueError()
        return self._entries

    def __load_data(self) -> None:
        self._metric_types = []
        self._entries = []
        if self.metric_types_path.is_file():
            raw = load(self.metric_types_path.read_text(), Loader=Loader)
            if raw is not None:
                self._metric_types = cast(list[MetricType], raw["metric_types"])
        if self.entries_path.is_file():
            raw = load(self.entries_path.read_text(), Loader=Loader)
            if raw is not None:
                self._entries = [
                    self.__convert_entry_for_deserialization(e)
                    for e in raw["entries"]
                ]

    def __save_data(self) -> None:
        self.data_path.mkdir(parents=True, exist_ok=True)
        self.metric_types_path.write_text(
            dump({"metric_types": self.metric_types}, Dumper=Dumper)
        )
        serializable_entries = [
            self.__convert_entry_for_serialization(deepcopy(e)) for e in self.entries
        ]
        self.entries_path.write_text(
            dump({"entries": serializable_entries}, Dumper=Dumper)
        )

    def __convert_entry_for_serialization(self, entry: Entry) -> dict[str, Any]:
        serializable_entry = cast(dict[str, Any], entry)
        serializable_entry["date"] = time.date_to_iso_str(serializable_entry["date"])
        return serializable_entry

    def __convert_entry_for_deserialization(self, entry: dict[str, Any]) -> Entry:
        deserializable_entry = entry
        # the C loader may already yield a datetime.date
        deserializable_entry["date"] = time.date_from_str(
            str(deserializable_entry["date"])
        )
        return cast(Entry, deserializable_entry)

    # ─────────────────────────────────────────────────────────────
    # Entries
    # ─────────────────────────────────────────────────────────────

    async def create_entry(
        self, metric_type_id: EntityId, date: pendulum.Date, value: int
    ) -> Result[Entry]:
        try:
            metric_type = self.__get_metric_type(metric_type_id)
        except RemoteError as e:
            return Failure(e.message)
        for existing in self.entries:
            if existing["metric_type_id"] == metric_type_id and existing["date"] == date:
                return Failure(
                    "Entry already exists for this date. Use PUT to update."
                )

        entry: Entry = {
            "id": generate_entity_id(),
            "metric_type_id": metric_type_id,
            "metric_type_name": metric_type["name"],
            "date": date,
            "value": value,
        }
        self.entries.append(entry)
        self.__save_data()
        return Success(deepcopy(entry))

    async def update_entry(self, entry_id: EntityId, value: int) -> Result[Entry]:
        for entry in self.entries:
            if entry["id"] == entry_id:
                entry["value"] = value
                self.__save_data()
                return Success(deepcopy(entry))
        return Failure("Error: 404")

    async def delete_entry(self, entry_id: EntityId) -> Result[None]:
        remaining = [e for e in self.entries if e["id"] != entry_id]
        if len(remaining) == len(self.entries):
            return Failure("Error: 404")
        self._entries = remaining
        self.__save_data()
        return Success(None)

    async def list_entries(
        self,
        from_date: Optional[pendulum.Date],
        to_date: Optional[pendulum.Date],
        metric_type_id: Optional[EntityId] = None,
    ) -> Result[list[Entry]]:
        entries = [
            e
            for e in self.entries
            if (from_date is None or e["date"] >= from_date)
            and (to_date is None or e["date"] <= to_date)
            and (metric_type_id is None or e["metric_type_id"] == metric_type_id)
        ]
        entries.sort(key=lambda e: e["date"], reverse=True)
        return Success(deepcopy(entries))

    # ─────────────────────────────────────────────────────────────
    # Metric types
    # ─────────────────────────────────────────────────────────────

    async def list_metric_types(self) -> Result[list[MetricType]]:
        metric_types = sorted(self.metric_types, key=lambda mt: mt["name"])
        return Success(deepcopy(metric_types))

    async def create_metric_type(
        self, definition: MetricTypeDefinition
    ) -> Result[MetricType]:
        metric_type: MetricType = {
            "id": generate_entity_id(),
            **self.__normalize(definition),
        }
        self.metric_types.append(metric_type)
        self.__save_data()
        return Success(deepcopy(metric_type))

    async def update_metric_type(
        self, id: EntityId, definition: MetricTypeDefinition
    ) -> Result[MetricType]:
        try:
            metric_type = self.__get_metric_type(id)
        except RemoteError as e:
            return Failure(e.message)
        metric_type.update(self.__normalize(definition))
        for entry in self.entries:
            if entry["metric_type_id"] == id:
                entry["metric_type_name"] = metric_type["name"]
        self.__save_data()
        return Success(deepcopy(metric_type))

    async def delete_metric_type(self, id: EntityId) -> Result[None]:
        try:
            self.__get_metric_type(id)
        except RemoteError as e:
            return Failure(e.message)
        self._metric_types = [mt for mt in self.metric_types if mt["id"] != id]
        self._entries = [e for e in self.entries if e["metric_type_id"] != id]
        self.__save_data()
        return Success(None)

    def __get_metric_type(self, id: EntityId) -> MetricType:
        for metric_type in self.metric_types:
            if metric_type["id"] == id:
                return metric_type
        raise RemoteError("Invalid metric type")

    def __normalize(self, definition: MetricTypeDefinition) -> MetricTypeDefinition:
        normalized = deepcopy(definition)
        goal = normalized["goal"]
        if goal is not None:
            goal["target"] = clamp_goal_target(
                normalized["kind"], goal["cadence"], goal["target"]
            )
        return normalized
