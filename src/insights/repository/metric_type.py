# SPDX-License-Identifier: MIT

from copy import deepcopy
from typing import Iterable, Optional

from insights.model.entity_id import EntityId
from insights.model.metric_type import MetricType
from insights.signal import Signal


class MetricTypeRegistry:
    """In-memory metric type definitions, kept sorted by name."""

    def __init__(self) -> None:
        self._metric_types: list[MetricType] = []
        self.changed = Signal()

    def upsert(self, metric_type: MetricType) -> None:
        metric_type = deepcopy(metric_type)
        self._metric_types = [
            mt for mt in self._metric_types if mt["id"] != metric_type["id"]
        ]
        self._metric_types.append(metric_type)
        self.__sort()
        self.changed.emit()

    def remove(self, id: EntityId) -> Optional[MetricType]:
        removed = self.get(id)
        if removed is None:
            return None
        self._metric_types = [mt for mt in self._metric_types if mt["id"] != id]
        self.changed.emit()
        return removed

    def replace_all(self, metric_types: Iterable[MetricType]) -> None:
        self._metric_types = deepcopy(list(metric_types))
        self.__sort()
        self.changed.emit()

    def get(self, id: EntityId) -> Optional[MetricType]:
        for metric_type in self._metric_types:
            if metric_type["id"] == id:
                return deepcopy(metric_type)
        return None

    def find_by_name(self, name: str) -> Optional[MetricType]:
        for metric_type in self._metric_types:
            if metric_type["name"].casefold() == name.strip().casefold():
                return deepcopy(metric_type)
        return None

    def snapshot(self) -> list[MetricType]:
        return deepcopy(self._metric_types)

    def __len__(self) -> int:
        return len(self._metric_types)

    def __sort(self) -> None:
        self._metric_types.sort(key=lambda mt: mt["name"].casefold())
