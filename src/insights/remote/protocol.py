# SPDX-License-Identifier: MIT

from typing import Optional, Protocol, TypedDict

import pendulum

from insights.model.entity_id import EntityId
from insights.model.entry import Entry
from insights.model.metric_type import Goal, MetricKind, MetricType
from insights.model.result import Result


class MetricTypeDefinition(TypedDict):
    """Fields a client sends when creating or editing a metric type."""

    name: str
    kind: MetricKind
    unit: Optional[str]
    goal: Optional[Goal]


class RemoteService(Protocol):
    """
    Remote entry and metric type store.

    Every call returns Success or Failure; expected failures never raise.
    """

    async def create_entry(
        self, metric_type_id: EntityId, date: pendulum.Date, value: int
    ) -> Result[Entry]: ...

    async def update_entry(self, entry_id: EntityId, value: int) -> Result[Entry]: ...

    async def delete_entry(self, entry_id: EntityId) -> Result[None]: ...

    async def list_entries(
        self,
        from_date: Optional[pendulum.Date],
        to_date: Optional[pendulum.Date],
        metric_type_id: Optional[EntityId] = None,
    ) -> Result[list[Entry]]: ...

    async def list_metric_types(self) -> Result[list[MetricType]]: ...

    async def create_metric_type(
        self, definition: MetricTypeDefinition
    ) -> Result[MetricType]: ...

    async def update_metric_type(
        self, id: EntityId, definition: MetricTypeDefinition
    ) -> Result[MetricType]: ...

    async def delete_metric_type(self, id: EntityId) -> Result[None]: ...
