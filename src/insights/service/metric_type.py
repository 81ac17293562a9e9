# SPDX-License-Identifier: MIT

import logging
from typing import Optional, Union

from insights.model.entity_id import EntityId, is_temporary_id
from insights.model.errors import ProgrammerError, ValidationError
from insights.model.metric_type import MetricType
from insights.model.result import Failure, Result, Success
from insights.model.weekday_mask import WeekdayMask
from insights.remote.protocol import RemoteService
from insights.repository.entry import EntryStore
from insights.repository.metric_type import MetricTypeRegistry
from insights.service.goal import build_definition
from insights.service.message import MessageChannel

logger = logging.getLogger(__name__)


class MetricTypeCoordinator:
    """Keeps the metric type registry in step with the remote store."""

    def __init__(
        self,
        registry: MetricTypeRegistry,
        store: EntryStore,
        remote: RemoteService,
        messages: MessageChannel,
    ) -> None:
        self._registry = registry
        self._store = store
        self._remote = remote
        self._messages = messages

    async def load(self) -> Result[list[MetricType]]:
        result = await self._remote.list_metric_types()
        if isinstance(result, Failure):
            self._messages.error(result.error)
            return result
        self._registry.replace_all(result.value)
        return result

    async def create(
        self,
        name: str,
        kind: str,
        unit: Optional[str] = None,
        goal_target: Optional[Union[str, int, float]] = None,
        goal_cadence: str = "Weekly",
        goal_days: WeekdayMask = WeekdayMask(),
    ) -> Result[MetricType]:
        try:
            definition = build_definition(
                name, kind, unit, goal_target, goal_cadence, goal_days
            )
        except ValidationError as e:
            return self.__reject(e)

        # the server issues the id, so creation waits for confirmation
        result = await self._remote.create_metric_type(definition)
        if isinstance(result, Failure):
            logger.warning("create metric type %s failed: %s", name, result.error)
            self._messages.error(result.error)
            return result
        self._registry.upsert(result.value)
        return result

    async def update(
        self,
        id: EntityId,
        name: str,
        kind: str,
        unit: Optional[str] = None,
        goal_target: Optional[Union[str, int, float]] = None,
        goal_cadence: str = "Weekly",
        goal_days: WeekdayMask = WeekdayMask(),
    ) -> Result[MetricType]:
        snapshot = self._registry.get(id)
        if snapshot is None:
            raise ProgrammerError(f"update: unknown metric type id {id}")
        try:
            definition = build_definition(
                name, kind, unit, goal_target, goal_cadence, goal_days
            )
        except ValidationError as e:
            return self.__reject(e)

        optimistic: MetricType = {"id": id, **definition}
        self._registry.upsert(optimistic)

        result = await self._remote.update_metric_type(id, definition)
        if isinstance(result, Failure):
            self._registry.upsert(snapshot)
            logger.warning("rolled back metric type %s: %s", id, result.error)
            self._messages.error(result.error)
            return result
        self._registry.upsert(result.value)
        return result

    async def delete(self, id: EntityId) -> Result[None]:
        """Remove a metric type and, with it, all of its entries."""
        snapshot = self._registry.remove(id)
        if snapshot is None:
            return Success(None)
        removed_entries = self._store.remove_for_metric_type(id)

        result = await self._remote.delete_metric_type(id)
        if isinstance(result, Failure):
            self._registry.upsert(snapshot)
            for entry in reversed(removed_entries):
                # pending creates settle on their own; a settled one owns the key
                if is_temporary_id(entry["id"]):
                    continue
                if self._store.lookup(entry["metric_type_id"], entry["date"]) is not None:
                    continue
                self._store.upsert(entry)
            logger.warning("rolled back delete of metric type %s: %s", id, result.error)
            self._messages.error(result.error)
            return result
        return result

    def __reject(self, error: ValidationError) -> Failure:
        logger.debug("rejected metric type input: %s", error)
        self._messages.error(str(error))
        return Failure(str(error))
