# SPDX-License-Identifier: MIT

"""Shared fixtures: a gated remote over the YAML store and a manual clock."""

import asyncio
from pathlib import Path
from typing import Any, Callable, Optional

import pendulum
import pytest
import pytest_asyncio

from insights.model.entity_id import EntityId
from insights.model.entry import Entry
from insights.model.metric_type import MetricType
from insights.model.result import Failure, Result
from insights.model.weekday_mask import WeekdayMask
from insights.remote.file import FileRemoteService
from insights.remote.protocol import MetricTypeDefinition
from insights.service.workspace import Workspace


class GatedRemote:
    """
    Remote store that can hold requests in flight and fail them on demand.

    Requests go to a FileRemoteService once released. While paused, every
    call waits until release() is called.
    """

    def __init__(self, inner: FileRemoteService) -> None:
        self.inner = inner
        self.calls: list[str] = []
        self.paused = False
        self._gates: list[asyncio.Future[None]] = []
        self._failures: dict[str, str] = {}

    def pause(self) -> None:
        self.paused = True

    def release(self) -> None:
        self.paused = False
        gates, self._gates = self._gates, []
        for gate in gates:
            if not gate.done():
                gate.set_result(None)

    def fail_next(self, method: str, error: str) -> None:
        self._failures[method] = error

    def count(self, method: str) -> int:
        return self.calls.count(method)

    async def __gate(self, method: str) -> Optional[str]:
        self.calls.append(method)
        if self.paused:
            gate: asyncio.Future[None] = asyncio.get_running_loop().create_future()
            self._gates.append(gate)
            await gate
        return self._failures.pop(method, None)

    async def create_entry(
        self, metric_type_id: EntityId, date: pendulum.Date, value: int
    ) -> Result[Entry]:
        error = await self.__gate("create_entry")
        if error is not None:
            return Failure(error)
        return await self.inner.create_entry(metric_type_id, date, value)

    async def update_entry(self, entry_id: EntityId, value: int) -> Result[Entry]:
        error = await self.__gate("update_entry")
        if error is not None:
            return Failure(error)
        return await self.inner.update_entry(entry_id, value)

    async def delete_entry(self, entry_id: EntityId) -> Result[None]:
        error = await self.__gate("delete_entry")
        if error is not None:
            return Failure(error)
        return await self.inner.delete_entry(entry_id)

    async def list_entries(
        self,
        from_date: Optional[pendulum.Date],
        to_date: Optional[pendulum.Date],
        metric_type_id: Optional[EntityId] = None,
    ) -> Result[list[Entry]]:
        error = await self.__gate("list_entries")
        if error is not None:
            return Failure(error)
        return await self.inner.list_entries(from_date, to_date, metric_type_id)

    async def list_metric_types(self) -> Result[list[MetricType]]:
        error = await self.__gate("list_metric_types")
        if error is not None:
            return Failure(error)
        return await self.inner.list_metric_types()

    async def create_metric_type(
        self, definition: MetricTypeDefinition
    ) -> Result[MetricType]:
        error = await self.__gate("create_metric_type")
        if error is not None:
            return Failure(error)
        return await self.inner.create_metric_type(definition)

    async def update_metric_type(
        self, id: EntityId, definition: MetricTypeDefinition
    ) -> Result[MetricType]:
        error = await self.__gate("update_metric_type")
        if error is not None:
            return Failure(error)
        return await self.inner.update_metric_type(id, definition)

    async def delete_metric_type(self, id: EntityId) -> Result[None]:
        error = await self.__gate("delete_metric_type")
        if error is not None:
            return Failure(error)
        return await self.inner.delete_metric_type(id)


class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic clock for the stepped input controller."""

    def __init__(self) -> None:
        self.now = 0.0
        self._sequence = 0
        self._timers: list[tuple[float, int, _ManualHandle, Callable[[], None]]] = []

    def now_ms(self) -> float:
        return self.now

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle()
        self._sequence += 1
        self._timers.append((self.now + delay_ms, self._sequence, handle, callback))
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for _, _, handle, _ in self._timers if not handle.cancelled)

    def advance(self, ms: float) -> None:
        target = self.now + ms
        while True:
            due = [t for t in self._timers if t[0] <= target and not t[2].cancelled]
            if len(due) == 0:
                break
            timer = min(due, key=lambda t: (t[0], t[1]))
            self._timers.remove(timer)
            self.now = timer[0]
            timer[3]()
        self._timers = [t for t in self._timers if not t[2].cancelled]
        self.now = target


def definition(
    name: str,
    kind: str = "Number",
    unit: Optional[str] = None,
    target: Optional[int] = None,
    cadence: str = "Weekly",
    days: WeekdayMask = WeekdayMask(),
) -> MetricTypeDefinition:
    goal: Any = None
    if target is not None:
        goal = {"cadence": cadence, "target": target, "days": days.bits}
    return {"name": name, "kind": kind, "unit": unit, "goal": goal}  # type: ignore[typeddict-item]


def make_entry(
    metric_type: MetricType, date: pendulum.Date, value: int, id: str = ""
) -> Entry:
    return {
        "id": id or f"{metric_type['id']}-{date.to_date_string()}",
        "metric_type_id": metric_type["id"],
        "metric_type_name": metric_type["name"],
        "date": date,
        "value": value,
    }


def make_metric_type(
    id: str,
    name: str,
    kind: str = "Number",
    target: Optional[int] = None,
    cadence: str = "Weekly",
    days: WeekdayMask = WeekdayMask(),
    unit: Optional[str] = None,
) -> MetricType:
    return {"id": id, **definition(name, kind, unit, target, cadence, days)}  # type: ignore[typeddict-item]


@pytest.fixture
def day() -> pendulum.Date:
    return pendulum.date(2024, 1, 3)


@pytest.fixture
def file_remote(tmp_path: Path) -> FileRemoteService:
    return FileRemoteService(tmp_path / "data")


@pytest.fixture
def remote(file_remote: FileRemoteService) -> GatedRemote:
    return GatedRemote(file_remote)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest_asyncio.fixture
async def workspace(
    remote: GatedRemote, file_remote: FileRemoteService
) -> Workspace:
    """Workspace seeded with Coffee (Number), Meditate (Boolean), Reading (Duration)."""
    await file_remote.create_metric_type(
        definition("Coffee", "Number", "cups", target=10, cadence="Weekly")
    )
    await file_remote.create_metric_type(
        definition("Meditate", "Boolean", target=1, cadence="Daily")
    )
    await file_remote.create_metric_type(definition("Reading", "Duration", "min"))

    workspace = Workspace(remote)
    await workspace.load()
    remote.calls.clear()
    return workspace


def metric_type_id(workspace: Workspace, name: str) -> EntityId:
    metric_type = workspace.metric_types.find_by_name(name)
    assert metric_type is not None
    return metric_type["id"]
