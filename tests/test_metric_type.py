# SPDX-License-Identifier: MIT

"""Tests for metric type create/update/delete against the remote store."""

import asyncio

import pytest

from insights.model.entity_id import is_temporary_id
from insights.model.errors import ProgrammerError
from insights.model.result import Failure, Success
from insights.model.weekday_mask import WeekdayMask
from insights.service.workspace import Workspace
from tests.conftest import metric_type_id


class TestLoad:
    @pytest.mark.asyncio
    async def test_registry_sorted_by_name(self, workspace):
        names = [mt["name"] for mt in workspace.metric_types.snapshot()]

        assert names == ["Coffee", "Meditate", "Reading"]

    @pytest.mark.asyncio
    async def test_failed_load_posts_message(self, remote):
        workspace = Workspace(remote)
        remote.fail_next("list_metric_types", "Error: 500")

        result = await workspace.load()

        assert isinstance(result, Failure)
        message = workspace.messages.current()
        assert message is not None
        assert message["text"] == "Error: 500"


class TestCreate:
    @pytest.mark.asyncio
    async def test_created_type_joins_registry(self, workspace):
        result = await workspace.metric_type_actions.create(
            "Water", "Number", "glasses", goal_target=8, goal_cadence="Daily"
        )

        assert isinstance(result, Success)
        water = workspace.metric_types.find_by_name("water")
        assert water is not None
        assert water["goal"] == {"cadence": "Daily", "target": 8, "days": 127}

    @pytest.mark.asyncio
    async def test_invalid_input_never_reaches_remote(self, workspace, remote):
        result = await workspace.metric_type_actions.create(
            "Stretch",
            "Boolean",
            goal_target=1,
            goal_cadence="Daily",
            goal_days=WeekdayMask(0),
        )

        assert isinstance(result, Failure)
        assert remote.calls == []
        assert workspace.metric_types.find_by_name("Stretch") is None
        message = workspace.messages.current()
        assert message is not None
        assert "at least one day" in message["text"]


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_is_applied_before_remote_returns(self, workspace, remote):
        coffee = metric_type_id(workspace, "Coffee")
        remote.pause()

        update = asyncio.ensure_future(
            workspace.metric_type_actions.update(coffee, "Espresso", "Number", "shots")
        )
        await asyncio.sleep(0)
        optimistic = workspace.metric_types.get(coffee)
        assert optimistic is not None
        assert optimistic["name"] == "Espresso"

        remote.release()
        result = await update

        assert isinstance(result, Success)
        assert result.value["unit"] == "shots"
        assert result.value["goal"] is None

    @pytest.mark.asyncio
    async def test_failed_update_restores_snapshot(self, workspace, remote):
        coffee = metric_type_id(workspace, "Coffee")
        before = workspace.metric_types.get(coffee)
        remote.fail_next("update_metric_type", "boom")

        result = await workspace.metric_type_actions.update(coffee, "Tea", "Number")

        assert isinstance(result, Failure)
        assert workspace.metric_types.get(coffee) == before

    @pytest.mark.asyncio
    async def test_unknown_id(self, workspace):
        with pytest.raises(ProgrammerError):
            await workspace.metric_type_actions.update("missing", "Tea", "Number")


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_cascades_to_entries(self, workspace, day):
        coffee = metric_type_id(workspace, "Coffee")
        reading = metric_type_id(workspace, "Reading")
        await workspace.mutations.log_value(coffee, day, 2)
        await workspace.mutations.log_value(reading, day, 30)

        result = await workspace.metric_type_actions.delete(coffee)

        assert isinstance(result, Success)
        assert workspace.metric_types.get(coffee) is None
        assert [e["metric_type_id"] for e in workspace.entries.snapshot()] == [reading]

        await workspace.load()
        assert workspace.entries.lookup(coffee, day) is None

    @pytest.mark.asyncio
    async def test_failed_delete_restores_type_and_entries(self, workspace, remote, day):
        coffee = metric_type_id(workspace, "Coffee")
        await workspace.mutations.log_value(coffee, day, 2)
        await workspace.mutations.log_value(coffee, day.add(days=1), 3)
        entries_before = workspace.entries.snapshot()
        remote.fail_next("delete_metric_type", "boom")

        result = await workspace.metric_type_actions.delete(coffee)

        assert isinstance(result, Failure)
        assert workspace.metric_types.get(coffee) is not None
        assert workspace.entries.snapshot() == entries_before

    @pytest.mark.asyncio
    async def test_failed_delete_keeps_entry_confirmed_meanwhile(
        self, workspace, remote, day
    ):
        coffee = metric_type_id(workspace, "Coffee")
        remote.pause()
        logged = workspace.mutations.log_value(coffee, day, 3)
        remote.fail_next("delete_metric_type", "boom")
        delete = asyncio.ensure_future(workspace.metric_type_actions.delete(coffee))
        await asyncio.sleep(0)

        remote.release()
        outcome, result = await asyncio.gather(logged, delete)

        assert outcome["status"] == "confirmed"
        assert isinstance(result, Failure)
        restored = workspace.entries.lookup(coffee, day)
        assert restored is not None
        assert not is_temporary_id(restored["id"])
        assert restored["value"] == 3

        later = await workspace.mutations.log_value(coffee, day, 5)
        assert later["status"] == "confirmed"
