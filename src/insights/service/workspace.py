# SPDX-License-Identifier: MIT

from typing import Optional

import pendulum

from insights.model.entry import Entry
from insights.model.result import Failure, Result, Success
from insights.remote.protocol import RemoteService
from insights.repository.entry import EntryStore
from insights.repository.metric_type import MetricTypeRegistry
from insights.service.message import MessageChannel
from insights.service.metric_type import MetricTypeCoordinator
from insights.service.mutation import MutationCoordinator


class Workspace:
    """
    One user's working set: the entry store, the metric type registry and
    the coordinators that keep them in step with a remote store.
    """

    def __init__(
        self,
        remote: RemoteService,
        message_timeout_ms: float = 5000,
        messages: Optional[MessageChannel] = None,
    ) -> None:
        self.remote = remote
        self.entries = EntryStore()
        self.metric_types = MetricTypeRegistry()
        self.messages = (
            messages if messages is not None else MessageChannel(message_timeout_ms)
        )
        self.mutations = MutationCoordinator(
            self.entries, self.metric_types, remote, self.messages
        )
        self.metric_type_actions = MetricTypeCoordinator(
            self.metric_types, self.entries, remote, self.messages
        )

    async def load(
        self,
        from_date: Optional[pendulum.Date] = None,
        to_date: Optional[pendulum.Date] = None,
    ) -> Result[None]:
        """Load metric types, then the entries in [from_date, to_date]."""
        types_result = await self.metric_type_actions.load()
        if isinstance(types_result, Failure):
            return types_result
        return await self.load_entries(from_date, to_date)

    async def load_entries(
        self,
        from_date: Optional[pendulum.Date] = None,
        to_date: Optional[pendulum.Date] = None,
    ) -> Result[None]:
        result: Result[list[Entry]] = await self.remote.list_entries(
            from_date, to_date
        )
        if isinstance(result, Failure):
            self.messages.error(result.error)
            return result
        self.entries.replace_all(result.value)
        return Success(None)
