# SPDX-License-Identifier: MIT

from typing import TypedDict

import pendulum

from insights.model.entity_id import EntityId

type EntryKey = tuple[EntityId, pendulum.Date]


class Entry(TypedDict):
    id: EntityId  # permanent (server-issued) or temporary ("temp-" prefix)
    metric_type_id: EntityId
    metric_type_name: str
    date: pendulum.Date  # calendar day, no time of day

    # minutes for Duration, raw number for Number, 1 for Boolean
    value: int


def entry_key(entry: Entry) -> EntryKey:
    return (entry["metric_type_id"], entry["date"])
