# SPDX-License-Identifier: MIT

from typing import Literal, Optional, TypedDict

from insights.model.entity_id import EntityId

MetricKind = Literal["Boolean", "Number", "Duration"]
GoalCadence = Literal["Daily", "Weekly"]

METRIC_KINDS: tuple[MetricKind, ...] = ("Boolean", "Number", "Duration")
GOAL_CADENCES: tuple[GoalCadence, ...] = ("Daily", "Weekly")


class Goal(TypedDict):
    cadence: GoalCadence
    target: int  # 0 means no goal
    days: int  # weekday mask, only meaningful for Daily cadence


class MetricType(TypedDict):
    id: EntityId
    name: str  # e.g., "Coffee"
    kind: MetricKind
    unit: Optional[str]  # e.g., "cups", "min"
    goal: Optional[Goal]


def has_goal(metric_type: MetricType) -> bool:
    goal = metric_type["goal"]
    return goal is not None and goal["target"] > 0
