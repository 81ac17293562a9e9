# SPDX-License-Identifier: MIT

import math
from typing import Optional, Union

from insights.model.errors import ValidationError
from insights.model.metric_type import (
    GOAL_CADENCES,
    METRIC_KINDS,
    Goal,
    GoalCadence,
    MetricKind,
)
from insights.model.weekday_mask import WeekdayMask
from insights.remote.protocol import MetricTypeDefinition

MAX_NAME_LENGTH = 100


def clamp_goal_target(kind: MetricKind, cadence: GoalCadence, target: int) -> int:
    """
    Boolean goals count days: at most 1 per day, at most 7 per week.
    """
    target = max(0, target)
    if kind == "Boolean" and cadence == "Daily":
        target = min(1, target)
    if kind == "Boolean" and cadence == "Weekly":
        target = min(7, target)
    return target


def validate_goal(goal: Optional[Goal]) -> None:
    """An active Daily goal must apply to at least one weekday."""
    if goal is None or goal["target"] <= 0:
        return
    if goal["cadence"] == "Daily" and WeekdayMask(goal["days"]).is_empty():
        raise ValidationError("Please select at least one day for your daily goal.")


def parse_goal_target(raw: Union[str, int, float]) -> int:
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationError("Goal must be a valid non-negative number.")
    if not math.isfinite(value) or value < 0:
        raise ValidationError("Goal must be a valid non-negative number.")
    return math.floor(value)


def build_definition(
    name: str,
    kind: str,
    unit: Optional[str] = None,
    goal_target: Optional[Union[str, int, float]] = None,
    goal_cadence: str = "Weekly",
    goal_days: WeekdayMask = WeekdayMask(),
) -> MetricTypeDefinition:
    """
    Validate and normalise user input for a metric type.

    Raises ValidationError without touching any state.
    """
    name = name.strip()
    if name == "":
        raise ValidationError("Please enter a metric name.")
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Metric name must be at most {MAX_NAME_LENGTH} characters."
        )

    if kind not in METRIC_KINDS:
        raise ValidationError(
            f"Invalid kind: {kind}. Valid options: {', '.join(METRIC_KINDS)}"
        )
    if goal_cadence not in GOAL_CADENCES:
        raise ValidationError(
            f"Invalid cadence: {goal_cadence}. Valid options: {', '.join(GOAL_CADENCES)}"
        )
    metric_kind: MetricKind = kind  # type: ignore[assignment]
    cadence: GoalCadence = goal_cadence  # type: ignore[assignment]

    unit = unit.strip() if unit is not None else None
    if unit == "":
        unit = None

    goal: Optional[Goal] = None
    if goal_target is not None:
        target = clamp_goal_target(metric_kind, cadence, parse_goal_target(goal_target))
        goal = {"cadence": cadence, "target": target, "days": goal_days.bits}
        validate_goal(goal)

    return {"name": name, "kind": metric_kind, "unit": unit, "goal": goal}
