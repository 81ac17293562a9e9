# SPDX-License-Identifier: MIT

from typing import Optional

from insights.model.metric_type import MetricKind, MetricType
from insights.model.weekday_mask import WeekdayMask
from insights.time import minutes_to_str


def format_value(kind: MetricKind, value: float, unit: Optional[str] = None) -> str:
    if kind == "Boolean":
        return "done" if value > 0 else ""
    if kind == "Duration":
        text = minutes_to_str(int(value))
    elif float(value).is_integer():
        text = str(int(value))
    else:
        text = f"{value:.1f}"
    return f"{text} {unit}" if unit else text


def format_goal(metric_type: MetricType) -> str:
    goal = metric_type["goal"]
    if goal is None or goal["target"] <= 0:
        return "No goal set"
    target = format_value(
        "Number" if metric_type["kind"] == "Boolean" else metric_type["kind"],
        goal["target"],
        metric_type["unit"],
    )
    text = f"{target} ({goal['cadence']})"
    if goal["cadence"] == "Daily":
        mask = WeekdayMask(goal["days"])
        if mask.bits != WeekdayMask().bits:
            text += " " + ",".join(day[:3] for day in mask.days())
    return text


def format_percent(ratio: float) -> str:
    return f"{round(ratio * 100)}%"


def progress_bar(ratio: float, width: int = 20) -> str:
    filled = round(max(0.0, min(1.0, ratio)) * width)
    return "█" * filled + "░" * (width - filled)
