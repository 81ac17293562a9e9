# SPDX-License-Identifier: MIT

import math
from typing import Literal, Optional, Sequence, TypedDict

import pendulum

from insights.model.entity_id import EntityId
from insights.model.entry import Entry
from insights.model.metric_type import GoalCadence, MetricKind, MetricType, has_goal
from insights.model.weekday_mask import WeekdayMask
from insights.time import end_of_week, start_of_week


class GoalStatus(TypedDict):
    cadence: GoalCadence
    current: float
    target: int
    progress: float  # 0..1
    met: bool
    applies: bool  # False on days a Daily goal is not scheduled for


class Streaks(TypedDict):
    current: int
    longest: int


def completion_ratio(
    metric_types: Sequence[MetricType],
    entries: Sequence[Entry],
    date: pendulum.Date,
) -> float:
    """
    Share of metric types with any entry on date.

    Presence alone counts, whether or not a goal is met.
    """
    if len(metric_types) == 0:
        return 0.0
    logged = {e["metric_type_id"] for e in entries if e["date"] == date}
    done = sum(1 for mt in metric_types if mt["id"] in logged)
    return done / len(metric_types)


def week_window(date: pendulum.Date) -> tuple[pendulum.Date, pendulum.Date]:
    """Monday through Sunday of the week containing date."""
    return start_of_week(date), end_of_week(date)


def _entries_for(metric_type: MetricType, entries: Sequence[Entry]) -> list[Entry]:
    return [e for e in entries if e["metric_type_id"] == metric_type["id"]]


def goal_current_value(
    metric_type: MetricType,
    entries: Sequence[Entry],
    reference_date: pendulum.Date,
) -> float:
    """
    Value measured against the goal target.

    - Daily:  the entry on reference_date (presence for Boolean, value otherwise)
    - Weekly: over Monday..Sunday, distinct logged days for Boolean, the sum of
              values otherwise
    """
    goal = metric_type["goal"]
    cadence = goal["cadence"] if goal is not None else "Daily"
    own_entries = _entries_for(metric_type, entries)

    if cadence == "Daily":
        day_entries = [e for e in own_entries if e["date"] == reference_date]
        if len(day_entries) == 0:
            return 0.0
        if metric_type["kind"] == "Boolean":
            return 1.0
        return float(day_entries[0]["value"])

    start, end = week_window(reference_date)
    week_entries = [e for e in own_entries if start <= e["date"] <= end]
    if metric_type["kind"] == "Boolean":
        return float(len({e["date"] for e in week_entries}))
    return float(sum(e["value"] for e in week_entries))


def goal_progress(
    metric_type: MetricType,
    entries: Sequence[Entry],
    reference_date: pendulum.Date,
) -> float:
    goal = metric_type["goal"]
    if goal is None or not has_goal(metric_type):
        return 0.0
    current = goal_current_value(metric_type, entries, reference_date)
    return min(1.0, current / goal["target"])


def is_goal_day(metric_type: MetricType, date: pendulum.Date) -> bool:
    goal = metric_type["goal"]
    if goal is None or not has_goal(metric_type):
        return False
    if goal["cadence"] == "Weekly":
        return True
    return WeekdayMask(goal["days"]).includes_date(date)


def goal_status(
    metric_type: MetricType,
    entries: Sequence[Entry],
    reference_date: pendulum.Date,
) -> Optional[GoalStatus]:
    goal = metric_type["goal"]
    if goal is None or not has_goal(metric_type):
        return None
    current = goal_current_value(metric_type, entries, reference_date)
    progress = goal_progress(metric_type, entries, reference_date)
    return {
        "cadence": goal["cadence"],
        "current": current,
        "target": goal["target"],
        "progress": progress,
        "met": progress >= 1.0,
        "applies": is_goal_day(metric_type, reference_date),
    }


def monthly_activity_grid(
    metric_type: MetricType,
    entries: Sequence[Entry],
    month: pendulum.Date,
) -> list[int]:
    """One flag per calendar day of month's month: 1 iff an entry exists."""
    first = month.start_of("month")
    logged_days = {
        e["date"].day
        for e in _entries_for(metric_type, entries)
        if e["date"].year == first.year and e["date"].month == first.month
    }
    return [
        1 if day in logged_days else 0 for day in range(1, first.days_in_month + 1)
    ]


def paginate[T](collection: Sequence[T], page_size: int, page_index: int) -> list[T]:
    """
    Window [page_index * page_size, page_index * page_size + page_size).

    An index past the last page yields an empty window; callers clamp with
    clamp_page_index when the collection shrinks.
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    start = page_index * page_size
    return list(collection[start : start + page_size])


def page_count(total: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    return math.ceil(total / page_size)


def clamp_page_index(page_index: int, pages: int) -> int:
    """Last valid page for a shrunken collection, 0 when it is empty."""
    if pages <= 0:
        return 0
    return max(0, min(page_index, pages - 1))


def history_by_date(
    entries: Sequence[Entry],
    metric_type_id: Optional[EntityId] = None,
) -> list[tuple[pendulum.Date, list[Entry]]]:
    """Entries grouped per day, newest day first."""
    groups: dict[pendulum.Date, list[Entry]] = {}
    for entry in entries:
        if metric_type_id is not None and entry["metric_type_id"] != metric_type_id:
            continue
        groups.setdefault(entry["date"], []).append(entry)
    return sorted(groups.items(), key=lambda group: group[0], reverse=True)


def streaks(
    metric_type: MetricType,
    entries: Sequence[Entry],
    today: pendulum.Date,
) -> Streaks:
    """
    Runs of consecutive logged days.

    The current streak counts back from today, or from yesterday when today
    has nothing logged yet.
    """
    days = sorted({e["date"] for e in _entries_for(metric_type, entries)})

    longest = 0
    run = 0
    previous: Optional[pendulum.Date] = None
    for day in days:
        if previous is not None and previous.add(days=1) == day:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day

    logged = set(days)
    cursor = today if today in logged else today.subtract(days=1)
    current = 0
    while cursor in logged:
        current += 1
        cursor = cursor.subtract(days=1)

    return {"current": current, "longest": longest}


# ─────────────────────────────────────────────────────────────
# Cross-metric analytics
# ─────────────────────────────────────────────────────────────

# minimum effect, in percent or percentage points, worth reporting
INSIGHT_THRESHOLD = 15
MIN_PAIRED_DAYS = 3
MIN_GROUP_SIZE = 2
MIN_STREAK_DAYS = 3
MIN_CONSISTENT_DAYS = 5
MIN_AVERAGED_ENTRIES = 3
MAX_CORRELATION_INSIGHTS = 3
MAX_SINGLE_INSIGHTS = 3
MAX_INSIGHTS = 5

InsightDirection = Literal["positive", "negative", "neutral"]
InsightType = Literal["correlation", "streak", "consistency", "average"]
ComparisonType = Literal["boolean_boolean", "boolean_numeric", "numeric_numeric"]


class ComparePoint(TypedDict):
    date: pendulum.Date
    x: int
    y: int


class Comparison(TypedDict):
    metric_x: str
    metric_y: str
    unit_x: Optional[str]
    unit_y: Optional[str]
    points: list[ComparePoint]  # oldest first
    correlation: Optional[float]


class ComparisonGroup(TypedDict):
    label: str
    value: float
    count: int


class ComparisonData(TypedDict):
    group_a: ComparisonGroup
    group_b: ComparisonGroup
    value_type: Literal["percentage", "average"]
    percent_diff: float
    threshold: Optional[int]  # lower bound of the high group, numeric pairs only
    unit: Optional[str]


class InsightItem(TypedDict):
    metric_type_id_x: EntityId
    metric_type_id_y: Optional[EntityId]
    metric_x: str
    metric_y: Optional[str]
    unit_x: Optional[str]
    unit_y: Optional[str]
    strength: float  # sort key: effect size, streak length, percent or average
    direction: InsightDirection
    summary: str
    data_points: int
    insight_type: InsightType
    comparison_type: Optional[ComparisonType]
    comparison_data: Optional[ComparisonData]
    scatter_data: Optional[list[ComparePoint]]


class DayConsistency(TypedDict):
    day_name: str
    count: int
    percentage: float


class BarPoint(TypedDict):
    date: pendulum.Date
    label: str
    value: int
    goal_met: bool


class MetricAnalytics(TypedDict):
    metric_name: str
    kind: MetricKind
    unit: Optional[str]
    current_streak: int
    max_streak: int
    average: float
    consistent_days: list[DayConsistency]  # most logged weekday first
    last_7_days: list[BarPoint]
    last_30_days: list[BarPoint]


def _values_by_date(
    metric_type: MetricType, entries: Sequence[Entry]
) -> dict[pendulum.Date, int]:
    return {e["date"]: e["value"] for e in _entries_for(metric_type, entries)}


def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values)


def _direction(difference: float) -> InsightDirection:
    return "positive" if difference > 0 else "negative"


def _sign(difference: float) -> str:
    return "+" if difference > 0 else ""


def _unit_suffix(unit: Optional[str]) -> str:
    return f" {unit}" if unit is not None else ""


def pearson_correlation(points: Sequence[ComparePoint]) -> Optional[float]:
    """Pearson coefficient of the paired values, None when undefined."""
    n = len(points)
    if n < 2:
        return None
    sum_x = float(sum(p["x"] for p in points))
    sum_y = float(sum(p["y"] for p in points))
    sum_xy = float(sum(p["x"] * p["y"] for p in points))
    sum_x2 = float(sum(p["x"] * p["x"] for p in points))
    sum_y2 = float(sum(p["y"] * p["y"] for p in points))

    numerator = n * sum_xy - sum_x * sum_y
    variance = (n * sum_x2 - sum_x * sum_x) * (n * sum_y2 - sum_y * sum_y)
    if variance <= 0:
        return None
    return numerator / math.sqrt(variance)


def compare(
    metric_type_x: MetricType,
    metric_type_y: MetricType,
    entries: Sequence[Entry],
) -> Comparison:
    """Values of two metric types on the days both were logged."""
    values_x = _values_by_date(metric_type_x, entries)
    values_y = _values_by_date(metric_type_y, entries)
    points: list[ComparePoint] = [
        {"date": day, "x": values_x[day], "y": values_y[day]}
        for day in sorted(values_x.keys() & values_y.keys())
    ]
    return {
        "metric_x": metric_type_x["name"],
        "metric_y": metric_type_y["name"],
        "unit_x": metric_type_x["unit"],
        "unit_y": metric_type_y["unit"],
        "points": points,
        "correlation": pearson_correlation(points),
    }


def _paired_points(
    metric_type_x: MetricType,
    metric_type_y: MetricType,
    entries: Sequence[Entry],
) -> list[ComparePoint]:
    """
    Days on which a pair of metric types can be compared.

    A Boolean counts as 0 on days it was not logged:

    - Boolean/Boolean: every day from the first to the last day either was logged
    - Boolean/numeric: the days the numeric one was logged
    - numeric/numeric: the days both were logged
    """
    values_x = _values_by_date(metric_type_x, entries)
    values_y = _values_by_date(metric_type_y, entries)
    x_is_boolean = metric_type_x["kind"] == "Boolean"
    y_is_boolean = metric_type_y["kind"] == "Boolean"

    if x_is_boolean and y_is_boolean:
        logged = values_x.keys() | values_y.keys()
        if len(logged) == 0:
            return []
        first, last = min(logged), max(logged)
        days = [first.add(days=n) for n in range((last - first).days + 1)]
    elif x_is_boolean:
        days = sorted(values_y)
    elif y_is_boolean:
        days = sorted(values_x)
    else:
        days = sorted(values_x.keys() & values_y.keys())

    return [
        {"date": day, "x": values_x.get(day, 0), "y": values_y.get(day, 0)}
        for day in days
    ]


def _boolean_boolean_insight(
    metric_type_x: MetricType,
    metric_type_y: MetricType,
    points: list[ComparePoint],
) -> Optional[InsightItem]:
    with_y = [p for p in points if p["y"] == 1]
    without_y = [p for p in points if p["y"] == 0]
    if len(with_y) < MIN_GROUP_SIZE or len(without_y) < MIN_GROUP_SIZE:
        return None

    rate_with = sum(1 for p in with_y if p["x"] == 1) / len(with_y) * 100
    rate_without = sum(1 for p in without_y if p["x"] == 1) / len(without_y) * 100
    difference = rate_with - rate_without
    if abs(difference) < INSIGHT_THRESHOLD:
        return None

    name_y = metric_type_y["name"].lower()
    return {
        "metric_type_id_x": metric_type_x["id"],
        "metric_type_id_y": metric_type_y["id"],
        "metric_x": metric_type_x["name"],
        "metric_y": metric_type_y["name"],
        "unit_x": metric_type_x["unit"],
        "unit_y": metric_type_y["unit"],
        "strength": abs(difference),
        "direction": _direction(difference),
        "summary": (
            f"{metric_type_x['name']} rate: {rate_with:.0f}% on {name_y} days "
            f"vs {rate_without:.0f}% otherwise ({_sign(difference)}{difference:.0f}pts)"
        ),
        "data_points": len(points),
        "insight_type": "correlation",
        "comparison_type": "boolean_boolean",
        "comparison_data": {
            "group_a": {
                "label": f"With {name_y}",
                "value": rate_with,
                "count": len(with_y),
            },
            "group_b": {
                "label": "Without",
                "value": rate_without,
                "count": len(without_y),
            },
            "value_type": "percentage",
            "percent_diff": difference,
            "threshold": None,
            "unit": None,
        },
        "scatter_data": points,
    }


def _boolean_numeric_insight(
    metric_type_x: MetricType,
    metric_type_y: MetricType,
    points: list[ComparePoint],
) -> Optional[InsightItem]:
    """Average of the numeric metric on days with and without the Boolean one."""
    x_is_boolean = metric_type_x["kind"] == "Boolean"
    if x_is_boolean:
        boolean_type, numeric_type = metric_type_x, metric_type_y
        when_true = [p["y"] for p in points if p["x"] == 1]
        when_false = [p["y"] for p in points if p["x"] == 0]
    else:
        boolean_type, numeric_type = metric_type_y, metric_type_x
        when_true = [p["x"] for p in points if p["y"] == 1]
        when_false = [p["x"] for p in points if p["y"] == 0]
    if len(when_true) < MIN_GROUP_SIZE or len(when_false) < MIN_GROUP_SIZE:
        return None

    average_true = _mean(when_true)
    average_false = _mean(when_false)
    if average_false == 0:
        return None
    percent_diff = (average_true - average_false) / average_false * 100
    if abs(percent_diff) < INSIGHT_THRESHOLD:
        return None

    unit = _unit_suffix(numeric_type["unit"])
    boolean_name = boolean_type["name"].lower()
    return {
        "metric_type_id_x": metric_type_x["id"],
        "metric_type_id_y": metric_type_y["id"],
        "metric_x": metric_type_x["name"],
        "metric_y": metric_type_y["name"],
        "unit_x": metric_type_x["unit"],
        "unit_y": metric_type_y["unit"],
        "strength": abs(percent_diff),
        "direction": _direction(percent_diff),
        "summary": (
            f"{numeric_type['name']} averages {average_true:.1f}{unit} on "
            f"{boolean_name} days vs {average_false:.1f}{unit} otherwise "
            f"({_sign(percent_diff)}{percent_diff:.0f}%)"
        ),
        "data_points": len(points),
        "insight_type": "correlation",
        "comparison_type": "boolean_numeric",
        "comparison_data": {
            "group_a": {
                "label": f"With {boolean_name}",
                "value": average_true,
                "count": len(when_true),
            },
            "group_b": {
                "label": "Without",
                "value": average_false,
                "count": len(when_false),
            },
            "value_type": "average",
            "percent_diff": percent_diff,
            "threshold": None,
            "unit": numeric_type["unit"],
        },
        "scatter_data": points,
    }


def _median(values: Sequence[int]) -> float:
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[middle - 1] + ordered[middle]) / 2
    return float(ordered[middle])


def _numeric_numeric_insight(
    metric_type_x: MetricType,
    metric_type_y: MetricType,
    points: list[ComparePoint],
) -> Optional[InsightItem]:
    """Average of y on days x was at or above its median against days below."""
    median = _median([p["x"] for p in points])
    high = [p for p in points if p["x"] >= median]
    low = [p for p in points if p["x"] < median]
    # ties on the median put every point in the high group
    if len(low) == 0:
        high = [p for p in points if p["x"] > median]
        low = [p for p in points if p["x"] <= median]
    if len(high) < MIN_GROUP_SIZE or len(low) < MIN_GROUP_SIZE:
        return None

    average_high = _mean([p["y"] for p in high])
    average_low = _mean([p["y"] for p in low])
    if average_low == 0:
        return None
    percent_diff = (average_high - average_low) / average_low * 100
    if abs(percent_diff) < INSIGHT_THRESHOLD:
        return None

    unit_x = _unit_suffix(metric_type_x["unit"])
    unit_y = _unit_suffix(metric_type_y["unit"])
    high_min = min(p["x"] for p in high)
    return {
        "metric_type_id_x": metric_type_x["id"],
        "metric_type_id_y": metric_type_y["id"],
        "metric_x": metric_type_x["name"],
        "metric_y": metric_type_y["name"],
        "unit_x": metric_type_x["unit"],
        "unit_y": metric_type_y["unit"],
        "strength": abs(percent_diff),
        "direction": _direction(percent_diff),
        "summary": (
            f"When {metric_type_x['name'].lower()} ≥ {high_min}{unit_x}, "
            f"{metric_type_y['name'].lower()} averages {average_high:.1f}{unit_y} "
            f"vs {average_low:.1f}{unit_y} ({_sign(percent_diff)}{percent_diff:.0f}%)"
        ),
        "data_points": len(points),
        "insight_type": "correlation",
        "comparison_type": "numeric_numeric",
        "comparison_data": {
            "group_a": {
                "label": f"≥{high_min}{unit_x}",
                "value": average_high,
                "count": len(high),
            },
            "group_b": {
                "label": f"<{high_min}{unit_x}",
                "value": average_low,
                "count": len(low),
            },
            "value_type": "average",
            "percent_diff": percent_diff,
            "threshold": high_min,
            "unit": metric_type_y["unit"],
        },
        "scatter_data": points,
    }


def cross_metric_insight(
    metric_type_x: MetricType,
    metric_type_y: MetricType,
    entries: Sequence[Entry],
) -> Optional[InsightItem]:
    """The strongest effect one metric type shows on another, if notable."""
    points = _paired_points(metric_type_x, metric_type_y, entries)
    if len(points) < MIN_PAIRED_DAYS:
        return None
    x_is_boolean = metric_type_x["kind"] == "Boolean"
    y_is_boolean = metric_type_y["kind"] == "Boolean"
    if x_is_boolean and y_is_boolean:
        return _boolean_boolean_insight(metric_type_x, metric_type_y, points)
    if x_is_boolean or y_is_boolean:
        return _boolean_numeric_insight(metric_type_x, metric_type_y, points)
    return _numeric_numeric_insight(metric_type_x, metric_type_y, points)


def _single_insight(
    metric_type: MetricType,
    strength: float,
    direction: InsightDirection,
    summary: str,
    data_points: int,
    insight_type: InsightType,
) -> InsightItem:
    return {
        "metric_type_id_x": metric_type["id"],
        "metric_type_id_y": None,
        "metric_x": metric_type["name"],
        "metric_y": None,
        "unit_x": metric_type["unit"],
        "unit_y": None,
        "strength": strength,
        "direction": direction,
        "summary": summary,
        "data_points": data_points,
        "insight_type": insight_type,
        "comparison_type": None,
        "comparison_data": None,
        "scatter_data": None,
    }


def _format_average(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


def single_metric_insights(
    metric_type: MetricType,
    entries: Sequence[Entry],
    today: pendulum.Date,
) -> list[InsightItem]:
    """Streak, weekly consistency and average insights for one metric type."""
    values = _values_by_date(metric_type, entries)
    if len(values) == 0:
        return []
    name = metric_type["name"]
    found: list[InsightItem] = []

    streak = streaks(metric_type, entries, today)["current"]
    if streak >= MIN_STREAK_DAYS:
        found.append(
            _single_insight(
                metric_type,
                streak,
                "positive",
                f"🔥 {streak} day streak on {name}!",
                streak,
                "streak",
            )
        )

    days_logged = sum(1 for n in range(7) if today.subtract(days=n) in values)
    if days_logged >= MIN_CONSISTENT_DAYS:
        found.append(
            _single_insight(
                metric_type,
                round(days_logged / 7 * 100),
                "positive",
                f"Great consistency! {name} logged {days_logged}/7 days this week",
                days_logged,
                "consistency",
            )
        )

    if metric_type["kind"] != "Boolean" and len(values) >= MIN_AVERAGED_ENTRIES:
        average = round(_mean(list(values.values())), 1)
        words = ["You average", _format_average(average)]
        if metric_type["unit"]:
            words.append(metric_type["unit"])
        words.append(f"of {name.lower()} per day")
        found.append(
            _single_insight(
                metric_type, average, "neutral", " ".join(words), len(values), "average"
            )
        )
    return found


def insights(
    metric_types: Sequence[MetricType],
    entries: Sequence[Entry],
    today: pendulum.Date,
) -> list[InsightItem]:
    """
    Up to five notable observations, cross-metric effects first.

    Every pair of metric types is tested in the given order. The three
    strongest effects are followed by the three best single-metric insights,
    streaks ahead of the rest.
    """
    correlations: list[InsightItem] = []
    for i, metric_type_x in enumerate(metric_types):
        for metric_type_y in metric_types[i + 1 :]:
            insight = cross_metric_insight(metric_type_x, metric_type_y, entries)
            if insight is not None and insight["strength"] >= INSIGHT_THRESHOLD:
                correlations.append(insight)

    singles: list[InsightItem] = []
    for metric_type in metric_types:
        singles.extend(single_metric_insights(metric_type, entries, today))

    correlations.sort(key=lambda item: item["strength"], reverse=True)
    singles.sort(
        key=lambda item: (item["insight_type"] == "streak", item["strength"]),
        reverse=True,
    )
    combined = correlations[:MAX_CORRELATION_INSIGHTS] + singles[:MAX_SINGLE_INSIGHTS]
    return combined[:MAX_INSIGHTS]


def _bar_points(
    metric_type: MetricType,
    entries: Sequence[Entry],
    today: pendulum.Date,
    days: int,
    label_format: str,
) -> list[BarPoint]:
    values = _values_by_date(metric_type, entries)
    points: list[BarPoint] = []
    for n in reversed(range(days)):
        day = today.subtract(days=n)
        value = values.get(day, 0)
        status = goal_status(metric_type, entries, day)
        met = (
            value > 0 and status is not None and status["applies"] and status["met"]
        )
        points.append(
            {
                "date": day,
                "label": day.format(label_format),
                "value": value,
                "goal_met": met,
            }
        )
    return points


def metric_analytics(
    metric_type: MetricType,
    entries: Sequence[Entry],
    today: pendulum.Date,
) -> MetricAnalytics:
    """
    Summary of one metric type's history.

    consistent_days counts logged days per weekday, as a share of all logged
    days. Bars cover the last 7 and 30 days, oldest first.
    """
    values = _values_by_date(metric_type, entries)
    streak = streaks(metric_type, entries, today)

    per_weekday: dict[str, int] = {}
    for day in sorted(values):
        name = day.format("dddd")
        per_weekday[name] = per_weekday.get(name, 0) + 1
    consistent_days: list[DayConsistency] = [
        {"day_name": name, "count": count, "percentage": count / len(values) * 100}
        for name, count in per_weekday.items()
    ]
    consistent_days.sort(key=lambda d: d["count"], reverse=True)

    return {
        "metric_name": metric_type["name"],
        "kind": metric_type["kind"],
        "unit": metric_type["unit"],
        "current_streak": streak["current"],
        "max_streak": streak["longest"],
        "average": _mean(list(values.values())) if len(values) > 0 else 0.0,
        "consistent_days": consistent_days,
        "last_7_days": _bar_points(metric_type, entries, today, 7, "ddd"),
        "last_30_days": _bar_points(metric_type, entries, today, 30, "MMM D"),
    }
