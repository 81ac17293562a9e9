# SPDX-License-Identifier: MIT

from typing import Optional, Sequence

import pendulum
from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from insights.model.entry import Entry
from insights.model.metric_type import MetricType
from insights.service.aggregation import (
    Comparison,
    GoalStatus,
    InsightItem,
    MetricAnalytics,
    Streaks,
    completion_ratio,
    monthly_activity_grid,
)
from insights.time import date_to_display_str
from insights.view.format import format_percent, format_value, progress_bar
from insights.view.header import header

GRID_LEFT_COLUMN_WIDTH = 20


def today_view(
    metric_types: Sequence[MetricType],
    entries: Sequence[Entry],
    date: pendulum.Date,
) -> None:
    """Which metric types have something logged on date."""
    header(f"today {date_to_display_str(date)}")

    ratio = completion_ratio(metric_types, entries, date)

    table = Table(box=box.SIMPLE)
    table.add_column("metric")
    table.add_column("logged")

    for metric_type in metric_types:
        entry = next(
            (
                e
                for e in entries
                if e["metric_type_id"] == metric_type["id"] and e["date"] == date
            ),
            None,
        )
        logged = ""
        if entry is not None:
            logged = format_value(
                metric_type["kind"], entry["value"], metric_type["unit"]
            )
            if metric_type["kind"] == "Boolean":
                logged = "✓"
        table.add_row(metric_type["name"], logged)

    console = Console()
    console.print(table)
    console.print(f"{progress_bar(ratio)} {format_percent(ratio)} complete")


def goals_view(
    rows: Sequence[tuple[MetricType, Optional[GoalStatus], Streaks]],
    date: pendulum.Date,
) -> None:
    header(f"goals {date_to_display_str(date)}")

    table = Table(box=box.SIMPLE)
    table.add_column("metric")
    table.add_column("cadence")
    table.add_column("current")
    table.add_column("target")
    table.add_column("progress")
    table.add_column("streak")

    for metric_type, status, streak in rows:
        streak_text = f"{streak['current']} (best {streak['longest']})"
        if status is None:
            table.add_row(metric_type["name"], "", "", "No goal set", "", streak_text)
            continue

        kind = metric_type["kind"]
        display_kind = "Number" if kind == "Boolean" else kind
        progress_style = "green" if status["met"] else ""
        if not status["applies"]:
            progress_style = "grey50"
        table.add_row(
            metric_type["name"],
            status["cadence"],
            format_value(display_kind, status["current"], metric_type["unit"]),
            format_value(display_kind, status["target"], metric_type["unit"]),
            Text(
                f"{progress_bar(status['progress'], 10)} "
                f"{format_percent(status['progress'])}",
                style=progress_style,
            ),
            streak_text,
        )

    console = Console()
    console.print(table)


def grid_view(
    metric_types: Sequence[MetricType],
    entries: Sequence[Entry],
    month: pendulum.Date,
) -> None:
    """One row per metric type, one column per day of month."""
    header(f"activity {month.format('YYYY-MM')}")

    first = month.start_of("month")
    days_in_month = first.days_in_month

    day_header = Text(" " * GRID_LEFT_COLUMN_WIDTH)
    for day in range(1, days_in_month + 1):
        day_header.append(str(day % 10), style="grey50" if day % 10 else "bold")

    console = Console()
    console.print(day_header)

    for metric_type in metric_types:
        row = Text()
        name = metric_type["name"]
        if len(name) > GRID_LEFT_COLUMN_WIDTH - 1:
            name = name[: GRID_LEFT_COLUMN_WIDTH - 4] + "..."
        row.append(name.ljust(GRID_LEFT_COLUMN_WIDTH), style="sandy_brown")

        grid = monthly_activity_grid(metric_type, entries, first)
        for index, flag in enumerate(grid):
            bg_style = " on grey23" if index % 2 == 1 else ""
            if flag:
                row.append("X", style="dark_orange" + bg_style)
            else:
                row.append(" ", style=bg_style.strip())
        console.print(row)


def insights_view(items: Sequence[InsightItem], date: pendulum.Date) -> None:
    header(f"insights {date_to_display_str(date)}")

    console = Console()
    if len(items) == 0:
        console.print("[grey50]Keep logging to discover insights[/grey50]")
        return

    table = Table(box=box.SIMPLE)
    table.add_column("insight")
    table.add_column("metrics")
    table.add_column("days", justify="right")

    direction_styles = {"positive": "green", "negative": "red", "neutral": ""}
    for item in items:
        metrics = item["metric_x"]
        if item["metric_y"] is not None:
            metrics += f" / {item['metric_y']}"
        table.add_row(
            Text(item["summary"], style=direction_styles[item["direction"]]),
            metrics,
            str(item["data_points"]),
        )
    console.print(table)


def compare_view(comparison: Comparison) -> None:
    header(f"compare {comparison['metric_x']} / {comparison['metric_y']}")

    table = Table(box=box.SIMPLE)
    table.add_column("date")
    table.add_column(comparison["metric_x"], justify="right")
    table.add_column(comparison["metric_y"], justify="right")

    for point in comparison["points"]:
        table.add_row(
            date_to_display_str(point["date"]),
            _with_unit(point["x"], comparison["unit_x"]),
            _with_unit(point["y"], comparison["unit_y"]),
        )

    console = Console()
    console.print(table)
    correlation = comparison["correlation"]
    if correlation is None:
        console.print("correlation: [grey50]not enough data[/grey50]")
    else:
        console.print(f"correlation: {correlation:.2f}")


def _with_unit(value: int, unit: Optional[str]) -> str:
    return f"{value} {unit}" if unit else str(value)


def analytics_view(analytics: MetricAnalytics, days: int = 7) -> None:
    """Streaks, average, most consistent weekdays and recent daily values."""
    header(f"analytics {analytics['metric_name']}")

    console = Console()
    console.print(
        f"current streak {analytics['current_streak']}  "
        f"best streak {analytics['max_streak']}  "
        f"average {analytics['average']:.1f} {analytics['unit'] or 'value'}"
    )

    if len(analytics["consistent_days"]) > 0:
        table = Table(box=box.SIMPLE, title="most consistent days")
        table.add_column("day")
        table.add_column("entries", justify="right")
        table.add_column("share")
        for day in analytics["consistent_days"][:3]:
            table.add_row(
                day["day_name"],
                str(day["count"]),
                f"{progress_bar(day['percentage'] / 100, 10)} {day['percentage']:.0f}%",
            )
        console.print(table)

    bars = analytics["last_7_days"] if days <= 7 else analytics["last_30_days"]
    peak = max((bar["value"] for bar in bars), default=0)
    for bar in bars:
        ratio = bar["value"] / peak if peak > 0 else 0.0
        row = Text(bar["label"].ljust(8))
        bar_style = "green" if bar["goal_met"] else "dark_orange"
        row.append(progress_bar(ratio), style=bar_style)
        if bar["value"] > 0:
            row.append(
                " " + format_value(analytics["kind"], bar["value"], analytics["unit"])
            )
        console.print(row)
