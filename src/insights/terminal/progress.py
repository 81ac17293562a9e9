# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer

from insights.service.aggregation import (
    compare as compare_metric_types,
    goal_status,
    insights as find_insights,
    metric_analytics,
    streaks,
    week_window,
)
from insights.service.workspace import Workspace
from insights.terminal.custom_typer import AliasedTyperGroup
from insights.terminal.parse import parse_date, parse_month
from insights.terminal.runtime import require_metric_type, run_with_workspace
from insights.time import today
from insights.view.progress import (
    analytics_view,
    compare_view,
    goals_view,
    grid_view,
    insights_view,
    today_view,
)

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


@app.command("today, t")
def today_report(
    date: Annotated[Optional[str], typer.Option("--date", "-d")] = None,
) -> None:
    """Which metric types have been logged on a day."""
    day = parse_date(date)

    async def action(workspace: Workspace) -> None:
        today_view(workspace.metric_types.snapshot(), workspace.entries.snapshot(), day)

    run_with_workspace(action, day, day)


@app.command("goals, g")
def goals(
    date: Annotated[Optional[str], typer.Option("--date", "-d")] = None,
) -> None:
    """Goal progress and streaks per metric type."""
    day = parse_date(date)
    _, week_end = week_window(day)

    async def action(workspace: Workspace) -> None:
        entries = workspace.entries.snapshot()
        rows = [
            (
                metric_type,
                goal_status(metric_type, entries, day),
                streaks(metric_type, entries, min(day, today())),
            )
            for metric_type in workspace.metric_types.snapshot()
        ]
        goals_view(rows, day)

    # streaks need the full history up to the end of the week
    run_with_workspace(action, None, week_end)


@app.command("grid, gr")
def grid(
    month: Annotated[
        Optional[str], typer.Option("--month", "-m", help="YYYY-MM")
    ] = None,
) -> None:
    """Monthly activity grid, one row per metric type."""
    first = parse_month(month)

    async def action(workspace: Workspace) -> None:
        grid_view(
            workspace.metric_types.snapshot(), workspace.entries.snapshot(), first
        )

    run_with_workspace(action, first, first.end_of("month"))


@app.command("insights, i")
def insights_report() -> None:
    """Notable streaks, averages and effects between metric types."""
    day = today()

    async def action(workspace: Workspace) -> None:
        items = find_insights(
            workspace.metric_types.snapshot(), workspace.entries.snapshot(), day
        )
        insights_view(items, day)

    run_with_workspace(action)


@app.command("compare, c", no_args_is_help=True)
def compare(name_x: str, name_y: str) -> None:
    """Values of two metric types side by side, with their correlation."""

    async def action(workspace: Workspace) -> None:
        metric_type_x = require_metric_type(workspace, name_x)
        metric_type_y = require_metric_type(workspace, name_y)
        compare_view(
            compare_metric_types(
                metric_type_x, metric_type_y, workspace.entries.snapshot()
            )
        )

    run_with_workspace(action)


@app.command("analytics, a", no_args_is_help=True)
def analytics(
    name: str,
    month: Annotated[
        bool, typer.Option("--month", "-m", help="Show the last 30 days")
    ] = False,
) -> None:
    """Streaks, average and weekday consistency of one metric type."""
    day = today()

    async def action(workspace: Workspace) -> None:
        metric_type = require_metric_type(workspace, name)
        analytics_view(
            metric_analytics(metric_type, workspace.entries.snapshot(), day),
            30 if month else 7,
        )

    run_with_workspace(action)
