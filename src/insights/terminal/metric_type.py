# SPDX-License-Identifier: MIT

from typing import Annotated, Optional, Union

import typer

from insights.model.metric_type import MetricType
from insights.model.result import Failure
from insights.model.weekday_mask import WeekdayMask
from insights.service.workspace import Workspace
from insights.terminal.custom_typer import AliasedTyperGroup
from insights.terminal.parse import parse_weekdays
from insights.terminal.runtime import (
    console,
    report_error,
    require_metric_type,
    run_with_workspace,
)
from insights.view.metric_type import metric_types_view, single_metric_type_view

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


# ─────────────────────────────────────────────────────────────
# Metric Type Management
# ─────────────────────────────────────────────────────────────


@app.command("add, a", no_args_is_help=True)
def add(
    name: str,
    kind: Annotated[
        str,
        typer.Option("--kind", "-k", help="Duration, Number, Boolean"),
    ] = "Number",
    unit: Annotated[
        Optional[str],
        typer.Option("--unit", "-u", help="Unit shown next to values"),
    ] = None,
    goal: Annotated[
        Optional[str],
        typer.Option("--goal", "-g", help="Goal target, minutes for Duration"),
    ] = None,
    cadence: Annotated[
        str,
        typer.Option("--cadence", "-c", help="Daily, Weekly"),
    ] = "Weekly",
    days: Annotated[
        Optional[list[str]],
        typer.Option(
            "--day",
            "-d",
            help="Weekday a Daily goal applies to (repeatable, default: all)",
        ),
    ] = None,
) -> None:
    """Create a new metric type."""
    goal_days = WeekdayMask.of(*parse_weekdays(days)) if days else WeekdayMask()

    async def action(workspace: Workspace) -> None:
        result = await workspace.metric_type_actions.create(
            name, kind, unit, goal, cadence, goal_days
        )
        if isinstance(result, Failure):
            report_error(result.error)
            raise typer.Exit(1)
        single_metric_type_view(result.value)

    run_with_workspace(action)


@app.command("modify, m", no_args_is_help=True)
def modify(
    name: str,
    new_name: Annotated[Optional[str], typer.Option("--name", "-n")] = None,
    kind: Annotated[
        Optional[str],
        typer.Option("--kind", "-k", help="Duration, Number, Boolean"),
    ] = None,
    unit: Annotated[Optional[str], typer.Option("--unit", "-u")] = None,
    remove_unit: Annotated[bool, typer.Option("--remove-unit")] = False,
    goal: Annotated[
        Optional[str],
        typer.Option("--goal", "-g", help="Goal target, minutes for Duration"),
    ] = None,
    cadence: Annotated[
        Optional[str],
        typer.Option("--cadence", "-c", help="Daily, Weekly"),
    ] = None,
    days: Annotated[
        Optional[list[str]],
        typer.Option("--day", "-d", help="Replace the goal days (repeatable)"),
    ] = None,
    toggle_days: Annotated[
        Optional[list[str]],
        typer.Option("--toggle-day", "-td", help="Flip a single goal day"),
    ] = None,
    remove_goal: Annotated[bool, typer.Option("--remove-goal")] = False,
) -> None:
    """Modify an existing metric type."""

    async def action(workspace: Workspace) -> None:
        metric_type = require_metric_type(workspace, name)
        current_goal = metric_type["goal"]

        goal_target: Optional[Union[str, int]] = (
            current_goal["target"] if current_goal is not None else None
        )
        goal_cadence = (
            current_goal["cadence"] if current_goal is not None else "Weekly"
        )
        goal_days = (
            WeekdayMask(current_goal["days"])
            if current_goal is not None
            else WeekdayMask()
        )

        if goal is not None:
            goal_target = goal
        if cadence is not None:
            goal_cadence = cadence
        if days:
            goal_days = WeekdayMask.of(*parse_weekdays(days))
        for day in parse_weekdays(toggle_days):
            goal_days = goal_days.toggle(day)
        if remove_goal:
            goal_target = None

        result = await workspace.metric_type_actions.update(
            metric_type["id"],
            new_name if new_name is not None else metric_type["name"],
            kind if kind is not None else metric_type["kind"],
            None if remove_unit else (unit if unit is not None else metric_type["unit"]),
            goal_target,
            goal_cadence,
            goal_days,
        )
        if isinstance(result, Failure):
            report_error(result.error)
            raise typer.Exit(1)
        single_metric_type_view(result.value)

    run_with_workspace(action)


@app.command("delete, d", no_args_is_help=True)
def delete(
    name: str,
    yes: Annotated[
        bool, typer.Option("--yes", "-y", help="Skip the confirmation prompt")
    ] = False,
) -> None:
    """Delete a metric type together with all of its entries."""

    async def action(workspace: Workspace) -> None:
        metric_type = require_metric_type(workspace, name)
        if not yes:
            typer.confirm(
                f"Delete '{metric_type['name']}' and all of its entries?",
                abort=True,
            )
        result = await workspace.metric_type_actions.delete(metric_type["id"])
        if isinstance(result, Failure):
            report_error(result.error)
            raise typer.Exit(1)
        console.print(f"[green]Deleted '{metric_type['name']}'[/green]")

    run_with_workspace(action)


@app.command("list, ls")
def list_metric_types(
    show_ids: Annotated[bool, typer.Option("--ids", help="Show ids")] = False,
) -> None:
    """List all metric types."""

    async def action(workspace: Workspace) -> list[MetricType]:
        return workspace.metric_types.snapshot()

    columns = ["name", "kind", "unit", "goal"]
    if show_ids:
        columns = ["id", *columns]
    metric_types_view(run_with_workspace(action), columns)
