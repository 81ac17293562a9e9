# SPDX-License-Identifier: MIT

import asyncio
from typing import Annotated, Optional

import typer

from insights.model.entry import Entry
from insights.model.metric_type import MetricType
from insights.model.result import MutationOutcome
from insights.repository.configuration import CONFIGURATION_REPO
from insights.service.aggregation import (
    clamp_page_index,
    history_by_date,
    page_count,
    paginate,
)
from insights.service.stepper import SteppedInputController
from insights.service.workspace import Workspace
from insights.terminal.custom_typer import AliasedTyperGroup
from insights.terminal.parse import parse_date, parse_date_optional
from insights.terminal.runtime import (
    console,
    report_outcome,
    require_metric_type,
    run_with_workspace,
)
from insights.time import minutes_from_str
from insights.view.entry import history_view, single_entry_view

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


def _controller_for(
    workspace: Workspace,
    metric_type: MetricType,
    date_param: Optional[str],
    outcomes: list[asyncio.Future[MutationOutcome]],
) -> SteppedInputController:
    """Stepped input bound to one metric type and day."""
    date = parse_date(date_param)

    def get_value() -> int:
        entry = workspace.entries.lookup(metric_type["id"], date)
        return entry["value"] if entry is not None else 0

    def on_change(value: int) -> asyncio.Future[MutationOutcome]:
        outcome = workspace.mutations.log_value(metric_type["id"], date, value)
        outcomes.append(outcome)
        return outcome

    return SteppedInputController(get_value, on_change)


async def _finish(
    workspace: Workspace,
    metric_type: MetricType,
    outcomes: list[asyncio.Future[MutationOutcome]],
) -> None:
    if len(outcomes) == 0:
        console.print("[grey50]Nothing to change[/grey50]")
        return
    for future in outcomes:
        outcome = await future
        report_outcome(outcome)
        if outcome["status"] == "confirmed" and outcome["entry"] is not None:
            single_entry_view(outcome["entry"], metric_type)
        elif outcome["status"] == "confirmed":
            console.print(f"[green]Cleared '{metric_type['name']}'[/green]")


# ─────────────────────────────────────────────────────────────
# Logging values
# ─────────────────────────────────────────────────────────────


@app.command("log, l", no_args_is_help=True)
def log(
    name: str,
    value: Annotated[
        Optional[str],
        typer.Argument(help="Number, or H:MM / minutes for Duration"),
    ] = None,
    date: Annotated[
        Optional[str],
        typer.Option("--date", "-d", help="YYYY-MM-DD, today, yesterday or -N"),
    ] = None,
) -> None:
    """
    Set the value logged for a metric type on a day. Zero clears the entry.
    """

    async def action(workspace: Workspace) -> None:
        metric_type = require_metric_type(workspace, name)
        outcomes: list[asyncio.Future[MutationOutcome]] = []
        controller = _controller_for(workspace, metric_type, date, outcomes)

        draft = value
        if draft is None:
            if metric_type["kind"] != "Boolean":
                raise typer.BadParameter("A value is required")
            draft = "1"
        elif metric_type["kind"] == "Duration":
            try:
                draft = str(minutes_from_str(draft))
            except ValueError:
                raise typer.BadParameter(f"Invalid duration: {value}")

        controller.set_draft(draft)
        if controller.commit_edit() is None:
            raise typer.BadParameter(f"Invalid value: {value}")
        await _finish(workspace, metric_type, outcomes)

    run_with_workspace(action)


@app.command("step, st", no_args_is_help=True)
def step(
    name: str,
    down: Annotated[
        bool, typer.Option("--down", "-dn", help="Step down instead of up")
    ] = False,
    date: Annotated[Optional[str], typer.Option("--date", "-d")] = None,
) -> None:
    """Increase or decrease the value for a day by one."""

    async def action(workspace: Workspace) -> None:
        metric_type = require_metric_type(workspace, name)
        outcomes: list[asyncio.Future[MutationOutcome]] = []
        controller = _controller_for(workspace, metric_type, date, outcomes)
        controller.press(-1 if down else 1)
        await _finish(workspace, metric_type, outcomes)

    run_with_workspace(action)


@app.command("toggle, t", no_args_is_help=True)
def toggle(
    name: str,
    date: Annotated[Optional[str], typer.Option("--date", "-d")] = None,
) -> None:
    """Check or uncheck a Boolean metric type for a day."""

    async def action(workspace: Workspace) -> None:
        metric_type = require_metric_type(workspace, name)
        if metric_type["kind"] != "Boolean":
            raise typer.BadParameter(f"'{metric_type['name']}' is not a Boolean metric")
        outcome = workspace.mutations.toggle_boolean(metric_type["id"], parse_date(date))
        await _finish(workspace, metric_type, [outcome])

    run_with_workspace(action)


@app.command("set, s", no_args_is_help=True)
def set_value(
    entry_id: str,
    value: int,
) -> None:
    """Overwrite the value of an existing entry by id."""

    async def action(workspace: Workspace) -> None:
        entry = workspace.entries.get(entry_id)
        if entry is None:
            raise typer.BadParameter(f"No entry with id '{entry_id}'")
        metric_type = require_metric_type(workspace, entry["metric_type_name"])
        outcome = workspace.mutations.update_value(entry_id, value)
        await _finish(workspace, metric_type, [outcome])

    run_with_workspace(action)


@app.command("delete, d", no_args_is_help=True)
def delete(
    name: str,
    date: Annotated[Optional[str], typer.Option("--date", "-d")] = None,
) -> None:
    """Delete the entry for a metric type on a day."""

    async def action(workspace: Workspace) -> None:
        metric_type = require_metric_type(workspace, name)
        entry = workspace.entries.lookup(metric_type["id"], parse_date(date))
        if entry is None:
            console.print("[grey50]Nothing logged for that day[/grey50]")
            return
        outcome = await workspace.mutations.delete_entry(entry["id"])
        report_outcome(outcome)
        console.print(f"[green]Deleted entry for '{metric_type['name']}'[/green]")

    run_with_workspace(action)


# ─────────────────────────────────────────────────────────────
# History
# ─────────────────────────────────────────────────────────────


@app.command("history, h")
def history(
    name: Annotated[
        Optional[str], typer.Option("--metric", "-m", help="Only this metric type")
    ] = None,
    page: Annotated[int, typer.Option("--page", "-p", min=1)] = 1,
    page_size: Annotated[Optional[int], typer.Option("--page-size", min=1)] = None,
    from_date: Annotated[Optional[str], typer.Option("--from", "-f")] = None,
    to_date: Annotated[Optional[str], typer.Option("--to")] = None,
) -> None:
    """Show logged entries grouped by day, newest first."""
    config = CONFIGURATION_REPO.get_config()
    size = page_size if page_size is not None else config["history_page_size"]

    async def action(
        workspace: Workspace,
    ) -> tuple[list[tuple], list[MetricType], int, int]:
        metric_type_id = (
            require_metric_type(workspace, name)["id"] if name is not None else None
        )
        entries: list[Entry] = workspace.entries.snapshot()
        groups = history_by_date(entries, metric_type_id)
        pages = page_count(len(groups), size)
        page_index = clamp_page_index(page - 1, pages)
        return (
            paginate(groups, size, page_index),
            workspace.metric_types.snapshot(),
            page_index,
            pages,
        )

    groups, metric_types, page_index, pages = run_with_workspace(
        action, parse_date_optional(from_date), parse_date_optional(to_date)
    )
    history_view(groups, metric_types, page_index, pages)
