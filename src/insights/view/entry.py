# SPDX-License-Identifier: MIT

import pendulum
from rich import box
from rich.console import Console
from rich.table import Table

from insights.model.entity_id import is_temporary_id
from insights.model.entry import Entry
from insights.model.metric_type import MetricType
from insights.time import date_to_display_str
from insights.view.format import format_value
from insights.view.header import header


def history_view(
    page: list[tuple[pendulum.Date, list[Entry]]],
    metric_types: list[MetricType],
    page_index: int,
    pages: int,
) -> None:
    """Entries grouped by day, newest first, one page at a time."""
    header("history")

    by_id = {mt["id"]: mt for mt in metric_types}

    table = Table(box=box.SIMPLE)
    table.add_column("date")
    table.add_column("metric")
    table.add_column("value")

    for date, entries in page:
        first = True
        for entry in entries:
            metric_type = by_id.get(entry["metric_type_id"])
            value = (
                format_value(metric_type["kind"], entry["value"], metric_type["unit"])
                if metric_type is not None
                else str(entry["value"])
            )
            table.add_row(
                date_to_display_str(date) if first else "",
                entry["metric_type_name"],
                value,
            )
            first = False

    console = Console()
    if len(page) == 0:
        console.print("[grey50]No entries in this range[/grey50]")
        return
    console.print(table)
    console.print(f"[grey50]page {page_index + 1} of {max(pages, 1)}[/grey50]")


def single_entry_view(entry: Entry, metric_type: MetricType) -> None:
    header("entry")

    table = Table(box=box.SIMPLE)
    table.add_column("property")
    table.add_column("value")

    status = "pending" if is_temporary_id(entry["id"]) else "saved"
    table.add_row("metric", metric_type["name"])
    table.add_row("date", date_to_display_str(entry["date"]))
    table.add_row(
        "value", format_value(metric_type["kind"], entry["value"], metric_type["unit"])
    )
    table.add_row("status", status)

    console = Console()
    console.print(table)
