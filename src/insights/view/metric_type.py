# SPDX-License-Identifier: MIT

from rich import box
from rich.console import Console
from rich.table import Table

from insights.model.metric_type import MetricType
from insights.view.format import format_goal
from insights.view.header import header


def metric_types_view(
    metric_types: list[MetricType],
    columns: list[str] = ["name", "kind", "unit", "goal"],
) -> None:
    """Display list of metric types in a table."""
    header("metric types")

    table = Table(box=box.SIMPLE)
    for column in columns:
        table.add_column(column)

    for metric_type in metric_types:
        row = []
        for column in columns:
            column_value = ""
            if column == "goal":
                column_value = format_goal(metric_type)
            elif column == "unit":
                column_value = metric_type["unit"] or ""
            elif column == "id":
                column_value = metric_type["id"]
            elif column == "name":
                column_value = metric_type["name"]
            elif column == "kind":
                column_value = metric_type["kind"]
            row.append(column_value)
        table.add_row(*row)

    console = Console()
    console.print(table)


def single_metric_type_view(metric_type: MetricType) -> None:
    """Display detailed view of a single metric type."""
    header("metric type")

    table = Table(box=box.SIMPLE)
    table.add_column("property")
    table.add_column("value")

    table.add_row("id", metric_type["id"])
    table.add_row("name", metric_type["name"])
    table.add_row("kind", metric_type["kind"])
    table.add_row("unit", metric_type["unit"] or "")
    table.add_row("goal", format_goal(metric_type))

    console = Console()
    console.print(table)
