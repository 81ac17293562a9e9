# SPDX-License-Identifier: MIT

import logging
from typing import Annotated

import typer
from rich.logging import RichHandler

from insights.terminal import configuration, entry, metric_type, progress
from insights.terminal.custom_typer import AliasedTyperGroup
from insights.view import state as view_state

app = typer.Typer(
    cls=AliasedTyperGroup,
    help="Insights - Personal metrics and goals in the CLI",
    no_args_is_help=True,
)
app.add_typer(metric_type.app, name="type, t", help="Manage metric types")
app.add_typer(entry.app, name="entry, e", help="Log and browse entries")
app.add_typer(progress.app, name="progress, p", help="Completion, goals and grids")
app.add_typer(configuration.app, name="config, c", help="View and edit settings")


@app.callback()
def main_callback(
    no_header: Annotated[
        bool,
        typer.Option(
            "--no-header",
            "-nh",
            help="Suppress header output in reports",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-V", help="Log remote calls and rollbacks"),
    ] = False,
) -> None:
    """
    Insights - Personal metrics and goals in the CLI

    Global options that apply to all commands.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(show_path=False)],
        )
    if no_header:
        view_state.set_show_header(False)


def run() -> None:
    app()
