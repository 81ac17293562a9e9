# SPDX-License-Identifier: MIT

from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from insights import configuration
from insights.repository.configuration import CONFIGURATION_REPO
from insights.terminal.custom_typer import AliasedTyperGroup

app = typer.Typer(cls=AliasedTyperGroup, no_args_is_help=True)


def _configuration_table(title: Optional[str] = None) -> Table:
    config = CONFIGURATION_REPO.get_config()

    table = Table(title=title)
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="magenta")

    table.add_row("remote", config["remote"])
    table.add_row("api_base_url", config["api_base_url"])
    table.add_row("api_timeout_seconds", str(config["api_timeout_seconds"]))
    table.add_row("auth_cookie", "set" if config["auth_cookie"] else "None")
    table.add_row("data_path", str(configuration.DATA_PATH))
    table.add_row("history_page_size", str(config["history_page_size"]))
    table.add_row("message_timeout_ms", str(config["message_timeout_ms"]))
    table.add_row(
        "show_header",
        "✓ Enabled" if config["show_header"] else "✗ Disabled",
    )
    return table


@app.command("view, v")
def view() -> None:
    """Display current configuration settings."""
    console = Console()
    console.print(_configuration_table())

    yaml_library_type = "untested"
    try:
        from yaml import CDumper as Dumper  # noqa: F401
        from yaml import CLoader as Loader  # noqa: F401

        yaml_library_type = "C"
    except ImportError:
        from yaml import Loader  # type: ignore[assignment] # noqa: F401

        yaml_library_type = "Python"

    console.print()
    console.print(f"YAML Library Type: {yaml_library_type}")


@app.command("set, s")
def set(
    remote: Annotated[
        Optional[str],
        typer.Option("--remote", help="file or http"),
    ] = None,
    api_base_url: Annotated[
        Optional[str],
        typer.Option("--api-base-url", help="Base URL of the Insights server"),
    ] = None,
    api_timeout_seconds: Annotated[
        Optional[float],
        typer.Option("--api-timeout-seconds", min=0.1),
    ] = None,
    auth_cookie: Annotated[
        Optional[str],
        typer.Option("--auth-cookie", help="Value of the Insights.Auth cookie"),
    ] = None,
    remove_auth_cookie: Annotated[
        bool, typer.Option("--remove-auth-cookie")
    ] = False,
    data_path: Annotated[
        Optional[str],
        typer.Option("--data-path", help="Directory for the file remote"),
    ] = None,
    remove_data_path: Annotated[
        bool,
        typer.Option(
            "--remove-data-path", help="Reset data path to the platform default"
        ),
    ] = False,
    history_page_size: Annotated[
        Optional[int], typer.Option("--history-page-size", min=1)
    ] = None,
    message_timeout_ms: Annotated[
        Optional[int], typer.Option("--message-timeout-ms", min=0)
    ] = None,
    show_header: Annotated[
        Optional[bool],
        typer.Option("--show-header/--no-show-header"),
    ] = None,
) -> None:
    """
    Update configuration settings.
    """
    if remote is not None and remote not in ("file", "http"):
        typer.echo(f"Invalid remote: {remote}. Valid options: file, http")
        raise typer.Exit(1)

    CONFIGURATION_REPO.update_config(
        remote=remote,  # type: ignore[arg-type]
        api_base_url=api_base_url,
        api_timeout_seconds=api_timeout_seconds,
        auth_cookie=auth_cookie,
        remove_auth_cookie=remove_auth_cookie,
        data_path=data_path,
        remove_data_path=remove_data_path,
        history_page_size=history_page_size,
        message_timeout_ms=message_timeout_ms,
        show_header=show_header,
    )

    console = Console()
    console.print("[green]Configuration updated successfully![/green]\n")
    console.print(_configuration_table("Updated Configuration"))
