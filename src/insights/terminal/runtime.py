# SPDX-License-Identifier: MIT

import asyncio
import logging
from typing import Awaitable, Callable, Optional

import pendulum
import typer
from rich.console import Console

from insights import configuration
from insights.model.metric_type import MetricType
from insights.model.result import Failure, MutationOutcome
from insights.remote.file import FileRemoteService
from insights.remote.http import HttpRemoteService
from insights.remote.protocol import RemoteService
from insights.repository.configuration import CONFIGURATION_REPO
from insights.service.workspace import Workspace

logger = logging.getLogger(__name__)

console = Console()


def open_remote(config: configuration.Configuration) -> RemoteService:
    if config["remote"] == "http":
        return HttpRemoteService(
            config["api_base_url"],
            timeout_seconds=config["api_timeout_seconds"],
            auth_cookie=config["auth_cookie"],
        )
    return FileRemoteService(configuration.DATA_PATH)


def run_with_workspace[T](
    action: Callable[[Workspace], Awaitable[T]],
    from_date: Optional[pendulum.Date] = None,
    to_date: Optional[pendulum.Date] = None,
) -> T:
    """
    Load a workspace from the configured remote, run action against it and
    wait for every optimistic mutation it started to settle.
    """
    config = CONFIGURATION_REPO.get_config()

    async def main() -> T:
        remote = open_remote(config)
        try:
            workspace = Workspace(remote, config["message_timeout_ms"])
            loaded = await workspace.load(from_date, to_date)
            if isinstance(loaded, Failure):
                report_error(loaded.error)
                raise typer.Exit(1)
            value = await action(workspace)
            await workspace.mutations.drain()
            return value
        finally:
            if isinstance(remote, HttpRemoteService):
                await remote.aclose()

    return asyncio.run(main())


def require_metric_type(workspace: Workspace, name: str) -> MetricType:
    metric_type = workspace.metric_types.find_by_name(name)
    if metric_type is None:
        raise typer.BadParameter(f"No metric type named '{name}'")
    return metric_type


def report_error(message: str) -> None:
    console.print(f"[red]{message}[/red]")


def report_outcome(outcome: MutationOutcome) -> None:
    if outcome["status"] == "rolled_back":
        report_error(outcome["error"] or "Remote call failed")
        raise typer.Exit(1)
    if outcome["status"] == "dropped":
        console.print("[yellow]Another change for this day is still in flight[/yellow]")
    elif outcome["status"] == "noop":
        console.print("[grey50]Nothing to change[/grey50]")
