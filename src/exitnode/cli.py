from __future__ import annotations

import asyncio
import signal
import sys
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, TypeVar

import click
from rich.console import Console

from . import __version__
from .autoselect import (
    auto_select,
    check_exit_node,
    disable_exit_node,
    load_catalog,
    set_exit_node_by_name,
)
from .catalog import filter_by_country
from .cli_errors import EXIT_ERROR, ConfigError, handle_cli_errors
from .commit import PreferenceCommitter
from .config import AppSettings, SelectionOptions
from .localapi import LocalClient
from .logging_config import setup_logging
from .models import Candidate
from .output import (
    print_candidates,
    print_exit_node_status,
    print_report,
    print_selection_details,
    protected_message,
)
from .probe import LocalAPIProber

console = Console()

T = TypeVar("T")


@dataclass
class CliState:
    settings: AppSettings
    options: SelectionOptions
    verbose: bool = False


async def _with_interrupt(run: Callable[[asyncio.Event], Awaitable[T]]) -> T:
    """Run ``run(stop)`` with SIGINT setting ``stop`` instead of killing the loop."""
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    installed = False
    try:
        loop.add_signal_handler(signal.SIGINT, stop.set)
        installed = True
    except (NotImplementedError, RuntimeError, ValueError):
        # No loop signal handlers on this platform or thread; Ctrl+C aborts
        pass
    try:
        return await run(stop)
    finally:
        if installed:
            loop.remove_signal_handler(signal.SIGINT)


def _client(state: CliState) -> LocalClient:
    return LocalClient(state.settings.SOCKET_PATH)


async def _auto_select(state: CliState, stop: Optional[asyncio.Event] = None) -> None:
    async with _client(state) as client:
        prober = None
        if not state.options.prefer_priority:
            prober = LocalAPIProber(client, timeout=state.options.probe_timeout)
        outcome = await auto_select(
            client, PreferenceCommitter(client), state.options, prober=prober, stop=stop
        )

    if state.verbose:
        if outcome.report is not None:
            print_report(console, outcome.report)
        print_selection_details(console, outcome.candidate)
    click.echo(protected_message(outcome.candidate))


async def _check(state: CliState) -> bool:
    async with _client(state) as client:
        exit_node = await check_exit_node(client)
    if exit_node is not None and state.verbose:
        print_exit_node_status(console, exit_node)
    return exit_node is not None


@click.group(invoke_without_command=True)
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable detailed logging.")
@click.option("--socket", "socket_path", type=str, help="Path to the tailscaled socket.")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also write logs to this file.")
@click.option("--country", type=str, help="Filter Mullvad nodes by country code (e.g. US, CH, SE).")
@click.option(
    "--prefer-priority",
    is_flag=True,
    help="Select by Tailscale priority instead of latency (faster but may not be optimal).",
)
@click.option("--top-regions", type=int, help="Countries tested in depth.")
@click.option("--per-region", type=int, help="Nodes tested per country.")
@click.option("--concurrency", type=int, help="Probes allowed in flight at once.")
@click.option("--probe-timeout", type=float, help="Seconds to wait for each probe.")
@click.pass_context
@handle_cli_errors(context="Exit node selection", exit_code=EXIT_ERROR)
def cli(
    ctx: click.Context,
    verbose: bool,
    socket_path: Optional[str],
    log_file: Optional[str],
    country: Optional[str],
    prefer_priority: bool,
    top_regions: Optional[int],
    per_region: Optional[int],
    concurrency: Optional[int],
    probe_timeout: Optional[float],
) -> None:
    """
    exitnode: keep WAN traffic behind the best Mullvad exit node.

    Without a command, checks for an active exit node and auto-selects one
    when none is active.
    """
    settings = AppSettings()
    if socket_path:
        settings.SOCKET_PATH = socket_path
    if log_file:
        settings.LOG_FILE = log_file
    setup_logging(
        "DEBUG" if verbose else settings.LOG_LEVEL,
        settings.MASK_SENSITIVE_DATA,
        log_file=settings.LOG_FILE or None,
    )

    try:
        options = settings.selection_options(
            country=country,
            prefer_priority=prefer_priority or None,
            top_regions=top_regions,
            per_region=per_region,
            concurrency=concurrency,
            probe_timeout=probe_timeout,
        )
    except ValueError as e:
        raise ConfigError(str(e)) from e

    state = CliState(settings=settings, options=options, verbose=verbose)
    ctx.obj = state

    if ctx.invoked_subcommand is not None:
        return

    if asyncio.run(_check(state)):
        click.echo("WAN is protected")
        return
    if verbose:
        click.echo("No exit node active. Auto-selecting best Mullvad node...")
    asyncio.run(_with_interrupt(lambda stop: _auto_select(state, stop)))


@cli.command()
@click.pass_obj
@handle_cli_errors(context="Checking exit node", exit_code=EXIT_ERROR)
def check(state: CliState) -> None:
    """Only check current exit node status (exit 0 when protected, 1 otherwise)."""
    if asyncio.run(_check(state)):
        click.echo("WAN is protected")
        return
    click.echo("No exit node active")
    sys.exit(1)


async def _list(state: CliState) -> List[Candidate]:
    async with _client(state) as client:
        return await load_catalog(client, state.options.provider_suffix)


@cli.command(name="list")
@click.pass_obj
@handle_cli_errors(context="Listing Mullvad nodes")
def list_nodes(state: CliState) -> None:
    """List all available Mullvad exit nodes."""
    candidates = asyncio.run(_list(state))
    if candidates and state.options.country:
        candidates = filter_by_country(candidates, state.options.country)
    print_candidates(console, candidates)


@cli.command()
@click.pass_obj
@handle_cli_errors(context="Auto-selecting Mullvad node")
def auto(state: CliState) -> None:
    """Auto-select the best Mullvad exit node."""
    asyncio.run(_with_interrupt(lambda stop: _auto_select(state, stop)))


async def _set(state: CliState, name: str) -> None:
    async with _client(state) as client:
        await set_exit_node_by_name(
            client, PreferenceCommitter(client), name, state.options.provider_suffix
        )


@cli.command(name="set")
@click.argument("name")
@click.pass_obj
@handle_cli_errors(context="Setting exit node")
def set_node(state: CliState, name: str) -> None:
    """Set a specific exit node by ID or hostname."""
    asyncio.run(_set(state, name))
    click.echo(f"Exit node set to: {name}")


async def _disable(state: CliState) -> None:
    async with _client(state) as client:
        await disable_exit_node(PreferenceCommitter(client))


@cli.command()
@click.pass_obj
@handle_cli_errors(context="Disabling exit node")
def disable(state: CliState) -> None:
    """Disable the exit node."""
    asyncio.run(_disable(state))
    click.echo("Exit node disabled successfully")


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":  # pragma: no cover - module execution convenience
    main()
