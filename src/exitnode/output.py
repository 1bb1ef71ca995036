"""Human readable rendering of candidates and selection results."""

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.table import Table

from .constants import MULLVAD_ADDON_NOTE
from .models import Candidate, ExitNodeStatus
from .selection import SelectionReport


def format_latency(latency_ms: float) -> str:
    return f"{latency_ms:.0f}ms"


def candidates_table(candidates: Sequence[Candidate]) -> Table:
    table = Table(title=f"Available Mullvad Exit Nodes ({len(candidates)})")
    table.add_column("HOSTNAME", no_wrap=True)
    table.add_column("LOCATION")
    table.add_column("ONLINE")
    table.add_column("PRIORITY", justify="right")
    for candidate in candidates:
        table.add_row(
            candidate.hostname,
            candidate.location,
            "Yes" if candidate.online else "No",
            str(candidate.priority),
        )
    return table


def print_candidates(console: Console, candidates: Sequence[Candidate]) -> None:
    if not candidates:
        console.print("No Mullvad exit nodes found.")
        console.print(f"Note: {MULLVAD_ADDON_NOTE}")
        return
    console.print(candidates_table(candidates))


def print_exit_node_status(console: Console, exit_node: ExitNodeStatus) -> None:
    console.print("Exit node active:")
    console.print(f"  ID: {exit_node.id}")
    console.print(f"  Online: {exit_node.online}")
    console.print(f"  IPs: {', '.join(exit_node.addresses)}")


def print_selection_details(console: Console, candidate: Candidate) -> None:
    console.print("\nSelected Mullvad node:")
    console.print(f"  Hostname: {candidate.hostname}")
    console.print(f"  Location: {candidate.location}")
    console.print(f"  Priority: {candidate.priority}")
    if candidate.measured:
        console.print(f"  Latency: {format_latency(candidate.latency_ms)}")
    console.print(f"  Online: {candidate.online}")


def print_report(console: Console, report: SelectionReport) -> None:
    """Summary of the latency search, shown in verbose mode."""
    table = Table(title=f"Latency test results ({report.probes} probes)")
    table.add_column("#", justify="right")
    table.add_column("HOSTNAME", no_wrap=True)
    table.add_column("LOCATION")
    table.add_column("LATENCY", justify="right")
    for position, candidate in enumerate(report.ranked, start=1):
        latency = format_latency(candidate.latency_ms) if candidate.measured else "failed"
        table.add_row(str(position), candidate.hostname, candidate.location, latency)
    console.print(table)


def protected_message(candidate: Candidate) -> str:
    message = f"WAN is now protected via {candidate.hostname} ({candidate.location})"
    if candidate.measured:
        message += f" - Latency: {format_latency(candidate.latency_ms)}"
    return message
