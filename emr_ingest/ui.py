"""Rich renderers for EMR cluster results.

Plain status lines go through ``cli_core_yo.output``; this module draws
the cluster-shaped output: launch summaries, state lines coloured by
lifecycle phase, step ids and fleet listings.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from emr_ingest.config.models import ACTIVE_STATES, STATE_WAITING, TERMINAL_STATES, ClusterSummary

# Shared console; Rich decides whether the output is a terminal.
console = Console(stderr=False, force_terminal=None)


def state_style(state: str) -> str:
    """Rich style for an EMR cluster state."""
    if state == STATE_WAITING:
        return "bold green"
    if state in TERMINAL_STATES:
        return "bold red"
    if state in ACTIVE_STATES:
        return "cyan"
    return "yellow"


def state_text(state: str) -> Text:
    return Text(state, style=state_style(state))


def cluster_state(cluster: str, handle: Optional[str], state: str) -> None:
    """Print one cluster's state line, red when the cluster is gone."""
    line = Text.assemble(
        (f"{cluster}", "bold"),
        f" ({handle or '?'}) ",
        "State: ",
        state_text(state),
    )
    console.print(line)
    if state in TERMINAL_STATES:
        console.print("[dim]The cluster has shut down; launch a new one to add steps.[/]")


def launch_summary(
    name: str,
    region: str,
    handle: str,
    *,
    diagnostics: bool = False,
    record_path: Optional[Path] = None,
) -> None:
    body = Text.assemble(
        ("Name:    ", "bold"), f"{name}\n",
        ("Region:  ", "bold"), f"{region}\n",
        ("Handle:  ", "bold"), (handle, "bold cyan"),
    )
    if diagnostics:
        body.append("\n")
        body.append("Debug:   ", style="bold")
        body.append("Hadoop debugging step queued")
    if record_path is not None:
        body.append("\n")
        body.append("Record:  ", style="bold")
        body.append(str(record_path))
    console.print(
        Panel(
            body,
            title="[bold green]Cluster launched[/]",
            border_style="green",
            padding=(1, 2),
        )
    )


def step_ids(job_name: str, ids: Sequence[str]) -> None:
    """List the step ids returned for *job_name*."""
    if not ids:
        console.print(f"[yellow]No step id returned for {job_name}[/]")
        return
    for step_id in ids:
        console.print(f"  [bold]{job_name}[/] → [cyan]{step_id}[/]")


def waiting_clusters(summaries: Iterable[ClusterSummary], region: str) -> None:
    table = Table(title=f"Waiting clusters in {region}", title_justify="left")
    table.add_column("Name", style="bold")
    table.add_column("Id")
    table.add_column("State")
    for summary in summaries:
        table.add_row(summary.name, summary.cluster_id, state_text(summary.state))
    console.print(table)
