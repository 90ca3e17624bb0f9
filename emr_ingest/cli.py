"""CLI entry point for emr-ingest, built on cli-core-yo.

Provides ``launch``, ``add-step``, ``status`` and ``running`` commands for
managing an EMR batch-ingestion cluster.

Usage::

    python -m emr_ingest.cli --help
    emr-ingest launch --config cluster.yaml --profile my-profile --debug-step
    emr-ingest add-step --cluster ingest-prod --job-name load --script s3://b/load.sh
    emr-ingest status --cluster ingest-prod
    emr-ingest running ingest-prod --region eu-central-1
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

import typer
from cli_core_yo import output
from cli_core_yo.app import create_app
from cli_core_yo.runtime import _reset, initialize
from cli_core_yo.spec import CliSpec, XdgSpec

from emr_ingest import ui
from emr_ingest.errors import ClusterControlError, ValidationError

# Exit codes
EXIT_SUCCESS = 0
EXIT_VALIDATION_FAILURE = 1
EXIT_AWS_FAILURE = 2
EXIT_NOT_RUNNING = 3

# ── App specification ────────────────────────────────────────────────────────

spec = CliSpec(
    prog_name="emr-ingest",
    app_display_name="EMR Batch Ingest",
    dist_name="emr-batch-ingest",
    root_help="Launch and feed EMR clusters for batch data ingestion.",
    xdg=XdgSpec(app_dir_name="emr-ingest"),
)

app = create_app(spec)


# ── Root callback (global options) ───────────────────────────────────────────


@app.callback()
def _root_callback(
    json_flag: bool = typer.Option(
        False, "--json", "-j", help="Output as JSON."
    ),
) -> None:
    """EMR batch-ingestion cluster control."""
    _reset()
    debug = os.environ.get("CLI_CORE_YO_DEBUG") == "1"
    xdg_paths = app._cli_core_yo_xdg_paths  # type: ignore[attr-defined]
    initialize(spec, xdg_paths, json_mode=json_flag, debug=debug)


def _setup_logging(debug: bool) -> None:
    if debug:
        logging.basicConfig(level=logging.DEBUG)


def _exit_code_for(exc: ClusterControlError) -> int:
    if isinstance(exc, ValidationError):
        return EXIT_VALIDATION_FAILURE
    return EXIT_AWS_FAILURE


def _attach(cluster: str, profile: Optional[str]):
    """Build a controller attached to the last recorded launch of *cluster*."""
    from emr_ingest.cluster.controller import ClusterController
    from emr_ingest.state.store import latest_launch_record

    record = latest_launch_record(cluster)
    if record is None:
        output.error(f"No launch record found for cluster '{cluster}'.")
        raise typer.Exit(EXIT_VALIDATION_FAILURE)
    controller = ClusterController(
        record.cluster_name, record.region, profile=profile or record.profile or None,
    )
    controller.attach(record.cluster_handle)
    return controller


# ── launch command ───────────────────────────────────────────────────────────


@app.command()
def launch(
    config: str = typer.Option(
        ...,
        "--config",
        help="Path to the cluster description YAML.",
    ),
    profile: Optional[str] = typer.Option(
        None,
        "--profile",
        help="AWS CLI profile. Defaults to AWS_PROFILE env var, then 'default'.",
    ),
    region: Optional[str] = typer.Option(
        None,
        "--region",
        help="Override the region from the config file.",
    ),
    debug_step: bool = typer.Option(
        False,
        "--debug-step",
        help="Prepend the Hadoop debugging step (terminates the cluster on failure).",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """Launch a cluster from a YAML description and record its handle.

    Exit codes: 0 = launched, 1 = bad config, 2 = AWS failure.
    """
    from emr_ingest.aws.context import resolve_profile, resolve_region
    from emr_ingest.cluster.controller import ClusterController
    from emr_ingest.config.loader import apply_to_builder, load_cluster_config
    from emr_ingest.state.models import LaunchRecord
    from emr_ingest.state.store import write_launch_record

    _setup_logging(debug)

    try:
        cfg = load_cluster_config(config)
    except (FileNotFoundError, ValidationError) as exc:
        output.error(str(exc))
        raise typer.Exit(EXIT_VALIDATION_FAILURE) from exc

    target_region = resolve_region(region or cfg.region)
    resolved_profile = resolve_profile(profile)
    output.action(f"Starting cluster {cfg.name} in {target_region} ...")

    try:
        with ClusterController(cfg.name, target_region, profile=resolved_profile) as ctl:
            apply_to_builder(cfg, ctl.builder)
            result = ctl.launch(enable_diagnostics_step=debug_step)
    except ClusterControlError as exc:
        output.error(str(exc))
        raise typer.Exit(_exit_code_for(exc)) from exc

    ui.launch_summary(
        cfg.name, target_region, result.cluster_handle, diagnostics=debug_step,
    )

    # The cluster exists from here on; a failed write must not hide its handle.
    try:
        path = write_launch_record(
            LaunchRecord(
                cluster_name=cfg.name,
                region=target_region,
                cluster_handle=result.cluster_handle,
                profile=resolved_profile,
                diagnostics_step=debug_step,
            )
        )
    except OSError as exc:
        output.warning(
            f"Cluster {result.cluster_handle} is up but its launch record "
            f"could not be written: {exc}"
        )
        raise typer.Exit(EXIT_SUCCESS) from exc

    output.detail(f"Launch record: {path}")
    raise typer.Exit(EXIT_SUCCESS)


# ── add-step command ─────────────────────────────────────────────────────────


@app.command("add-step")
def add_step(
    cluster: str = typer.Option(..., "--cluster", help="Cluster name used at launch."),
    job_name: str = typer.Option(..., "--job-name", help="Step name."),
    script: str = typer.Option(..., "--script", help="S3 location of the script to run."),
    profile: Optional[str] = typer.Option(None, "--profile", help="AWS CLI profile."),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """Append a script step to a launched cluster."""
    _setup_logging(debug)
    output.action(f"Adding job {job_name} to {cluster} ...")
    try:
        with _attach(cluster, profile) as ctl:
            ack = ctl.submit_step(job_name, script)
    except ClusterControlError as exc:
        output.error(str(exc))
        raise typer.Exit(_exit_code_for(exc)) from exc

    output.success(f"Job {job_name} added to {cluster}")
    ui.step_ids(job_name, ack.step_ids)
    raise typer.Exit(EXIT_SUCCESS)


# ── status command ───────────────────────────────────────────────────────────


@app.command()
def status(
    cluster: str = typer.Option(..., "--cluster", help="Cluster name used at launch."),
    profile: Optional[str] = typer.Option(None, "--profile", help="AWS CLI profile."),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """Show the provider's current state of a launched cluster."""
    _setup_logging(debug)
    try:
        with _attach(cluster, profile) as ctl:
            state = ctl.get_state()
            handle = ctl.cluster_handle
    except ClusterControlError as exc:
        output.error(str(exc))
        raise typer.Exit(_exit_code_for(exc)) from exc

    ui.cluster_state(cluster, handle, state)
    raise typer.Exit(EXIT_SUCCESS)


# ── running command ──────────────────────────────────────────────────────────


@app.command()
def running(
    name: str = typer.Argument(..., help="Cluster name (substring match unless --exact)."),
    region: Optional[str] = typer.Option(None, "--region", help="AWS region."),
    profile: Optional[str] = typer.Option(None, "--profile", help="AWS CLI profile."),
    exact: bool = typer.Option(False, "--exact", help="Require an exact name match."),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    """Exit 0 when a WAITING cluster named like NAME exists, 3 otherwise."""
    from emr_ingest.aws.context import resolve_region
    from emr_ingest.cluster.fleet import find_clusters

    _setup_logging(debug)
    target_region = resolve_region(region)
    try:
        matches = find_clusters(name, target_region, profile=profile, exact=exact)
    except ClusterControlError as exc:
        output.error(str(exc))
        raise typer.Exit(_exit_code_for(exc)) from exc

    if not matches:
        output.warning(f"No waiting cluster matching '{name}' in {target_region}")
        raise typer.Exit(EXIT_NOT_RUNNING)
    ui.waiting_clusters(matches, target_region)
    raise typer.Exit(EXIT_SUCCESS)


# ── Entry point ──────────────────────────────────────────────────────────────


def main() -> int:
    """Run the CLI and return an exit code."""
    try:
        app()
        return 0
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 0


if __name__ == "__main__":
    sys.exit(main())
