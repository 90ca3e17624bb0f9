"""Tests for emr_ingest.cli — typer commands with the controller mocked."""

from __future__ import annotations

import textwrap
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from emr_ingest.cli import (
    EXIT_AWS_FAILURE,
    EXIT_NOT_RUNNING,
    EXIT_SUCCESS,
    EXIT_VALIDATION_FAILURE,
    app,
)
from emr_ingest.config.models import ClusterSummary, LaunchResult, SubmissionAck
from emr_ingest.errors import CredentialError, LaunchFailed, SubmissionFailed
from emr_ingest.state.models import LaunchRecord
from emr_ingest.state.store import latest_launch_record, write_launch_record

runner = CliRunner()

CONFIG = textwrap.dedent(
    """\
    cluster:
      name: ingest-prod
      region: eu-central-1
      release_label: emr-5.20.0
      applications: [Hadoop, Spark]
      master_instance_type: m5.xlarge
      core_groups:
        - {instance_type: m5.xlarge, instance_count: 2}
    """
)


@pytest.fixture(autouse=True)
def _isolated(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("AWS_PROFILE", raising=False)


def _mock_controller_cls():
    ctl = MagicMock()
    ctl.__enter__.return_value = ctl
    ctl.__exit__.return_value = False
    cls = MagicMock(return_value=ctl)
    return cls, ctl


def _record():
    write_launch_record(
        LaunchRecord(
            run_id="20260201100000",
            cluster_name="ingest-prod",
            region="eu-central-1",
            cluster_handle="j-REC",
            profile="ops",
        )
    )


# ── launch ───────────────────────────────────────────────────────────────


class TestLaunchCommand:
    def test_success_writes_record(self, tmp_path):
        cfg = tmp_path / "cluster.yaml"
        cfg.write_text(CONFIG, encoding="utf-8")
        cls, ctl = _mock_controller_cls()
        ctl.launch.return_value = LaunchResult(cluster_handle="j-NEW")

        with patch("emr_ingest.cluster.controller.ClusterController", cls):
            result = runner.invoke(app, ["launch", "--config", str(cfg), "--debug-step"])

        assert result.exit_code == EXIT_SUCCESS, result.output
        cls.assert_called_once_with("ingest-prod", "eu-central-1", profile="default")
        ctl.launch.assert_called_once_with(enable_diagnostics_step=True)
        ctl.builder.add_master_node.assert_called_once_with("m5.xlarge")
        rec = latest_launch_record("ingest-prod")
        assert rec.cluster_handle == "j-NEW"
        assert rec.diagnostics_step is True

    def test_region_override(self, tmp_path):
        cfg = tmp_path / "cluster.yaml"
        cfg.write_text(CONFIG, encoding="utf-8")
        cls, ctl = _mock_controller_cls()
        ctl.launch.return_value = LaunchResult(cluster_handle="j-NEW")

        with patch("emr_ingest.cluster.controller.ClusterController", cls):
            runner.invoke(app, ["launch", "--config", str(cfg), "--region", "eu-west-1"])

        assert cls.call_args.args[1] == "eu-west-1"

    def test_missing_config(self, tmp_path):
        result = runner.invoke(app, ["launch", "--config", str(tmp_path / "nope.yaml")])
        assert result.exit_code == EXIT_VALIDATION_FAILURE

    def test_launch_failure(self, tmp_path):
        cfg = tmp_path / "cluster.yaml"
        cfg.write_text(CONFIG, encoding="utf-8")
        cls, ctl = _mock_controller_cls()
        ctl.launch.side_effect = LaunchFailed("rejected")

        with patch("emr_ingest.cluster.controller.ClusterController", cls):
            result = runner.invoke(app, ["launch", "--config", str(cfg)])

        assert result.exit_code == EXIT_AWS_FAILURE
        assert latest_launch_record("ingest-prod") is None

    def test_record_write_failure_keeps_handle(self, tmp_path):
        cfg = tmp_path / "cluster.yaml"
        cfg.write_text(CONFIG, encoding="utf-8")
        cls, ctl = _mock_controller_cls()
        ctl.launch.return_value = LaunchResult(cluster_handle="j-NEW")

        with patch("emr_ingest.cluster.controller.ClusterController", cls), patch(
            "emr_ingest.state.store.write_launch_record",
            side_effect=PermissionError("read-only"),
        ):
            result = runner.invoke(app, ["launch", "--config", str(cfg)])

        assert result.exit_code == EXIT_SUCCESS, result.output
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "j-NEW" in result.output

    def test_credential_failure(self, tmp_path):
        cfg = tmp_path / "cluster.yaml"
        cfg.write_text(CONFIG, encoding="utf-8")
        cls = MagicMock(side_effect=CredentialError("no creds"))

        with patch("emr_ingest.cluster.controller.ClusterController", cls):
            result = runner.invoke(app, ["launch", "--config", str(cfg)])

        assert result.exit_code == EXIT_AWS_FAILURE


# ── add-step ─────────────────────────────────────────────────────────────


class TestAddStepCommand:
    def test_success(self):
        _record()
        cls, ctl = _mock_controller_cls()
        ctl.submit_step.return_value = SubmissionAck(step_ids=("s-1",))

        with patch("emr_ingest.cluster.controller.ClusterController", cls):
            result = runner.invoke(app, [
                "add-step", "--cluster", "ingest-prod",
                "--job-name", "load", "--script", "s3://b/load.sh",
            ])

        assert result.exit_code == EXIT_SUCCESS, result.output
        cls.assert_called_once_with("ingest-prod", "eu-central-1", profile="ops")
        ctl.attach.assert_called_once_with("j-REC")
        ctl.submit_step.assert_called_once_with("load", "s3://b/load.sh")
        assert "s-1" in result.output

    def test_no_record(self):
        result = runner.invoke(app, [
            "add-step", "--cluster", "ghost", "--job-name", "j", "--script", "s3://x",
        ])
        assert result.exit_code == EXIT_VALIDATION_FAILURE

    def test_submission_failure(self):
        _record()
        cls, ctl = _mock_controller_cls()
        ctl.submit_step.side_effect = SubmissionFailed("throttled")

        with patch("emr_ingest.cluster.controller.ClusterController", cls):
            result = runner.invoke(app, [
                "add-step", "--cluster", "ingest-prod",
                "--job-name", "load", "--script", "s3://b/load.sh",
            ])

        assert result.exit_code == EXIT_AWS_FAILURE


# ── status ───────────────────────────────────────────────────────────────


class TestStatusCommand:
    def test_prints_state(self):
        _record()
        cls, ctl = _mock_controller_cls()
        ctl.get_state.return_value = "WAITING"
        ctl.cluster_handle = "j-REC"

        with patch("emr_ingest.cluster.controller.ClusterController", cls):
            result = runner.invoke(app, ["status", "--cluster", "ingest-prod"])

        assert result.exit_code == EXIT_SUCCESS, result.output
        assert "WAITING" in result.output


# ── running ──────────────────────────────────────────────────────────────


class TestRunningCommand:
    def test_running(self):
        found = [ClusterSummary(cluster_id="j-1", name="prod-cluster", state="WAITING")]
        with patch("emr_ingest.cluster.fleet.find_clusters", return_value=found) as fc:
            result = runner.invoke(app, ["running", "prod-cluster", "--region", "eu-west-1"])
        assert result.exit_code == EXIT_SUCCESS
        fc.assert_called_once_with("prod-cluster", "eu-west-1", profile=None, exact=False)

    def test_not_running(self):
        with patch("emr_ingest.cluster.fleet.find_clusters", return_value=[]):
            result = runner.invoke(app, ["running", "prod-cluster", "--region", "eu-west-1"])
        assert result.exit_code == EXIT_NOT_RUNNING

    def test_exact_flag(self):
        with patch("emr_ingest.cluster.fleet.find_clusters", return_value=[]) as fc:
            runner.invoke(app, ["running", "prod", "--region", "eu-west-1", "--exact"])
        assert fc.call_args.kwargs["exact"] is True
