"""Tests for emr_ingest.cluster.fleet — fleet-wide running checks."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from emr_ingest.aws.emr import render_status
from emr_ingest.cluster.fleet import (
    WAITING_TOKEN,
    default_client_factory,
    find_clusters,
    is_cluster_running,
)
from emr_ingest.config.models import ClusterSummary
from emr_ingest.errors import ProviderError, StatusUnavailable


# ── helpers ──────────────────────────────────────────────────────────────


def _summary(name: str, state: str, cid: str = "j-1") -> ClusterSummary:
    return ClusterSummary(
        cluster_id=cid,
        name=name,
        state=state,
        status=render_status({"State": state, "StateChangeReason": {"Message": "x"}}),
    )


def _factory(summaries):
    client = MagicMock()
    if isinstance(summaries, Exception):
        client.list_clusters.side_effect = summaries
    else:
        client.list_clusters.return_value = summaries
    calls = []

    def factory(region, profile):
        calls.append((region, profile))
        return client

    return factory, client, calls


# ── is_cluster_running ───────────────────────────────────────────────────


class TestIsClusterRunning:
    def test_token(self):
        assert WAITING_TOKEN == "State: WAITING"

    def test_waiting_match(self):
        factory, _, _ = _factory([_summary("prod-cluster", "WAITING")])
        assert is_cluster_running("prod-cluster", "eu-west-1", client_factory=factory)

    def test_empty_list(self):
        factory, _, _ = _factory([])
        assert is_cluster_running("prod-cluster", "eu-west-1", client_factory=factory) is False

    def test_substring_name_matches(self):
        factory, _, _ = _factory([_summary("nightly-prod-cluster-2", "WAITING")])
        assert is_cluster_running("prod-cluster", "eu-west-1", client_factory=factory)

    def test_running_state_not_enough(self):
        factory, _, _ = _factory([_summary("prod-cluster", "RUNNING")])
        assert not is_cluster_running("prod-cluster", "eu-west-1", client_factory=factory)

    def test_other_name_waiting(self):
        factory, _, _ = _factory([
            _summary("staging", "WAITING"),
            _summary("prod-cluster", "TERMINATED"),
        ])
        assert not is_cluster_running("prod-cluster", "eu-west-1", client_factory=factory)

    def test_fresh_client_per_region_and_closed(self):
        factory, client, calls = _factory([])
        is_cluster_running("prod-cluster", "eu-west-1", profile="ops", client_factory=factory)
        assert calls == [("eu-west-1", "ops")]
        client.close.assert_called_once()

    def test_exact_rejects_substring(self):
        factory, _, _ = _factory([_summary("prod-cluster-old", "WAITING")])
        assert not is_cluster_running(
            "prod-cluster", "eu-west-1", client_factory=factory, exact=True,
        )

    def test_exact_match(self):
        factory, _, _ = _factory([_summary("prod-cluster", "WAITING")])
        assert is_cluster_running(
            "prod-cluster", "eu-west-1", client_factory=factory, exact=True,
        )

    def test_list_failure(self):
        factory, client, _ = _factory(ProviderError("denied"))
        with pytest.raises(StatusUnavailable, match="eu-west-1"):
            is_cluster_running("prod-cluster", "eu-west-1", client_factory=factory)
        client.close.assert_called_once()


# ── find_clusters ────────────────────────────────────────────────────────


class TestFindClusters:
    def test_returns_matches_only(self):
        factory, _, _ = _factory([
            _summary("prod-cluster-a", "WAITING", "j-A"),
            _summary("prod-cluster-b", "RUNNING", "j-B"),
            _summary("prod-cluster-c", "WAITING", "j-C"),
        ])
        found = find_clusters("prod-cluster", "eu-west-1", client_factory=factory)
        assert [s.cluster_id for s in found] == ["j-A", "j-C"]


class TestDefaultClientFactory:
    @patch("emr_ingest.cluster.fleet.EmrProvisioningClient")
    @patch("emr_ingest.cluster.fleet.AWSContext")
    def test_builds_from_context(self, mock_ctx_cls, mock_client_cls):
        client = default_client_factory("eu-west-1", "ops")
        mock_ctx_cls.build.assert_called_once_with("eu-west-1", "ops")
        mock_client_cls.from_context.assert_called_once_with(mock_ctx_cls.build.return_value)
        assert client is mock_client_cls.from_context.return_value
