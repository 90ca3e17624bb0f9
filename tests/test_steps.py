"""Tests for emr_ingest.cluster.steps — step factories."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from emr_ingest.cluster.steps import (
    COMMAND_RUNNER_JAR,
    DEBUGGING_COMMAND,
    DEBUGGING_STEP_NAME,
    make_debugging_step,
    make_job_step,
    script_runner_jar,
)
from emr_ingest.config.models import FailurePolicy


class TestScriptRunnerJar:
    def test_eu_central_1(self):
        assert (
            script_runner_jar("eu-central-1")
            == "s3://eu-central-1.elasticmapreduce/libs/script-runner/script-runner.jar"
        )

    def test_us_east_1(self):
        assert script_runner_jar("us-east-1").startswith("s3://us-east-1.elasticmapreduce/")


class TestMakeJobStep:
    def test_fields(self):
        step = make_job_step("job1", "s3://x/y", "eu-central-1")
        assert step.name == "job1"
        assert step.jar == script_runner_jar("eu-central-1")
        assert step.args == ("s3://x/y",)
        assert step.failure_policy is FailurePolicy.CONTINUE

    def test_blank_name_rejected(self):
        with pytest.raises(PydanticValidationError):
            make_job_step("", "s3://x/y", "eu-central-1")


class TestMakeDebuggingStep:
    def test_fields(self):
        step = make_debugging_step()
        assert step.name == DEBUGGING_STEP_NAME
        assert step.jar == COMMAND_RUNNER_JAR
        assert step.args == (DEBUGGING_COMMAND,)
        assert step.failure_policy is FailurePolicy.TERMINATE_CLUSTER
