"""Work step factories.

Job steps run through the regional EMR ``script-runner.jar`` with the
caller's script location as the only argument, and leave the cluster up
when they fail.  The optional diagnostics step pushes Hadoop debugging state
and takes the whole cluster down when it fails.
"""

from __future__ import annotations

from emr_ingest.config.models import FailurePolicy, WorkStep

SCRIPT_RUNNER_JAR = "s3://{region}.elasticmapreduce/libs/script-runner/script-runner.jar"

COMMAND_RUNNER_JAR = "command-runner.jar"
DEBUGGING_COMMAND = "state-pusher-script"
DEBUGGING_STEP_NAME = "Setup Hadoop Debugging"


def script_runner_jar(region: str) -> str:
    """Regional script-runner location.

    Examples:
        >>> script_runner_jar("eu-central-1")
        's3://eu-central-1.elasticmapreduce/libs/script-runner/script-runner.jar'
    """
    return SCRIPT_RUNNER_JAR.format(region=region)


def make_job_step(job_name: str, payload_location: str, region: str) -> WorkStep:
    """Build a CONTINUE-on-failure step running *payload_location*."""
    return WorkStep(
        name=job_name,
        jar=script_runner_jar(region),
        args=(payload_location,),
        failure_policy=FailurePolicy.CONTINUE,
    )


def make_debugging_step() -> WorkStep:
    """Build the TERMINATE_CLUSTER-on-failure Hadoop debugging step."""
    return WorkStep(
        name=DEBUGGING_STEP_NAME,
        jar=COMMAND_RUNNER_JAR,
        args=(DEBUGGING_COMMAND,),
        failure_policy=FailurePolicy.TERMINATE_CLUSTER,
    )
