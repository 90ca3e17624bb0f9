"""Launch record models and persistence."""

from emr_ingest.state.models import LaunchRecord
from emr_ingest.state.store import (
    config_dir,
    latest_launch_record,
    load_launch_record,
    write_launch_record,
)

__all__ = [
    "LaunchRecord",
    "config_dir",
    "latest_launch_record",
    "load_launch_record",
    "write_launch_record",
]
