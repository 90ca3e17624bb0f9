"""Launch record persisted after a successful launch.

Matches the JSON written by :func:`emr_ingest.state.store.write_launch_record`::

    {
      "cluster_handle": "j-2AXXXXXXGAPLF",
      "cluster_name": "ingest-prod",
      "diagnostics_step": false,
      "profile": "default",
      "region": "eu-central-1",
      "run_id": "YYYYMMDDHHMMSS"
    }
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

from pydantic import BaseModel, Field


class LaunchRecord(BaseModel):
    """Identity of a launched cluster, enough to attach a controller later."""

    run_id: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S"),
    )
    cluster_name: str
    region: str
    cluster_handle: str
    profile: str = ""
    diagnostics_step: bool = False

    def to_sorted_json(self, indent: int = 2) -> str:
        """Serialise with sorted keys for deterministic output."""
        return json.dumps(
            self.model_dump(mode="json"),
            indent=indent,
            sort_keys=True,
        )
