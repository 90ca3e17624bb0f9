"""Persistent storage for launch records.

Writes JSON to ``~/.config/emr-ingest/`` (XDG_CONFIG_HOME / emr-ingest).

File naming::

    launch_<cluster>_<run_id>.json

All JSON is serialised with **sorted keys** for deterministic, diff-friendly output.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from emr_ingest.state.models import LaunchRecord

logger = logging.getLogger(__name__)

_APP_DIR = "emr-ingest"


# ---------------------------------------------------------------------------
# Directory resolution
# ---------------------------------------------------------------------------


def config_dir() -> Path:
    """Return the XDG config directory for emr-ingest.

    Uses ``XDG_CONFIG_HOME`` if set, otherwise ``~/.config``.
    Creates the directory if it does not exist.
    """
    base = os.environ.get("XDG_CONFIG_HOME", "")
    if not base:
        base = str(Path.home() / ".config")
    path = Path(base) / _APP_DIR
    path.mkdir(parents=True, exist_ok=True)
    return path


def _safe_cluster_name(name: Optional[str]) -> str:
    """Sanitise cluster name for use in a filename."""
    if not name:
        return "unknown"
    return "".join(c if (c.isalnum() or c in "-_") else "_" for c in name)


# ---------------------------------------------------------------------------
# Read / write
# ---------------------------------------------------------------------------


def write_launch_record(record: LaunchRecord) -> Path:
    """Persist *record* as sorted-key JSON and return the written path."""
    cluster = _safe_cluster_name(record.cluster_name)
    dest = config_dir() / f"launch_{cluster}_{record.run_id}.json"
    dest.write_text(record.to_sorted_json() + "\n", encoding="utf-8")
    logger.info("Launch record written to %s", dest)
    return dest


def load_launch_record(path: str | Path) -> LaunchRecord:
    """Load a launch record written by :func:`write_launch_record`."""
    return LaunchRecord.model_validate_json(Path(path).read_text(encoding="utf-8"))


def latest_launch_record(cluster_name: str) -> Optional[LaunchRecord]:
    """Return the most recent record for *cluster_name*, or ``None``.

    Records sort by their ``run_id`` timestamp suffix.
    """
    cluster = _safe_cluster_name(cluster_name)
    prefix = f"launch_{cluster}"
    candidates = sorted(
        p for p in config_dir().glob(f"{prefix}_*.json")
        if p.stem.rsplit("_", 1)[0] == prefix
    )
    if not candidates:
        return None
    return load_launch_record(candidates[-1])
