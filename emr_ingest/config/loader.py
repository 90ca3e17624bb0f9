"""Cluster description loading from YAML.

File layout::

    cluster:
      name: ingest-prod
      region: eu-central-1
      release_label: emr-5.20.0
      applications: [Hadoop, Spark]
      bootstrap_script: s3://bucket/bootstrap.sh   # optional
      master_instance_type: m5.xlarge
      core_groups:
        - {instance_type: m5.xlarge, instance_count: 2}
      policy:                                       # optional overrides
        log_uri: s3://bucket/log

- :func:`load_cluster_config` — parse and validate a file into :class:`ClusterConfig`
- :func:`apply_to_builder` — replay a config onto a :class:`ClusterSpecBuilder`
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from emr_ingest.config.models import LaunchPolicy
from emr_ingest.errors import ValidationError

if TYPE_CHECKING:
    from emr_ingest.cluster.builder import ClusterSpecBuilder


class CoreGroupConfig(BaseModel):
    """One ``core_groups`` entry."""

    instance_type: str
    instance_count: int = Field(default=1, ge=1)


class ClusterConfig(BaseModel):
    """The ``cluster:`` section of a cluster description file."""

    name: str
    region: Optional[str] = None
    release_label: str
    applications: List[str]
    bootstrap_script: Optional[str] = None
    master_instance_type: str
    core_groups: List[CoreGroupConfig] = Field(default_factory=list)
    policy: LaunchPolicy = Field(default_factory=LaunchPolicy)


def load_cluster_config(path: str | Path) -> ClusterConfig:
    """Load and validate a cluster description YAML file.

    Raises:
        FileNotFoundError: *path* does not exist.
        ValidationError: The YAML is malformed or misses required keys.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Cluster config not found: {path}")

    try:
        with open(path, encoding="utf-8") as fh:
            raw: Dict[str, Any] = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        raise ValidationError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(raw, dict) or not isinstance(raw.get("cluster"), dict):
        raise ValidationError(f"{path}: missing top-level 'cluster:' mapping")

    try:
        return ClusterConfig.model_validate(raw["cluster"])
    except PydanticValidationError as exc:
        raise ValidationError(f"{path}: {exc}") from exc


def apply_to_builder(cfg: ClusterConfig, builder: "ClusterSpecBuilder") -> "ClusterSpecBuilder":
    """Replay *cfg* onto *builder* in the order a caller would."""
    builder.set_software_profile(cfg.release_label, cfg.applications)
    if cfg.bootstrap_script:
        builder.set_bootstrap_action(cfg.bootstrap_script)
    builder.add_master_node(cfg.master_instance_type)
    for group in cfg.core_groups:
        builder.add_core_node(group.instance_type, group.instance_count)
    builder.set_policy(cfg.policy)
    return builder
