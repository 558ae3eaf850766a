# src/talosplan/models/cluster.py

from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from .plan import SizeClass

# Optional leading v, a numeric version, then an optional pre-release suffix.
VERSION_PATTERN = r"^[vV]?[0-9]+(\.[0-9]+)*(-[0-9A-Za-z.]+)?$"


class ClusterDocument(BaseModel):
    """
    Strict schema for one cluster document, flattened from its template.

    Every numeric field is required and must be an integer; a missing or
    non-numeric value fails validation instead of being guessed. Versions
    must be strings; YAML reads an unquoted 1.10 as the float 1.1.
    """

    model_config = ConfigDict(extra="ignore")

    site_code: str = Field(..., min_length=1)
    cluster_name: str = Field(..., min_length=1)
    control_planes: int = Field(..., ge=0, strict=True)
    workers: int = Field(..., ge=0, strict=True)
    cpu: int = Field(..., gt=0, strict=True)
    memory_mb: int = Field(..., gt=0, strict=True)
    disk_gb: int = Field(..., gt=0, strict=True)
    kubernetes_version: str = Field(..., pattern=VERSION_PATTERN, strict=True)
    talos_version: str = Field(..., pattern=VERSION_PATTERN, strict=True)
    size_class: Optional[str] = Field(None, description="Declared CPUxMEMORY descriptor, if any")
    selectors: Dict[str, Dict[str, str]] = Field(
        default_factory=dict, description="Machine-class matchLabels per role"
    )


class ClusterSpec(BaseModel):
    """
    One cluster belonging to one site, as consumed by the aggregator.

    Attributes:
        site_code: Site the cluster belongs to (e.g. 'dk1d')
        cluster_name: Short cluster name without the site prefix (e.g. 'web')
        control_plane_count: Number of control plane nodes
        worker_count: Number of worker nodes
        size_class: Per-node CPU and memory
        disk_gb: Per-node disk size in GB
        kubernetes_version: Kubernetes version, without a leading 'v'
        platform_image_version: Talos image version, without a leading 'v'
        selectors: Machine-class matchLabels per role, only used for the label contract check
    """

    model_config = ConfigDict(frozen=True)

    site_code: str
    cluster_name: str
    control_plane_count: int = Field(..., ge=0)
    worker_count: int = Field(..., ge=0)
    size_class: SizeClass
    disk_gb: int = Field(..., gt=0)
    kubernetes_version: str
    platform_image_version: str
    selectors: Dict[str, Dict[str, str]] = Field(default_factory=dict)

    @property
    def total_nodes(self) -> int:
        return self.control_plane_count + self.worker_count
