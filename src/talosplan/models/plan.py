# src/talosplan/models/plan.py
"""
Pydantic models for the aggregated infrastructure plan of a site.

A plan is always recomputed from the current cluster documents; none of these
objects is updated incrementally.
"""

from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, model_validator


class NodeRole(str, Enum):
    """Role of a provisioned node inside its cluster."""

    CONTROLPLANE = "controlplane"
    WORKER = "worker"


class SizeClass(BaseModel):
    """
    Per-node CPU and memory allocation, written as a CPUxMEMORY descriptor.

    Memory is kept in megabytes and must be a whole number of gigabytes so the
    descriptor can be regenerated without loss.
    """

    model_config = ConfigDict(frozen=True)

    cpu: int = Field(..., gt=0, description="CPU cores per node")
    memory_mb: int = Field(..., gt=0, multiple_of=1024, description="Memory per node in MB")

    @property
    def memory_gb(self) -> int:
        return self.memory_mb // 1024


class VMConfigGroup(BaseModel):
    """A bucket of identical nodes aggregated across the clusters of a site."""

    role: NodeRole
    cpu: int = Field(..., gt=0)
    memory_mb: int = Field(..., gt=0)
    disk_gb: int = Field(..., gt=0)
    platform_image_version: str
    count: int = Field(..., ge=1)
    # Originating clusters, for traceability only.
    clusters: List[str] = Field(default_factory=list)

    @property
    def size_class(self) -> SizeClass:
        return SizeClass(cpu=self.cpu, memory_mb=self.memory_mb)


class InfrastructurePlan(BaseModel):
    """Result of aggregating every cluster specification of one site."""

    site_code: str
    vm_config_groups: List[VMConfigGroup] = Field(default_factory=list)
    image_version_map: Dict[str, str] = Field(default_factory=dict)
    total_node_count: int = 0

    @model_validator(mode="after")
    def _check_invariants(self) -> "InfrastructurePlan":
        counted = sum(group.count for group in self.vm_config_groups)
        if self.total_node_count != counted:
            raise ValueError(f"total_node_count {self.total_node_count} does not match the group sum {counted}")
        unmapped = sorted(
            {g.platform_image_version for g in self.vm_config_groups} - set(self.image_version_map)
        )
        if unmapped:
            raise ValueError(f"image_version_map has no entry for version(s): {', '.join(unmapped)}")
        return self


class LabelTriple(BaseModel):
    """Labels stamped on provisioned machines and matched by machine-class selectors."""

    model_config = ConfigDict(frozen=True)

    site: str
    platform: str
    size_class: str

    def as_labels(self) -> Dict[str, str]:
        # Field names are the label keys.
        return self.model_dump()
