# src/talosplan/core/aggregator.py
"""
Aggregates the cluster specifications of a site into one infrastructure plan.
Nodes with identical per-node resources and image version are provisioned
from the same VM configuration group, whichever cluster asked for them.
"""

import logging
from typing import Dict, Iterable, List, Tuple

from ..models.cluster import ClusterSpec
from ..models.plan import InfrastructurePlan, NodeRole, VMConfigGroup
from ..storage.base_registry import BootImageRegistry
from .exceptions import MissingBootImage

logger = logging.getLogger(__name__)

GroupKey = Tuple[NodeRole, int, int, int, str]


def _key_for_group(group: VMConfigGroup) -> GroupKey:
    """Return a grouping key (role, cpu, memory, disk, image version).

    The originating cluster names are deliberately not part of the key.
    """
    return (group.role, group.cpu, group.memory_mb, group.disk_gb, group.platform_image_version)


def _contributions(spec: ClusterSpec) -> List[VMConfigGroup]:
    """Splits a cluster into its control plane and worker contributions."""
    contributions = []
    for role, count in ((NodeRole.CONTROLPLANE, spec.control_plane_count), (NodeRole.WORKER, spec.worker_count)):
        if count > 0:
            contributions.append(
                VMConfigGroup(
                    role=role,
                    cpu=spec.size_class.cpu,
                    memory_mb=spec.size_class.memory_mb,
                    disk_gb=spec.disk_gb,
                    platform_image_version=spec.platform_image_version,
                    count=count,
                    clusters=[spec.cluster_name],
                )
            )
    return contributions


def aggregate_cluster_specs(cluster_specs: Iterable[ClusterSpec]) -> List[VMConfigGroup]:
    """Merge every cluster's contributions into groups, summing counts on key collision.

    Groups are returned in first-seen order: clusters in input order, control
    planes before workers within a cluster.
    """
    groups: Dict[GroupKey, VMConfigGroup] = {}
    for spec in cluster_specs:
        for contribution in _contributions(spec):
            key = _key_for_group(contribution)
            existing = groups.get(key)
            if existing is None:
                groups[key] = contribution
                continue
            clusters = existing.clusters + [c for c in contribution.clusters if c not in existing.clusters]
            groups[key] = existing.model_copy(update={"count": existing.count + contribution.count, "clusters": clusters})
    return list(groups.values())


class SiteAggregator:
    """Builds the InfrastructurePlan of a site and checks its boot images."""

    def __init__(self, registry: BootImageRegistry):
        self.registry = registry

    def aggregate(self, site_code: str, cluster_specs: Iterable[ClusterSpec]) -> InfrastructurePlan:
        """
        Aggregates the specs of one site.

        Raises:
            MissingBootImage: listing every required version without a registered image.
        """
        specs = list(cluster_specs)
        groups = aggregate_cluster_specs(specs)

        required: List[str] = []
        for group in groups:
            if group.platform_image_version not in required:
                required.append(group.platform_image_version)

        image_version_map: Dict[str, str] = {}
        missing: List[str] = []
        for version in required:
            reference = self.registry.get_reference(site_code, version)
            if reference is None:
                missing.append(version)
            else:
                image_version_map[version] = reference

        if missing:
            logger.error(f"Site {site_code}: no boot image registered for version(s) {', '.join(missing)}")
            raise MissingBootImage(site_code, missing)

        # Every node of every spec lands in exactly one group.
        total = sum(group.count for group in groups)

        for group in groups:
            logger.info(
                f"  - {group.count}x {group.role.value}: {group.cpu} CPU, {group.memory_mb // 1024}GB RAM, "
                f"{group.disk_gb}GB disk, Talos {group.platform_image_version}"
            )

        return InfrastructurePlan(
            site_code=site_code,
            vm_config_groups=groups,
            image_version_map=image_version_map,
            total_node_count=total,
        )
