# src/talosplan/core/reconciler.py
import logging
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from pydantic import BaseModel

from ..exporters.tfvars_writer import TfvarsPlanWriter, WriteResult
from ..models.cluster import ClusterSpec
from ..models.plan import InfrastructurePlan
from ..parsers.cluster_spec import load_site_cluster_specs
from ..storage.base_registry import BootImageRegistry
from .aggregator import SiteAggregator
from .exceptions import MissingArtifact, NoClusterSpecs, SiteNotFound
from .labels import check_cluster_selectors
from .locking import wait_locked_exclusively
from .site import load_site_metadata, normalize_platform, normalize_site_code

logger = logging.getLogger(__name__)


class ReconcileResult(BaseModel):
    site_code: str
    platform: str
    plan: InfrastructurePlan
    artifact_path: Path
    write: Optional[WriteResult] = None
    label_warnings: List[str] = []

    @property
    def dry_run(self) -> bool:
        return self.write is None


class SiteReconciler:
    """Orchestrates one reconciliation pass: read cluster specs, aggregate, write the plan."""

    def __init__(
        self,
        clusters_dir: Path,
        terraform_dir: Path,
        writer: TfvarsPlanWriter,
        registry_factory: Callable[[str], BootImageRegistry],
        lock_timeout: float = 30.0,
    ):
        self.clusters_dir = Path(clusters_dir)
        self.terraform_dir = Path(terraform_dir)
        self.writer = writer
        self.registry_factory = registry_factory
        self.lock_timeout = lock_timeout

    def site_dir(self, site_code: str) -> Path:
        return self.clusters_dir / site_code

    def artifact_path(self, site_code: str, platform: str) -> Path:
        return self.terraform_dir / platform / f"terraform.tfvars.{site_code}"

    def resolve_platform(self, site_code: str, platform: Optional[str] = None) -> str:
        """Uses the given platform, or detects it from the site metadata."""
        if platform:
            return normalize_platform(platform)
        return load_site_metadata(self.site_dir(site_code), site_code).platform

    def load_cluster_specs(self, site_code: str) -> List[ClusterSpec]:
        site_dir = self.site_dir(site_code)
        if not site_dir.is_dir():
            raise SiteNotFound(f"Site directory not found: {site_dir}")
        specs = load_site_cluster_specs(site_dir, site_code)
        if not specs:
            raise NoClusterSpecs(site_code, site_dir)
        return specs

    def _aggregate(self, site_code: str, platform: str, specs: List[ClusterSpec]) -> InfrastructurePlan:
        logger.info(f"Analyzing {len(specs)} cluster configuration(s) for site {site_code}...")
        aggregator = SiteAggregator(self.registry_factory(platform))
        return aggregator.aggregate(site_code, specs)

    @staticmethod
    def _label_warnings(specs: List[ClusterSpec], platform: str) -> List[str]:
        warnings: List[str] = []
        for spec in specs:
            warnings.extend(check_cluster_selectors(spec, platform))
        return warnings

    def inspect(self, site_code: str, platform: Optional[str] = None) -> Tuple[InfrastructurePlan, List[str]]:
        """Computes the plan and the label contract warnings from one read of the site, touching no file."""
        site_code = normalize_site_code(site_code)
        platform = self.resolve_platform(site_code, platform)
        specs = self.load_cluster_specs(site_code)
        return self._aggregate(site_code, platform, specs), self._label_warnings(specs, platform)

    def build_plan(self, site_code: str, platform: Optional[str] = None) -> InfrastructurePlan:
        """Computes the plan of a site without touching any file."""
        site_code = normalize_site_code(site_code)
        platform = self.resolve_platform(site_code, platform)
        return self._aggregate(site_code, platform, self.load_cluster_specs(site_code))

    def label_warnings(self, site_code: str, platform: Optional[str] = None) -> List[str]:
        """Checks every cluster's machine-class selectors against the label contract."""
        site_code = normalize_site_code(site_code)
        platform = self.resolve_platform(site_code, platform)
        return self._label_warnings(self.load_cluster_specs(site_code), platform)

    def reconcile(self, site_code: str, platform: Optional[str] = None, dry_run: bool = False) -> ReconcileResult:
        """
        Runs a full pass for one site.

        The artifact must exist before anything else happens. The plan is
        computed and written while holding an exclusive lock on the artifact,
        so two runs for the same site cannot interleave.
        """
        site_code = normalize_site_code(site_code)
        platform = self.resolve_platform(site_code, platform)
        artifact_path = self.artifact_path(site_code, platform)
        if not artifact_path.is_file():
            raise MissingArtifact(artifact_path)

        with wait_locked_exclusively(artifact_path, self.lock_timeout):
            specs = self.load_cluster_specs(site_code)
            plan = self._aggregate(site_code, platform, specs)
            warnings = self._label_warnings(specs, platform)
            for warning in warnings:
                logger.warning(f"Label contract: {warning}")

            write = None
            if dry_run:
                logger.info(f"Dry run: {artifact_path} left unchanged.")
            else:
                write = self.writer.write(site_code, platform, plan, artifact_path)

        return ReconcileResult(
            site_code=site_code,
            platform=platform,
            plan=plan,
            artifact_path=artifact_path,
            write=write,
            label_warnings=warnings,
        )
