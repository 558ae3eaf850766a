# src/talosplan/core/factory.py
"""
Factory functions to instantiate core components like the SiteReconciler
and the boot image registry of a platform.
"""

import logging
from functools import lru_cache

from ..exporters.tfvars_writer import TfvarsPlanWriter
from ..storage.base_registry import BootImageRegistry
from ..storage.boot_image_registry import FileBootImageRegistry
from .config import config
from .reconciler import SiteReconciler
from .site import normalize_platform

logger = logging.getLogger(__name__)


@lru_cache(maxsize=None)
def get_boot_image_registry(platform: str) -> BootImageRegistry:
    """
    Factory function to get the boot image registry of a platform.
    Markers live next to the platform's Terraform configuration.
    """
    platform = normalize_platform(platform)
    directory = config.TERRAFORM_DIR / platform
    logger.debug(f"Using boot image markers in {directory}")
    return FileBootImageRegistry(directory)


@lru_cache(maxsize=1)
def get_reconciler() -> SiteReconciler:
    """
    Factory function to instantiate and return a fully configured SiteReconciler.
    Uses lru_cache to act as a singleton.
    """
    logger.debug(f"Initializing reconciler for project root {config.PROJECT_ROOT.resolve()}")
    return SiteReconciler(
        clusters_dir=config.CLUSTERS_DIR,
        terraform_dir=config.TERRAFORM_DIR,
        writer=TfvarsPlanWriter(),
        registry_factory=get_boot_image_registry,
        lock_timeout=config.LOCK_TIMEOUT_SECONDS,
    )
