# src/talosplan/storage/boot_image_registry.py
import logging
from pathlib import Path
from typing import Dict, Optional

from ..utils.versions import normalize_version
from .base_registry import BootImageRegistry

logger = logging.getLogger(__name__)

MARKER_PREFIX = ".omni-iso-"


def iso_name(site_code: str, version: str) -> str:
    """Returns the ISO file name the image preparation step produces for a site and version."""
    return f"talos-omni-{site_code}-v{normalize_version(version)}.iso"


class FileBootImageRegistry(BootImageRegistry):
    """
    Boot image registry backed by one marker file per site and version.

    Markers live in the platform's Terraform directory as
    ``.omni-iso-<site>-v<version>`` and contain the image reference. They
    are written by the external image preparation step; this class only
    reads them, plus the explicit `register` call.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def marker_path(self, site_code: str, version: str) -> Path:
        return self.directory / f"{MARKER_PREFIX}{site_code}-v{normalize_version(version)}"

    def get_reference(self, site_code: str, version: str) -> Optional[str]:
        marker = self.marker_path(site_code, version)
        if not marker.is_file():
            return None
        reference = marker.read_text(encoding="utf-8").strip()
        if not reference:
            logger.warning(f"Boot image marker {marker} is empty; treating version as unregistered.")
            return None
        return reference

    def register(self, site_code: str, version: str, reference: str) -> bool:
        reference = reference.strip()
        if not reference:
            raise ValueError("Image reference must not be empty.")

        marker = self.marker_path(site_code, version)
        current = self.get_reference(site_code, version)
        if current == reference:
            logger.debug(f"Boot image {reference} already registered for {site_code} v{normalize_version(version)}.")
            return False
        if current is not None:
            logger.info(f"Replacing boot image {current} with {reference} for {site_code}.")

        self.directory.mkdir(parents=True, exist_ok=True)
        marker.write_text(f"{reference}\n", encoding="utf-8")
        logger.info(f"Registered boot image {reference} for {site_code} v{normalize_version(version)}: {marker}")
        return True

    def list_versions(self, site_code: str) -> Dict[str, str]:
        prefix = f"{MARKER_PREFIX}{site_code}-v"
        versions: Dict[str, str] = {}
        if not self.directory.is_dir():
            return versions
        for marker in sorted(self.directory.glob(f"{prefix}*")):
            version = marker.name[len(prefix) :]
            reference = self.get_reference(site_code, version)
            if reference is not None:
                versions[version] = reference
        return versions
