# src/talosplan/storage/base_registry.py
from abc import ABC, abstractmethod
from typing import Dict, Optional


class BootImageRegistry(ABC):
    """
    Abstract base class for boot image registries.
    Records which Talos image versions have been prepared for a site and
    under which reference the provisioning layer can find them.
    """

    @abstractmethod
    def get_reference(self, site_code: str, version: str) -> Optional[str]:
        """
        Retrieves the image reference registered for a site and version.

        Args:
            site_code: The site code (e.g., 'dk1d').
            version: The Talos image version, with or without a leading 'v'.

        Returns:
            The image reference, or None if the version is not registered.
        """
        pass

    @abstractmethod
    def register(self, site_code: str, version: str, reference: str) -> bool:
        """
        Records a prepared image for a site and version.

        Returns:
            True if the marker was written, False if the same reference was already registered.
        """
        pass

    @abstractmethod
    def list_versions(self, site_code: str) -> Dict[str, str]:
        """
        Lists every registered version of a site.

        Returns:
            A mapping of version to image reference.
        """
        pass

    def is_registered(self, site_code: str, version: str) -> bool:
        return self.get_reference(site_code, version) is not None
