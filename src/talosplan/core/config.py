# src/talosplan/core/config.py

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from a .env file located in the project root
dotenv_path = os.path.join(os.path.dirname(__file__), "..", "..", "..", ".env")
load_dotenv(dotenv_path=dotenv_path)

SUPPORTED_PLATFORMS = ("proxmox", "vsphere")


class Config:
    """
    Handles the application's configuration by loading values from environment variables.
    """

    # Path settings are properties so their values are resolved at access
    # time. Tests and the CLI can then point the tool at another project
    # tree by changing environment variables.
    @property
    def PROJECT_ROOT(self) -> Path:
        return Path(os.getenv("TALOSPLAN_PROJECT_ROOT", ".")).expanduser()

    @property
    def CLUSTERS_DIR(self) -> Path:
        return self.PROJECT_ROOT / os.getenv("CLUSTERS_DIR", "clusters/omni")

    @property
    def TERRAFORM_DIR(self) -> Path:
        return self.PROJECT_ROOT / os.getenv("TERRAFORM_DIR", "terraform")

    @property
    def LOCK_TIMEOUT_SECONDS(self) -> float:
        return float(os.getenv("LOCK_TIMEOUT_SECONDS", "30"))

    @property
    def BACKUP_TIMESTAMP_FORMAT(self) -> str:
        return os.getenv("BACKUP_TIMESTAMP_FORMAT", "%Y%m%d-%H%M%S")

    # --- Logging variables ---
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    def validate_instance(self):
        if self.LOCK_TIMEOUT_SECONDS <= 0:
            raise ValueError("LOCK_TIMEOUT_SECONDS must be a positive number of seconds.")
        if "%" not in self.BACKUP_TIMESTAMP_FORMAT:
            raise ValueError("BACKUP_TIMESTAMP_FORMAT must be a strftime format.")
        if not self.CLUSTERS_DIR.exists():
            logging.getLogger(__name__).debug("Clusters directory %s does not exist yet.", self.CLUSTERS_DIR)


# Instantiate the config to be imported by other modules
config = Config()
config.validate_instance()
