# src/talosplan/models/site.py

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Platform = Literal["proxmox", "vsphere"]


class SiteMetadata(BaseModel):
    """
    Site metadata written when a site is created.

    Attributes:
        site_code: Short site identifier (e.g. 'dk1d', 'ny1p')
        platform: Hypervisor platform hosting the site's nodes
        location: Free-form location description
        environment: development, staging or production
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    site_code: str = Field(..., description="Site code")
    platform: Platform = Field(..., description="Hypervisor platform")
    location: Optional[str] = Field(None, description="Location description")
    environment: str = Field(default="unknown", description="Environment derived from the site code")
