# src/talosplan/core/site.py
"""
Site codes and site metadata.

A site code is <city><zone><env>: two lowercase letters, one digit and the
environment letter (d, s or p), e.g. 'dk1d' or 'ny1p'. Site metadata is a
shell-style KEY="value" file written when the site is created.
"""

import logging
import re
from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import ValidationError

from ..models.site import SiteMetadata
from .config import SUPPORTED_PLATFORMS
from .exceptions import InvalidSiteCode, SiteNotFound, UnsupportedPlatform

logger = logging.getLogger(__name__)

SITE_CODE_PATTERN = re.compile(r"^[a-z]{2}[0-9][dsp]$")
METADATA_FILENAME = ".site-metadata"

ENVIRONMENTS = {"d": "development", "s": "staging", "p": "production"}


def normalize_site_code(site_code: str) -> str:
    site_code = site_code.strip().lower()
    if not SITE_CODE_PATTERN.match(site_code):
        raise InvalidSiteCode(site_code)
    return site_code


def environment_for(site_code: str) -> str:
    return ENVIRONMENTS.get(site_code[-1:], "unknown")


def normalize_platform(platform: Optional[str]) -> str:
    value = (platform or "").strip().lower()
    if value not in SUPPORTED_PLATFORMS:
        raise UnsupportedPlatform(
            f"Unsupported platform {platform!r}. Must be one of: {', '.join(SUPPORTED_PLATFORMS)}"
        )
    return value


def metadata_path(site_dir: Path, site_code: str) -> Optional[Path]:
    """Returns the metadata file of a site, preferring .site-metadata over the legacy site-<code>.yaml."""
    for candidate in (site_dir / METADATA_FILENAME, site_dir / f"site-{site_code}.yaml"):
        if candidate.is_file():
            return candidate
    return None


def load_site_metadata(site_dir: Path, site_code: str) -> SiteMetadata:
    """
    Loads the metadata of a site.

    Raises:
        SiteNotFound: The site directory or its metadata file does not exist.
        UnsupportedPlatform: PLATFORM is missing or not a supported hypervisor.
    """
    site_dir = Path(site_dir)
    if not site_dir.is_dir():
        raise SiteNotFound(f"Site directory not found: {site_dir}")

    path = metadata_path(site_dir, site_code)
    if path is None:
        raise SiteNotFound(f"Site metadata not found in {site_dir}; create the site first.")

    values = dotenv_values(path)
    platform = normalize_platform(values.get("PLATFORM"))

    try:
        metadata = SiteMetadata(
            site_code=values.get("SITE_CODE") or site_code,
            platform=platform,
            location=values.get("LOCATION"),
            environment=values.get("ENVIRONMENT") or environment_for(site_code),
        )
    except ValidationError as e:
        raise SiteNotFound(f"Site metadata {path} is invalid: {e}") from e

    logger.info(f"Loaded site metadata: {metadata.site_code} (platform: {metadata.platform})")
    return metadata
