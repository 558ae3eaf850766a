# src/talosplan/cli/images.py
"""
Implements the `images` commands that inspect and record prepared boot images.
"""

import logging
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from typing_extensions import Annotated

from ..core.factory import get_boot_image_registry, get_reconciler
from ..core.site import normalize_site_code
from ..storage.boot_image_registry import iso_name
from ..utils.versions import normalize_version
from .utils import exit_on_error

logger = logging.getLogger(__name__)

app = typer.Typer(help="Inspect and register prepared Talos boot images.", add_completion=False)

PlatformOption = Annotated[
    Optional[str],
    typer.Option("--platform", "-p", help="proxmox or vsphere. Auto-detected from site metadata if omitted."),
]


@app.command(name="list")
def list_images(
    site: Annotated[str, typer.Argument(help="Site code (e.g., dk1d).")],
    platform: PlatformOption = None,
):
    """
    List the boot image versions registered for a site.
    """
    with exit_on_error("images list"):
        site = normalize_site_code(site)
        platform = get_reconciler().resolve_platform(site, platform)
        versions = get_boot_image_registry(platform).list_versions(site)

        console = Console()
        if not versions:
            console.print(f"No boot images registered for {site} ({platform}).", style="yellow")
            return

        table = Table(title=f"Boot Images: {site} ({platform})", header_style="bold magenta")
        table.add_column("Talos Version", style="magenta")
        table.add_column("Image Reference", style="white")
        for version, reference in versions.items():
            table.add_row(version, reference)
        console.print(table)


@app.command(name="register")
def register_image(
    site: Annotated[str, typer.Argument(help="Site code (e.g., dk1d).")],
    version: Annotated[str, typer.Argument(help="Talos version of the prepared image (e.g., 1.10.1).")],
    reference: Annotated[
        Optional[str],
        typer.Option("--reference", "-r", help="Image reference. Defaults to the generated ISO name."),
    ] = None,
    platform: PlatformOption = None,
):
    """
    Record that the boot image of a Talos version has been prepared for a site.
    """
    version = normalize_version(version)
    if not version:
        raise typer.BadParameter("Version must not be empty.")

    with exit_on_error("images register"):
        site = normalize_site_code(site)
        platform = get_reconciler().resolve_platform(site, platform)
        reference = reference or iso_name(site, version)

        if get_boot_image_registry(platform).register(site, version, reference):
            typer.echo(f"Registered {reference} for {site} v{version} ({platform}).")
        else:
            typer.echo(f"{reference} is already registered for {site} v{version} ({platform}).")
