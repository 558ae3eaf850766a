# src/talosplan/cli/reconcile.py
"""
Implements the `reconcile` command: rewrite a site's Terraform variables
from its Omni cluster configurations.
"""

import logging
from typing import Optional

import typer
from typing_extensions import Annotated

from ..core.factory import get_reconciler
from ..reporters.console_reporter import ConsoleReporter
from .utils import exit_on_error

logger = logging.getLogger(__name__)


def reconcile(
    site: Annotated[str, typer.Argument(help="Site code (e.g., dk1d, ny1p).")],
    platform: Annotated[
        Optional[str],
        typer.Argument(help="proxmox or vsphere. Auto-detected from site metadata if omitted."),
    ] = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Compute and display the plan without writing the tfvars file."),
    ] = False,
):
    """
    Aggregate every cluster of a site into VM configurations and write them
    to terraform/<platform>/terraform.tfvars.<site>.
    """
    with exit_on_error("reconcile"):
        result = get_reconciler().reconcile(site, platform, dry_run=dry_run)

        ConsoleReporter().report(result.plan, result.platform, result.label_warnings)

        if result.dry_run:
            typer.echo(f"Dry run: {result.artifact_path} was not modified.")
            return

        typer.echo(f"Backup created: {result.write.backup_path}")
        typer.echo(f"Updated {result.artifact_path}")
        typer.echo("Next step: review the changes, then run terraform plan.")
