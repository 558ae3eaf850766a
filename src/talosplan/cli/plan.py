# src/talosplan/cli/plan.py
"""
Implements the `plan` command: show what a reconciliation would write.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from ..core.factory import get_reconciler
from ..core.labels import label_triple
from ..core.site import normalize_site_code
from ..exporters.json_exporter import JSONExporter
from ..reporters.console_reporter import ConsoleReporter
from .utils import exit_on_error

logger = logging.getLogger(__name__)


def plan(
    site: Annotated[str, typer.Argument(help="Site code (e.g., dk1d, ny1p).")],
    platform: Annotated[
        Optional[str],
        typer.Option("--platform", "-p", help="proxmox or vsphere. Auto-detected from site metadata if omitted."),
    ] = None,
    output_format: Annotated[
        Optional[str],
        typer.Option("--output", help="Output format (json). If set, writes to a file instead of the console."),
    ] = None,
    output_path: Annotated[
        Optional[Path],
        typer.Option(
            "--output-path",
            help="Specify output file path. Default: './data/talosplan-plan.json'",
            dir_okay=False,
            writable=True,
        ),
    ] = None,
):
    """
    Aggregate a site's cluster configurations and display the resulting plan.

    Nothing is written to the Terraform variables.
    """
    if output_format and output_format.lower() != "json":
        raise typer.BadParameter(f"Invalid output format '{output_format}'. Must be 'json'.")

    with exit_on_error("plan"):
        reconciler = get_reconciler()
        site = normalize_site_code(site)
        platform = reconciler.resolve_platform(site, platform)
        infrastructure_plan, warnings = reconciler.inspect(site, platform)

        if output_format:
            exporter = JSONExporter()
            target = output_path or Path.cwd() / "data" / exporter.DEFAULT_FILENAME
            data = infrastructure_plan.model_dump(mode="json")
            data["platform"] = platform
            data["labels"] = [
                label_triple(infrastructure_plan.site_code, platform, group).as_labels()
                for group in infrastructure_plan.vm_config_groups
            ]
            written_path = exporter.export(data, str(target))
            logger.info(f"Successfully exported plan to {written_path}")
            print(f"Plan exported to: {written_path}", file=sys.stderr)
            return

        ConsoleReporter().report(infrastructure_plan, platform, warnings)
