# src/talosplan/reporters/console_reporter.py
"""
A reporter that displays an infrastructure plan in formatted tables in the console.
"""

import logging
from typing import Dict, List, Optional

from rich.console import Console
from rich.table import Table

from ..core.labels import label_triple
from ..models.plan import InfrastructurePlan, NodeRole
from .base_reporter import BaseReporter

logger = logging.getLogger(__name__)


class ConsoleReporter(BaseReporter):
    """
    Renders a site's plan to the console using the 'rich' library.
    """

    def __init__(self):
        self.console = Console()

    def report(self, plan: InfrastructurePlan, platform: str, warnings: Optional[List[str]] = None):
        """
        Displays the VM configuration groups in a table, followed by the image
        versions and any label contract warnings.
        """
        if not plan.vm_config_groups:
            self.console.print("No VM configurations to report.", style="yellow")
            return

        table = Table(
            title=f"Infrastructure Plan: {plan.site_code} ({platform})",
            header_style="bold magenta",
            show_lines=True,
        )
        table.add_column("Role", style="cyan")
        table.add_column("Count", style="green", justify="right")
        table.add_column("CPU", style="blue", justify="right")
        table.add_column("Memory (GB)", style="blue", justify="right")
        table.add_column("Disk (GB)", style="blue", justify="right")
        table.add_column("Talos", style="magenta")
        table.add_column("Size Class", style="yellow")
        table.add_column("Clusters", style="dim")

        for group in plan.vm_config_groups:
            labels = label_triple(plan.site_code, platform, group)
            role_style = "bold cyan" if group.role == NodeRole.CONTROLPLANE else "cyan"
            table.add_row(
                f"[{role_style}]{group.role.value}[/]",
                f"{group.count}",
                f"{group.cpu}",
                f"{group.memory_mb // 1024}",
                f"{group.disk_gb}",
                group.platform_image_version,
                labels.size_class,
                ", ".join(group.clusters),
            )

        self.console.print(table)
        self.console.print(f"Total nodes: {plan.total_node_count}", style="bold green")
        self.report_images(plan.image_version_map)

        if warnings:
            self.report_warnings(warnings)

    def report_images(self, image_version_map: Dict[str, str]):
        """
        Displays the boot image reference of every required version.
        """
        table = Table(title="Boot Images", header_style="bold magenta")
        table.add_column("Talos Version", style="magenta")
        table.add_column("Image Reference", style="white")
        for version, reference in image_version_map.items():
            table.add_row(version, reference)
        self.console.print(table)

    def report_warnings(self, warnings: List[str]):
        self.console.print("\nLabel contract warnings (machines may never be selected):", style="bold yellow")
        for warning in warnings:
            self.console.print(f"  - {warning}", style="yellow")
