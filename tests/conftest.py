# tests/conftest.py

from pathlib import Path
from typing import Dict, Iterable, Optional

import pytest

from talosplan.core.factory import get_boot_image_registry, get_reconciler

ORIGINAL_TFVARS = """# Proxmox connection
proxmox_endpoint = "https://pve.example.internal:8006"
proxmox_api_token = "terraform@pve!talos=secret"
storage_pool = "local-lvm"
"""


def make_cluster_yaml(
    name: str,
    site: str = "dk1d",
    control_planes: Optional[int] = 3,
    workers: Optional[int] = 2,
    cpu: Optional[object] = 4,
    memory_mb: Optional[object] = 8192,
    disk_gb: Optional[object] = 50,
    talos_version: Optional[str] = "v1.10.1",
    kubernetes_version: str = "v1.30.0",
    size_class: Optional[str] = None,
    platform: str = "proxmox",
    labels: Optional[Dict[str, str]] = None,
) -> str:
    """
    Renders an Omni cluster template the way the cluster-creation tooling
    writes it. Passing None for a value leaves it out of the template.
    """
    descriptor = size_class
    if descriptor is None and isinstance(cpu, int) and isinstance(memory_mb, int):
        descriptor = f"{cpu}x{memory_mb // 1024}"
    match_labels = labels if labels is not None else {"site": site, "platform": platform, "size_class": descriptor}

    def machine_class(size: Optional[int]) -> str:
        lines = ["machineClass:", "  matchLabels:"]
        lines += [f'    {key}: "{value}"' for key, value in match_labels.items()]
        if size is not None:
            lines.append(f"  size: {size}")
        return "\n".join(lines)

    cluster = ["kind: Cluster", f"name: {site}-{name}", "kubernetes:", f"  version: {kubernetes_version}"]
    if talos_version is not None:
        cluster += ["talos:", f"  version: {talos_version}"]

    parts = [
        "\n".join(cluster),
        "---\nkind: ControlPlane\n" + machine_class(control_planes),
        "---\nkind: Workers\nname: workers\n" + machine_class(workers),
    ]

    trailer = ["# Node specifications:"]
    if control_planes is not None:
        trailer.append(f"# - Control Planes: {control_planes}")
    if workers is not None:
        trailer.append(f"# - Workers: {workers}")
    if descriptor is not None:
        trailer.append(f"# - Size Class: {descriptor}")
    trailer += ["#", "# Per-node resources:"]
    if cpu is not None:
        trailer.append(f"# - CPU: {cpu} cores")
    if memory_mb is not None:
        trailer.append(f"# - Memory: {memory_mb} MB")
    if disk_gb is not None:
        trailer.append(f"# - Disk: {disk_gb} GB")

    return "\n".join(parts) + "\n" + "\n".join(trailer) + "\n"


def create_site(
    root: Path,
    site: str = "dk1d",
    platform: str = "proxmox",
    clusters: Optional[Dict[str, str]] = None,
    images: Iterable[str] = ("1.10.1",),
    artifact: Optional[str] = ORIGINAL_TFVARS,
) -> Path:
    """
    Lays out a project tree for one site: metadata, cluster documents,
    boot image markers and (optionally) the tfvars artifact.
    """
    site_dir = root / "clusters" / "omni" / site
    site_dir.mkdir(parents=True, exist_ok=True)
    (site_dir / ".site-metadata").write_text(
        f'SITE_CODE="{site}"\nPLATFORM="{platform}"\nLOCATION="Copenhagen"\n', encoding="utf-8"
    )
    for name, text in (clusters if clusters is not None else {"web": make_cluster_yaml("web", site=site)}).items():
        (site_dir / f"{name}.yaml").write_text(text, encoding="utf-8")

    platform_dir = root / "terraform" / platform
    platform_dir.mkdir(parents=True, exist_ok=True)
    for version in images:
        (platform_dir / f".omni-iso-{site}-v{version}").write_text(
            f"talos-omni-{site}-v{version}.iso\n", encoding="utf-8"
        )
    if artifact is not None:
        (platform_dir / f"terraform.tfvars.{site}").write_text(artifact, encoding="utf-8")
    return root


@pytest.fixture(autouse=True)
def isolated_project(monkeypatch, tmp_path):
    """
    Points the configuration at a fresh project root for every test and
    resets the cached factories, so no test sees another test's tree.
    """
    monkeypatch.setenv("TALOSPLAN_PROJECT_ROOT", str(tmp_path))
    for name in ("CLUSTERS_DIR", "TERRAFORM_DIR", "LOCK_TIMEOUT_SECONDS", "BACKUP_TIMESTAMP_FORMAT"):
        monkeypatch.delenv(name, raising=False)
    get_reconciler.cache_clear()
    get_boot_image_registry.cache_clear()
    yield tmp_path
    get_reconciler.cache_clear()
    get_boot_image_registry.cache_clear()


@pytest.fixture
def cluster_yaml():
    """Returns the cluster template builder."""
    return make_cluster_yaml


@pytest.fixture
def site_factory(tmp_path):
    """Returns a function creating a site under the test's project root."""

    def _create(**kwargs) -> Path:
        return create_site(tmp_path, **kwargs)

    return _create
