# tests/test_cli.py
"""
Unit tests for the talosplan Command-Line Interface (CLI).
"""

import json
from unittest.mock import ANY, MagicMock

import pytest
from typer.testing import CliRunner

from conftest import ORIGINAL_TFVARS, make_cluster_yaml
from talosplan import __version__
from talosplan.cli import app
from talosplan.models.plan import InfrastructurePlan
from talosplan.parsers.cluster_spec import load_site_cluster_specs

runner = CliRunner()


@pytest.fixture
def mock_reporter(mocker):
    """
    Fixture to patch ConsoleReporter in every command module and provide a mock instance.
    """
    mock_reporter_instance = MagicMock()
    for module in ("talosplan.cli.plan", "talosplan.cli.reconcile"):
        mock_reporter_class = mocker.patch(f"{module}.ConsoleReporter")
        mock_reporter_class.return_value = mock_reporter_instance
    return mock_reporter_instance


@pytest.fixture
def dk1d(site_factory):
    return site_factory(
        clusters={
            "baseline": make_cluster_yaml("baseline", control_planes=1, workers=3, cpu=2, memory_mb=4096),
            "web": make_cluster_yaml("web", control_planes=3, workers=5, cpu=4, memory_mb=8192),
        },
        images=["1.10.1"],
    )


def test_version_command():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert f"talosplan version: {__version__}" in result.output


def test_version_flag():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_size_class_command():
    result = runner.invoke(app, ["size-class", "4x8"])

    assert result.exit_code == 0
    assert "4x8: 4 CPU, 8192 MB memory" in result.output


def test_size_class_command_rejects_bad_descriptor():
    result = runner.invoke(app, ["size-class", "huge"])

    assert result.exit_code == 1


def test_plan_reports_without_writing(dk1d, mock_reporter):
    artifact = dk1d / "terraform" / "proxmox" / "terraform.tfvars.dk1d"

    result = runner.invoke(app, ["plan", "dk1d"])

    assert result.exit_code == 0, result.output
    mock_reporter.report.assert_called_once_with(ANY, "proxmox", [])
    reported_plan = mock_reporter.report.call_args.args[0]
    assert isinstance(reported_plan, InfrastructurePlan)
    assert reported_plan.total_node_count == 12
    assert artifact.read_text(encoding="utf-8") == ORIGINAL_TFVARS


def test_plan_reads_cluster_documents_once(dk1d, mock_reporter, mocker):
    loader = mocker.patch(
        "talosplan.core.reconciler.load_site_cluster_specs", wraps=load_site_cluster_specs
    )

    result = runner.invoke(app, ["plan", "dk1d"])

    assert result.exit_code == 0, result.output
    assert loader.call_count == 1


def test_plan_json_export(dk1d, mock_reporter, tmp_path):
    out = tmp_path / "out" / "plan.json"

    result = runner.invoke(app, ["plan", "dk1d", "--output", "json", "--output-path", str(out)])

    assert result.exit_code == 0, result.output
    mock_reporter.report.assert_not_called()
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["platform"] == "proxmox"
    assert data["total_node_count"] == 12
    assert data["image_version_map"] == {"1.10.1": "talos-omni-dk1d-v1.10.1.iso"}
    assert data["labels"][0] == {"site": "dk1d", "platform": "proxmox", "size_class": "2x4"}
    assert data["vm_config_groups"][0]["role"] == "controlplane"


def test_plan_rejects_unknown_output_format(dk1d):
    result = runner.invoke(app, ["plan", "dk1d", "--output", "csv"])

    assert result.exit_code != 0


def test_reconcile_writes_artifact(dk1d, mock_reporter):
    artifact = dk1d / "terraform" / "proxmox" / "terraform.tfvars.dk1d"

    result = runner.invoke(app, ["reconcile", "dk1d"])

    assert result.exit_code == 0, result.output
    assert "Backup created:" in result.output
    assert f"Updated {artifact}" in result.output
    assert "# BEGIN talosplan:vm_configs" in artifact.read_text(encoding="utf-8")
    mock_reporter.report.assert_called_once_with(ANY, "proxmox", [])


def test_reconcile_dry_run(dk1d, mock_reporter):
    artifact = dk1d / "terraform" / "proxmox" / "terraform.tfvars.dk1d"

    result = runner.invoke(app, ["reconcile", "dk1d", "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Dry run" in result.output
    assert artifact.read_text(encoding="utf-8") == ORIGINAL_TFVARS
    assert not list(artifact.parent.glob("*.backup-*"))


def test_reconcile_missing_boot_image_exits_with_error(site_factory, mock_reporter):
    root = site_factory(images=[])
    artifact = root / "terraform" / "proxmox" / "terraform.tfvars.dk1d"

    result = runner.invoke(app, ["reconcile", "dk1d"])

    assert result.exit_code == 1
    mock_reporter.report.assert_not_called()
    assert artifact.read_text(encoding="utf-8") == ORIGINAL_TFVARS


def test_reconcile_missing_artifact_exits_with_error(site_factory, mock_reporter):
    site_factory(artifact=None)

    result = runner.invoke(app, ["reconcile", "dk1d", "proxmox"])

    assert result.exit_code == 1


def test_reconcile_invalid_site_code(mock_reporter):
    result = runner.invoke(app, ["reconcile", "copenhagen"])

    assert result.exit_code == 1


def test_reconcile_unexpected_error_exits_with_error(mocker, mock_reporter):
    mocker.patch("talosplan.cli.reconcile.get_reconciler", side_effect=RuntimeError("boom"))

    result = runner.invoke(app, ["reconcile", "dk1d"])

    assert result.exit_code == 1
