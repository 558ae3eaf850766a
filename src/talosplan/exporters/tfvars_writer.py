# src/talosplan/exporters/tfvars_writer.py
"""
Writes an InfrastructurePlan into a site's Terraform variable file.

The tfvars file is owned by the operator: credentials, endpoints and other
hand-written settings must survive every write. Only the sections between
``# BEGIN talosplan:<name>`` and ``# END talosplan:<name>`` markers belong
to this writer; they are removed and appended again on each run, after the
previous file has been copied to a timestamped backup.
"""

import logging
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional

from pydantic import BaseModel

from ..core.config import config
from ..core.exceptions import ArtifactError, MissingArtifact
from ..core.labels import label_triple
from ..models.plan import InfrastructurePlan

logger = logging.getLogger(__name__)

GENERATOR = "talosplan"
IMAGE_SECTION = "talos_image_versions"
VM_CONFIG_SECTION = "vm_configs"

_BEGIN = re.compile(rf"^# BEGIN {GENERATOR}:(?P<name>\S+)\s*$")
_END = "# END {generator}:{name}"

# Left behind by the older shell tooling: single-size variables, an unmarked
# vm_configs block and its header comments.
_LEGACY_VARIABLE = re.compile(r"^node_(count|cpu|memory|disk_size)\s*=")
_LEGACY_BLOCK_START = re.compile(rf"^({VM_CONFIG_SECTION}|{IMAGE_SECTION})\s*=\s*[\[{{]\s*$")
_LEGACY_BLOCK_END = re.compile(r"^[\]}]\s*$")
_LEGACY_INLINE = re.compile(rf"^({VM_CONFIG_SECTION}|{IMAGE_SECTION})\s*=\s*(\[.*\]|\{{.*\}})\s*$")
_LEGACY_COMMENT = re.compile(r"^# (VM Configurations - Multi-size support|Generated by update-tfvars\.sh on .*)$")

# Any other assignment of a generated variable would be a duplicate attribute.
_OWNED_ASSIGNMENT = re.compile(rf"^({VM_CONFIG_SECTION}|{IMAGE_SECTION})\s*=")


class WriteResult(BaseModel):
    artifact_path: Path
    backup_path: Path
    generated_at: datetime


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _hcl_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("${", "$${")
    return f'"{escaped}"'


def detect_newline(text: str) -> str:
    """Returns the line ending of a tfvars file: CRLF if it uses any, LF otherwise."""
    return "\r\n" if "\r\n" in text else "\n"


def _block_end(lines: List[str], start: int, matches: Callable[[str], bool]) -> Optional[int]:
    return next((j for j in range(start + 1, len(lines)) if matches(lines[j])), None)


def strip_generated_sections(text: str, newline: Optional[str] = None) -> str:
    """
    Removes every generated section (and legacy generated variables) from tfvars text.

    Hand-written lines are kept byte for byte, joined with the file's own line
    ending; only trailing blank lines are dropped.

    Raises:
        ArtifactError: A generated block has no closing line, or a generated
            variable is assigned in a form this writer does not own.
    """
    newline = newline or detect_newline(text)
    kept: List[str] = []
    lines = text.split(newline)
    i = 0
    while i < len(lines):
        line = lines[i]
        begin = _BEGIN.match(line)
        if begin:
            end_marker = _END.format(generator=GENERATOR, name=begin.group("name"))
            end = _block_end(lines, i, lambda candidate: candidate.rstrip() == end_marker)
            if end is None:
                raise ArtifactError(f"Generated section '{begin.group('name')}' has no '{end_marker}' line")
            i = end + 1
            continue
        legacy = _LEGACY_BLOCK_START.match(line)
        if legacy:
            end = _block_end(lines, i, lambda candidate: bool(_LEGACY_BLOCK_END.match(candidate)))
            if end is None:
                raise ArtifactError(
                    f"Legacy '{legacy.group(1)}' block starting on line {i + 1} has no closing bracket at column 0"
                )
            i = end + 1
            continue
        if _LEGACY_INLINE.match(line) or _LEGACY_VARIABLE.match(line) or _LEGACY_COMMENT.match(line):
            i += 1
            continue
        owned = _OWNED_ASSIGNMENT.match(line)
        if owned:
            raise ArtifactError(
                f"'{owned.group(1)}' is assigned on line {i + 1} outside a generated section; remove it and re-run"
            )
        kept.append(line)
        i += 1

    while kept and not kept[-1].strip():
        kept.pop()
    return newline.join(kept)


def render_image_versions(plan: InfrastructurePlan, generated_at: datetime) -> str:
    lines = [
        f"# BEGIN {GENERATOR}:{IMAGE_SECTION}",
        "# Talos boot images per version",
        f"# Generated by {GENERATOR} on {generated_at.isoformat(timespec='seconds')}",
        f"{IMAGE_SECTION} = {{",
    ]
    width = max((len(_hcl_string(v)) for v in plan.image_version_map), default=0)
    for version, reference in plan.image_version_map.items():
        lines.append(f"  {_hcl_string(version).ljust(width)} = {_hcl_string(reference)}")
    lines.append("}")
    lines.append(_END.format(generator=GENERATOR, name=IMAGE_SECTION))
    return "\n".join(lines)


def render_vm_configs(site_code: str, platform: str, plan: InfrastructurePlan, generated_at: datetime) -> str:
    lines = [
        f"# BEGIN {GENERATOR}:{VM_CONFIG_SECTION}",
        f"# VM configurations for site {site_code} ({plan.total_node_count} nodes)",
        f"# Generated by {GENERATOR} on {generated_at.isoformat(timespec='seconds')}",
        f"{VM_CONFIG_SECTION} = [",
    ]
    entries = []
    for group in plan.vm_config_groups:
        labels = label_triple(site_code, platform, group).as_labels()
        entry = [
            "  {",
            f"    # clusters: {', '.join(group.clusters)}",
            f"    count         = {group.count}",
            f"    cpu           = {group.cpu}",
            f"    memory        = {group.memory_mb}",
            f"    disk          = {group.disk_gb}",
            f"    role          = {_hcl_string(group.role.value)}",
            f"    talos_version = {_hcl_string(group.platform_image_version)}",
            "    labels = {",
        ]
        key_width = max(len(k) for k in labels)
        entry.extend(f"      {k.ljust(key_width)} = {_hcl_string(v)}" for k, v in labels.items())
        entry.append("    }")
        entry.append("  }")
        entries.append("\n".join(entry))
    if entries:
        lines.append(",\n".join(entries))
    lines.append("]")
    lines.append(_END.format(generator=GENERATOR, name=VM_CONFIG_SECTION))
    return "\n".join(lines)


def render_sections(site_code: str, platform: str, plan: InfrastructurePlan, generated_at: datetime) -> str:
    """Serializes the generated sections of a plan, image versions first."""
    return "\n\n".join(
        [
            render_image_versions(plan, generated_at),
            render_vm_configs(site_code, platform, plan, generated_at),
        ]
    )


class TfvarsPlanWriter:
    """Backs up a tfvars file, then replaces its generated sections with a fresh plan."""

    def __init__(self, clock: Optional[Callable[[], datetime]] = None, timestamp_format: Optional[str] = None):
        self.clock = clock or _utc_now
        self.timestamp_format = timestamp_format or config.BACKUP_TIMESTAMP_FORMAT

    def _backup_path(self, artifact_path: Path, now: datetime) -> Path:
        base = f"{artifact_path}.backup-{now.strftime(self.timestamp_format)}"
        candidate = Path(base)
        suffix = 1
        while candidate.exists():
            candidate = Path(f"{base}-{suffix}")
            suffix += 1
        return candidate

    def write(self, site_code: str, platform: str, plan: InfrastructurePlan, artifact_path: Path) -> WriteResult:
        """
        Writes the plan into an existing tfvars file.

        Raises:
            MissingArtifact: The file does not exist; nothing is created.
            ArtifactError: The generated content cannot be separated from the
                hand-written content; no backup is taken and nothing is written.
        """
        artifact_path = Path(artifact_path)
        if not artifact_path.is_file():
            raise MissingArtifact(artifact_path)

        # newline="" keeps the file's own line endings on read and write.
        with artifact_path.open("r", encoding="utf-8", newline="") as fh:
            original = fh.read()
        newline = detect_newline(original)
        base = strip_generated_sections(original, newline)

        now = self.clock()
        backup_path = self._backup_path(artifact_path, now)
        shutil.copy2(artifact_path, backup_path)
        logger.info(f"Created backup: {backup_path}")

        sections = newline.join(render_sections(site_code, platform, plan, now).split("\n"))
        content = f"{base}{newline}{newline}{sections}{newline}" if base else f"{sections}{newline}"

        # Rewrite in place so an advisory lock held on the file stays valid.
        with artifact_path.open("r+", encoding="utf-8", newline="") as fh:
            fh.seek(0)
            fh.write(content)
            fh.truncate()

        logger.info(f"Updated {VM_CONFIG_SECTION} with {plan.total_node_count} total VMs in {artifact_path}")
        return WriteResult(artifact_path=artifact_path, backup_path=backup_path, generated_at=now)
