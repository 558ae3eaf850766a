# src/talosplan/core/labels.py
"""
The label contract shared by the provisioning and orchestration layers.

Every machine provisioned for a VM configuration group is stamped with
exactly three labels, and the machine-class selector of the matching cluster
role must ask for exactly the same three. Any difference means the machines
are never selected, and nothing downstream reports it.
"""

from typing import List, Mapping, Union

from ..models.cluster import ClusterSpec
from ..models.plan import LabelTriple, SizeClass, VMConfigGroup
from .size_class import format_size_class

LABEL_SITE = "site"
LABEL_PLATFORM = "platform"
LABEL_SIZE_CLASS = "size_class"

CONTRACT_LABELS = (LABEL_SITE, LABEL_PLATFORM, LABEL_SIZE_CLASS)


def label_triple(site_code: str, platform: str, source: Union[VMConfigGroup, SizeClass]) -> LabelTriple:
    """Builds the labels for a group (or a bare size class) of a site."""
    size_class = source.size_class if isinstance(source, VMConfigGroup) else source
    return LabelTriple(site=site_code, platform=platform, size_class=format_size_class(size_class))


def selector_mismatches(selector: Mapping[str, str], expected: LabelTriple) -> List[str]:
    """
    Compares a machine-selection filter against the expected triple.

    Returns one human-readable line per extra, missing or differing label;
    an empty list means the selector matches exactly.
    """
    wanted = expected.as_labels()
    problems: List[str] = []
    for key in CONTRACT_LABELS:
        if key not in selector:
            problems.append(f"missing label '{key}' (expected '{wanted[key]}')")
        elif str(selector[key]) != wanted[key]:
            problems.append(f"label '{key}' is '{selector[key]}', expected '{wanted[key]}'")
    for key in sorted(set(selector) - set(CONTRACT_LABELS)):
        problems.append(f"extra label '{key}={selector[key]}' is never stamped on machines")
    return problems


def check_cluster_selectors(spec: ClusterSpec, platform: str) -> List[str]:
    """Checks the selectors of every role a cluster actually uses."""
    expected = label_triple(spec.site_code, platform, spec.size_class)
    warnings: List[str] = []
    roles = []
    if spec.control_plane_count > 0:
        roles.append("controlplane")
    if spec.worker_count > 0:
        roles.append("worker")

    for role in roles:
        selector = spec.selectors.get(role)
        if selector is None:
            warnings.append(f"{spec.cluster_name}/{role}: no machine-class selector found")
            continue
        for problem in selector_mismatches(selector, expected):
            warnings.append(f"{spec.cluster_name}/{role}: {problem}")
    return warnings
