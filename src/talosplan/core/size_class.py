# src/talosplan/core/size_class.py
"""
Resolves compact CPUxMEMORY size-class descriptors.

Memory in a descriptor is given in whole gigabytes (``4x8`` is 4 cores and
8 GB), while the plan and the hypervisors work in megabytes.
"""

import re

from pydantic import ValidationError

from ..models.plan import SizeClass
from .exceptions import InvalidSizeClass

# ASCII digits only, no leading zeros, nothing around the descriptor.
SIZE_CLASS_PATTERN = re.compile(r"([1-9][0-9]*)x([1-9][0-9]*)")
MB_PER_GB = 1024


def parse_size_class(descriptor: str) -> SizeClass:
    """Parses a descriptor such as '2x4' into a SizeClass(cpu=2, memory_mb=4096)."""
    if not isinstance(descriptor, str):
        raise InvalidSizeClass(descriptor)

    match = SIZE_CLASS_PATTERN.fullmatch(descriptor)
    if not match:
        raise InvalidSizeClass(descriptor)

    cpu, memory_gb = int(match.group(1)), int(match.group(2))
    return SizeClass(cpu=cpu, memory_mb=memory_gb * MB_PER_GB)


def format_size_class(size_class: SizeClass) -> str:
    """Returns the canonical descriptor for a SizeClass."""
    return f"{size_class.cpu}x{size_class.memory_mb // MB_PER_GB}"


def size_class_from_resources(cpu: int, memory_mb: int) -> SizeClass:
    """Builds a SizeClass from per-node resources, rejecting values a descriptor cannot express."""
    try:
        return SizeClass(cpu=cpu, memory_mb=memory_mb)
    except ValidationError as e:
        raise InvalidSizeClass(
            f"{cpu} CPU / {memory_mb} MB",
            "CPU must be positive and memory a whole number of GB",
        ) from e
