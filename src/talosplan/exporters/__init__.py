"""Exporters package for plan outputs."""

from .base_exporter import BaseExporter
from .json_exporter import JSONExporter
from .tfvars_writer import TfvarsPlanWriter

__all__ = ["BaseExporter", "JSONExporter", "TfvarsPlanWriter"]
