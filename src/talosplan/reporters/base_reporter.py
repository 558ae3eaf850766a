# src/talosplan/reporters/base_reporter.py
"""
Defines the abstract base class for all reporters.
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from ..models.plan import InfrastructurePlan


class BaseReporter(ABC):
    """
    Abstract Base Class for all reporters.
    """

    @abstractmethod
    def report(self, plan: InfrastructurePlan, platform: str, warnings: Optional[List[str]] = None):
        """
        Takes an aggregated plan and presents it in a specific format.
        """
        pass
