"""
VS Code Extension Statistics Collector
"""
from .collector import VscodeStatCollector
from .models import STATISTICS_TYPES, Snapshot, StatConfig, StatPeriod

__version__ = "1.0.0"

__all__ = [
    "VscodeStatCollector",
    "STATISTICS_TYPES",
    "Snapshot",
    "StatConfig",
    "StatPeriod",
]
