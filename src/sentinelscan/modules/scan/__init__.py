"""Scan orchestration and report model."""

from .models import DetectorError, ScanReport, Target, parse_target
from .orchestrator import ScanOrchestrator

__all__ = ["DetectorError", "ScanOrchestrator", "ScanReport", "Target", "parse_target"]
