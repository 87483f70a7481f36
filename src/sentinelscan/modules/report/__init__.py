"""Reporting module for SentinelScan."""

from .generator import ReportGenerator, generate_report
from .models import FORMATS, ReportConfig
from .summary import AISummarizer, AISummary

__all__ = [
    "AISummarizer",
    "AISummary",
    "FORMATS",
    "ReportConfig",
    "ReportGenerator",
    "generate_report",
]
