"""Report data models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

FORMATS = ("json", "csv", "pdf")


@dataclass
class ReportConfig:
    """Configuration for report generation."""

    format: str = "json"
    ai_summary: bool = True

    def __post_init__(self) -> None:
        self.format = self.format.lower()
        if self.format not in FORMATS:
            raise ValueError(f"Unsupported format: {self.format}. Choose from {', '.join(FORMATS)}")


def report_path(report_dir: Path, fmt: str, generated_at: datetime | None = None) -> Path:
    """``security-scan-<timestamp>.<ext>`` inside *report_dir*."""
    generated_at = generated_at or datetime.now(timezone.utc)
    stamp = generated_at.strftime("%Y-%m-%dT%H-%M-%S-") + f"{generated_at.microsecond // 1000:03d}Z"
    return report_dir / f"security-scan-{stamp}.{fmt.lower()}"
