"""Report generator orchestration."""

import logging
from pathlib import Path

from sentinelscan.errors import ReportError
from sentinelscan.modules.scan import ScanReport

from .csv_report import generate_csv_report
from .json_report import generate_json_report
from .models import ReportConfig, report_path
from .pdf_report import generate_pdf_report
from .summary import AISummarizer

logger = logging.getLogger(__name__)

RENDERERS = {
    "json": generate_json_report,
    "csv": generate_csv_report,
    "pdf": generate_pdf_report,
}


class ReportGenerator:
    """Writes scan reports to disk, optionally with an AI assessment attached."""

    def __init__(self, output_dir: Path, summarizer: AISummarizer | None = None):
        self.output_dir = Path(output_dir)
        self.summarizer = summarizer

    def generate(self, report: ScanReport, fmt: str | ReportConfig = "json") -> Path:
        """Render *report* in the requested format and return the written file."""
        config = fmt if isinstance(fmt, ReportConfig) else ReportConfig(format=fmt)

        if config.ai_summary and self.summarizer is not None and report.ai_summary is None:
            report.attach_ai_summary(self.summarizer.summarize(report))

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ReportError(f"Cannot create output directory {self.output_dir}: {exc}") from exc

        report_file = report_path(self.output_dir, config.format)
        try:
            RENDERERS[config.format](report_file, report)
        except OSError as exc:
            raise ReportError(f"Cannot write report {report_file}: {exc}") from exc
        logger.info("Wrote %s report to %s", config.format, report_file)
        return report_file


def generate_report(
    report: ScanReport,
    output_dir: Path,
    fmt: str = "json",
    summarizer: AISummarizer | None = None,
) -> Path:
    """Convenience function to write one report."""
    return ReportGenerator(output_dir, summarizer).generate(report, fmt)
