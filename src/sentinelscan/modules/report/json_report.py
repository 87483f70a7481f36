"""JSON report rendering."""

import json
from pathlib import Path

from sentinelscan.modules.scan import ScanReport


def generate_json_report(report_file: Path, report: ScanReport) -> Path:
    """Write the report dictionary verbatim as indented JSON."""
    report_file.write_text(json.dumps(report.to_dict(), indent=2, default=str), encoding="utf-8")
    return report_file
