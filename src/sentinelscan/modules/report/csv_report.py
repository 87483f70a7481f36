"""CSV report rendering: one ``check,key,value`` row per reported field."""

import csv
import json
from pathlib import Path

from sentinelscan.modules.scan import DetectorError, ScanReport

AI_SUMMARY_ROW = "AI Summary"
HEADER = ("Check", "Key", "Value")


def report_rows(report: ScanReport) -> list[tuple[str, str, str]]:
    rows: list[tuple[str, str, str]] = []
    summary = report.ai_summary
    if summary is not None:
        rows.append((AI_SUMMARY_ROW, "rating", summary.rating))
        rows.append((AI_SUMMARY_ROW, "summary", summary.summary))
        for index, recommendation in enumerate(summary.recommendations, start=1):
            rows.append((AI_SUMMARY_ROW, f"recommendation_{index}", recommendation))

    for check, result in report.results.items():
        if isinstance(result, DetectorError):
            rows.append((check, "error", result.error))
            continue
        for key, value in result.to_dict().items():
            rows.append((check, key, json.dumps(value, default=str)))
    return rows


def generate_csv_report(report_file: Path, report: ScanReport) -> Path:
    with report_file.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(HEADER)
        writer.writerows(report_rows(report))
    return report_file
