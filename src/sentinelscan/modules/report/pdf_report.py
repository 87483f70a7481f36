"""PDF report rendering with reportlab."""

import html
import json
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, Preformatted, SimpleDocTemplate, Spacer, Table, TableStyle

from sentinelscan.modules.scan import DetectorError, ScanReport

C_DANGER = colors.HexColor("#C0392B")
C_OK = colors.HexColor("#1E8449")
C_MUTED = colors.HexColor("#6B7C93")
C_BORDER = colors.HexColor("#D0DAE6")


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("ReportTitle", parent=base["Title"], fontSize=20),
        "heading": ParagraphStyle("Heading", parent=base["Heading2"], spaceBefore=8),
        "body": base["BodyText"],
        "error": ParagraphStyle("Error", parent=base["BodyText"], textColor=C_DANGER),
        "code": ParagraphStyle("Code", parent=base["Code"], fontSize=7, leading=9),
    }


def _summary_table(report: ScanReport) -> Table:
    vulnerable = len(report.vulnerable_checks)
    failed = len(report.failed_checks)
    rows = [
        ["Target", report.target],
        ["Timestamp", report.timestamp],
        ["Checks run", str(len(report.results))],
        ["Vulnerable", str(vulnerable)],
        ["Errors", str(failed)],
    ]
    table = Table(rows, colWidths=[35 * mm, 135 * mm])
    table.setStyle(
        TableStyle(
            [
                ("TEXTCOLOR", (0, 0), (0, -1), C_MUTED),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("LINEBELOW", (0, 0), (-1, -1), 0.25, C_BORDER),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    return table


def generate_pdf_report(report_file: Path, report: ScanReport) -> Path:
    styles = _styles()
    story: list = [
        Paragraph("Web Security Scan Report", styles["title"]),
        Spacer(1, 4 * mm),
        _summary_table(report),
        Spacer(1, 6 * mm),
    ]

    summary = report.ai_summary
    if summary is not None:
        story.append(Paragraph("AI Security Assessment", styles["heading"]))
        story.append(Paragraph(f"<b>Rating:</b> {html.escape(summary.rating)}", styles["body"]))
        story.append(
            Paragraph(f"<b>Overall risk:</b> {html.escape(summary.overall_risk)}", styles["body"])
        )
        story.append(Paragraph(f"<b>Summary:</b> {html.escape(summary.summary)}", styles["body"]))
        story.append(Paragraph("<b>Recommendations:</b>", styles["body"]))
        for recommendation in summary.recommendations:
            story.append(Paragraph(f"&bull; {html.escape(recommendation)}", styles["body"]))
        story.append(Spacer(1, 4 * mm))

    for check, result in report.results.items():
        if isinstance(result, DetectorError):
            story.append(Paragraph(html.escape(check.upper()), styles["heading"]))
            story.append(Paragraph(f"Error: {html.escape(result.error)}", styles["error"]))
            continue
        color = C_DANGER if result.vulnerable else C_OK
        verdict = "VULNERABLE" if result.vulnerable else "OK"
        story.append(
            Paragraph(
                f'{html.escape(check.upper())} <font color="#{color.hexval()[2:]}">[{verdict}]</font>',
                styles["heading"],
            )
        )
        for issue in result.issues:
            story.append(Paragraph(f"&bull; {html.escape(issue)}", styles["body"]))
        story.append(
            Preformatted(json.dumps(result.details, indent=2, default=str), styles["code"])
        )

    doc = SimpleDocTemplate(
        str(report_file),
        pagesize=A4,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title="Web Security Scan Report",
    )
    doc.build(story)
    return report_file
