"""
Screening report export.

The report is the only artifact written to disk: a human-readable text file
(or JSON with the same fields) holding the timestamp, score, frame count,
feature detail block and a fixed disclaimer.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from scoring.asymmetry_score import ScreeningReport, report_to_dict

logger = logging.getLogger(__name__)

REPORT_TITLE = "Stroke Screening Report (Demo)"
REPORT_BASENAME = "stroke_screening_report"

DISCLAIMER = (
    "DISCLAIMER: This is a development/demo screening tool. NOT a medical diagnosis.\n"
    "If you suspect stroke, call emergency services immediately."
)

SUPPORTED_FORMATS = ('txt', 'json')


def format_text_report(report: ScreeningReport) -> str:
    """Render a report as plain text."""
    details = json.dumps(report.details.to_export_dict(), indent=2)
    return (
        f"{REPORT_TITLE}\n"
        f"Timestamp: {report.timestamp}\n"
        f"Score: {report.score} / 100\n"
        f"Risk tier: {report.tier.label}\n"
        f"Frames captured: {report.frame_count}\n"
        f"Details: {details}\n"
        f"\n"
        f"{DISCLAIMER}\n"
    )


def format_json_report(report: ScreeningReport) -> str:
    """Render a report as JSON, disclaimer included."""
    data = report_to_dict(report)
    data['disclaimer'] = DISCLAIMER
    return json.dumps(data, indent=2)


def export_report(
    report: ScreeningReport,
    output_dir: str,
    fmt: str = 'txt',
    filename: Optional[str] = None
) -> Path:
    """
    Write a report to disk.

    Args:
        report: Completed screening report
        output_dir: Directory for the report file (created if missing)
        fmt: 'txt' or 'json'
        filename: Optional file name (default: stroke_screening_report.<fmt>)

    Returns:
        Path of the written file

    Raises:
        ValueError: If the format is not supported
    """
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported report format '{fmt}', expected one of {SUPPORTED_FORMATS}")

    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    report_path = output_path / (filename or f"{REPORT_BASENAME}.{fmt}")

    if fmt == 'json':
        content = format_json_report(report)
    else:
        content = format_text_report(report)

    with open(report_path, 'w', encoding='utf-8') as f:
        f.write(content)

    logger.info(f"Screening report saved: {report_path}")
    return report_path
