"""
Visualization and reporting module.

This package produces the user-facing outputs:
- Preview overlay: scoring anchors and a sparse mesh on the live frame
- Screening report: text or JSON export of a completed capture window

Non-diagnostic language throughout.
"""

from .overlay import (
    draw_landmark_overlay,
    draw_status
)
from .report_generator import (
    export_report,
    format_json_report,
    format_text_report,
    DISCLAIMER
)

__all__ = [
    'draw_landmark_overlay',
    'draw_status',
    'export_report',
    'format_json_report',
    'format_text_report',
    'DISCLAIMER',
]
