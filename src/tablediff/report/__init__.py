"""
Report generation and export for diff results.
"""

from .formatters import (
    export_report_binary,
    export_report_csv,
    export_report_json,
    format_report_console,
)
from .generator import ReportStatus, generate_report

__all__ = [
    "ReportStatus",
    "generate_report",
    "export_report_json",
    "export_report_csv",
    "export_report_binary",
    "format_report_console",
]
