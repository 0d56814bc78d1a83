"""
report.py - Serialize account reports as CSV
"""

from __future__ import annotations
import csv
import sys
from decimal import Decimal
from typing import Iterable, TextIO

from .core import AccountReport, ZERO

REPORT_HEADER = ("client", "available", "held", "total", "locked")


def format_amount(value: Decimal) -> str:
    """
    Render an amount as plain decimal text.

    Trailing zeros are trimmed but one fractional digit is kept, so
    Decimal("2.0000") becomes "2.0" and Decimal("1.2340") becomes "1.234".
    """
    if value == ZERO:
        value = abs(value)  # no "-0.0"
    text = format(value, "f")
    if "." not in text:
        return text + ".0"
    text = text.rstrip("0")
    if text.endswith("."):
        text += "0"
    return text


def report_row(report: AccountReport) -> list:
    return [
        report.client,
        format_amount(report.available),
        format_amount(report.held),
        format_amount(report.total),
        "true" if report.locked else "false",
    ]


def write_report(reports: Iterable[AccountReport], stream: TextIO = None) -> None:
    """
    Write the header and one row per report.

    Args:
        reports: Rows in the order they should appear
        stream: Destination (default: sys.stdout)
    """
    writer = csv.writer(stream or sys.stdout, lineterminator="\n")
    writer.writerow(REPORT_HEADER)
    for report in reports:
        writer.writerow(report_row(report))
