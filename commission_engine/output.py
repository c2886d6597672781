"""
Output Helpers

Display formatting and CSV serialization for report consumers. Nothing here
feeds back into calculations.
"""

import csv
import io
import json

# Roles allowed to download report exports
EXPORT_ROLES = frozenset({"advisor", "manager", "admin"})


def to_money(value: float) -> float:
    """Round to 2 decimal places for display."""
    return round(float(value), 2)


def format_currency(value: float) -> str:
    """Format a number as a pound amount, e.g. ``£1,800.00``."""
    return f"£{value:,.2f}"


def format_percentage(value: float) -> str:
    return f"{value:.2f}%"


def can_export_csv(role: str | None) -> bool:
    """Case-insensitive check of the caller's role against EXPORT_ROLES."""
    if not role:
        return False
    return role.lower() in EXPORT_ROLES


def _csv_cell(value):
    """Prepare one cell: nested values as JSON, whole-number floats without ``.0``."""
    if value is None:
        return ""
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, separators=(",", ":"))
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def to_csv(rows: list[dict]) -> str:
    """
    Serialize uniform records to CSV text.

    The header comes from the first record's keys; later records are read
    with the same keys (missing keys render empty). Rows are joined with
    ``\\n`` and there is no trailing newline. Empty input gives ``""``.
    """
    if not rows:
        return ""

    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow([_csv_cell(row.get(header)) for header in headers])
    return buffer.getvalue().removesuffix("\n")
