"""CSV export of attendance records."""

import csv
import io
from datetime import date, datetime
from typing import Optional

from app.core.clock import to_local
from app.models.attendance import Attendance
from app.models.user import User

CSV_HEADERS = [
    "Date",
    "Employee",
    "Department",
    "Check In",
    "Check Out",
    "Status",
    "Work Hours",
]


def _clock(instant: Optional[datetime], tz) -> str:
    if instant is None:
        return "-"
    return to_local(instant, tz).strftime("%H:%M")


def _display_date(day: str) -> str:
    # "2026-10-05" -> "October 5, 2026"
    parsed = date.fromisoformat(day)
    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


def attendance_csv(rows: list[tuple[Attendance, User]], tz) -> str:
    """Render attendance rows as CSV text. Empty values are written as ``-``."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for record, user in rows:
        writer.writerow(
            [
                _display_date(record.date),
                user.name or "-",
                user.department or "-",
                _clock(record.check_in_time, tz),
                _clock(record.check_out_time, tz),
                record.status.value,
                f"{record.work_hours:.2f}h" if record.work_hours else "-",
            ]
        )
    return buffer.getvalue()


def export_filename(today: date) -> str:
    return f"attendance-report-{today.isoformat()}.csv"
