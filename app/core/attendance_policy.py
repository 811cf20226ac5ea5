"""
Attendance policy and lateness rules.

The policy is built from the settings table on every request, so admin
changes apply immediately without a restart.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal

from app.core.clock import get_timezone, local_date, to_local
from app.models.attendance import AttendanceStatus

DEFAULT_WORK_START = "09:00"
DEFAULT_WORK_END = "17:00"
DEFAULT_LATE_THRESHOLD_MINUTES = 15
DEFAULT_HALF_DAY_THRESHOLD_HOURS = 4.0

TWO_PLACES = Decimal("0.01")


def parse_hhmm(value: str) -> time:
    """Parse an ``HH:MM`` string. Raises ``ValueError`` on bad input."""
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return time(int(parts[0]), int(parts[1]))


@dataclass(frozen=True)
class AttendancePolicy:
    work_start_time: time
    work_end_time: time
    late_threshold_minutes: int
    half_day_threshold_hours: float
    timezone: str

    @property
    def tz(self):
        return get_timezone(self.timezone)

    def local_date(self, instant: datetime) -> date:
        """Attendance day of ``instant`` in the policy time zone."""
        return local_date(instant, self.tz)

    def late_cutoff(self, work_date: date) -> datetime:
        """Last on-time instant (aware, local) for ``work_date``."""
        start = self.tz.localize(datetime.combine(work_date, self.work_start_time))
        return start + timedelta(minutes=self.late_threshold_minutes)

    def classify_check_in(self, instant: datetime) -> AttendanceStatus:
        """LATE when the local check-in is strictly after start + threshold."""
        local = to_local(instant, self.tz)
        if local > self.late_cutoff(local.date()):
            return AttendanceStatus.LATE
        return AttendanceStatus.ON_TIME


def compute_work_hours(check_in: datetime, check_out: datetime) -> Decimal:
    """Elapsed hours between two instants, rounded half-up to two decimals."""
    seconds = Decimal(str((check_out - check_in).total_seconds()))
    return (seconds / Decimal(3600)).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
