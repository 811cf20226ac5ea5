"""
Dashboard aggregation.

Everything is recomputed from the attendance table on each request. Rates
are whole percentages rounded half-up.
"""

from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlmodel import Session, select

from app.core.attendance_policy import AttendancePolicy
from app.core.clock import average_clock_time, shift_months
from app.core.logging import get_logger
from app.models.attendance import Attendance, AttendanceStatus, AttendanceWithUser
from app.models.dashboard import (
    AdminDashboard,
    DailyTrend,
    DepartmentPresence,
    MonthlyStat,
    TopPerformer,
)
from app.models.user import Role, User

logger = get_logger(__name__)

UNASSIGNED = "Unassigned"
TOP_PERFORMERS = 5
RECENT_ATTENDANCE = 5
TREND_DAYS = 7
MONTHS_OF_HISTORY = 6


def percent(part: int, whole: int) -> int:
    if not whole:
        return 0
    value = Decimal(part * 100) / Decimal(whole)
    return int(value.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def range_start(today: date, range_: str) -> date:
    """
    First day of the top-performer window ending at ``today``.

    ``week`` and ``month`` select those windows; any other value selects the
    last three months.
    """
    if range_ == "week":
        return today - timedelta(days=7)
    if range_ == "month":
        return shift_months(today, -1)
    return shift_months(today, -3)


def _records_between(session: Session, start: date, end: date) -> list[Attendance]:
    statement = select(Attendance).where(
        (Attendance.date >= start.isoformat()) & (Attendance.date <= end.isoformat())
    )
    return list(session.exec(statement).all())


def _weekly_trend(session: Session, today: date) -> list[DailyTrend]:
    week_start = today - timedelta(days=TREND_DAYS - 1)
    days = [(week_start + timedelta(days=i)).isoformat() for i in range(TREND_DAYS)]
    trend = {day: {"present": 0, "late": 0, "absent": 0} for day in days}
    for record in _records_between(session, week_start, today):
        entry = trend.get(record.date)
        if entry is None:
            continue
        if record.status == AttendanceStatus.ON_TIME:
            entry["present"] += 1
        elif record.status == AttendanceStatus.LATE:
            entry["late"] += 1
        elif record.status == AttendanceStatus.ABSENT:
            entry["absent"] += 1
    return [DailyTrend(date=day, **counts) for day, counts in trend.items()]


def _departments(
    employees: list[User], today_rows: list[tuple[Attendance, User]]
) -> list[DepartmentPresence]:
    headcount: dict[Optional[str], int] = defaultdict(int)
    for employee in employees:
        headcount[employee.department] += 1

    present: dict[Optional[str], int] = defaultdict(int)
    for record, user in today_rows:
        if record.check_in_time:
            present[user.department] += 1

    return [
        DepartmentPresence(
            name=department or UNASSIGNED,
            count=count,
            present_today=present.get(department, 0),
        )
        for department, count in sorted(
            headcount.items(), key=lambda item: (item[0] is None, item[0] or "")
        )
    ]


def _top_performers(
    session: Session, today: date, range_: str
) -> list[TopPerformer]:
    totals: dict[int, int] = defaultdict(int)
    on_time: dict[int, int] = defaultdict(int)
    for record in _records_between(session, range_start(today, range_), today):
        totals[record.user_id] += 1
        if record.status == AttendanceStatus.ON_TIME:
            on_time[record.user_id] += 1

    ranked = sorted(
        (
            (user_id, percent(on_time[user_id], total))
            for user_id, total in totals.items()
        ),
        key=lambda item: item[1],
        reverse=True,
    )[:TOP_PERFORMERS]
    if not ranked:
        return []

    users = {
        u.id: u
        for u in session.exec(
            select(User).where(User.id.in_([user_id for user_id, _ in ranked]))
        ).all()
    }
    performers = []
    for user_id, rate in ranked:
        user = users.get(user_id)
        performers.append(
            TopPerformer(
                name=user.name if user else "Unknown",
                department=(user.department if user else None) or "No Department",
                on_time_rate=rate,
            )
        )
    return performers


def _monthly_stats(
    session: Session, today: date, total_employees: int
) -> list[MonthlyStat]:
    current_month = today.replace(day=1)
    first_month = shift_months(current_month, -(MONTHS_OF_HISTORY - 1))
    last_day = shift_months(current_month, 1) - timedelta(days=1)

    buckets: dict[str, list[Attendance]] = defaultdict(list)
    for record in _records_between(session, first_month, last_day):
        buckets[record.date[:7]].append(record)

    stats = []
    for offset in range(MONTHS_OF_HISTORY - 1, -1, -1):
        month_start = shift_months(current_month, -offset)
        records = buckets.get(month_start.strftime("%Y-%m"), [])
        on_time = sum(1 for r in records if r.status == AttendanceStatus.ON_TIME)
        late = sum(1 for r in records if r.status == AttendanceStatus.LATE)
        stats.append(
            MonthlyStat(
                month=month_start.strftime("%b %Y"),
                avg_attendance=percent(on_time + late, total_employees or 1)
                if records
                else 0,
                avg_late=percent(late, len(records)),
            )
        )
    return stats


def build_admin_dashboard(
    session: Session,
    policy: AttendancePolicy,
    now: datetime,
    range_: str = "month",
    company_name: Optional[str] = None,
) -> AdminDashboard:
    """Compute the admin dashboard for the attendance day containing ``now``."""
    tz = policy.tz
    today = policy.local_date(now)
    today_str = today.isoformat()

    employees = list(
        session.exec(
            select(User).where(
                (User.role == Role.EMPLOYEE) & (User.is_active == True)  # noqa: E712
            )
        ).all()
    )
    total_employees = len(employees)

    today_rows = list(
        session.exec(
            select(Attendance, User)
            .join(User, Attendance.user_id == User.id)
            .where(Attendance.date == today_str)
        ).all()
    )
    checked_in = [record for record, _ in today_rows if record.check_in_time]
    present_today = len(checked_in)
    late_today = sum(
        1 for record, _ in today_rows if record.status == AttendanceStatus.LATE
    )

    recent = sorted(
        ((record, user) for record, user in today_rows if record.check_in_time),
        key=lambda row: row[0].check_in_time,
        reverse=True,
    )[:RECENT_ATTENDANCE]

    logger.debug(
        f"Dashboard for {today_str}: {present_today}/{total_employees} present, "
        f"{late_today} late"
    )

    return AdminDashboard(
        date=today_str,
        range=range_,
        total_employees=total_employees,
        present_today=present_today,
        absent_today=max(total_employees - present_today, 0),
        late_today=late_today,
        attendance_rate=percent(present_today, total_employees),
        avg_check_in=average_clock_time([r.check_in_time for r in checked_in], tz),
        avg_check_out=average_clock_time(
            [r.check_out_time for r in checked_in if r.check_out_time], tz
        ),
        weekly_trend=_weekly_trend(session, today),
        departments=_departments(employees, today_rows),
        top_performers=_top_performers(session, today, range_),
        monthly_stats=_monthly_stats(session, today, total_employees),
        recent_attendance=[
            AttendanceWithUser.from_row(record, user) for record, user in recent
        ],
        company_name=company_name,
    )
