"""Response schemas for the admin dashboard."""

from typing import Optional

from pydantic import BaseModel

from app.models.attendance import AttendanceWithUser


class DailyTrend(BaseModel):
    date: str
    present: int
    late: int
    absent: int


class DepartmentPresence(BaseModel):
    name: str
    count: int
    present_today: int


class TopPerformer(BaseModel):
    name: str
    department: str
    on_time_rate: int


class MonthlyStat(BaseModel):
    month: str  # e.g. "Oct 2026"
    avg_attendance: int
    avg_late: int


class AdminDashboard(BaseModel):
    date: str
    range: str
    total_employees: int
    present_today: int
    absent_today: int
    late_today: int
    attendance_rate: int
    avg_check_in: str
    avg_check_out: str
    weekly_trend: list[DailyTrend]
    departments: list[DepartmentPresence]
    top_performers: list[TopPerformer]
    monthly_stats: list[MonthlyStat]
    recent_attendance: list[AttendanceWithUser]
    company_name: Optional[str] = None
