"""
Server-rendered pages.

Access to ``/admin`` and ``/employee`` is gated by the session middleware in
``app.core.middleware``; these handlers only render.
"""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from app.api.dependencies import ClockDep, PolicyDep, SessionDep
from app.core import attendance_service, security, settings_service, task_service
from app.core.clock import to_local
from app.core.dashboard_service import build_admin_dashboard
from app.models.task import TaskStatus
from app.models.user import User

TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(tags=["pages"], include_in_schema=False)


def _company_name(session) -> str:
    return settings_service.get_setting_value(
        session, settings_service.COMPANY_NAME, "Attendance Tracker"
    )


@router.get("/", response_class=HTMLResponse)
@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request, session: SessionDep):
    return templates.TemplateResponse(
        request, "login.html", {"company_name": _company_name(session)}
    )


@router.get("/admin", response_class=HTMLResponse)
def admin_page(
    request: Request, session: SessionDep, policy: PolicyDep, clock: ClockDep
):
    claims = security.get_session(request)
    if not security.is_admin(claims):
        return RedirectResponse("/", status_code=307)

    dashboard = build_admin_dashboard(
        session, policy, clock(), company_name=_company_name(session)
    )
    return templates.TemplateResponse(
        request,
        "admin.html",
        {
            "user": session.get(User, claims.user_id),
            "dashboard": dashboard,
            "company_name": dashboard.company_name,
        },
    )


@router.get("/employee", response_class=HTMLResponse)
def employee_page(
    request: Request, session: SessionDep, policy: PolicyDep, clock: ClockDep
):
    claims = security.get_session(request)
    if not security.is_employee(claims):
        return RedirectResponse("/", status_code=307)

    now = clock()
    today = attendance_service.today_status(session, claims.user_id, policy, now)
    tasks, _ = task_service.list_tasks(session, assigned_to=claims.user_id, limit=5)

    def local_clock(instant):
        return to_local(instant, policy.tz).strftime("%H:%M") if instant else "-"

    return templates.TemplateResponse(
        request,
        "employee.html",
        {
            "user": session.get(User, claims.user_id),
            "today": today,
            "tasks": [task for task, _ in tasks],
            "task_statuses": [status.value for status in TaskStatus],
            "local_clock": local_clock,
            "company_name": _company_name(session),
        },
    )
