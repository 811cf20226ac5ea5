"""Tests for check-in, check-out, listing and export of attendance."""

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime
from sqlmodel import Session, select

from app.core import attendance_service
from app.core.database import engine
from app.models.attendance import Attendance, AttendanceStatus
from app.models.setting import Setting
from app.models.task import Task
from app.models.user import User

OFFICE = {"latitude": 12.9716, "longitude": 77.5946, "address": "MG Road"}


def _records_for(user_id):
    with Session(engine) as session:
        return list(
            session.exec(select(Attendance).where(Attendance.user_id == user_id)).all()
        )


def _add_record(session, user, day, check_in, check_out=None, status=None):
    record = Attendance(
        user_id=user.id,
        date=day,
        check_in_time=check_in,
        check_out_time=check_out,
        status=status or AttendanceStatus.ON_TIME,
    )
    if check_out:
        record.work_hours = Decimal("8.50")
    session.add(record)
    session.commit()
    return record


def test_check_in_on_time(employee_client, employee):
    response = employee_client.post("/api/attendance/check-in", json=OFFICE)

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Checked in successfully"
    assert body["data"]["status"] == "ON_TIME"
    assert body["data"]["date"] == "2026-10-05"
    assert body["data"]["check_in_time"] == "2026-10-05T03:30:00"
    assert body["data"]["check_in_addr"] == "MG Road"
    assert body["data"]["check_out_time"] is None


def test_check_in_after_threshold_is_late(employee_client, clock):
    # 09:16 IST
    clock.now = datetime(2026, 10, 5, 3, 46)
    response = employee_client.post("/api/attendance/check-in", json=OFFICE)

    assert response.status_code == 200
    assert response.json()["message"] == "Checked in (Late)"
    assert response.json()["data"]["status"] == "LATE"


def test_late_threshold_follows_settings(employee_client, admin_client, clock):
    admin_client.put(
        "/api/settings",
        json={"settings": [{"key": "late_threshold", "value": "30"}]},
    )
    clock.now = datetime(2026, 10, 5, 3, 55)  # 09:25 IST

    response = employee_client.post("/api/attendance/check-in", json=OFFICE)
    assert response.json()["data"]["status"] == "ON_TIME"


def test_second_check_in_is_rejected(employee_client, employee, clock):
    employee_id = employee.id
    employee_client.post("/api/attendance/check-in", json=OFFICE)
    clock.now = datetime(2026, 10, 5, 5, 0)

    response = employee_client.post("/api/attendance/check-in", json=OFFICE)

    assert response.status_code == 400
    assert response.json() == {"detail": "Already checked in today"}
    assert len(_records_for(employee_id)) == 1


def test_concurrent_check_in_is_reported_as_duplicate(
    employee_client, employee, db_session, monkeypatch
):
    employee_id = employee.id
    # Another request inserts today's row after this one looked for it
    lookup = attendance_service.get_record_for_day
    calls = []

    def stale_lookup(session, user_id, day):
        calls.append(day)
        if len(calls) == 1:
            _add_record(db_session, employee, day, datetime(2026, 10, 5, 3, 29))
            return None
        return lookup(session, user_id, day)

    monkeypatch.setattr(attendance_service, "get_record_for_day", stale_lookup)

    response = employee_client.post("/api/attendance/check-in", json=OFFICE)

    assert response.status_code == 400
    assert response.json() == {"detail": "Already checked in today"}
    records = _records_for(employee_id)
    assert len(records) == 1
    assert records[0].check_in_time == datetime(2026, 10, 5, 3, 29)


def test_check_in_after_account_deletion(employee_client, employee, admin_client):
    employee_id = employee.id
    admin_client.delete(f"/api/employees/{employee_id}")

    response = employee_client.post("/api/attendance/check-in", json=OFFICE)

    assert response.status_code == 404
    assert response.json() == {"detail": "User not found"}


def test_timestamps_are_stored_as_naive_utc(employee_client, employee):
    employee_id = employee.id
    employee_client.post("/api/attendance/check-in", json=OFFICE)

    for column in (
        Attendance.__table__.c.check_in_time,
        Attendance.__table__.c.created_at,
        User.__table__.c.updated_at,
        Task.__table__.c.due_date,
        Setting.__table__.c.updated_at,
    ):
        assert type(column.type) is DateTime, column
        assert column.type.timezone is False
    (record,) = _records_for(employee_id)
    assert record.check_in_time == datetime(2026, 10, 5, 3, 30)
    assert record.check_in_time.tzinfo is None


def test_check_in_next_local_day_creates_new_record(employee_client, employee, clock):
    employee_id = employee.id
    employee_client.post("/api/attendance/check-in", json=OFFICE)
    # 2026-10-06 00:30 IST, still the 5th in UTC
    clock.now = datetime(2026, 10, 5, 19, 0)

    response = employee_client.post("/api/attendance/check-in", json=OFFICE)

    assert response.status_code == 200
    assert response.json()["data"]["date"] == "2026-10-06"
    assert {r.date for r in _records_for(employee_id)} == {"2026-10-05", "2026-10-06"}


def test_check_out_without_check_in(employee_client):
    response = employee_client.post("/api/attendance/check-out", json=OFFICE)
    assert response.status_code == 400
    assert response.json() == {"detail": "Not checked in today"}


def test_check_out_records_work_hours(employee_client, clock):
    employee_client.post("/api/attendance/check-in", json=OFFICE)
    clock.now = datetime(2026, 10, 5, 12, 0)  # 17:30 IST

    response = employee_client.post(
        "/api/attendance/check-out", json={"latitude": 12.9, "longitude": 77.6}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Checked out successfully"
    assert float(body["data"]["work_hours"]) == 8.5
    assert body["data"]["check_out_time"] == "2026-10-05T12:00:00"
    assert body["data"]["status"] == "ON_TIME"


def test_check_out_twice_is_rejected(employee_client, clock):
    employee_client.post("/api/attendance/check-in", json=OFFICE)
    clock.now = datetime(2026, 10, 5, 12, 0)
    employee_client.post("/api/attendance/check-out", json=OFFICE)

    response = employee_client.post("/api/attendance/check-out", json=OFFICE)
    assert response.status_code == 400
    assert response.json() == {"detail": "Already checked out today"}


def test_check_out_before_check_in_is_rejected(employee_client, clock):
    employee_client.post("/api/attendance/check-in", json=OFFICE)
    clock.now = datetime(2026, 10, 5, 3, 0)  # earlier, same local day

    response = employee_client.post("/api/attendance/check-out", json=OFFICE)
    assert response.status_code == 400
    assert response.json() == {
        "detail": "Check-out time cannot be before check-in time"
    }


def test_check_in_requires_valid_location(employee_client):
    response = employee_client.post(
        "/api/attendance/check-in", json={"latitude": 120, "longitude": 77.5}
    )
    assert response.status_code == 400

    response = employee_client.post("/api/attendance/check-in", json={})
    assert response.status_code == 400


def test_check_in_requires_session(client):
    response = client.post("/api/attendance/check-in", json=OFFICE)
    assert response.status_code == 401


def test_today_status(employee_client, clock):
    before = employee_client.get("/api/attendance/today").json()
    assert before["date"] == "2026-10-05"
    assert before["is_checked_in"] is False
    assert before["is_checked_out"] is False

    employee_client.post("/api/attendance/check-in", json=OFFICE)
    after = employee_client.get("/api/attendance/today").json()
    assert after["is_checked_in"] is True
    assert after["is_checked_out"] is False
    assert after["status"] == "ON_TIME"


def test_employee_lists_only_own_records(
    employee_client, employee, make_user, db_session
):
    bob = make_user("bob@example.com", name="Bob Jones", department="Sales")
    _add_record(db_session, bob, "2026-10-02", datetime(2026, 10, 2, 3, 30))
    _add_record(db_session, employee, "2026-10-02", datetime(2026, 10, 2, 3, 40))
    _add_record(db_session, employee, "2026-10-01", datetime(2026, 10, 1, 3, 40))

    # user_id is ignored for employees
    response = employee_client.get(f"/api/attendance?user_id={bob.id}")

    body = response.json()
    assert response.status_code == 200
    assert body["pagination"]["total"] == 2
    assert [r["date"] for r in body["records"]] == ["2026-10-02", "2026-10-01"]
    assert {r["user"]["name"] for r in body["records"]} == {"Alice Smith"}


def test_admin_filters_and_paginates(admin_client, employee, make_user, db_session):
    bob = make_user("bob@example.com", name="Bob Jones", department="Sales")
    for day in ("2026-10-01", "2026-10-02", "2026-10-03"):
        check_in = datetime.fromisoformat(f"{day}T03:30:00")
        _add_record(db_session, employee, day, check_in)
        _add_record(db_session, bob, day, check_in, status=AttendanceStatus.LATE)

    everything = admin_client.get("/api/attendance?limit=4").json()
    assert everything["pagination"] == {
        "page": 1,
        "limit": 4,
        "total": 6,
        "total_pages": 2,
    }
    assert len(everything["records"]) == 4

    by_name = admin_client.get("/api/attendance?search=BOB").json()
    assert by_name["pagination"]["total"] == 3

    by_department = admin_client.get("/api/attendance?department=Engineering").json()
    assert {r["user"]["name"] for r in by_department["records"]} == {"Alice Smith"}

    late = admin_client.get("/api/attendance?status=LATE").json()
    assert late["pagination"]["total"] == 3

    one_day = admin_client.get("/api/attendance?date=2026-10-02").json()
    assert one_day["pagination"]["total"] == 2

    # A full range wins over a single date
    ranged = admin_client.get(
        "/api/attendance?start_date=2026-10-02&end_date=2026-10-03&date=2026-10-01"
    ).json()
    assert ranged["pagination"]["total"] == 4


def test_list_rejects_malformed_date(admin_client):
    response = admin_client.get("/api/attendance?date=05-10-2026")
    assert response.status_code == 400
    assert response.json() == {"detail": "date must be in YYYY-MM-DD format"}


def test_export_is_admin_only(employee_client):
    response = employee_client.get("/api/attendance/export")
    assert response.status_code == 403
    assert response.json() == {"detail": "Forbidden"}


def test_export_csv(admin_client, employee, db_session):
    _add_record(
        db_session,
        employee,
        "2026-10-05",
        datetime(2026, 10, 5, 3, 30),
        check_out=datetime(2026, 10, 5, 12, 0),
    )

    response = admin_client.get("/api/attendance/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert (
        response.headers["content-disposition"]
        == 'attachment; filename="attendance-report-2026-10-05.csv"'
    )
    lines = response.text.strip().split("\n")
    assert lines[0] == "Date,Employee,Department,Check In,Check Out,Status,Work Hours"
    assert lines[1] == (
        '"October 5, 2026",Alice Smith,Engineering,09:00,17:30,ON_TIME,8.50h'
    )
