"""Tests for task assignment and status updates."""

import pytest


@pytest.fixture
def task(admin_client, employee):
    response = admin_client.post(
        "/api/tasks",
        json={
            "title": "Prepare sprint demo",
            "description": "Slides and a short walkthrough",
            "assigned_to": employee.id,
            "due_date": "2026-10-09T12:00:00",
            "priority": "high",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_create_task(task, employee):
    assert task["status"] == "pending"
    assert task["priority"] == "high"
    assert task["assigned_to"] == employee.id
    assert task["user"]["name"] == "Alice Smith"


def test_create_task_for_unknown_assignee(admin_client):
    response = admin_client.post(
        "/api/tasks", json={"title": "Orphan", "assigned_to": 999}
    )
    assert response.status_code == 400
    assert response.json() == {"detail": "Assignee not found"}


def test_create_task_for_admin_is_rejected(admin_client, admin):
    response = admin_client.post(
        "/api/tasks", json={"title": "Self", "assigned_to": admin.id}
    )
    assert response.status_code == 400


def test_employee_cannot_create_tasks(employee_client, employee):
    response = employee_client.post(
        "/api/tasks", json={"title": "Mine", "assigned_to": employee.id}
    )
    assert response.status_code == 403


def test_employee_sees_only_assigned_tasks(task, admin_client, make_user, login):
    bob = make_user("bob@example.com", name="Bob Jones")
    admin_client.post("/api/tasks", json={"title": "Bob's task", "assigned_to": bob.id})

    bob_client = login("bob@example.com")
    body = bob_client.get("/api/tasks").json()

    assert [t["title"] for t in body["tasks"]] == ["Bob's task"]
    assert body["pagination"]["total"] == 1
    assert bob_client.get(f"/api/tasks/{task['id']}").status_code == 403


def test_admin_lists_and_filters_tasks(task, admin_client, make_user):
    bob = make_user("bob@example.com", name="Bob Jones")
    admin_client.post("/api/tasks", json={"title": "Bob's task", "assigned_to": bob.id})

    everything = admin_client.get("/api/tasks").json()
    # Most recent first
    assert [t["title"] for t in everything["tasks"]] == [
        "Bob's task",
        "Prepare sprint demo",
    ]

    only_bob = admin_client.get(f"/api/tasks?assigned_to={bob.id}").json()
    assert only_bob["pagination"]["total"] == 1

    pending = admin_client.get("/api/tasks?status=completed").json()
    assert pending["tasks"] == []


def test_assignee_can_update_status(task, employee_client):
    response = employee_client.patch(
        f"/api/tasks/{task['id']}", json={"status": "in_progress"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "in_progress"


def test_assignee_cannot_edit_other_fields(task, employee_client):
    response = employee_client.patch(
        f"/api/tasks/{task['id']}", json={"status": "completed", "title": "Done!"}
    )
    assert response.status_code == 403
    assert response.json() == {"detail": "Only status can be updated"}

    unchanged = employee_client.get(f"/api/tasks/{task['id']}").json()
    assert unchanged["title"] == "Prepare sprint demo"
    assert unchanged["status"] == "pending"


def test_other_employee_cannot_update_task(task, make_user, login):
    make_user("bob@example.com", name="Bob Jones")
    response = login("bob@example.com").patch(
        f"/api/tasks/{task['id']}", json={"status": "completed"}
    )
    assert response.status_code == 403


def test_admin_updates_any_field(task, admin_client):
    response = admin_client.patch(
        f"/api/tasks/{task['id']}",
        json={"title": "Prepare sprint review", "priority": "low"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Prepare sprint review"
    assert body["priority"] == "low"


def test_update_rejects_unknown_status(task, employee_client):
    response = employee_client.patch(
        f"/api/tasks/{task['id']}", json={"status": "archived"}
    )
    assert response.status_code == 400


def test_delete_task(task, admin_client, employee_client):
    assert employee_client.delete(f"/api/tasks/{task['id']}").status_code == 403

    response = admin_client.delete(f"/api/tasks/{task['id']}")
    assert response.status_code == 200
    assert response.json() == {"message": "Task deleted successfully"}
    assert admin_client.get(f"/api/tasks/{task['id']}").status_code == 404


@pytest.mark.parametrize("field", ["title", "priority", "status"])
def test_update_rejects_null_for_required_fields(task, admin_client, field):
    response = admin_client.patch(f"/api/tasks/{task['id']}", json={field: None})

    assert response.status_code == 400
    assert response.json() == {"detail": f"{field} cannot be null"}
    unchanged = admin_client.get(f"/api/tasks/{task['id']}").json()
    assert unchanged[field] == task[field]


def test_admin_clears_due_date(task, admin_client):
    response = admin_client.patch(f"/api/tasks/{task['id']}", json={"due_date": None})
    assert response.status_code == 200
    assert response.json()["due_date"] is None


def test_due_date_with_offset_is_stored_in_utc(admin_client, employee):
    response = admin_client.post(
        "/api/tasks",
        json={
            "title": "Quarterly report",
            "assigned_to": employee.id,
            "due_date": "2026-10-09T17:30:00+05:30",
        },
    )

    assert response.status_code == 201
    assert response.json()["due_date"] == "2026-10-09T12:00:00"
