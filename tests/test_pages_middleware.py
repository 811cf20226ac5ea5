"""Tests for page routing by session role and the security headers."""

import pytest


def _location(response):
    return response.headers["location"]


@pytest.mark.parametrize("path", ["/admin", "/employee", "/admin/reports"])
def test_protected_pages_redirect_anonymous_visitors(client, path):
    response = client.get(path, follow_redirects=False)
    assert response.status_code == 307
    assert _location(response) == "/"


def test_login_page_is_public(client):
    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert "Sign in" in response.text
    assert response.headers["x-frame-options"] == "DENY"
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["referrer-policy"] == "strict-origin-when-cross-origin"


def test_admin_is_sent_to_admin_dashboard(admin_client):
    for path in ("/", "/login", "/employee"):
        response = admin_client.get(path, follow_redirects=False)
        assert response.status_code == 307
        assert _location(response) == "/admin"


def test_employee_is_sent_to_employee_dashboard(employee_client):
    for path in ("/", "/login", "/admin"):
        response = employee_client.get(path, follow_redirects=False)
        assert response.status_code == 307
        assert _location(response) == "/employee"


def test_admin_page_renders_dashboard(admin_client, employee):
    response = admin_client.get("/admin")

    assert response.status_code == 200
    assert "Attendance Tracker" in response.text
    assert "2026-10-05" in response.text
    assert response.headers["cache-control"].startswith("no-store")
    assert response.headers["pragma"] == "no-cache"
    assert response.headers["x-frame-options"] == "DENY"


def test_employee_page_shows_today(employee_client):
    employee_client.post(
        "/api/attendance/check-in", json={"latitude": 12.97, "longitude": 77.59}
    )

    response = employee_client.get("/employee")

    assert response.status_code == 200
    assert "Hello, Alice Smith" in response.text
    assert "09:00" in response.text
    assert response.headers["expires"] == "0"


def test_invalid_cookie_is_cleared(client):
    response = client.get(
        "/admin",
        headers={"Cookie": "auth_token=not-a-token"},
        follow_redirects=False,
    )

    assert response.status_code == 307
    assert _location(response) == "/"
    assert 'auth_token=""' in response.headers["set-cookie"]


def test_api_responses_carry_security_headers(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.headers["x-frame-options"] == "DENY"
    assert "cache-control" not in response.headers


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
