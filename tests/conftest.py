"""
Shared fixtures.

The application is configured for an in-memory SQLite database before it is
imported; every test starts from empty tables with the default settings.
"""

import os

os.environ["JWT_SECRET"] = "test-secret"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["ENVIRONMENT"] = "test"
os.environ["ADMIN_EMAIL"] = ""
os.environ["ADMIN_PASSWORD"] = ""

from datetime import datetime  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel  # noqa: E402

from app.api.dependencies import get_clock  # noqa: E402
from app.core.database import create_db_and_tables, engine  # noqa: E402
from app.core.security import hash_password  # noqa: E402
from app.core.settings_service import seed_default_settings  # noqa: E402
from app.main import app  # noqa: E402
from app.models.user import Role, User  # noqa: E402

PASSWORD = "password123"

# Monday 2026-10-05, 09:00 in Asia/Kolkata
MONDAY_9AM_IST = datetime(2026, 10, 5, 3, 30)


class FrozenClock:
    """Replaces the request clock; ``now`` is naive UTC."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(autouse=True)
def reset_database():
    SQLModel.metadata.drop_all(engine)
    create_db_and_tables()
    with Session(engine) as session:
        seed_default_settings(session)
    yield


@pytest.fixture
def db_session():
    with Session(engine) as session:
        yield session


@pytest.fixture
def clock():
    frozen = FrozenClock(MONDAY_9AM_IST)
    app.dependency_overrides[get_clock] = lambda: frozen
    yield frozen
    app.dependency_overrides.pop(get_clock, None)


def _create_user(
    session: Session,
    email: str,
    name: str = "Test User",
    role: Role = Role.EMPLOYEE,
    department: str | None = None,
    is_active: bool = True,
) -> User:
    user = User(
        email=email,
        password_hash=hash_password(PASSWORD),
        name=name,
        role=role,
        department=department,
        is_active=is_active,
    )
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


def _logged_in_client(email: str) -> TestClient:
    client = TestClient(app)
    response = client.post(
        "/api/auth/login", json={"email": email, "password": PASSWORD}
    )
    assert response.status_code == 200, response.text
    return client


@pytest.fixture
def make_user(db_session):
    """Factory creating users with the shared test password."""

    def make(email, **kwargs):
        return _create_user(db_session, email, **kwargs)

    return make


@pytest.fixture
def login(clock):
    """Factory returning a client logged in as ``email``."""
    return _logged_in_client


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def admin(db_session):
    return _create_user(db_session, "admin@example.com", name="Admin", role=Role.ADMIN)


@pytest.fixture
def employee(db_session):
    return _create_user(
        db_session, "alice@example.com", name="Alice Smith", department="Engineering"
    )


@pytest.fixture
def admin_client(admin, clock):
    return _logged_in_client(admin.email)


@pytest.fixture
def employee_client(employee, clock):
    return _logged_in_client(employee.email)
