"""
Database engine and session management.
"""

from collections.abc import Generator

from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def _build_engine(url: str):
    kwargs: dict = {"echo": settings.DATABASE_ECHO}
    if url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # In-memory databases live as long as their connection
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


engine = _build_engine(settings.DATABASE_URL)


if engine.dialect.name == "sqlite":

    @event.listens_for(engine, "connect")
    def _enable_sqlite_foreign_keys(dbapi_connection, _):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def create_db_and_tables() -> None:
    # Register every table on the metadata before creating it
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info(f"Database tables ensured ({engine.dialect.name})")


def get_session() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    with Session(engine) as session:
        yield session
