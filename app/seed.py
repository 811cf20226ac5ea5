"""
Seed the database with the default settings and an admin account.

    python -m app.seed --email admin@example.com --password secret123
"""

import argparse

from sqlmodel import Session

from app.core.database import create_db_and_tables, engine
from app.core.employee_service import employee_service
from app.core.logging import get_logger
from app.core.settings_service import seed_default_settings

logger = get_logger(__name__)


def seed(email: str, password: str, name: str) -> None:
    create_db_and_tables()
    with Session(engine) as session:
        created = seed_default_settings(session)
        logger.info(f"Settings ready ({created} created)")
        admin, _ = employee_service.upsert_admin(session, email, password, name)
        logger.info(f"Admin ready: {admin.email}")


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Seed settings and the admin user")
    parser.add_argument("--email", required=True, help="admin email address")
    parser.add_argument("--password", required=True, help="admin password")
    parser.add_argument("--name", default="Administrator", help="admin display name")
    args = parser.parse_args(argv)

    if len(args.password) < 6:
        parser.error("password must be at least 6 characters")
    seed(args.email, args.password, args.name)


if __name__ == "__main__":
    main()
