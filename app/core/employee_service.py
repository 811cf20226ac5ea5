"""
Employee management service.

Creates, updates and removes employee accounts and computes the per-employee
attendance statistics shown on the employee detail view.
"""

from datetime import date
from typing import Optional

from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.core.clock import average_clock_time, utcnow
from app.core.exceptions import NotFoundError, ValidationError
from app.core.logging import get_logger
from app.core.security import hash_password
from app.models.attendance import Attendance
from app.models.task import Task
from app.models.user import (
    EmployeeCreate,
    EmployeeStats,
    EmployeeUpdate,
    Role,
    User,
)

logger = get_logger(__name__)

# Columns that may be left out of an update but never set to null
NON_NULLABLE_FIELDS = ("name", "is_active")


class EmployeeService:
    """Employee account operations used by the employees API."""

    @staticmethod
    def get_user(session: Session, user_id: int) -> User:
        user = session.get(User, user_id)
        if not user:
            raise NotFoundError("Employee not found")
        return user

    @staticmethod
    def get_user_by_email(session: Session, email: str) -> Optional[User]:
        statement = select(User).where(User.email == email.strip().lower())
        return session.exec(statement).first()

    @staticmethod
    def list_employees(
        session: Session,
        search: str = "",
        department: str = "",
        offset: int = 0,
        limit: int = 10,
    ) -> tuple[list[User], int]:
        """
        Employees ordered by name, filtered by name/email and department.

        Args:
            session: Database session
            search: Case-insensitive substring of the name or email
            department: Exact department name
            offset: Number of rows to skip
            limit: Page size

        Returns:
            The page of employees and the total number of matches
        """
        conditions = [User.role == Role.EMPLOYEE]
        if search:
            needle = search.lower()
            conditions.append(
                or_(
                    func.lower(User.name).contains(needle),
                    func.lower(User.email).contains(needle),
                )
            )
        if department:
            conditions.append(User.department == department)

        statement = (
            select(User)
            .where(*conditions)
            .order_by(User.name)
            .offset(offset)
            .limit(limit)
        )
        employees = list(session.exec(statement).all())
        total = session.exec(select(func.count(User.id)).where(*conditions)).one()
        return employees, total

    @classmethod
    def create_employee(cls, session: Session, data: EmployeeCreate) -> User:
        """
        Create an employee account.

        Args:
            session: Database session
            data: Account details; the password is hashed before storing

        Returns:
            The created employee

        Raises:
            ValidationError: if the email address is already registered
        """
        email = data.email.lower()
        if cls.get_user_by_email(session, email):
            logger.warning(f"Attempt to register existing email {email}")
            raise ValidationError("Email already registered")

        user = User(
            email=email,
            password_hash=hash_password(data.password),
            name=data.name,
            phone=data.phone,
            department=data.department,
            position=data.position,
            role=Role.EMPLOYEE,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        logger.info(f"Created employee {user.id} ({user.email})")
        return user

    @classmethod
    def get_employee(cls, session: Session, user_id: int) -> User:
        """
        Get an employee account by ID.

        Administrator accounts are not managed through the employees API and
        are reported as missing.

        Args:
            session: Database session
            user_id: ID of the user

        Returns:
            The employee

        Raises:
            NotFoundError: if no employee has this ID
        """
        user = cls.get_user(session, user_id)
        if user.role != Role.EMPLOYEE:
            raise NotFoundError("Employee not found")
        return user

    @classmethod
    def update_employee(
        cls, session: Session, user_id: int, data: EmployeeUpdate
    ) -> User:
        """
        Apply a partial update to an employee profile.

        Args:
            session: Database session
            user_id: ID of the employee
            data: Fields sent by the client

        Returns:
            The updated employee

        Raises:
            NotFoundError: if no employee has this ID
            ValidationError: if a required field is sent as null
        """
        user = cls.get_employee(session, user_id)
        changes = data.model_dump(exclude_unset=True)
        for field in NON_NULLABLE_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be null")

        for field, value in changes.items():
            setattr(user, field, value)
        user.updated_at = utcnow()
        session.add(user)
        session.commit()
        session.refresh(user)
        logger.info(f"Updated employee {user_id}: {sorted(changes)}")
        return user

    @classmethod
    def delete_employee(cls, session: Session, user_id: int) -> None:
        """
        Delete an employee together with their attendance rows and tasks.

        Args:
            session: Database session
            user_id: ID of the employee

        Raises:
            NotFoundError: if no employee has this ID
        """
        user = cls.get_employee(session, user_id)
        email = user.email

        for record in session.exec(
            select(Attendance).where(Attendance.user_id == user_id)
        ).all():
            session.delete(record)
        for task in session.exec(
            select(Task).where(Task.assigned_to == user_id)
        ).all():
            session.delete(task)
        # Children first, the foreign keys are enforced
        session.flush()
        session.delete(user)
        session.commit()
        logger.info(f"Deleted employee {user_id} ({email})")

    @classmethod
    def upsert_admin(
        cls, session: Session, email: str, password: str, name: str = "Administrator"
    ) -> tuple[User, bool]:
        """
        Create the admin account for ``email``, or promote and reset an existing one.

        Returns the user and whether it was created.
        """
        admin = cls.get_user_by_email(session, email)
        created = admin is None
        if created:
            admin = User(email=email.strip().lower(), password_hash="", name=name)

        admin.password_hash = hash_password(password)
        admin.name = name
        admin.role = Role.ADMIN
        admin.is_active = True
        admin.updated_at = utcnow()
        session.add(admin)
        session.commit()
        session.refresh(admin)
        action = "Created" if created else "Updated"
        logger.info(f"{action} admin {admin.id} ({admin.email})")
        return admin, created

    @staticmethod
    def get_employee_stats(
        session: Session, user_id: int, since: date, tz
    ) -> EmployeeStats:
        """Attendance statistics for ``user_id`` from ``since`` onwards."""
        statement = select(Attendance).where(
            (Attendance.user_id == user_id) & (Attendance.date >= since.isoformat())
        )
        records = list(session.exec(statement).all())

        hours = [float(r.work_hours) for r in records if r.work_hours is not None]
        check_ins = [r.check_in_time for r in records if r.check_in_time]
        check_outs = [r.check_out_time for r in records if r.check_out_time]

        return EmployeeStats(
            total_attendance=len(records),
            avg_work_hours=round(sum(hours) / len(hours), 2) if hours else 0.0,
            avg_check_in=average_clock_time(check_ins, tz),
            avg_check_out=average_clock_time(check_outs, tz),
        )


# Create singleton instance
employee_service = EmployeeService()
