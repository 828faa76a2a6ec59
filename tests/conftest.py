"""Pytest fixtures for unit and integration tests."""
from dataclasses import dataclass
from datetime import date
from typing import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from school_api.auth.identity import IdentityContext
from school_api.auth.jwt_auth import create_access_token
from school_api.database import get_db
from school_api.main import app
from school_api.models import (
    AssignmentType,
    Base,
    ClassDivision,
    EnrollmentStatus,
    GuardianMapping,
    GuardianRelation,
    Student,
    StudentEnrollment,
    TeacherAssignment,
    User,
    UserRole,
)
from school_api.services import notification_service

# Use in-memory SQLite for tests (aiomysql requires MariaDB)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def notify_mock(monkeypatch) -> AsyncMock:
    """Background notifications are asserted on, never dispatched."""
    mock = AsyncMock(return_value=0)
    monkeypatch.setattr(notification_service, "notify", mock)
    return mock


@pytest_asyncio.fixture
async def client(db, notify_mock) -> AsyncGenerator[AsyncClient, None]:
    """HTTP test client with DB override."""
    app.dependency_overrides[get_db] = lambda: db
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# A small school
# ---------------------------------------------------------------------------


@dataclass
class School:
    admin: User
    principal: User
    # Class teacher of 5A through the legacy class_divisions.teacher_id column
    legacy_teacher: User
    # Subject teacher of 5A and 5B through class_teacher_assignments
    subject_teacher: User
    # No classes at all
    idle_teacher: User
    parent: User
    other_parent: User
    class_5a: ClassDivision
    class_5b: ClassDivision
    # Enrolled in 5A, child of parent
    child: Student
    # Enrolled in 5B, child of other_parent
    other_child: Student
    # Graduated out of 5B, also a child of parent
    graduate: Student

    @staticmethod
    def identity(user: User) -> IdentityContext:
        return IdentityContext(user_id=user.id, role=user.role, full_name=user.full_name)

    @staticmethod
    def auth(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest_asyncio.fixture
async def school(db) -> School:
    def user(name: str, phone: str, role: UserRole) -> User:
        return User(full_name=name, phone_number=phone, role=role)

    admin = user("Asha Admin", "9000000001", UserRole.admin)
    principal = user("Prakash Principal", "9000000002", UserRole.principal)
    legacy_teacher = user("Lata Legacy", "9000000003", UserRole.teacher)
    subject_teacher = user("Suresh Subject", "9000000004", UserRole.teacher)
    idle_teacher = user("Ira Idle", "9000000005", UserRole.teacher)
    parent = user("Pooja Parent", "9000000006", UserRole.parent)
    other_parent = user("Omkar Other", "9000000007", UserRole.parent)
    db.add_all(
        [admin, principal, legacy_teacher, subject_teacher, idle_teacher, parent, other_parent]
    )
    await db.flush()

    class_5a = ClassDivision(
        level="Grade 5", division="A", academic_year="2026-27", teacher_id=legacy_teacher.id
    )
    class_5b = ClassDivision(level="Grade 5", division="B", academic_year="2026-27")
    db.add_all([class_5a, class_5b])
    await db.flush()

    db.add_all(
        [
            TeacherAssignment(
                teacher_id=subject_teacher.id,
                class_division_id=class_5a.id,
                assignment_type=AssignmentType.subject_teacher,
                subject="Mathematics",
            ),
            TeacherAssignment(
                teacher_id=subject_teacher.id,
                class_division_id=class_5b.id,
                assignment_type=AssignmentType.subject_teacher,
                subject="Mathematics",
            ),
        ]
    )

    child = Student(full_name="Kavya", admission_number="ADM001", date_of_birth=date(2016, 3, 14))
    other_child = Student(
        full_name="Rohan", admission_number="ADM002", date_of_birth=date(2016, 7, 2)
    )
    graduate = Student(
        full_name="Meera", admission_number="ADM003", date_of_birth=date(2014, 1, 20)
    )
    db.add_all([child, other_child, graduate])
    await db.flush()

    db.add_all(
        [
            StudentEnrollment(
                student_id=child.id,
                class_division_id=class_5a.id,
                roll_number="1",
                status=EnrollmentStatus.ongoing,
                ongoing_student_id=child.id,
            ),
            StudentEnrollment(
                student_id=other_child.id,
                class_division_id=class_5b.id,
                roll_number="1",
                status=EnrollmentStatus.ongoing,
                ongoing_student_id=other_child.id,
            ),
            StudentEnrollment(
                student_id=graduate.id,
                class_division_id=class_5b.id,
                roll_number="2",
                status=EnrollmentStatus.graduated,
            ),
            GuardianMapping(
                parent_id=parent.id,
                student_id=child.id,
                relation=GuardianRelation.mother,
                is_primary_guardian=True,
                primary_student_id=child.id,
            ),
            GuardianMapping(
                parent_id=parent.id,
                student_id=graduate.id,
                relation=GuardianRelation.mother,
            ),
            GuardianMapping(
                parent_id=other_parent.id,
                student_id=other_child.id,
                relation=GuardianRelation.father,
                is_primary_guardian=True,
                primary_student_id=other_child.id,
            ),
        ]
    )
    await db.flush()

    return School(
        admin=admin,
        principal=principal,
        legacy_teacher=legacy_teacher,
        subject_teacher=subject_teacher,
        idle_teacher=idle_teacher,
        parent=parent,
        other_parent=other_parent,
        class_5a=class_5a,
        class_5b=class_5b,
        child=child,
        other_child=other_child,
        graduate=graduate,
    )
