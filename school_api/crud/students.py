from typing import Iterable, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import CRUDBase, execute, flush
from school_api.models.student import EnrollmentStatus, Student, StudentEnrollment
from school_api.schemas.student import (
    EnrollmentCreate,
    EnrollmentUpdate,
    StudentCreate,
    StudentUpdate,
)


class CRUDStudent(CRUDBase[Student, StudentCreate, StudentUpdate]):
    async def get_by_admission_number(
        self, db: AsyncSession, admission_number: str
    ) -> Optional[Student]:
        result = await execute(
            db, select(Student).where(Student.admission_number == admission_number)
        )
        return result.scalar_one_or_none()

    async def get_with_ongoing_class(
        self, db: AsyncSession, student_ids: Iterable[int]
    ) -> Sequence[tuple[Student, int]]:
        """(student, class_division_id) for students with an ongoing enrollment."""
        ids = sorted(set(student_ids))
        if not ids:
            return []
        result = await execute(
            db,
            select(Student, StudentEnrollment.class_division_id)
            .join(StudentEnrollment, StudentEnrollment.student_id == Student.id)
            .where(
                Student.id.in_(ids),
                StudentEnrollment.status == EnrollmentStatus.ongoing,
            )
            .order_by(Student.id),
        )
        return [tuple(row) for row in result.all()]

    async def get_enrolled(self, db: AsyncSession) -> Sequence[tuple[Student, int]]:
        """(student, class_division_id) for every ongoing enrollment."""
        result = await execute(
            db,
            select(Student, StudentEnrollment.class_division_id)
            .join(StudentEnrollment, StudentEnrollment.student_id == Student.id)
            .where(StudentEnrollment.status == EnrollmentStatus.ongoing)
            .order_by(Student.id),
        )
        return [tuple(row) for row in result.all()]

    async def get_in_classes(
        self, db: AsyncSession, class_division_ids: Iterable[int]
    ) -> Sequence[tuple[Student, int]]:
        """(student, class_division_id) for ongoing enrollments in the given classes."""
        ids = sorted(set(class_division_ids))
        if not ids:
            return []
        result = await execute(
            db,
            select(Student, StudentEnrollment.class_division_id)
            .join(StudentEnrollment, StudentEnrollment.student_id == Student.id)
            .where(
                StudentEnrollment.class_division_id.in_(ids),
                StudentEnrollment.status == EnrollmentStatus.ongoing,
            )
            .order_by(Student.id),
        )
        return [tuple(row) for row in result.all()]


def _ongoing_marker(enrollment: StudentEnrollment) -> None:
    if enrollment.status is None:
        enrollment.status = EnrollmentStatus.ongoing
    enrollment.ongoing_student_id = (
        enrollment.student_id if enrollment.status == EnrollmentStatus.ongoing else None
    )


class CRUDEnrollment(CRUDBase[StudentEnrollment, EnrollmentCreate, EnrollmentUpdate]):
    async def create(self, db: AsyncSession, *, obj_in, **extra) -> StudentEnrollment:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = StudentEnrollment(**data, **extra)
        _ongoing_marker(db_obj)
        db.add(db_obj)
        await flush(db)
        await db.refresh(db_obj)
        return db_obj

    async def update(self, db: AsyncSession, *, db_obj: StudentEnrollment, obj_in) -> StudentEnrollment:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for field, value in data.items():
            setattr(db_obj, field, value)
        _ongoing_marker(db_obj)
        db.add(db_obj)
        await flush(db)
        await db.refresh(db_obj)
        return db_obj

    async def get_ongoing(
        self, db: AsyncSession, student_id: int
    ) -> Optional[StudentEnrollment]:
        result = await execute(
            db,
            select(StudentEnrollment).where(
                StudentEnrollment.student_id == student_id,
                StudentEnrollment.status == EnrollmentStatus.ongoing,
            ),
        )
        return result.scalar_one_or_none()

    async def get_ongoing_for_students(
        self, db: AsyncSession, student_ids: Iterable[int]
    ) -> Sequence[StudentEnrollment]:
        ids = sorted(set(student_ids))
        if not ids:
            return []
        result = await execute(
            db,
            select(StudentEnrollment).where(
                StudentEnrollment.student_id.in_(ids),
                StudentEnrollment.status == EnrollmentStatus.ongoing,
            ),
        )
        return result.scalars().all()


crud_student = CRUDStudent(Student)
crud_enrollment = CRUDEnrollment(StudentEnrollment)
