from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import CRUDBase, execute
from school_api.models.teacher_assignment import TeacherAssignment
from school_api.schemas.class_division import TeacherAssignmentCreate, TeacherAssignmentUpdate


class CRUDTeacherAssignment(
    CRUDBase[TeacherAssignment, TeacherAssignmentCreate, TeacherAssignmentUpdate]
):
    async def get_active_for_teacher(
        self, db: AsyncSession, teacher_id: int
    ) -> Sequence[TeacherAssignment]:
        result = await execute(
            db,
            select(TeacherAssignment)
            .where(
                TeacherAssignment.teacher_id == teacher_id,
                TeacherAssignment.is_active == True,
            )
            .order_by(TeacherAssignment.id),
        )
        return result.scalars().all()

    async def get_active_for_class(
        self, db: AsyncSession, class_division_id: int
    ) -> Sequence[TeacherAssignment]:
        result = await execute(
            db,
            select(TeacherAssignment)
            .where(
                TeacherAssignment.class_division_id == class_division_id,
                TeacherAssignment.is_active == True,
            )
            .order_by(TeacherAssignment.id),
        )
        return result.scalars().all()


crud_assignment = CRUDTeacherAssignment(TeacherAssignment)
