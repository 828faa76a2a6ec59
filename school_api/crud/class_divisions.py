from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import CRUDBase, execute
from school_api.models.class_division import ClassDivision
from school_api.schemas.class_division import ClassDivisionCreate, ClassDivisionUpdate


class CRUDClassDivision(CRUDBase[ClassDivision, ClassDivisionCreate, ClassDivisionUpdate]):
    async def get_by_legacy_teacher(
        self, db: AsyncSession, teacher_id: int
    ) -> Sequence[ClassDivision]:
        """Class divisions whose legacy single-teacher column points at teacher_id."""
        result = await execute(
            db,
            select(ClassDivision)
            .where(ClassDivision.teacher_id == teacher_id)
            .order_by(ClassDivision.id),
        )
        return result.scalars().all()


crud_class_division = CRUDClassDivision(ClassDivision)
