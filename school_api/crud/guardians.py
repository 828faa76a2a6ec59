from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import CRUDBase, execute, flush
from school_api.models.guardian import GuardianMapping
from school_api.schemas.guardian import GuardianMappingCreate, GuardianMappingUpdate


def _primary_marker(mapping: GuardianMapping) -> None:
    mapping.primary_student_id = mapping.student_id if mapping.is_primary_guardian else None


def _to_columns(data: dict[str, Any]) -> dict[str, Any]:
    if "relationship" in data:
        data["relation"] = data.pop("relationship")
    return data


class CRUDGuardian(CRUDBase[GuardianMapping, GuardianMappingCreate, GuardianMappingUpdate]):
    async def create(self, db: AsyncSession, *, obj_in, **extra) -> GuardianMapping:
        """Insert a mapping. A second primary guardian for the same student raises ConflictError."""
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = GuardianMapping(**_to_columns(dict(data)), **extra)
        _primary_marker(db_obj)
        db.add(db_obj)
        await flush(db)
        await db.refresh(db_obj)
        return db_obj

    async def update(self, db: AsyncSession, *, db_obj: GuardianMapping, obj_in) -> GuardianMapping:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for field, value in _to_columns(dict(data)).items():
            setattr(db_obj, field, value)
        _primary_marker(db_obj)
        db.add(db_obj)
        await flush(db)
        await db.refresh(db_obj)
        return db_obj

    async def get_for_parent(self, db: AsyncSession, parent_id: int) -> Sequence[GuardianMapping]:
        result = await execute(
            db,
            select(GuardianMapping)
            .where(GuardianMapping.parent_id == parent_id)
            .order_by(GuardianMapping.id),
        )
        return result.scalars().all()

    async def get_pair(
        self, db: AsyncSession, parent_id: int, student_id: int
    ) -> Optional[GuardianMapping]:
        result = await execute(
            db,
            select(GuardianMapping).where(
                GuardianMapping.parent_id == parent_id,
                GuardianMapping.student_id == student_id,
            ),
        )
        return result.scalar_one_or_none()


crud_guardian = CRUDGuardian(GuardianMapping)
