from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import CRUDBase, execute
from school_api.models.user import User, UserRole
from school_api.schemas.user import UserCreate, UserUpdate


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    async def get_by_phone(self, db: AsyncSession, phone_number: str) -> Optional[User]:
        result = await execute(db, select(User).where(User.phone_number == phone_number))
        return result.scalar_one_or_none()

    async def get_by_role(self, db: AsyncSession, role: UserRole) -> Sequence[User]:
        result = await execute(
            db, select(User).where(User.role == role, User.is_active == True).order_by(User.id)
        )
        return result.scalars().all()

    async def get_staff(self, db: AsyncSession) -> Sequence[User]:
        result = await execute(
            db,
            select(User)
            .where(User.role.in_([UserRole.admin, UserRole.principal]), User.is_active == True)
            .order_by(User.id),
        )
        return result.scalars().all()


crud_user = CRUDUser(User)
