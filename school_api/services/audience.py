"""Who should hear about a published resource."""
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.users import crud_user
from school_api.models.user import UserRole
from school_api.services import assignment_resolver, guardian_resolver


async def audience_for(
    db: AsyncSession,
    class_division_id: Optional[int],
    audience_role: Optional[UserRole] = None,
) -> set[int]:
    """Teachers and parents a class-scoped (or, with no class, school-wide) item reaches."""
    want_teachers = audience_role in (None, UserRole.teacher)
    want_parents = audience_role in (None, UserRole.parent)
    users: set[int] = set()

    if class_division_id is None:
        if want_teachers:
            users.update(u.id for u in await crud_user.get_by_role(db, UserRole.teacher))
        if want_parents:
            users.update(u.id for u in await crud_user.get_by_role(db, UserRole.parent))
        return users

    if want_teachers:
        users |= await assignment_resolver.teachers_for_class(db, class_division_id)
    if want_parents:
        users |= await guardian_resolver.parents_for_classes(db, [class_division_id])
    return users
