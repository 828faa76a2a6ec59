"""The authenticated actor attached to every request."""

from dataclasses import dataclass

from school_api.models.user import UserRole

STAFF_ROLES = frozenset({UserRole.admin, UserRole.principal})


@dataclass(frozen=True)
class IdentityContext:
    """Who is calling. Built only from a verified credential; immutable for the request."""

    user_id: int
    role: UserRole
    full_name: str = ""

    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    def is_teacher(self) -> bool:
        return self.role == UserRole.teacher

    def is_parent(self) -> bool:
        return self.role == UserRole.parent

    def __str__(self) -> str:
        return f"{self.role.value}:{self.user_id}"
