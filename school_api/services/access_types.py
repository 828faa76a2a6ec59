"""Value types exchanged between handlers and the access policy."""

import enum
from dataclasses import dataclass, field
from typing import Optional

from school_api.errors import AuthorizationError, NotFoundError, StateConflictError
from school_api.models.enums import PUBLISHED_STATUSES, ApprovalStatus, VisibilityScope
from school_api.models.user import UserRole


class Operation(str, enum.Enum):
    list = "list"
    read = "read"
    create = "create"
    update = "update"
    delete = "delete"


class ResourceType(str, enum.Enum):
    homework = "homework"
    activity = "activity"
    activity_consent = "activity_consent"
    alert = "alert"
    announcement = "announcement"
    calendar_event = "calendar_event"
    message = "message"
    attendance = "attendance"
    leave_request = "leave_request"
    birthday = "birthday"


@dataclass(frozen=True)
class ResourceDescriptor:
    """What the policy needs to know about a resource (or a resource about to be created)."""

    type: ResourceType
    class_division_id: Optional[int] = None
    owner_id: Optional[int] = None
    approval_status: Optional[ApprovalStatus] = None
    visibility_scope: Optional[VisibilityScope] = None
    # Lifecycle state outside moderation, e.g. an activity's "completed"
    state: Optional[str] = None
    student_id: Optional[int] = None
    recipient_id: Optional[int] = None
    audience_role: Optional[UserRole] = None


@dataclass(frozen=True)
class ScopeFilter:
    """Rows a list query may return.

    A row matches when it is owned by ``owner_id``, or when it falls in one of
    the shared branches (class ids, student ids, recipient, school-wide) and,
    for moderated types, is published. ``unrestricted`` short-circuits all of it.
    """

    unrestricted: bool = False
    owner_id: Optional[int] = None
    class_division_ids: frozenset[int] = field(default_factory=frozenset)
    student_ids: frozenset[int] = field(default_factory=frozenset)
    recipient_id: Optional[int] = None
    include_school_wide: bool = False
    published_only: bool = False
    audience_role: Optional[UserRole] = None

    @classmethod
    def everything(cls) -> "ScopeFilter":
        return cls(unrestricted=True)

    def matches(self, resource: ResourceDescriptor) -> bool:
        """In-memory equivalent of the SQL translation, for single-record checks."""
        if self.unrestricted:
            return True
        if self.owner_id is not None and resource.owner_id == self.owner_id:
            return True
        if self.published_only and resource.approval_status not in PUBLISHED_STATUSES:
            return False
        if (
            self.audience_role is not None
            and resource.audience_role is not None
            and resource.audience_role != self.audience_role
        ):
            return False
        if resource.class_division_id is not None and (
            resource.class_division_id in self.class_division_ids
        ):
            return True
        if resource.student_id is not None and resource.student_id in self.student_ids:
            return True
        if self.recipient_id is not None and resource.recipient_id == self.recipient_id:
            return True
        return (
            self.include_school_wide
            and resource.visibility_scope == VisibilityScope.school_wide
        )


@dataclass(frozen=True)
class Decision:
    allow: bool
    scope: Optional[ScopeFilter] = None
    # Status a newly created moderated resource must start in
    initial_status: Optional[ApprovalStatus] = None
    # Set when the role may act but the resource's state forbids it
    conflict: Optional[str] = None
    # Report the denial as not-found so the caller cannot tell hidden rows from missing ones
    conceal: bool = False
    reason: str = ""

    @classmethod
    def permit(cls, **kwargs) -> "Decision":
        return cls(allow=True, **kwargs)

    @classmethod
    def deny(cls, reason: str = "", *, conceal: bool = False) -> "Decision":
        return cls(allow=False, reason=reason, conceal=conceal)

    @classmethod
    def state_conflict(cls, message: str) -> "Decision":
        return cls(allow=False, conflict=message, reason=message)

    def enforce(self) -> "Decision":
        """Raise the error matching a denial; return self when allowed."""
        if self.allow:
            return self
        if self.conflict:
            raise StateConflictError(self.conflict)
        if self.conceal:
            raise NotFoundError()
        raise AuthorizationError()
