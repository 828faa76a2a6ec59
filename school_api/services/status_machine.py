"""Moderation status machine shared by alerts, announcements, calendar events and messages.

    draft → pending → approved | rejected
    approved → sent                 (alerts only, terminal)
    draft → approved                (staff submission, skips the queue)
    rejected → pending              (owner edits and resubmits)
    approved → pending              (owner edits a published item, not alerts)
"""
from typing import Optional

from school_api.auth.identity import IdentityContext
from school_api.errors import StateConflictError
from school_api.models.enums import ApprovalStatus
from school_api.services.access_types import ResourceType

S = ApprovalStatus

TRANSITIONS: dict[ApprovalStatus, frozenset[ApprovalStatus]] = {
    S.draft: frozenset({S.pending, S.approved}),
    S.pending: frozenset({S.approved, S.rejected}),
    S.approved: frozenset({S.sent, S.pending}),
    S.rejected: frozenset({S.pending}),
    S.sent: frozenset(),
}

# Edges only admin/principal may take
STAFF_EDGES = frozenset(
    {
        (S.draft, S.approved),
        (S.pending, S.approved),
        (S.pending, S.rejected),
        (S.approved, S.sent),
    }
)


def is_allowed(resource_type: ResourceType, current: ApprovalStatus, target: ApprovalStatus) -> bool:
    if target not in TRANSITIONS.get(current, frozenset()):
        return False
    if (current, target) == (S.approved, S.sent):
        return resource_type == ResourceType.alert
    if (current, target) == (S.approved, S.pending):
        return resource_type != ResourceType.alert
    return True


def assert_transition(
    resource_type: ResourceType, current: ApprovalStatus, target: ApprovalStatus
) -> None:
    if not is_allowed(resource_type, current, target):
        raise StateConflictError(
            f"Cannot move {resource_type.value} from {current.value} to {target.value}"
        )


def requires_staff(current: ApprovalStatus, target: ApprovalStatus) -> bool:
    return (current, target) in STAFF_EDGES


def initial_status(identity: IdentityContext, *, draft: bool = False) -> ApprovalStatus:
    """Status a new moderated resource starts in. Staff content is auto-approved."""
    if draft:
        return S.draft
    return S.approved if identity.is_staff() else S.pending


def status_after_edit(
    identity: IdentityContext, resource_type: ResourceType, current: ApprovalStatus
) -> Optional[ApprovalStatus]:
    """New status after the owner edits the content, or None to leave it unchanged.

    A non-staff edit of rejected or published content goes back to the queue.
    """
    if identity.is_staff():
        return None
    if current in (S.rejected, S.approved) and is_allowed(resource_type, current, S.pending):
        return S.pending
    return None
