"""Role-scoped access decisions for every resource type.

``AccessPolicy.decide`` answers one question per call: may this identity
perform this operation on this resource? Denials are returned as ``Decision``
values, never raised; callers turn them into HTTP errors with
``decision.enforce()``. List operations get a ``ScopeFilter`` back, which the
CRUD layer turns into SQL (see ``school_api.crud.scoping``).

Resolver results are memoized on the instance, which lives for one request.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from school_api.auth.identity import IdentityContext
from school_api.models.enums import ApprovalStatus
from school_api.models.user import UserRole
from school_api.services import assignment_resolver, guardian_resolver, status_machine
from school_api.services.access_types import (
    Decision,
    Operation,
    ResourceDescriptor,
    ResourceType,
    ScopeFilter,
)

logger = logging.getLogger(__name__)

_NO_STATES: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ResourceRule:
    # Non-staff roles allowed to create; staff always may
    creators: frozenset[UserRole]
    moderated: bool = False
    # Parents see rows of their own children instead of their children's classes
    student_scoped: bool = False
    readonly: bool = False
    # Lifecycle states in which nobody may delete
    undeletable_states: frozenset[str] = _NO_STATES
    # Lifecycle states in which the row is settled: no edits, no deletes
    locked_states: frozenset[str] = _NO_STATES
    # Approval statuses deletion is limited to; None means any
    deletable_statuses: Optional[frozenset[ApprovalStatus]] = None
    # Same, but only for non-staff owners
    owner_deletable_statuses: Optional[frozenset[ApprovalStatus]] = None
    # Direct messages carry a recipient who can see them
    has_recipient: bool = False


_TEACHER = frozenset({UserRole.teacher})

RESOURCE_RULES: dict[ResourceType, ResourceRule] = {
    ResourceType.homework: ResourceRule(creators=_TEACHER),
    ResourceType.activity: ResourceRule(
        creators=_TEACHER,
        undeletable_states=frozenset({"in_progress", "completed"}),
    ),
    ResourceType.alert: ResourceRule(
        creators=_TEACHER,
        moderated=True,
        deletable_statuses=frozenset({ApprovalStatus.approved}),
    ),
    ResourceType.announcement: ResourceRule(
        creators=_TEACHER,
        moderated=True,
        owner_deletable_statuses=frozenset({ApprovalStatus.pending}),
    ),
    ResourceType.calendar_event: ResourceRule(creators=_TEACHER, moderated=True),
    ResourceType.message: ResourceRule(
        creators=frozenset({UserRole.teacher, UserRole.parent}),
        moderated=True,
        has_recipient=True,
    ),
    ResourceType.attendance: ResourceRule(creators=_TEACHER, student_scoped=True),
    ResourceType.leave_request: ResourceRule(
        creators=frozenset({UserRole.teacher, UserRole.parent}),
        student_scoped=True,
        locked_states=frozenset({"approved", "rejected"}),
    ),
    ResourceType.birthday: ResourceRule(
        creators=frozenset(), student_scoped=True, readonly=True
    ),
}

# Parents may only change their own content while it is still in the queue
_PARENT_EDITABLE = frozenset({ApprovalStatus.pending, ApprovalStatus.rejected})


class AccessPolicy:
    def __init__(self, db: AsyncSession):
        self.db = db
        self._assignments: dict[int, frozenset[assignment_resolver.Assignment]] = {}
        self._links: dict[int, list[guardian_resolver.GuardianLink]] = {}

    # ── Resolver access ────────────────────────────────────────────────────

    async def teacher_class_ids(self, teacher_id: int) -> frozenset[int]:
        if teacher_id not in self._assignments:
            self._assignments[teacher_id] = await assignment_resolver.resolve_for_teacher(
                self.db, teacher_id
            )
        return assignment_resolver.class_ids(self._assignments[teacher_id])

    async def guardian_links(self, parent_id: int) -> list[guardian_resolver.GuardianLink]:
        if parent_id not in self._links:
            self._links[parent_id] = await guardian_resolver.resolve_for_parent(
                self.db, parent_id
            )
        return self._links[parent_id]

    async def teaches(self, teacher_id: int, class_division_id: int) -> bool:
        if teacher_id in self._assignments:
            return class_division_id in assignment_resolver.class_ids(
                self._assignments[teacher_id]
            )
        return await assignment_resolver.teaches_class(self.db, teacher_id, class_division_id)

    # ── Decisions ──────────────────────────────────────────────────────────

    async def decide(
        self,
        identity: IdentityContext,
        resource: ResourceDescriptor,
        operation: Operation,
    ) -> Decision:
        if resource.type == ResourceType.activity_consent:
            decision = await self._decide_consent(identity, resource, operation)
        elif identity.role not in (
            UserRole.admin,
            UserRole.principal,
            UserRole.teacher,
            UserRole.parent,
        ):
            decision = Decision.deny("unknown role")
        else:
            rule = RESOURCE_RULES[resource.type]
            if rule.readonly and operation not in (Operation.list, Operation.read):
                decision = Decision.deny("read-only resource")
            elif operation == Operation.list:
                decision = await self._decide_list(identity, resource.type, rule)
            elif operation == Operation.read:
                decision = await self._decide_read(identity, resource, rule)
            elif operation == Operation.create:
                decision = await self._decide_create(identity, resource, rule)
            else:
                decision = self._decide_mutation(identity, resource, operation, rule)

        if not decision.allow:
            self._log_denial(identity, resource, operation.value, decision)
        return decision

    async def decide_transition(
        self,
        identity: IdentityContext,
        resource: ResourceDescriptor,
        target: ApprovalStatus,
    ) -> Decision:
        """May ``identity`` move a moderated resource to ``target``?"""
        rule = RESOURCE_RULES.get(resource.type)
        current = resource.approval_status
        if rule is None or not rule.moderated or current is None:
            decision = Decision.state_conflict(f"{resource.type.value} is not moderated")
        elif not status_machine.is_allowed(resource.type, current, target):
            decision = Decision.state_conflict(
                f"Cannot move {resource.type.value} from {current.value} to {target.value}"
            )
        elif not identity.is_staff() and resource.owner_id != identity.user_id:
            decision = Decision.deny("not owner", conceal=identity.is_parent())
        elif status_machine.requires_staff(current, target) and not identity.is_staff():
            decision = Decision.deny("moderation requires admin or principal")
        else:
            decision = Decision.permit()

        if not decision.allow:
            self._log_denial(identity, resource, f"transition:{target.value}", decision)
        return decision

    async def decide_review(
        self, identity: IdentityContext, resource: ResourceDescriptor
    ) -> Decision:
        """May ``identity`` settle a student-scoped request such as a leave request?

        Staff may review anything; a teacher only requests for a class they hold.
        Having filed the request grants nothing here.
        """
        rule = RESOURCE_RULES[resource.type]
        if identity.is_staff():
            decision = Decision.permit()
        elif identity.is_teacher():
            if resource.class_division_id is not None and await self.teaches(
                identity.user_id, resource.class_division_id
            ):
                decision = Decision.permit()
            else:
                decision = Decision.deny("class not assigned")
        else:
            scope = await self.scope_for(identity, resource.type)
            visible = scope is not None and scope.matches(resource)
            decision = Decision.deny(
                "only staff or the class teacher review", conceal=not visible
            )

        if decision.allow and resource.state in rule.locked_states:
            decision = Decision.state_conflict(
                f"{resource.type.value} is already {resource.state}"
            )
        if not decision.allow:
            self._log_denial(identity, resource, "review", decision)
        return decision

    async def scope_for(
        self, identity: IdentityContext, resource_type: ResourceType
    ) -> Optional[ScopeFilter]:
        """The list scope for ``identity``, or None when the role sees nothing."""
        rule = RESOURCE_RULES[resource_type]
        if identity.is_staff():
            return ScopeFilter.everything()
        recipient = identity.user_id if rule.has_recipient else None
        if identity.is_teacher():
            return ScopeFilter(
                owner_id=identity.user_id,
                class_division_ids=await self.teacher_class_ids(identity.user_id),
                recipient_id=recipient,
                include_school_wide=True,
                published_only=rule.moderated,
                audience_role=UserRole.teacher,
            )
        if identity.is_parent():
            links = await self.guardian_links(identity.user_id)
            if rule.student_scoped:
                classes: frozenset[int] = frozenset()
                students = guardian_resolver.enrolled_student_ids(links)
            else:
                classes = guardian_resolver.class_ids(links)
                students = frozenset()
            return ScopeFilter(
                owner_id=identity.user_id,
                class_division_ids=classes,
                student_ids=students,
                recipient_id=recipient,
                include_school_wide=True,
                published_only=rule.moderated,
                audience_role=UserRole.parent,
            )
        return None

    async def _decide_list(
        self, identity: IdentityContext, resource_type: ResourceType, rule: ResourceRule
    ) -> Decision:
        scope = await self.scope_for(identity, resource_type)
        if scope is None:
            return Decision.deny("no list scope for role")
        return Decision.permit(scope=scope)

    async def _decide_read(
        self, identity: IdentityContext, resource: ResourceDescriptor, rule: ResourceRule
    ) -> Decision:
        scope = await self.scope_for(identity, resource.type)
        if scope is None or not scope.matches(resource):
            return Decision.deny("outside read scope", conceal=identity.is_parent())
        return Decision.permit(scope=scope)

    async def _decide_create(
        self, identity: IdentityContext, resource: ResourceDescriptor, rule: ResourceRule
    ) -> Decision:
        initial = status_machine.initial_status(identity) if rule.moderated else None
        if identity.is_staff():
            return Decision.permit(initial_status=initial)
        if identity.role not in rule.creators:
            return Decision.deny("role may not create this type")

        if identity.is_teacher():
            if resource.class_division_id is None:
                if rule.student_scoped:
                    return Decision.deny("student has no current class")
                return Decision.permit(initial_status=initial)
            if not await self.teaches(identity.user_id, resource.class_division_id):
                return Decision.deny("class not assigned")
            return Decision.permit(initial_status=initial)

        # parent
        links = await self.guardian_links(identity.user_id)
        if rule.student_scoped:
            if resource.student_id not in guardian_resolver.enrolled_student_ids(links):
                return Decision.deny("not a guardian of an enrolled student", conceal=True)
            return Decision.permit(initial_status=initial)
        if resource.class_division_id is not None:
            if resource.class_division_id not in guardian_resolver.class_ids(links):
                return Decision.deny("class not among children's classes")
            return Decision.permit(initial_status=initial)
        if rule.has_recipient and resource.recipient_id is not None:
            teachers = await assignment_resolver.teachers_for_classes(
                self.db, guardian_resolver.class_ids(links)
            )
            if resource.recipient_id not in teachers:
                return Decision.deny("recipient does not teach any of the children")
            return Decision.permit(initial_status=initial)
        return Decision.deny("parents may only post to their children's classes")

    def _decide_mutation(
        self,
        identity: IdentityContext,
        resource: ResourceDescriptor,
        operation: Operation,
        rule: ResourceRule,
    ) -> Decision:
        is_owner = resource.owner_id is not None and resource.owner_id == identity.user_id
        if not identity.is_staff() and not is_owner:
            return Decision.deny("not owner", conceal=identity.is_parent())

        if resource.state is not None and resource.state in rule.locked_states:
            return Decision.state_conflict(f"{resource.type.value} is already {resource.state}")

        status = resource.approval_status
        if operation == Operation.delete:
            if resource.state is not None and resource.state in rule.undeletable_states:
                return Decision.state_conflict(
                    f"Cannot delete {resource.type.value} while {resource.state}"
                )
            if rule.deletable_statuses is not None and status not in rule.deletable_statuses:
                return Decision.state_conflict(
                    f"Cannot delete {resource.type.value} in status {_value(status)}"
                )
            if (
                not identity.is_staff()
                and rule.owner_deletable_statuses is not None
                and status not in rule.owner_deletable_statuses
            ):
                return Decision.state_conflict(
                    f"Only {_join(rule.owner_deletable_statuses)} {resource.type.value} "
                    "can be deleted by its author"
                )
        elif status == ApprovalStatus.sent:
            return Decision.state_conflict(f"{resource.type.value} has already been sent")

        if identity.is_parent() and rule.moderated and status not in _PARENT_EDITABLE:
            return Decision.state_conflict(
                f"{resource.type.value} can no longer be changed once {_value(status)}"
            )
        return Decision.permit()

    async def _decide_consent(
        self, identity: IdentityContext, resource: ResourceDescriptor, operation: Operation
    ) -> Decision:
        """Consent is authorized by guardianship of the student, never by ownership."""
        if identity.is_staff():
            return Decision.permit()
        if not identity.is_parent() or operation not in (Operation.create, Operation.update):
            return Decision.deny("only a guardian records consent")
        if resource.student_id is None or not await guardian_resolver.is_guardian_of(
            self.db, identity.user_id, resource.student_id
        ):
            return Decision.deny("not a guardian of this student", conceal=True)
        return Decision.permit()

    @staticmethod
    def _log_denial(
        identity: IdentityContext,
        resource: ResourceDescriptor,
        operation: str,
        decision: Decision,
    ) -> None:
        logger.info(
            "Denied %s on %s for %s: %s",
            operation,
            resource.type.value,
            identity,
            decision.reason,
        )


def _value(status: Optional[ApprovalStatus]) -> str:
    return status.value if status is not None else "none"


def _join(statuses: frozenset[ApprovalStatus]) -> str:
    return "/".join(sorted(s.value for s in statuses))
