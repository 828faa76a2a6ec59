"""Tests for AccessPolicy decisions: list scopes, reads, creates, mutations, moderation."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy import update
from sqlalchemy.exc import OperationalError

from school_api.errors import (
    AuthorizationError,
    NotFoundError,
    ResolverError,
    StateConflictError,
)
from school_api.models import ApprovalStatus, TeacherAssignment, VisibilityScope
from school_api.services import assignment_resolver
from school_api.services.access_policy import AccessPolicy
from school_api.services.access_types import (
    Decision,
    Operation,
    ResourceDescriptor,
    ResourceType,
)


def _alert(owner_id, status, class_division_id=None):
    return ResourceDescriptor(
        type=ResourceType.alert,
        class_division_id=class_division_id,
        owner_id=owner_id,
        approval_status=status,
        visibility_scope=(
            VisibilityScope.class_specific
            if class_division_id is not None
            else VisibilityScope.school_wide
        ),
    )


# ---------------------------------------------------------------------------
# Decision → error mapping
# ---------------------------------------------------------------------------


def test_enforce_maps_denials_to_errors():
    assert Decision.permit().enforce().allow is True
    with pytest.raises(AuthorizationError):
        Decision.deny("nope").enforce()
    with pytest.raises(NotFoundError):
        Decision.deny("hidden", conceal=True).enforce()
    with pytest.raises(StateConflictError):
        Decision.state_conflict("already sent").enforce()


# ---------------------------------------------------------------------------
# Staff
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_staff_list_scope_is_unrestricted(db, school):
    policy = AccessPolicy(db)
    for user in (school.admin, school.principal):
        decision = await policy.decide(
            school.identity(user), ResourceDescriptor(ResourceType.homework), Operation.list
        )
        assert decision.allow and decision.scope.unrestricted


@pytest.mark.asyncio
async def test_staff_create_is_auto_approved(db, school):
    decision = await AccessPolicy(db).decide(
        school.identity(school.principal),
        _alert(school.principal.id, None, school.class_5b.id),
        Operation.create,
    )
    assert decision.allow
    assert decision.initial_status == ApprovalStatus.approved


@pytest.mark.asyncio
async def test_staff_mutate_regardless_of_ownership(db, school):
    hw = ResourceDescriptor(
        type=ResourceType.homework,
        class_division_id=school.class_5a.id,
        owner_id=school.legacy_teacher.id,
    )
    policy = AccessPolicy(db)
    assert (await policy.decide(school.identity(school.admin), hw, Operation.update)).allow
    assert (await policy.decide(school.identity(school.admin), hw, Operation.delete)).allow


# ---------------------------------------------------------------------------
# Teachers
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_subject_teacher_creates_homework_only_for_assigned_classes(db, school):
    """A subject assignment alone grants class-wide create rights."""
    policy = AccessPolicy(db)
    teacher = school.identity(school.legacy_teacher)

    allowed = await policy.decide(
        school.identity(school.subject_teacher),
        ResourceDescriptor(
            type=ResourceType.homework,
            class_division_id=school.class_5a.id,
            owner_id=school.subject_teacher.id,
        ),
        Operation.create,
    )
    assert allowed.allow

    denied = await policy.decide(
        teacher,
        ResourceDescriptor(
            type=ResourceType.homework,
            class_division_id=school.class_5b.id,
            owner_id=school.legacy_teacher.id,
        ),
        Operation.create,
    )
    assert not denied.allow
    with pytest.raises(AuthorizationError):
        denied.enforce()


@pytest.mark.asyncio
async def test_legacy_teacher_gets_class_scope(db, school):
    decision = await AccessPolicy(db).decide(
        school.identity(school.legacy_teacher),
        ResourceDescriptor(ResourceType.homework),
        Operation.list,
    )
    assert decision.allow
    assert decision.scope.class_division_ids == {school.class_5a.id}
    assert decision.scope.owner_id == school.legacy_teacher.id


@pytest.mark.asyncio
async def test_idle_teacher_sees_only_own_and_school_wide(db, school):
    decision = await AccessPolicy(db).decide(
        school.identity(school.idle_teacher),
        ResourceDescriptor(ResourceType.alert),
        Operation.list,
    )
    scope = decision.scope
    assert scope.class_division_ids == frozenset()
    assert scope.include_school_wide
    assert scope.published_only


@pytest.mark.asyncio
async def test_teacher_cannot_mutate_another_teachers_homework(db, school):
    """Ownership dominates class assignment for update and delete."""
    hw = ResourceDescriptor(
        type=ResourceType.homework,
        class_division_id=school.class_5a.id,
        owner_id=school.legacy_teacher.id,
    )
    policy = AccessPolicy(db)
    other = school.identity(school.subject_teacher)
    for op in (Operation.update, Operation.delete):
        decision = await policy.decide(other, hw, op)
        assert not decision.allow
        assert not decision.conceal


@pytest.mark.asyncio
async def test_teacher_cannot_create_readonly_birthdays(db, school):
    decision = await AccessPolicy(db).decide(
        school.identity(school.legacy_teacher),
        ResourceDescriptor(ResourceType.birthday, class_division_id=school.class_5a.id),
        Operation.create,
    )
    assert not decision.allow


# ---------------------------------------------------------------------------
# Pending content never leaks
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_pending_alert_visible_to_owner_only_until_approved(db, school):
    policy = AccessPolicy(db)
    author = school.identity(school.legacy_teacher)
    colleague = school.identity(school.idle_teacher)
    parent = school.identity(school.parent)

    pending = _alert(school.legacy_teacher.id, ApprovalStatus.pending)
    author_scope = (await policy.decide(author, pending, Operation.list)).scope
    colleague_scope = (await policy.decide(colleague, pending, Operation.list)).scope
    parent_scope = (await policy.decide(parent, pending, Operation.list)).scope
    assert author_scope.matches(pending)
    assert not colleague_scope.matches(pending)
    assert not parent_scope.matches(pending)

    approve = await policy.decide_transition(
        school.identity(school.principal), pending, ApprovalStatus.approved
    )
    assert approve.allow

    approved = _alert(school.legacy_teacher.id, ApprovalStatus.approved)
    assert colleague_scope.matches(approved)
    assert parent_scope.matches(approved)


@pytest.mark.asyncio
async def test_pending_class_alert_hidden_from_assigned_teacher(db, school):
    pending = _alert(school.legacy_teacher.id, ApprovalStatus.pending, school.class_5a.id)
    decision = await AccessPolicy(db).decide(
        school.identity(school.subject_teacher), pending, Operation.read
    )
    assert not decision.allow


# ---------------------------------------------------------------------------
# Parents
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_parent_scope_covers_only_ongoing_classes(db, school):
    decision = await AccessPolicy(db).decide(
        school.identity(school.parent), ResourceDescriptor(ResourceType.homework), Operation.list
    )
    assert decision.scope.class_division_ids == {school.class_5a.id}


@pytest.mark.asyncio
async def test_parent_attendance_scope_is_by_student(db, school):
    decision = await AccessPolicy(db).decide(
        school.identity(school.parent), ResourceDescriptor(ResourceType.attendance), Operation.list
    )
    assert decision.scope.student_ids == {school.child.id}
    assert decision.scope.class_division_ids == frozenset()


@pytest.mark.asyncio
async def test_parent_probing_other_class_gets_not_found(db, school):
    hw = ResourceDescriptor(
        type=ResourceType.homework,
        class_division_id=school.class_5b.id,
        owner_id=school.subject_teacher.id,
    )
    decision = await AccessPolicy(db).decide(school.identity(school.parent), hw, Operation.read)
    assert not decision.allow and decision.conceal
    with pytest.raises(NotFoundError):
        decision.enforce()


@pytest.mark.asyncio
async def test_parent_cannot_create_homework(db, school):
    decision = await AccessPolicy(db).decide(
        school.identity(school.parent),
        ResourceDescriptor(
            type=ResourceType.homework,
            class_division_id=school.class_5a.id,
            owner_id=school.parent.id,
        ),
        Operation.create,
    )
    assert not decision.allow


@pytest.mark.asyncio
async def test_parent_message_to_childs_teacher_is_pending(db, school):
    policy = AccessPolicy(db)
    parent = school.identity(school.parent)

    to_teacher = ResourceDescriptor(
        type=ResourceType.message,
        owner_id=school.parent.id,
        visibility_scope=VisibilityScope.direct,
        recipient_id=school.legacy_teacher.id,
    )
    decision = await policy.decide(parent, to_teacher, Operation.create)
    assert decision.allow
    assert decision.initial_status == ApprovalStatus.pending

    to_stranger = ResourceDescriptor(
        type=ResourceType.message,
        owner_id=school.parent.id,
        visibility_scope=VisibilityScope.direct,
        recipient_id=school.idle_teacher.id,
    )
    assert not (await policy.decide(parent, to_stranger, Operation.create)).allow


@pytest.mark.asyncio
async def test_parent_cannot_edit_approved_message(db, school):
    msg = ResourceDescriptor(
        type=ResourceType.message,
        owner_id=school.parent.id,
        approval_status=ApprovalStatus.approved,
        visibility_scope=VisibilityScope.direct,
        recipient_id=school.legacy_teacher.id,
    )
    decision = await AccessPolicy(db).decide(school.identity(school.parent), msg, Operation.update)
    assert not decision.allow
    assert decision.conflict


# ---------------------------------------------------------------------------
# Consent
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_consent_authorized_by_guardianship_not_ownership(db, school):
    policy = AccessPolicy(db)
    own_child = ResourceDescriptor(
        type=ResourceType.activity_consent, student_id=school.child.id
    )
    other_child = ResourceDescriptor(
        type=ResourceType.activity_consent, student_id=school.other_child.id
    )
    parent = school.identity(school.parent)
    assert (await policy.decide(parent, own_child, Operation.update)).allow

    denied = await policy.decide(parent, other_child, Operation.update)
    assert not denied.allow and denied.conceal

    teacher = await policy.decide(
        school.identity(school.legacy_teacher), own_child, Operation.update
    )
    assert not teacher.allow


# ---------------------------------------------------------------------------
# State-dependent mutations
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_activity_cannot_be_deleted_once_started(db, school):
    policy = AccessPolicy(db)
    owner = school.identity(school.legacy_teacher)
    for state, allowed in (("scheduled", True), ("in_progress", False), ("completed", False)):
        activity = ResourceDescriptor(
            type=ResourceType.activity,
            class_division_id=school.class_5a.id,
            owner_id=school.legacy_teacher.id,
            state=state,
        )
        decision = await policy.decide(owner, activity, Operation.delete)
        assert decision.allow is allowed
        if not allowed:
            assert decision.conflict


@pytest.mark.asyncio
async def test_sent_alert_cannot_be_deleted(db, school):
    decision = await AccessPolicy(db).decide(
        school.identity(school.principal),
        _alert(school.legacy_teacher.id, ApprovalStatus.sent),
        Operation.delete,
    )
    with pytest.raises(StateConflictError):
        decision.enforce()


@pytest.mark.asyncio
async def test_owner_deletes_announcement_only_while_pending(db, school):
    policy = AccessPolicy(db)
    owner = school.identity(school.legacy_teacher)

    def announcement(status):
        return ResourceDescriptor(
            type=ResourceType.announcement,
            owner_id=school.legacy_teacher.id,
            approval_status=status,
            visibility_scope=VisibilityScope.school_wide,
        )

    assert (
        await policy.decide(owner, announcement(ApprovalStatus.pending), Operation.delete)
    ).allow
    assert (
        await policy.decide(owner, announcement(ApprovalStatus.approved), Operation.delete)
    ).conflict
    assert (
        await policy.decide(
            school.identity(school.admin), announcement(ApprovalStatus.approved), Operation.delete
        )
    ).allow


# ---------------------------------------------------------------------------
# Moderation transitions
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_only_staff_approve(db, school):
    policy = AccessPolicy(db)
    pending = _alert(school.legacy_teacher.id, ApprovalStatus.pending)
    decision = await policy.decide_transition(
        school.identity(school.legacy_teacher), pending, ApprovalStatus.approved
    )
    assert not decision.allow and not decision.conflict


@pytest.mark.asyncio
async def test_owner_submits_draft(db, school):
    draft = _alert(school.legacy_teacher.id, ApprovalStatus.draft)
    decision = await AccessPolicy(db).decide_transition(
        school.identity(school.legacy_teacher), draft, ApprovalStatus.pending
    )
    assert decision.allow


@pytest.mark.asyncio
async def test_invalid_edges_conflict_even_for_staff(db, school):
    policy = AccessPolicy(db)
    principal = school.identity(school.principal)
    sent = _alert(school.legacy_teacher.id, ApprovalStatus.sent)
    rejected = _alert(school.legacy_teacher.id, ApprovalStatus.rejected)

    with pytest.raises(StateConflictError):
        (await policy.decide_transition(principal, sent, ApprovalStatus.approved)).enforce()
    with pytest.raises(StateConflictError):
        (await policy.decide_transition(principal, rejected, ApprovalStatus.sent)).enforce()


@pytest.mark.asyncio
async def test_unmoderated_type_has_no_transitions(db, school):
    hw = ResourceDescriptor(
        type=ResourceType.homework,
        class_division_id=school.class_5a.id,
        owner_id=school.legacy_teacher.id,
    )
    decision = await AccessPolicy(db).decide_transition(
        school.identity(school.admin), hw, ApprovalStatus.approved
    )
    assert decision.conflict


# ---------------------------------------------------------------------------
# Ownership outlives assignments
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_owner_keeps_own_homework_after_assignments_revoked(db, school):
    await db.execute(
        update(TeacherAssignment)
        .where(TeacherAssignment.teacher_id == school.subject_teacher.id)
        .values(is_active=False)
    )
    await db.flush()

    policy = AccessPolicy(db)
    teacher = school.identity(school.subject_teacher)
    own = ResourceDescriptor(
        type=ResourceType.homework,
        class_division_id=school.class_5b.id,
        owner_id=school.subject_teacher.id,
    )
    for op in (Operation.read, Operation.update, Operation.delete):
        assert (await policy.decide(teacher, own, op)).allow

    fresh = ResourceDescriptor(
        type=ResourceType.homework,
        class_division_id=school.class_5b.id,
        owner_id=school.subject_teacher.id,
    )
    assert not (await AccessPolicy(db).decide(teacher, fresh, Operation.create)).allow


@pytest.mark.asyncio
async def test_create_uses_point_lookup_when_nothing_resolved(db, school, monkeypatch):
    resolve = AsyncMock(side_effect=AssertionError("full resolve not expected"))
    monkeypatch.setattr(assignment_resolver, "resolve_for_teacher", resolve)
    decision = await AccessPolicy(db).decide(
        school.identity(school.legacy_teacher),
        ResourceDescriptor(
            type=ResourceType.homework,
            class_division_id=school.class_5a.id,
            owner_id=school.legacy_teacher.id,
        ),
        Operation.create,
    )
    assert decision.allow
    resolve.assert_not_awaited()


# ---------------------------------------------------------------------------
# Resolver failures
# ---------------------------------------------------------------------------


def _store_down(monkeypatch, db):
    monkeypatch.setattr(
        db,
        "execute",
        AsyncMock(side_effect=OperationalError("SELECT 1", {}, Exception("server has gone away"))),
    )


@pytest.mark.asyncio
async def test_teacher_resolver_failure_is_neither_allow_nor_deny(db, school, monkeypatch):
    _store_down(monkeypatch, db)
    with pytest.raises(ResolverError):
        await AccessPolicy(db).decide(
            school.identity(school.legacy_teacher),
            ResourceDescriptor(ResourceType.homework),
            Operation.list,
        )


@pytest.mark.asyncio
async def test_guardian_resolver_failure_propagates(db, school, monkeypatch):
    _store_down(monkeypatch, db)
    with pytest.raises(ResolverError):
        await AccessPolicy(db).decide(
            school.identity(school.parent),
            ResourceDescriptor(
                type=ResourceType.homework,
                class_division_id=school.class_5a.id,
                owner_id=school.legacy_teacher.id,
            ),
            Operation.read,
        )


# ---------------------------------------------------------------------------
# Leave requests
# ---------------------------------------------------------------------------


def _leave(school, student, class_division, *, owner, state=None):
    return ResourceDescriptor(
        type=ResourceType.leave_request,
        class_division_id=class_division.id if class_division is not None else None,
        owner_id=owner.id,
        student_id=student.id,
        state=state,
    )


@pytest.mark.asyncio
async def test_parent_files_leave_only_for_enrolled_child(db, school):
    policy = AccessPolicy(db)
    parent = school.identity(school.parent)

    own = _leave(school, school.child, school.class_5a, owner=school.parent)
    assert (await policy.decide(parent, own, Operation.create)).allow

    other = _leave(school, school.other_child, school.class_5b, owner=school.parent)
    denied = await policy.decide(parent, other, Operation.create)
    assert not denied.allow and denied.conceal

    graduate = _leave(school, school.graduate, None, owner=school.parent)
    assert not (await policy.decide(parent, graduate, Operation.create)).allow


@pytest.mark.asyncio
async def test_class_teacher_reviews_leave_parent_cannot(db, school):
    policy = AccessPolicy(db)
    leave = _leave(school, school.child, school.class_5a, owner=school.parent, state="pending")

    assert (await policy.decide_review(school.identity(school.legacy_teacher), leave)).allow
    assert (await policy.decide_review(school.identity(school.principal), leave)).allow
    assert not (await policy.decide_review(school.identity(school.idle_teacher), leave)).allow

    requester = await policy.decide_review(school.identity(school.parent), leave)
    assert not requester.allow and not requester.conceal
    stranger = await policy.decide_review(school.identity(school.other_parent), leave)
    assert not stranger.allow and stranger.conceal


@pytest.mark.asyncio
async def test_reviewed_leave_is_settled(db, school):
    policy = AccessPolicy(db)
    leave = _leave(school, school.child, school.class_5a, owner=school.parent, state="approved")

    review = await policy.decide_review(school.identity(school.legacy_teacher), leave)
    assert review.conflict
    for op in (Operation.update, Operation.delete):
        decision = await policy.decide(school.identity(school.parent), leave, op)
        assert decision.conflict
