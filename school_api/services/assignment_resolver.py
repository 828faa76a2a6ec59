"""Teacher → class assignments, merged from the legacy and the many-to-many sources.

A class division may name its teacher directly (``class_divisions.teacher_id``,
the legacy single-teacher model) and/or through rows in
``class_teacher_assignments``. Both are folded into one normalized set here so
no caller ever has to consult the two sources separately.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.assignments import crud_assignment
from school_api.crud.base import execute
from school_api.crud.class_divisions import crud_class_division
from school_api.errors import ResolverError, UnavailableError
from school_api.models.class_division import ClassDivision
from school_api.models.teacher_assignment import AssignmentType, TeacherAssignment

logger = logging.getLogger(__name__)

SOURCE_ASSIGNMENT = "assignment"
SOURCE_LEGACY = "legacy"


@dataclass(frozen=True)
class Assignment:
    class_division_id: int
    assignment_type: AssignmentType
    subject: Optional[str]
    is_primary: bool
    source: str = SOURCE_ASSIGNMENT


def _merge(
    rows: Iterable[TeacherAssignment], legacy: Iterable[ClassDivision]
) -> frozenset[Assignment]:
    merged = {
        Assignment(
            class_division_id=row.class_division_id,
            assignment_type=row.assignment_type,
            subject=row.subject,
            is_primary=row.is_primary,
        )
        for row in rows
    }
    covered = {a.class_division_id for a in merged}
    for cd in legacy:
        if cd.id in covered:
            continue
        merged.add(
            Assignment(
                class_division_id=cd.id,
                assignment_type=AssignmentType.class_teacher,
                subject=None,
                is_primary=True,
                source=SOURCE_LEGACY,
            )
        )
    return frozenset(merged)


async def resolve_for_teacher(db: AsyncSession, teacher_id: int) -> frozenset[Assignment]:
    """Every class the teacher currently holds, one entry per (class, type, subject).

    An empty set is a normal answer: the teacher has no class-scoped access.
    """
    try:
        rows = await crud_assignment.get_active_for_teacher(db, teacher_id)
        legacy = await crud_class_division.get_by_legacy_teacher(db, teacher_id)
    except UnavailableError as exc:
        logger.error("Assignment lookup failed for teacher %s: %s", teacher_id, exc)
        raise ResolverError() from exc
    return _merge(rows, legacy)


def class_ids(assignments: Iterable[Assignment]) -> frozenset[int]:
    return frozenset(a.class_division_id for a in assignments)


async def teaches_class(db: AsyncSession, teacher_id: int, class_division_id: int) -> bool:
    """Point lookup for create and review checks when no assignments are resolved yet."""
    try:
        result = await execute(
            db,
            select(TeacherAssignment.id)
            .where(
                TeacherAssignment.teacher_id == teacher_id,
                TeacherAssignment.class_division_id == class_division_id,
                TeacherAssignment.is_active == True,
            )
            .limit(1),
        )
        if result.scalar_one_or_none() is not None:
            return True
        result = await execute(
            db,
            select(ClassDivision.id).where(
                ClassDivision.id == class_division_id,
                ClassDivision.teacher_id == teacher_id,
            ),
        )
        return result.scalar_one_or_none() is not None
    except UnavailableError as exc:
        logger.error(
            "Assignment point lookup failed for teacher %s, class %s: %s",
            teacher_id,
            class_division_id,
            exc,
        )
        raise ResolverError() from exc


async def teachers_for_classes(db: AsyncSession, class_division_ids: Iterable[int]) -> set[int]:
    """Reverse lookup: every teacher holding any of the given classes, from both sources."""
    ids = sorted(set(class_division_ids))
    if not ids:
        return set()
    try:
        result = await execute(
            db,
            select(TeacherAssignment.teacher_id).where(
                TeacherAssignment.class_division_id.in_(ids),
                TeacherAssignment.is_active == True,
            ),
        )
        teachers = set(result.scalars().all())
        result = await execute(
            db,
            select(ClassDivision.teacher_id).where(
                ClassDivision.id.in_(ids), ClassDivision.teacher_id.is_not(None)
            ),
        )
        teachers.update(result.scalars().all())
    except UnavailableError as exc:
        logger.error("Teacher lookup failed for classes %s: %s", ids, exc)
        raise ResolverError() from exc
    return teachers


async def teachers_for_class(db: AsyncSession, class_division_id: int) -> set[int]:
    return await teachers_for_classes(db, [class_division_id])
