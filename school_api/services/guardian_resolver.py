"""Parent → students, each with the student's ongoing class (if any).

Only ``ongoing`` enrollments ever supply a class: a graduated or transferred
student still shows up as a linked child, but with no class scope.
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import execute
from school_api.crud.guardians import crud_guardian
from school_api.crud.students import crud_enrollment
from school_api.errors import ResolverError, UnavailableError
from school_api.models.guardian import GuardianMapping, GuardianRelation
from school_api.models.student import EnrollmentStatus, StudentEnrollment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GuardianLink:
    student_id: int
    class_division_id: Optional[int]
    relationship: GuardianRelation
    is_primary_guardian: bool


async def resolve_for_parent(db: AsyncSession, parent_id: int) -> list[GuardianLink]:
    try:
        mappings = await crud_guardian.get_for_parent(db, parent_id)
        enrollments = await crud_enrollment.get_ongoing_for_students(
            db, [m.student_id for m in mappings]
        )
    except UnavailableError as exc:
        logger.error("Guardian lookup failed for parent %s: %s", parent_id, exc)
        raise ResolverError() from exc

    ongoing = {e.student_id: e.class_division_id for e in enrollments}
    return [
        GuardianLink(
            student_id=m.student_id,
            class_division_id=ongoing.get(m.student_id),
            relationship=m.relation,
            is_primary_guardian=m.is_primary_guardian,
        )
        for m in mappings
    ]


def class_ids(links: Iterable[GuardianLink]) -> frozenset[int]:
    return frozenset(l.class_division_id for l in links if l.class_division_id is not None)


def enrolled_student_ids(links: Iterable[GuardianLink]) -> frozenset[int]:
    """Children that currently have an ongoing class."""
    return frozenset(l.student_id for l in links if l.class_division_id is not None)


async def is_guardian_of(db: AsyncSession, parent_id: int, student_id: int) -> bool:
    try:
        mapping = await crud_guardian.get_pair(db, parent_id, student_id)
    except UnavailableError as exc:
        logger.error(
            "Guardian point lookup failed for parent %s, student %s: %s",
            parent_id,
            student_id,
            exc,
        )
        raise ResolverError() from exc
    return mapping is not None


async def parents_for_classes(db: AsyncSession, class_division_ids: Iterable[int]) -> set[int]:
    """Parents with a child currently enrolled in any of the given classes."""
    ids = sorted(set(class_division_ids))
    if not ids:
        return set()
    try:
        result = await execute(
            db,
            select(GuardianMapping.parent_id)
            .join(StudentEnrollment, StudentEnrollment.student_id == GuardianMapping.student_id)
            .where(
                StudentEnrollment.class_division_id.in_(ids),
                StudentEnrollment.status == EnrollmentStatus.ongoing,
            )
            .distinct(),
        )
    except UnavailableError as exc:
        logger.error("Parent lookup failed for classes %s: %s", ids, exc)
        raise ResolverError() from exc
    return set(result.scalars().all())
