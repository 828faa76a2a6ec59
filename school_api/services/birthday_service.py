"""Upcoming birthdays for the students an identity may see."""
from datetime import date, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.students import crud_student
from school_api.schemas.birthday import BirthdayResponse
from school_api.services.access_types import ScopeFilter


def _in_year(dob: date, year: int) -> date:
    try:
        return dob.replace(year=year)
    except ValueError:
        # Feb 29 in a common year
        return date(year, 2, 28)


def next_birthday(dob: date, today: date) -> date:
    """Next occurrence of ``dob`` on or after ``today``."""
    candidate = _in_year(dob, today.year)
    if candidate < today:
        candidate = _in_year(dob, today.year + 1)
    return candidate


async def upcoming(
    db: AsyncSession,
    scope: ScopeFilter,
    *,
    today: date,
    days: int = 30,
) -> list[BirthdayResponse]:
    if scope.unrestricted:
        rows = await crud_student.get_enrolled(db)
    else:
        rows = list(await crud_student.get_in_classes(db, scope.class_division_ids))
        seen = {s.id for s, _ in rows}
        extra = [sid for sid in scope.student_ids if sid not in seen]
        rows.extend(await crud_student.get_with_ongoing_class(db, extra))

    horizon = today + timedelta(days=days)
    result = []
    for student, class_division_id in rows:
        if student.date_of_birth is None:
            continue
        upcoming_on = next_birthday(student.date_of_birth, today)
        if upcoming_on > horizon:
            continue
        result.append(
            BirthdayResponse(
                student_id=student.id,
                full_name=student.full_name,
                class_division_id=class_division_id,
                date_of_birth=student.date_of_birth,
                next_birthday=upcoming_on,
                days_until=(upcoming_on - today).days,
                age_turning=upcoming_on.year - student.date_of_birth.year,
            )
        )
    result.sort(key=lambda b: (b.days_until, b.full_name))
    return result
