"""Tests for upcoming-birthday computation."""
from datetime import date

import pytest

from school_api.services import birthday_service
from school_api.services.access_types import ScopeFilter


def test_next_birthday_later_this_year():
    assert birthday_service.next_birthday(date(2016, 12, 1), date(2026, 10, 19)) == date(2026, 12, 1)


def test_next_birthday_rolls_over():
    assert birthday_service.next_birthday(date(2016, 3, 14), date(2026, 10, 19)) == date(2027, 3, 14)


def test_birthday_today_counts():
    assert birthday_service.next_birthday(date(2016, 10, 19), date(2026, 10, 19)) == date(2026, 10, 19)


def test_leap_day_falls_back_to_feb_28():
    assert birthday_service.next_birthday(date(2016, 2, 29), date(2027, 1, 1)) == date(2027, 2, 28)


@pytest.mark.asyncio
async def test_upcoming_respects_window_and_scope(db, school):
    today = date(2026, 3, 1)

    everyone = await birthday_service.upcoming(db, ScopeFilter.everything(), today=today, days=30)
    # Graduated students have no ongoing class and are skipped
    assert [b.student_id for b in everyone] == [school.child.id]
    (kavya,) = everyone
    assert kavya.days_until == 13
    assert kavya.age_turning == 10
    assert kavya.class_division_id == school.class_5a.id

    class_5b_only = ScopeFilter(class_division_ids=frozenset({school.class_5b.id}))
    wide = await birthday_service.upcoming(db, class_5b_only, today=today, days=180)
    assert [b.student_id for b in wide] == [school.other_child.id]

    by_student = ScopeFilter(student_ids=frozenset({school.child.id}))
    mine = await birthday_service.upcoming(db, by_student, today=today, days=30)
    assert [b.student_id for b in mine] == [school.child.id]
