from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import CRUDBase, execute, flush
from school_api.crud.scoping import ScopeColumns, ScopedCRUD
from school_api.models.activity import Activity, ActivityParticipant
from school_api.schemas.activity import (
    ActivityCreate,
    ActivityUpdate,
    ConsentUpdate,
    ParticipantCreate,
)


class CRUDActivity(ScopedCRUD[Activity, ActivityCreate, ActivityUpdate]):
    def columns(self) -> ScopeColumns:
        return ScopeColumns(owner=Activity.teacher_id, class_division=Activity.class_division_id)

    def default_order(self):
        return [Activity.activity_date.desc(), Activity.id.desc()]


class CRUDParticipant(CRUDBase[ActivityParticipant, ParticipantCreate, ConsentUpdate]):
    async def get_for_activity(
        self, db: AsyncSession, activity_id: int
    ) -> Sequence[ActivityParticipant]:
        result = await execute(
            db,
            select(ActivityParticipant)
            .where(ActivityParticipant.activity_id == activity_id)
            .order_by(ActivityParticipant.id),
        )
        return result.scalars().all()

    async def get_pair(
        self, db: AsyncSession, activity_id: int, student_id: int
    ) -> Optional[ActivityParticipant]:
        result = await execute(
            db,
            select(ActivityParticipant).where(
                ActivityParticipant.activity_id == activity_id,
                ActivityParticipant.student_id == student_id,
            ),
        )
        return result.scalar_one_or_none()

    async def count_for_activity(self, db: AsyncSession, activity_id: int) -> int:
        result = await execute(
            db,
            select(func.count(ActivityParticipant.id)).where(
                ActivityParticipant.activity_id == activity_id
            ),
        )
        return result.scalar_one()

    async def record_consent(
        self,
        db: AsyncSession,
        participant: ActivityParticipant,
        *,
        consent: bool,
        given_by: int,
    ) -> ActivityParticipant:
        participant.parent_consent = consent
        participant.consent_given_by = given_by
        participant.consent_given_at = datetime.utcnow()
        db.add(participant)
        await flush(db)
        await db.refresh(participant)
        return participant


crud_activity = CRUDActivity(Activity)
crud_participant = CRUDParticipant(ActivityParticipant)
