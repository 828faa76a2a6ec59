from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import flush
from school_api.crud.scoping import ScopeColumns, ScopedCRUD
from school_api.models.calendar_event import CalendarEvent
from school_api.models.enums import ApprovalStatus
from school_api.schemas.calendar_event import CalendarEventCreate, CalendarEventUpdate


class CRUDCalendarEvent(ScopedCRUD[CalendarEvent, CalendarEventCreate, CalendarEventUpdate]):
    def columns(self) -> ScopeColumns:
        return ScopeColumns(
            owner=CalendarEvent.created_by,
            class_division=CalendarEvent.class_division_id,
            visibility=CalendarEvent.event_type,
            status=CalendarEvent.status,
        )

    def default_order(self):
        return [CalendarEvent.event_date.asc(), CalendarEvent.id.asc()]

    async def set_status(
        self,
        db: AsyncSession,
        event: CalendarEvent,
        status: ApprovalStatus,
        *,
        actor_id: int,
        reason: Optional[str] = None,
    ) -> CalendarEvent:
        event.status = status
        if status == ApprovalStatus.approved:
            event.approved_by = actor_id
            event.approved_at = datetime.utcnow()
            event.rejection_reason = None
        elif status == ApprovalStatus.rejected:
            event.rejection_reason = reason
        db.add(event)
        await flush(db)
        await db.refresh(event)
        return event


crud_calendar_event = CRUDCalendarEvent(CalendarEvent)
