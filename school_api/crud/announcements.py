from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import flush
from school_api.crud.scoping import ScopeColumns, ScopedCRUD
from school_api.models.announcement import Announcement
from school_api.models.enums import ApprovalStatus
from school_api.schemas.announcement import AnnouncementCreate, AnnouncementUpdate


class CRUDAnnouncement(ScopedCRUD[Announcement, AnnouncementCreate, AnnouncementUpdate]):
    def columns(self) -> ScopeColumns:
        return ScopeColumns(
            owner=Announcement.created_by,
            class_division=Announcement.class_division_id,
            visibility=Announcement.visibility_scope,
            status=Announcement.status,
            audience=Announcement.audience_role,
        )

    def default_order(self):
        return [Announcement.is_featured.desc(), Announcement.id.desc()]

    async def set_status(
        self,
        db: AsyncSession,
        announcement: Announcement,
        status: ApprovalStatus,
        *,
        actor_id: int,
        reason: Optional[str] = None,
    ) -> Announcement:
        now = datetime.utcnow()
        announcement.status = status
        if status == ApprovalStatus.approved:
            announcement.approved_by = actor_id
            announcement.approved_at = now
            announcement.rejection_reason = None
        elif status == ApprovalStatus.rejected:
            announcement.rejected_by = actor_id
            announcement.rejected_at = now
            announcement.rejection_reason = reason
        db.add(announcement)
        await flush(db)
        await db.refresh(announcement)
        return announcement


crud_announcement = CRUDAnnouncement(Announcement)
