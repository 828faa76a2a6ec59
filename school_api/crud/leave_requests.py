from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import flush
from school_api.crud.scoping import ScopeColumns, ScopedCRUD
from school_api.models.leave_request import LeaveRequest, LeaveStatus
from school_api.schemas.leave_request import LeaveRequestCreate, LeaveRequestUpdate


class CRUDLeaveRequest(ScopedCRUD[LeaveRequest, LeaveRequestCreate, LeaveRequestUpdate]):
    def columns(self) -> ScopeColumns:
        return ScopeColumns(
            owner=LeaveRequest.requested_by,
            class_division=LeaveRequest.class_division_id,
            student=LeaveRequest.student_id,
        )

    def default_order(self):
        return [LeaveRequest.created_at.desc(), LeaveRequest.id.desc()]

    async def review(
        self, db: AsyncSession, leave: LeaveRequest, status: LeaveStatus, *, reviewer_id: int
    ) -> LeaveRequest:
        leave.status = status
        leave.reviewed_by = reviewer_id
        leave.reviewed_at = datetime.utcnow()
        db.add(leave)
        await flush(db)
        await db.refresh(leave)
        return leave


crud_leave_request = CRUDLeaveRequest(LeaveRequest)
