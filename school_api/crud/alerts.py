from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import flush
from school_api.crud.scoping import ScopeColumns, ScopedCRUD
from school_api.models.alert import Alert
from school_api.models.enums import ApprovalStatus
from school_api.schemas.alert import AlertCreate


class CRUDAlert(ScopedCRUD[Alert, AlertCreate, AlertCreate]):
    def columns(self) -> ScopeColumns:
        return ScopeColumns(
            owner=Alert.sender_id,
            class_division=Alert.class_division_id,
            visibility=Alert.visibility_scope,
            status=Alert.status,
            audience=Alert.audience_role,
        )

    async def set_status(
        self,
        db: AsyncSession,
        alert: Alert,
        status: ApprovalStatus,
        *,
        actor_id: int,
        reason: Optional[str] = None,
    ) -> Alert:
        now = datetime.utcnow()
        alert.status = status
        if status == ApprovalStatus.approved:
            alert.approved_by = actor_id
            alert.approved_at = now
            alert.rejection_reason = None
        elif status == ApprovalStatus.rejected:
            alert.rejected_by = actor_id
            alert.rejected_at = now
            alert.rejection_reason = reason
        elif status == ApprovalStatus.sent:
            alert.sent_at = now
        db.add(alert)
        await flush(db)
        await db.refresh(alert)
        return alert


crud_alert = CRUDAlert(Alert)
