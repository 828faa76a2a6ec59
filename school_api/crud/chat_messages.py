from datetime import datetime
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from school_api.crud.base import flush
from school_api.crud.scoping import ScopeColumns, ScopedCRUD
from school_api.models.chat_message import ChatMessage
from school_api.models.enums import ApprovalStatus
from school_api.schemas.chat_message import MessageCreate, MessageUpdate


class CRUDChatMessage(ScopedCRUD[ChatMessage, MessageCreate, MessageUpdate]):
    def columns(self) -> ScopeColumns:
        return ScopeColumns(
            owner=ChatMessage.sender_id,
            class_division=ChatMessage.class_division_id,
            recipient=ChatMessage.recipient_id,
            visibility=ChatMessage.visibility_scope,
            status=ChatMessage.approval_status,
        )

    def default_order(self):
        return [ChatMessage.id.asc()]

    async def set_status(
        self,
        db: AsyncSession,
        message: ChatMessage,
        status: ApprovalStatus,
        *,
        actor_id: int,
        reason: Optional[str] = None,
    ) -> ChatMessage:
        message.approval_status = status
        if status == ApprovalStatus.approved:
            message.approved_by = actor_id
            message.approved_at = datetime.utcnow()
            message.rejection_reason = None
        elif status == ApprovalStatus.rejected:
            message.rejection_reason = reason
        db.add(message)
        await flush(db)
        await db.refresh(message)
        return message


crud_chat_message = CRUDChatMessage(ChatMessage)
