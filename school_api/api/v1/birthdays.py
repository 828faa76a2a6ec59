"""Birthdays of the students the caller can see."""
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.api.v1.deps import get_identity, get_policy
from school_api.auth.identity import IdentityContext
from school_api.database import get_db
from school_api.schemas.birthday import BirthdayResponse
from school_api.services import birthday_service
from school_api.services.access_policy import AccessPolicy
from school_api.services.access_types import Operation, ResourceDescriptor, ResourceType

router = APIRouter(prefix="/birthdays", tags=["birthdays"])


@router.get("/upcoming", response_model=list[BirthdayResponse])
async def upcoming_birthdays(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
    days: Annotated[int, Query(ge=0, le=366)] = 30,
):
    decision = (
        await policy.decide(identity, ResourceDescriptor(ResourceType.birthday), Operation.list)
    ).enforce()
    return await birthday_service.upcoming(db, decision.scope, today=date.today(), days=days)


@router.get("/today", response_model=list[BirthdayResponse])
async def todays_birthdays(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    decision = (
        await policy.decide(identity, ResourceDescriptor(ResourceType.birthday), Operation.list)
    ).enforce()
    return await birthday_service.upcoming(db, decision.scope, today=date.today(), days=0)
