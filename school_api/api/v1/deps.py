"""FastAPI dependencies."""

import math
from dataclasses import dataclass
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.auth.identity import IdentityContext
from school_api.auth.jwt_auth import parse_bearer, verify_token
from school_api.config import get_settings
from school_api.crud import crud_user
from school_api.database import get_db
from school_api.errors import AuthenticationError
from school_api.services.access_policy import AccessPolicy

settings = get_settings()


async def get_identity(
    db: Annotated[AsyncSession, Depends(get_db)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> IdentityContext:
    credential = verify_token(parse_bearer(authorization))
    user = await crud_user.get(db, credential.user_id)
    if user is None or not user.is_active:
        raise AuthenticationError("User not found or inactive")
    if user.role != credential.role:
        raise AuthenticationError("Role changed; sign in again")
    return IdentityContext(user_id=user.id, role=user.role, full_name=user.full_name)


async def get_policy(db: Annotated[AsyncSession, Depends(get_db)]) -> AccessPolicy:
    return AccessPolicy(db)


async def require_staff(
    identity: Annotated[IdentityContext, Depends(get_identity)],
) -> IdentityContext:
    if not identity.is_staff():
        raise HTTPException(status_code=403, detail="Admin or principal role required")
    return identity


@dataclass
class PageParams:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def wrap(self, items, total: int) -> dict:
        return {
            "items": items,
            "page": self.page,
            "limit": self.limit,
            "total": total,
            "total_pages": math.ceil(total / self.limit) if total else 0,
        }


async def get_page(
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[Optional[int], Query(ge=1)] = None,
) -> PageParams:
    size = min(limit or settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)
    return PageParams(page=page, limit=size)

