"""Translate a ScopeFilter into a SQL predicate for a given model."""

from dataclasses import dataclass
from typing import Any, Optional, Sequence

from sqlalchemy import and_, false, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from school_api.crud.base import (
    CreateSchemaType,
    CRUDBase,
    ModelType,
    UpdateSchemaType,
    paginate,
)
from school_api.models.enums import PUBLISHED_STATUSES, VisibilityScope
from school_api.services.access_types import ScopeFilter


@dataclass(frozen=True)
class ScopeColumns:
    """Which columns of a model play which role in scoping. Absent roles are None."""

    owner: Any
    class_division: Any = None
    student: Any = None
    recipient: Any = None
    visibility: Any = None
    status: Any = None
    audience: Any = None


def scope_clause(scope: ScopeFilter, cols: ScopeColumns) -> ColumnElement[bool]:
    if scope.unrestricted:
        return true()

    branches: list[ColumnElement[bool]] = []
    if scope.class_division_ids and cols.class_division is not None:
        branches.append(cols.class_division.in_(sorted(scope.class_division_ids)))
    if scope.student_ids and cols.student is not None:
        branches.append(cols.student.in_(sorted(scope.student_ids)))
    if scope.recipient_id is not None and cols.recipient is not None:
        branches.append(cols.recipient == scope.recipient_id)
    if scope.include_school_wide and cols.visibility is not None:
        branches.append(cols.visibility == VisibilityScope.school_wide)

    shared: ColumnElement[bool] = or_(*branches) if branches else false()
    if scope.published_only and cols.status is not None:
        shared = and_(shared, cols.status.in_(list(PUBLISHED_STATUSES)))
    if scope.audience_role is not None and cols.audience is not None:
        shared = and_(shared, or_(cols.audience.is_(None), cols.audience == scope.audience_role))

    owner: Optional[ColumnElement[bool]] = None
    if scope.owner_id is not None and cols.owner is not None:
        owner = cols.owner == scope.owner_id
    return or_(owner, shared) if owner is not None else shared


class ScopedCRUD(CRUDBase[ModelType, CreateSchemaType, UpdateSchemaType]):
    """CRUD whose list queries are narrowed by an access scope in SQL."""

    def columns(self) -> ScopeColumns:
        raise NotImplementedError

    def default_order(self) -> list[Any]:
        return [self.model.id.desc()]

    async def list_scoped(
        self,
        db: AsyncSession,
        scope: ScopeFilter,
        *,
        filters: Sequence[ColumnElement[bool]] = (),
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[Sequence[ModelType], int]:
        stmt = (
            select(self.model)
            .where(scope_clause(scope, self.columns()), *filters)
            .order_by(*self.default_order())
        )
        return await paginate(db, stmt, skip=skip, limit=limit)
