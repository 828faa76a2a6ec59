"""Generic async CRUD over one mapped model.

Store failures are translated into the shared error taxonomy here so callers
never see driver exceptions: uniqueness violations become ConflictError and
connection/driver failures become UnavailableError.
"""
import logging
from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from school_api.errors import ConflictError, UnavailableError
from school_api.models.base import Base

logger = logging.getLogger(__name__)

ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


async def flush(db: AsyncSession) -> None:
    """Flush pending writes, mapping integrity and driver errors."""
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.info("Write rejected by constraint: %s", exc.orig)
        raise ConflictError() from exc
    except (DBAPIError, SQLAlchemyError) as exc:
        logger.error("Record store write failed: %s", exc)
        raise UnavailableError() from exc


async def execute(db: AsyncSession, stmt: Any):
    """Execute a statement, mapping driver errors to UnavailableError."""
    try:
        return await db.execute(stmt)
    except IntegrityError as exc:
        raise ConflictError() from exc
    except (DBAPIError, SQLAlchemyError) as exc:
        logger.error("Record store query failed: %s", exc)
        raise UnavailableError() from exc


async def paginate(
    db: AsyncSession, stmt: Select, *, skip: int = 0, limit: int = 20
) -> tuple[Sequence[Any], int]:
    """Return one page of ``stmt`` plus the total row count."""
    total = (
        await execute(db, select(func.count()).select_from(stmt.order_by(None).subquery()))
    ).scalar_one()
    rows = (await execute(db, stmt.offset(skip).limit(limit))).scalars().all()
    return rows, total


class CRUDBase(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    def __init__(self, model: Type[ModelType]):
        self.model = model

    async def get(self, db: AsyncSession, id: int) -> Optional[ModelType]:
        result = await execute(db, select(self.model).where(self.model.id == id))
        return result.scalar_one_or_none()

    async def get_multi(
        self, db: AsyncSession, *, skip: int = 0, limit: int = 100
    ) -> Sequence[ModelType]:
        result = await execute(
            db, select(self.model).order_by(self.model.id).offset(skip).limit(limit)
        )
        return result.scalars().all()

    async def create(
        self, db: AsyncSession, *, obj_in: CreateSchemaType | dict[str, Any], **extra: Any
    ) -> ModelType:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump()
        db_obj = self.model(**data, **extra)
        db.add(db_obj)
        await flush(db)
        await db.refresh(db_obj)
        return db_obj

    async def update(
        self,
        db: AsyncSession,
        *,
        db_obj: ModelType,
        obj_in: UpdateSchemaType | dict[str, Any],
    ) -> ModelType:
        data = obj_in if isinstance(obj_in, dict) else obj_in.model_dump(exclude_unset=True)
        for field, value in data.items():
            setattr(db_obj, field, value)
        db.add(db_obj)
        await flush(db)
        await db.refresh(db_obj)
        return db_obj

    async def remove(self, db: AsyncSession, *, id: int) -> Optional[ModelType]:
        db_obj = await self.get(db, id)
        if db_obj is None:
            return None
        await db.delete(db_obj)
        await flush(db)
        return db_obj
