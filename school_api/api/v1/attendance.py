"""Attendance marking and lookup."""
from datetime import date
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.api.v1.deps import PageParams, get_identity, get_page, get_policy
from school_api.auth.identity import IdentityContext
from school_api.crud import crud_attendance, crud_class_division, crud_enrollment
from school_api.database import get_db
from school_api.errors import NotFoundError
from school_api.models.attendance import AttendanceRecord, AttendanceStatus
from school_api.schemas.attendance import (
    AttendanceMarkRequest,
    AttendanceResponse,
    AttendanceUpdate,
)
from school_api.schemas.common import Page
from school_api.services.access_policy import AccessPolicy
from school_api.services.access_types import Operation, ResourceDescriptor, ResourceType

router = APIRouter(prefix="/attendance", tags=["attendance"])


def _descriptor(record: AttendanceRecord) -> ResourceDescriptor:
    return ResourceDescriptor(
        type=ResourceType.attendance,
        class_division_id=record.class_division_id,
        owner_id=record.marked_by,
        student_id=record.student_id,
    )


@router.post("", response_model=list[AttendanceResponse], status_code=201)
async def mark_attendance(
    body: AttendanceMarkRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    """Mark (or re-mark) a class's attendance for one day."""
    if not await crud_class_division.get(db, body.class_division_id):
        raise HTTPException(404, "Class division not found")
    descriptor = ResourceDescriptor(
        type=ResourceType.attendance,
        class_division_id=body.class_division_id,
        owner_id=identity.user_id,
    )
    (await policy.decide(identity, descriptor, Operation.create)).enforce()

    student_ids = [e.student_id for e in body.entries]
    if len(set(student_ids)) != len(student_ids):
        raise HTTPException(422, "Each student may appear only once")
    enrolled = {
        e.student_id
        for e in await crud_enrollment.get_ongoing_for_students(db, student_ids)
        if e.class_division_id == body.class_division_id
    }
    missing = sorted(set(student_ids) - enrolled)
    if missing:
        raise HTTPException(422, f"Students not enrolled in this class: {missing}")

    records = []
    for entry in body.entries:
        existing = await crud_attendance.get_for_student_on(
            db, entry.student_id, body.attendance_date
        )
        if existing:
            record = await crud_attendance.update(
                db,
                db_obj=existing,
                obj_in={
                    "status": entry.status,
                    "remarks": entry.remarks,
                    "marked_by": identity.user_id,
                    "class_division_id": body.class_division_id,
                },
            )
        else:
            record = await crud_attendance.create(
                db,
                obj_in=entry,
                class_division_id=body.class_division_id,
                attendance_date=body.attendance_date,
                marked_by=identity.user_id,
            )
        records.append(record)
    return records


@router.get("", response_model=Page[AttendanceResponse])
async def list_attendance(
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
    paging: Annotated[PageParams, Depends(get_page)],
    class_division_id: Optional[int] = None,
    student_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    status: Optional[AttendanceStatus] = None,
):
    decision = (
        await policy.decide(identity, ResourceDescriptor(ResourceType.attendance), Operation.list)
    ).enforce()
    filters = []
    if class_division_id is not None:
        filters.append(AttendanceRecord.class_division_id == class_division_id)
    if student_id is not None:
        filters.append(AttendanceRecord.student_id == student_id)
    if start_date is not None:
        filters.append(AttendanceRecord.attendance_date >= start_date)
    if end_date is not None:
        filters.append(AttendanceRecord.attendance_date <= end_date)
    if status is not None:
        filters.append(AttendanceRecord.status == status)
    rows, total = await crud_attendance.list_scoped(
        db, decision.scope, filters=filters, skip=paging.skip, limit=paging.limit
    )
    return paging.wrap(rows, total)


@router.patch("/{record_id}", response_model=AttendanceResponse)
async def update_attendance(
    record_id: int,
    body: AttendanceUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    identity: Annotated[IdentityContext, Depends(get_identity)],
    policy: Annotated[AccessPolicy, Depends(get_policy)],
):
    record = await crud_attendance.get(db, record_id)
    if not record:
        raise NotFoundError()
    (await policy.decide(identity, _descriptor(record), Operation.update)).enforce()
    return await crud_attendance.update(db, db_obj=record, obj_in=body)
