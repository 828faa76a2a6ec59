"""Admin endpoints: users, class divisions, teacher assignments, students, enrollments."""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from school_api.api.v1.deps import require_staff
from school_api.auth.identity import IdentityContext
from school_api.crud import (
    crud_assignment,
    crud_class_division,
    crud_enrollment,
    crud_student,
    crud_user,
)
from school_api.database import get_db
from school_api.errors import ConflictError
from school_api.models.user import UserRole
from school_api.schemas.class_division import (
    ClassDivisionCreate,
    ClassDivisionResponse,
    ClassDivisionUpdate,
    ResolvedAssignmentResponse,
    TeacherAssignmentCreate,
    TeacherAssignmentResponse,
    TeacherAssignmentUpdate,
)
from school_api.schemas.student import (
    EnrollmentCreate,
    EnrollmentResponse,
    EnrollmentUpdate,
    StudentCreate,
    StudentResponse,
    StudentUpdate,
)
from school_api.schemas.user import UserCreate, UserResponse, UserUpdate
from school_api.services import assignment_resolver

router = APIRouter(prefix="/admin", tags=["admin"])


async def _require_teacher(db: AsyncSession, teacher_id: Optional[int]) -> None:
    if teacher_id is None:
        return
    teacher = await crud_user.get(db, teacher_id)
    if not teacher or teacher.role != UserRole.teacher:
        raise HTTPException(404, "Teacher not found")


# ── Users ───────────────────────────────────────────────────────────────────


@router.get("/users", response_model=list[UserResponse])
async def list_users(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
    role: Optional[UserRole] = None,
):
    if role is not None:
        return await crud_user.get_by_role(db, role)
    return await crud_user.get_multi(db)


@router.post("/users", response_model=UserResponse, status_code=201)
async def create_user(
    body: UserCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    if await crud_user.get_by_phone(db, body.phone_number):
        raise ConflictError("Phone number already registered")
    return await crud_user.create(db, obj_in=body)


@router.patch("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    user = await crud_user.get(db, user_id)
    if not user:
        raise HTTPException(404, "User not found")
    return await crud_user.update(db, db_obj=user, obj_in=body)


@router.delete("/users/{user_id}")
async def deactivate_user(
    user_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    """Users are referenced everywhere, so they are deactivated rather than deleted."""
    user = await crud_user.get(db, user_id)
    if not user:
        raise HTTPException(404, "User not found")
    await crud_user.update(db, db_obj=user, obj_in={"is_active": False})
    return {"success": True}


# ── Class divisions and assignments ─────────────────────────────────────────


@router.get("/class-divisions", response_model=list[ClassDivisionResponse])
async def list_class_divisions(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    return await crud_class_division.get_multi(db)


@router.post("/class-divisions", response_model=ClassDivisionResponse, status_code=201)
async def create_class_division(
    body: ClassDivisionCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    await _require_teacher(db, body.teacher_id)
    return await crud_class_division.create(db, obj_in=body)


@router.patch("/class-divisions/{class_division_id}", response_model=ClassDivisionResponse)
async def update_class_division(
    class_division_id: int,
    body: ClassDivisionUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    cd = await crud_class_division.get(db, class_division_id)
    if not cd:
        raise HTTPException(404, "Class division not found")
    await _require_teacher(db, body.teacher_id)
    return await crud_class_division.update(db, db_obj=cd, obj_in=body)


@router.get(
    "/class-divisions/{class_division_id}/assignments",
    response_model=list[TeacherAssignmentResponse],
)
async def list_class_assignments(
    class_division_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    return await crud_assignment.get_active_for_class(db, class_division_id)


@router.post("/assignments", response_model=TeacherAssignmentResponse, status_code=201)
async def create_assignment(
    body: TeacherAssignmentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    await _require_teacher(db, body.teacher_id)
    if not await crud_class_division.get(db, body.class_division_id):
        raise HTTPException(404, "Class division not found")
    return await crud_assignment.create(db, obj_in=body)


@router.patch("/assignments/{assignment_id}", response_model=TeacherAssignmentResponse)
async def update_assignment(
    assignment_id: int,
    body: TeacherAssignmentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    """Set ``is_active=false`` to revoke an assignment while keeping its history."""
    assignment = await crud_assignment.get(db, assignment_id)
    if not assignment:
        raise HTTPException(404, "Assignment not found")
    return await crud_assignment.update(db, db_obj=assignment, obj_in=body)


@router.get(
    "/teachers/{teacher_id}/assignments", response_model=list[ResolvedAssignmentResponse]
)
async def resolved_assignments(
    teacher_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    """A teacher's effective classes, merged from both assignment sources."""
    await _require_teacher(db, teacher_id)
    assignments = await assignment_resolver.resolve_for_teacher(db, teacher_id)
    return sorted(
        (
            ResolvedAssignmentResponse(
                class_division_id=a.class_division_id,
                assignment_type=a.assignment_type,
                subject=a.subject,
                is_primary=a.is_primary,
                source=a.source,
            )
            for a in assignments
        ),
        key=lambda a: (a.class_division_id, a.assignment_type.value, a.subject or ""),
    )


# ── Students and enrollments ────────────────────────────────────────────────


@router.get("/students", response_model=list[StudentResponse])
async def list_students(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    return await crud_student.get_multi(db)


@router.post("/students", response_model=StudentResponse, status_code=201)
async def create_student(
    body: StudentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    return await crud_student.create(db, obj_in=body)


@router.patch("/students/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: int,
    body: StudentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    student = await crud_student.get(db, student_id)
    if not student:
        raise HTTPException(404, "Student not found")
    return await crud_student.update(db, db_obj=student, obj_in=body)


@router.post("/enrollments", response_model=EnrollmentResponse, status_code=201)
async def create_enrollment(
    body: EnrollmentCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    """A second ongoing enrollment for the same student is rejected with 409."""
    if not await crud_student.get(db, body.student_id):
        raise HTTPException(404, "Student not found")
    if not await crud_class_division.get(db, body.class_division_id):
        raise HTTPException(404, "Class division not found")
    return await crud_enrollment.create(db, obj_in=body)


@router.patch("/enrollments/{enrollment_id}", response_model=EnrollmentResponse)
async def update_enrollment(
    enrollment_id: int,
    body: EnrollmentUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[IdentityContext, Depends(require_staff)],
):
    enrollment = await crud_enrollment.get(db, enrollment_id)
    if not enrollment:
        raise HTTPException(404, "Enrollment not found")
    return await crud_enrollment.update(db, db_obj=enrollment, obj_in=body)
