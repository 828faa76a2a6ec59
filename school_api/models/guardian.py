import enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Enum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from school_api.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from school_api.models.student import Student
    from school_api.models.user import User


class GuardianRelation(str, enum.Enum):
    father = "father"
    mother = "mother"
    guardian = "guardian"


class AccessLevel(str, enum.Enum):
    full = "full"
    restricted = "restricted"
    view_only = "view_only"


class GuardianMapping(Base, TimestampMixin):
    __tablename__ = "parent_student_mappings"
    __table_args__ = (
        UniqueConstraint("parent_id", "student_id", name="uq_parent_student"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    parent_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )
    student_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("students_master.id"), nullable=False, index=True
    )
    relation: Mapped[GuardianRelation] = mapped_column(
        "relationship", Enum(GuardianRelation), nullable=False
    )
    is_primary_guardian: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    access_level: Mapped[AccessLevel] = mapped_column(
        Enum(AccessLevel), nullable=False, default=AccessLevel.full
    )
    # Equals student_id for the primary guardian, NULL otherwise; the unique index
    # rejects a second primary guardian even when two requests race.
    primary_student_id: Mapped[Optional[int]] = mapped_column(
        Integer, unique=True, nullable=True
    )

    # Relationships
    parent: Mapped["User"] = relationship("User", back_populates="guardianships")
    student: Mapped["Student"] = relationship("Student", back_populates="guardians")
