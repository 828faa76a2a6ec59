from school_api.models.base import Base, TimestampMixin
from school_api.models.enums import ApprovalStatus, VisibilityScope, PUBLISHED_STATUSES
from school_api.models.user import User, UserRole
from school_api.models.class_division import ClassDivision
from school_api.models.teacher_assignment import TeacherAssignment, AssignmentType
from school_api.models.student import Student, StudentEnrollment, EnrollmentStatus
from school_api.models.guardian import GuardianMapping, GuardianRelation, AccessLevel
from school_api.models.homework import Homework
from school_api.models.activity import (
    Activity,
    ActivityParticipant,
    ActivityStatus,
    ActivityType,
)
from school_api.models.alert import Alert, AlertType
from school_api.models.announcement import Announcement, AnnouncementType, Priority
from school_api.models.calendar_event import CalendarEvent, EventCategory
from school_api.models.chat_message import ChatMessage
from school_api.models.attendance import AttendanceRecord, AttendanceStatus
from school_api.models.leave_request import LeaveRequest, LeaveStatus
from school_api.models.notification import (
    Notification,
    NotificationStatus,
    NotificationType,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "ApprovalStatus",
    "VisibilityScope",
    "PUBLISHED_STATUSES",
    "User",
    "UserRole",
    "ClassDivision",
    "TeacherAssignment",
    "AssignmentType",
    "Student",
    "StudentEnrollment",
    "EnrollmentStatus",
    "GuardianMapping",
    "GuardianRelation",
    "AccessLevel",
    "Homework",
    "Activity",
    "ActivityParticipant",
    "ActivityStatus",
    "ActivityType",
    "Alert",
    "AlertType",
    "Announcement",
    "AnnouncementType",
    "Priority",
    "CalendarEvent",
    "EventCategory",
    "ChatMessage",
    "AttendanceRecord",
    "AttendanceStatus",
    "LeaveRequest",
    "LeaveStatus",
    "Notification",
    "NotificationStatus",
    "NotificationType",
]
