from school_api.schemas.user import UserCreate, UserUpdate, UserResponse
from school_api.schemas.class_division import (
    ClassDivisionCreate,
    ClassDivisionUpdate,
    ClassDivisionResponse,
    TeacherAssignmentCreate,
    TeacherAssignmentUpdate,
    TeacherAssignmentResponse,
)
from school_api.schemas.student import (
    StudentCreate,
    StudentUpdate,
    StudentResponse,
    EnrollmentCreate,
    EnrollmentUpdate,
    EnrollmentResponse,
)
from school_api.schemas.guardian import (
    GuardianMappingCreate,
    GuardianMappingUpdate,
    GuardianMappingResponse,
    GuardianLinkRequest,
    ChildResponse,
)
from school_api.schemas.homework import HomeworkCreate, HomeworkUpdate, HomeworkResponse
from school_api.schemas.activity import (
    ActivityCreate,
    ActivityUpdate,
    ActivityResponse,
    ParticipantCreate,
    ParticipantResponse,
    ConsentUpdate,
)
from school_api.schemas.alert import AlertCreate, AlertResponse, RejectRequest
from school_api.schemas.announcement import (
    AnnouncementCreate,
    AnnouncementUpdate,
    AnnouncementResponse,
    ApprovalRequest,
)
from school_api.schemas.calendar_event import (
    CalendarEventCreate,
    CalendarEventUpdate,
    CalendarEventResponse,
)
from school_api.schemas.chat_message import MessageCreate, MessageUpdate, MessageResponse
from school_api.schemas.attendance import (
    AttendanceEntry,
    AttendanceMarkRequest,
    AttendanceUpdate,
    AttendanceResponse,
)
from school_api.schemas.leave_request import (
    LeaveRequestCreate,
    LeaveRequestUpdate,
    LeaveReviewRequest,
    LeaveRequestResponse,
)
from school_api.schemas.birthday import BirthdayResponse
from school_api.schemas.notification import NotificationPayload, NotificationResponse
from school_api.schemas.common import Page
