from school_api.crud.users import crud_user
from school_api.crud.class_divisions import crud_class_division
from school_api.crud.assignments import crud_assignment
from school_api.crud.students import crud_student, crud_enrollment
from school_api.crud.guardians import crud_guardian
from school_api.crud.homework import crud_homework
from school_api.crud.activities import crud_activity, crud_participant
from school_api.crud.alerts import crud_alert
from school_api.crud.announcements import crud_announcement
from school_api.crud.calendar_events import crud_calendar_event
from school_api.crud.chat_messages import crud_chat_message
from school_api.crud.attendance import crud_attendance
from school_api.crud.leave_requests import crud_leave_request
from school_api.crud.notifications import crud_notification

__all__ = [
    "crud_user",
    "crud_class_division",
    "crud_assignment",
    "crud_student",
    "crud_enrollment",
    "crud_guardian",
    "crud_homework",
    "crud_activity",
    "crud_participant",
    "crud_alert",
    "crud_announcement",
    "crud_calendar_event",
    "crud_chat_message",
    "crud_attendance",
    "crud_leave_request",
    "crud_notification",
]
