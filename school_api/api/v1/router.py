"""Aggregates all v1 routers."""
from fastapi import APIRouter
from school_api.api.v1.admin import router as admin_router
from school_api.api.v1.homework import router as homework_router
from school_api.api.v1.activities import router as activities_router
from school_api.api.v1.alerts import router as alerts_router
from school_api.api.v1.announcements import router as announcements_router
from school_api.api.v1.calendar import router as calendar_router
from school_api.api.v1.chat import router as chat_router
from school_api.api.v1.attendance import router as attendance_router
from school_api.api.v1.leave_requests import router as leave_requests_router
from school_api.api.v1.birthdays import router as birthdays_router
from school_api.api.v1.guardians import router as guardians_router
from school_api.api.v1.notifications import router as notifications_router

router = APIRouter()
router.include_router(admin_router)
router.include_router(homework_router)
router.include_router(activities_router)
router.include_router(alerts_router)
router.include_router(announcements_router)
router.include_router(calendar_router)
router.include_router(chat_router)
router.include_router(attendance_router)
router.include_router(leave_requests_router)
router.include_router(birthdays_router)
router.include_router(guardians_router)
router.include_router(notifications_router)
