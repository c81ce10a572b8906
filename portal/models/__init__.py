"""Client-side record models."""
from portal.models.user import User, Role, PermissionSet, Profile, Session, AuthIdentity
from portal.models.student import Student, StudentCreate, StudentUpdate
from portal.models.teacher import Teacher, TeacherCreate, TeacherUpdate
from portal.models.notice import (
    Announcement,
    AnnouncementCreate,
    AnnouncementUpdate,
    SchoolEvent,
    SchoolEventCreate,
    SchoolEventUpdate,
)
from portal.models.transport import BusStop, TransportRoute, TransportRouteCreate, TransportRouteUpdate
from portal.models.exam import Exam, ExamCreate, ExamUpdate, Result, AttendanceRecord

__all__ = [
    "User",
    "Role",
    "PermissionSet",
    "Profile",
    "Session",
    "AuthIdentity",
    "Student",
    "StudentCreate",
    "StudentUpdate",
    "Teacher",
    "TeacherCreate",
    "TeacherUpdate",
    "Announcement",
    "AnnouncementCreate",
    "AnnouncementUpdate",
    "SchoolEvent",
    "SchoolEventCreate",
    "SchoolEventUpdate",
    "BusStop",
    "TransportRoute",
    "TransportRouteCreate",
    "TransportRouteUpdate",
    "Exam",
    "ExamCreate",
    "ExamUpdate",
    "Result",
    "AttendanceRecord",
]
