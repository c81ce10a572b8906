"""Announcements and school events."""
from typing import Literal, Optional

from portal.models.base import ClientModel
from portal.models.student import RecordStatus

AnnouncementCategory = Literal["General", "Academic", "Fees", "Event", "Holiday", "Urgent"]
AnnouncementPriority = Literal["Low", "Medium", "High", "Urgent"]
TargetAudience = Literal["All", "Parents", "Teachers", "Students"]


class Announcement(ClientModel):
    id: str
    title: str
    content: str = ""
    date: str
    category: AnnouncementCategory = "General"
    priority: AnnouncementPriority = "Medium"
    target_audience: TargetAudience = "All"


class AnnouncementCreate(ClientModel):
    title: str
    content: str = ""
    date: Optional[str] = None  # stamped with today's date when omitted
    category: AnnouncementCategory = "General"
    priority: AnnouncementPriority = "Medium"
    target_audience: TargetAudience = "All"


class AnnouncementUpdate(ClientModel):
    title: Optional[str] = None
    content: Optional[str] = None
    date: Optional[str] = None
    category: Optional[AnnouncementCategory] = None
    priority: Optional[AnnouncementPriority] = None
    target_audience: Optional[TargetAudience] = None


class SchoolEvent(ClientModel):
    """Event with the backend's single date-time split into date and HH:MM time."""

    id: str
    title: str
    description: str = ""
    category: str = "Academic"
    date: Optional[str] = None
    time: Optional[str] = None
    venue: str = ""
    status: RecordStatus = "active"


class SchoolEventCreate(ClientModel):
    title: str
    description: str = ""
    category: str = "Academic"
    date: Optional[str] = None
    time: Optional[str] = None
    venue: str = ""
    status: RecordStatus = "active"


class SchoolEventUpdate(ClientModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    venue: Optional[str] = None
    status: Optional[RecordStatus] = None
