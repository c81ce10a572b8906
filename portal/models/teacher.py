"""Teacher records with login username and granted permissions."""
from typing import Optional

from pydantic import EmailStr, Field

from portal.models.base import ClientModel
from portal.models.student import RecordStatus
from portal.models.user import PermissionSet


class Teacher(ClientModel):
    id: str
    employee_id: str
    full_name: str
    subject: str = ""
    phone: str = ""
    email: Optional[str] = None
    qualification: str = ""
    experience: int = 0
    joining_date: Optional[str] = None
    username: str
    status: RecordStatus = "active"
    permissions: PermissionSet = Field(default_factory=PermissionSet)
    user_id: Optional[str] = None


class TeacherCreate(ClientModel):
    employee_id: str
    full_name: str
    subject: str = ""
    phone: str = ""
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    qualification: str = ""
    experience: int = 0
    joining_date: Optional[str] = None
    username: str
    status: RecordStatus = "active"
    # Newly created teachers may create exams and mark attendance by default.
    permissions: PermissionSet = Field(
        default_factory=lambda: PermissionSet(manage_exams=True, manage_attendance=True)
    )


class TeacherUpdate(ClientModel):
    employee_id: Optional[str] = None
    full_name: Optional[str] = None
    subject: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    qualification: Optional[str] = None
    experience: Optional[int] = None
    joining_date: Optional[str] = None
    username: Optional[str] = None
    status: Optional[RecordStatus] = None
    permissions: Optional[PermissionSet] = None
