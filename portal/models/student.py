"""Student records: class assignment, guardian contact, optional login."""
from typing import Literal, Optional

from pydantic import Field

from portal.models.base import ClientModel

RecordStatus = Literal["active", "inactive"]


class Student(ClientModel):
    id: str
    roll_number: str  # also the student's login username
    full_name: str
    class_name: str = Field("", alias="class")
    section: str = ""
    parent_name: str = ""
    parent_phone: str = ""
    address: str = ""
    date_of_birth: Optional[str] = None
    admission_date: Optional[str] = None
    status: RecordStatus = "active"
    email: Optional[str] = None
    user_id: Optional[str] = None


class StudentCreate(ClientModel):
    roll_number: str
    full_name: str
    class_name: str = Field("", alias="class")
    section: str = ""
    parent_name: str = ""
    parent_phone: str = ""
    address: str = ""
    date_of_birth: Optional[str] = None
    admission_date: Optional[str] = None
    status: RecordStatus = "active"
    email: Optional[str] = None
    password: Optional[str] = None


class StudentUpdate(ClientModel):
    """All fields optional; password/email changes go to the login identity."""
    roll_number: Optional[str] = None
    full_name: Optional[str] = None
    class_name: Optional[str] = Field(None, alias="class")
    section: Optional[str] = None
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    address: Optional[str] = None
    date_of_birth: Optional[str] = None
    admission_date: Optional[str] = None
    status: Optional[RecordStatus] = None
    email: Optional[str] = None
    password: Optional[str] = None
