"""Exams, per-student results and daily attendance."""
from typing import Literal, Optional

from pydantic import Field

from portal.models.base import ClientModel

ExamType = Literal[
    "Weekly Test",
    "Monthly Test",
    "Unit Test",
    "Quarterly Exam",
    "Half Yearly Exam",
    "Annual Exam",
]
AttendanceStatus = Literal["Present", "Absent", "Late", "Excused"]


class Exam(ClientModel):
    id: str
    name: str
    subject: str = ""
    class_name: str = Field("", alias="class")
    section: str = ""
    date: Optional[str] = None
    max_marks: int = Field(100, gt=0)
    type: ExamType = "Weekly Test"
    created_by_teacher_id: Optional[str] = None


class ExamCreate(ClientModel):
    name: str
    subject: str = ""
    class_name: str = Field(..., alias="class")
    section: str = ""
    date: Optional[str] = None
    max_marks: int = Field(100, gt=0)
    type: ExamType = "Weekly Test"
    created_by_teacher_id: Optional[str] = None


class ExamUpdate(ClientModel):
    name: Optional[str] = None
    subject: Optional[str] = None
    class_name: Optional[str] = Field(None, alias="class")
    section: Optional[str] = None
    date: Optional[str] = None
    max_marks: Optional[int] = Field(None, gt=0)
    type: Optional[ExamType] = None


class Result(ClientModel):
    id: Optional[str] = None
    student_id: str
    exam_id: str
    marks_obtained: float = Field(..., ge=0)


class AttendanceRecord(ClientModel):
    student_id: str
    status: AttendanceStatus = "Present"
    remarks: str = ""
