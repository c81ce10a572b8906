"""Daily attendance marking for a class."""
from datetime import date as date_type

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from portal.api.deps import CanManageAttendance, RemoteDep, StoreDep, TeacherOrAdmin
from portal.models.exam import AttendanceRecord
from portal.store import Action, ActionType
from portal.services.records import get_attendance, save_attendance, summarize_attendance

router = APIRouter()


class AttendanceSheet(BaseModel):
    date: str
    records: list[AttendanceRecord]
    summary: dict[str, int]


def _check_date(value: str) -> str:
    try:
        return date_type.fromisoformat(value).isoformat()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid date format (YYYY-MM-DD)")


@router.get("/{date}", response_model=AttendanceSheet)
async def read_attendance(
    date: str,
    user: TeacherOrAdmin,
    remote: RemoteDep,
    store: StoreDep,
    student_ids: list[str] = Query(default=[]),
    class_name: str | None = None,
):
    """Attendance for the given students, or for every student of `class_name`."""
    day = _check_date(date)
    if not student_ids and class_name:
        student_ids = [s.id for s in store.state.students if s.class_name == class_name]
    records = await get_attendance(remote, day, student_ids)
    return AttendanceSheet(date=day, records=records, summary=summarize_attendance(records))


@router.put("/{date}", response_model=AttendanceSheet)
async def mark_attendance(
    date: str, records: list[AttendanceRecord], user: CanManageAttendance, store: StoreDep, remote: RemoteDep
):
    day = _check_date(date)
    known = {s.id for s in store.state.students}
    unknown = [r.student_id for r in records if r.student_id not in known]
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown students: {', '.join(unknown)}")
    saved = await save_attendance(remote, day, records)
    store.dispatch(Action(ActionType.SAVE_ATTENDANCE, {"date": day, "records": saved}))
    return AttendanceSheet(date=day, records=saved, summary=summarize_attendance(saved))
