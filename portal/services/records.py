"""Daily attendance and exam results: batch upserts on natural keys."""
from __future__ import annotations

from portal.models.exam import AttendanceRecord, Result
from portal.remote.base import RemoteClient
from portal.services.mapping import to_backend_shape, to_client_shape

ATTENDANCE_TABLE = "attendance"
RESULTS_TABLE = "results"


async def get_attendance(client: RemoteClient, date: str, student_ids: list[str]) -> list[AttendanceRecord]:
    if not student_ids:
        return []
    rows = await client.db.select(
        ATTENDANCE_TABLE,
        eq={"date": date},
        in_=("student_id", student_ids),
        columns=["student_id", "status", "remarks"],
    )
    return [AttendanceRecord.model_validate(to_client_shape(row)) for row in rows]


async def save_attendance(client: RemoteClient, date: str, records: list[AttendanceRecord]) -> list[AttendanceRecord]:
    """Upsert one record per (student, date)."""
    payload = [to_backend_shape({**r.to_client(), "date": date}) for r in records]
    rows = await client.db.upsert(ATTENDANCE_TABLE, payload, on_conflict=("student_id", "date"))
    return [AttendanceRecord.model_validate(to_client_shape(row)) for row in rows]


async def list_results(client: RemoteClient) -> list[Result]:
    rows = await client.db.select(RESULTS_TABLE)
    return [Result.model_validate(to_client_shape(row)) for row in rows]


async def save_results(client: RemoteClient, results: list[Result]) -> list[Result]:
    """Upsert one result per (student, exam); returns the persisted rows."""
    payload = [to_backend_shape(r.to_client(exclude={"id"})) for r in results]
    rows = await client.db.upsert(RESULTS_TABLE, payload, on_conflict=("student_id", "exam_id"))
    return [Result.model_validate(to_client_shape(row)) for row in rows]


def summarize_attendance(records: list[AttendanceRecord]) -> dict[str, int]:
    counts = {"present": 0, "absent": 0, "late": 0, "excused": 0}
    for record in records:
        counts[record.status.lower()] += 1
    counts["total"] = len(records)
    return counts
