from datetime import date
from typing import Any, Dict

from fastapi import APIRouter, HTTPException

from portal.api.deps import CurrentUser, StoreDep
from portal.models.user import Role
from portal.services.announcements import visible_announcements
from portal.services.records import summarize_attendance
from portal.store import student_for_user, teacher_for_user

router = APIRouter()


@router.get("/stats")
async def get_dashboard_stats(user: CurrentUser, store: StoreDep) -> Dict[str, Any]:
    """Overview for the signed-in user's dashboard; the shape depends on the role."""
    state = store.state
    today = date.today().isoformat()
    latest = visible_announcements(state.announcements, user.role)[:3]

    if user.role == Role.ADMIN:
        return {
            "role": user.role.value,
            "counts": {
                "students": len(state.students),
                "teachers": len(state.teachers),
                "announcements": len(state.announcements),
                "events": len(state.events),
                "routes": len(state.transport_routes),
                "exams": len(state.exams),
            },
            "attendance": {"date": today, **summarize_attendance(state.attendance.get(today, []))},
            "latest_announcements": [a.to_client() for a in latest],
        }

    if user.role == Role.TEACHER:
        teacher = teacher_for_user(state, user.id)
        if not teacher:
            raise HTTPException(status_code=404, detail="Teacher record not found")
        own_exams = [e for e in state.exams if e.subject == teacher.subject or e.created_by_teacher_id == teacher.id]
        upcoming = sorted((e for e in own_exams if e.date and e.date >= today), key=lambda e: e.date)
        return {
            "role": user.role.value,
            "teacher": teacher.to_client(),
            "counts": {"exams": len(own_exams), "upcoming_exams": len(upcoming)},
            "upcoming_exams": [e.to_client() for e in upcoming[:5]],
            "latest_announcements": [a.to_client() for a in latest],
        }

    student = student_for_user(state, user.id)
    if not student:
        raise HTTPException(status_code=404, detail="Student record not found")
    exam_ids = {e.id for e in state.exams if e.class_name == student.class_name}
    own_results = [r for r in state.results if r.student_id == student.id and r.exam_id in exam_ids]
    return {
        "role": user.role.value,
        "student": student.to_client(),
        "counts": {"exams": len(exam_ids), "results": len(own_results)},
        "latest_announcements": [a.to_client() for a in latest],
    }
