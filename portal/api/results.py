"""Exam results: scoped listing, batch entry and report download."""
import io
from typing import Optional

import pandas as pd
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from portal.api.deps import CurrentUser, RemoteDep, StoreDep, TeacherOrAdmin, has_permission
from portal.models.exam import Exam, Result
from portal.models.student import Student
from portal.models.user import Role, User
from portal.store import Action, ActionType, AppState, student_for_user, teacher_for_user
from portal.services.records import save_results

router = APIRouter()


class ResultRow(BaseModel):
    result: Result
    student: Student
    exam: Exam
    percentage: float


def _visible_exam_ids(state: AppState, user: User) -> Optional[set[str]]:
    """Exam ids the user may see results for; None means all of them."""
    if has_permission(user, "view_all_results"):
        return None
    if user.role == Role.TEACHER:
        teacher = teacher_for_user(state, user.id)
        if not teacher:
            return set()
        return {e.id for e in state.exams if e.subject == teacher.subject or e.created_by_teacher_id == teacher.id}
    return {e.id for e in state.exams}


def _joined_results(
    state: AppState, user: User, exam_id: Optional[str], class_name: Optional[str]
) -> list[ResultRow]:
    students = {s.id: s for s in state.students}
    exams = {e.id: e for e in state.exams}
    allowed = _visible_exam_ids(state, user)
    own_student = student_for_user(state, user.id) if user.role == Role.STUDENT else None

    rows = []
    for result in state.results:
        if exam_id and result.exam_id != exam_id:
            continue
        if allowed is not None and result.exam_id not in allowed:
            continue
        student = students.get(result.student_id)
        exam = exams.get(result.exam_id)
        # results pointing at deleted students or exams are not shown
        if not student or not exam:
            continue
        if user.role == Role.STUDENT and (not own_student or student.id != own_student.id):
            continue
        if class_name and student.class_name != class_name:
            continue
        percentage = round(result.marks_obtained * 100 / exam.max_marks, 2)
        rows.append(ResultRow(result=result, student=student, exam=exam, percentage=percentage))
    return rows


@router.get("/", response_model=list[ResultRow])
async def list_results(
    user: CurrentUser, store: StoreDep, exam_id: str | None = None, class_name: str | None = None
):
    return _joined_results(store.state, user, exam_id, class_name)


@router.put("/", response_model=list[Result])
async def enter_results(results: list[Result], user: TeacherOrAdmin, store: StoreDep, remote: RemoteDep):
    """Save marks for a batch; existing marks for the same student and exam are replaced."""
    exams = {e.id: e for e in store.state.exams}
    allowed = _visible_exam_ids(store.state, user)
    for r in results:
        exam = exams.get(r.exam_id)
        if not exam:
            raise HTTPException(status_code=400, detail=f"Unknown exam {r.exam_id}")
        if allowed is not None and r.exam_id not in allowed:
            raise HTTPException(status_code=403, detail=f"Not allowed to enter results for {exam.name}")
        if r.marks_obtained > exam.max_marks:
            raise HTTPException(
                status_code=400,
                detail=f"Marks for student {r.student_id} exceed the maximum of {exam.max_marks}",
            )
    if not results:
        return []
    saved = await save_results(remote, results)
    store.dispatch(Action(ActionType.SAVE_RESULTS, saved))
    return saved


@router.get("/report")
async def download_results_report(
    user: TeacherOrAdmin,
    store: StoreDep,
    exam_id: str | None = None,
    class_name: str | None = None,
    format: str = Query("csv", enum=["csv", "excel"]),
):
    """Download results for an exam and/or class."""
    rows = _joined_results(store.state, user, exam_id, class_name)
    if not rows:
        raise HTTPException(status_code=404, detail="No results found for the given criteria")

    df = pd.DataFrame(
        [
            {
                "Roll Number": row.student.roll_number,
                "Student Name": row.student.full_name,
                "Class": row.student.class_name,
                "Section": row.student.section,
                "Exam": row.exam.name,
                "Subject": row.exam.subject,
                "Marks": row.result.marks_obtained,
                "Max Marks": row.exam.max_marks,
                "Percentage": row.percentage,
            }
            for row in rows
        ]
    ).sort_values(["Exam", "Class", "Roll Number"])

    suffix = "_".join(part for part in (exam_id, class_name) if part) or "all"
    suffix = suffix.replace(" ", "-")
    if format == "csv":
        stream = io.StringIO()
        df.to_csv(stream, index=False)
        return StreamingResponse(
            iter([stream.getvalue()]),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=results_{suffix}.csv"},
        )
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Results")
    output.seek(0)
    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename=results_{suffix}.xlsx"},
    )
