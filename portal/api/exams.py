"""Exam schedule: listing is scoped by role, management needs the exams permission."""
from fastapi import APIRouter, HTTPException

from portal.api.deps import CanManageExams, CurrentUser, RemoteDep, StoreDep
from portal.models.exam import Exam, ExamCreate, ExamUpdate
from portal.models.user import Role
from portal.store import Action, ActionType, student_for_user, teacher_for_user
from portal.services.exams import add_exam, delete_exam, update_exam

router = APIRouter()


def _ensure_exists(store, exam_id: str) -> None:
    if not any(e.id == exam_id for e in store.state.exams):
        raise HTTPException(status_code=404, detail="Exam not found")


@router.get("/", response_model=list[Exam])
async def list_exams(user: CurrentUser, store: StoreDep, class_name: str | None = None):
    exams = store.state.exams
    if user.role == Role.STUDENT:
        student = student_for_user(store.state, user.id)
        exams = [e for e in exams if student and e.class_name == student.class_name]
    elif class_name:
        exams = [e for e in exams if e.class_name == class_name]
    return sorted(exams, key=lambda e: e.date or "")


@router.post("/", response_model=Exam, status_code=201)
async def create_exam(data: ExamCreate, user: CanManageExams, store: StoreDep, remote: RemoteDep):
    if user.role == Role.TEACHER:
        teacher = teacher_for_user(store.state, user.id)
        if teacher:
            if not data.created_by_teacher_id:
                data.created_by_teacher_id = teacher.id
            if not data.subject:
                data.subject = teacher.subject
    exam = await add_exam(remote, data)
    store.dispatch(Action(ActionType.ADD_EXAM, exam))
    return exam


@router.patch("/{exam_id}", response_model=Exam)
async def edit_exam(exam_id: str, data: ExamUpdate, user: CanManageExams, store: StoreDep, remote: RemoteDep):
    _ensure_exists(store, exam_id)
    updated = await update_exam(remote, exam_id, data)
    store.dispatch(Action(ActionType.UPDATE_EXAM, updated))
    return updated


@router.delete("/{exam_id}", status_code=204)
async def remove_exam(exam_id: str, user: CanManageExams, store: StoreDep, remote: RemoteDep):
    _ensure_exists(store, exam_id)
    await delete_exam(remote, exam_id)
    store.dispatch(Action(ActionType.DELETE_EXAM, exam_id))
