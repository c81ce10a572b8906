"""Student management: records and student logins."""
from fastapi import APIRouter, HTTPException

from portal.api.deps import CanManageStudents, StoreDep, RemoteDep, TeacherOrAdmin
from portal.models.student import Student, StudentCreate, StudentUpdate
from portal.store import Action, ActionType
from portal.services.students import add_student, delete_student, update_student

router = APIRouter()


def _find_student(store, student_id: str) -> Student:
    for s in store.state.students:
        if s.id == student_id:
            return s
    raise HTTPException(status_code=404, detail="Student not found")


@router.get("/", response_model=list[Student])
async def list_students(
    user: TeacherOrAdmin,
    store: StoreDep,
    class_name: str | None = None,
    section: str | None = None,
    q: str | None = None,
):
    students = store.state.students
    if class_name:
        students = [s for s in students if s.class_name == class_name]
    if section:
        students = [s for s in students if s.section.lower() == section.lower()]
    if q and q.strip():
        search = q.strip().lower()
        students = [s for s in students if search in s.full_name.lower() or search in s.roll_number.lower()]
    return students


@router.post("/", response_model=Student, status_code=201)
async def create_student(data: StudentCreate, user: CanManageStudents, store: StoreDep, remote: RemoteDep):
    student = await add_student(remote, data)
    store.dispatch(Action(ActionType.ADD_STUDENT, student))
    return student


@router.get("/{student_id}", response_model=Student)
async def get_student(student_id: str, user: TeacherOrAdmin, store: StoreDep):
    return _find_student(store, student_id)


@router.patch("/{student_id}", response_model=Student)
async def edit_student(
    student_id: str, data: StudentUpdate, user: CanManageStudents, store: StoreDep, remote: RemoteDep
):
    student = _find_student(store, student_id)
    updated = await update_student(remote, student, data)
    store.dispatch(Action(ActionType.UPDATE_STUDENT, updated))
    return updated


@router.delete("/{student_id}", status_code=204)
async def remove_student(student_id: str, user: CanManageStudents, store: StoreDep, remote: RemoteDep):
    student = _find_student(store, student_id)
    await delete_student(remote, student)
    store.dispatch(Action(ActionType.DELETE_STUDENT, student.id))
