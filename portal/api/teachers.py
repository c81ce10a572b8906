"""Teacher management: records, logins and permissions."""
from fastapi import APIRouter, HTTPException

from portal.api.deps import AdminOnly, CanManageTeachers, StoreDep, RemoteDep
from portal.models.teacher import Teacher, TeacherCreate, TeacherUpdate
from portal.models.user import Role
from portal.store import Action, ActionType
from portal.services.teachers import add_teacher, delete_teacher, update_teacher

router = APIRouter()


def _find_teacher(store, teacher_id: str) -> Teacher:
    for t in store.state.teachers:
        if t.id == teacher_id:
            return t
    raise HTTPException(status_code=404, detail="Teacher not found")


@router.get("/", response_model=list[Teacher])
async def list_teachers(user: CanManageTeachers, store: StoreDep, q: str | None = None):
    teachers = store.state.teachers
    if q and q.strip():
        search = q.strip().lower()
        teachers = [
            t for t in teachers
            if search in t.full_name.lower() or search in t.employee_id.lower() or search in t.subject.lower()
        ]
    return teachers


@router.post("/", response_model=Teacher, status_code=201)
async def create_teacher(data: TeacherCreate, user: CanManageTeachers, store: StoreDep, remote: RemoteDep):
    teacher = await add_teacher(remote, data)
    store.dispatch(Action(ActionType.ADD_TEACHER, teacher))
    return teacher


@router.patch("/{teacher_id}", response_model=Teacher)
async def edit_teacher(
    teacher_id: str, data: TeacherUpdate, user: CanManageTeachers, store: StoreDep, remote: RemoteDep
):
    teacher = _find_teacher(store, teacher_id)
    if data.permissions is not None and user.role != Role.ADMIN and not user.permissions.full_admin_access:
        raise HTTPException(status_code=403, detail="Only administrators can change permissions")
    updated = await update_teacher(remote, teacher, data)
    store.dispatch(Action(ActionType.UPDATE_TEACHER, updated))
    return updated


@router.delete("/{teacher_id}", status_code=204)
async def remove_teacher(teacher_id: str, user: AdminOnly, store: StoreDep, remote: RemoteDep):
    teacher = _find_teacher(store, teacher_id)
    await delete_teacher(remote, teacher)
    store.dispatch(Action(ActionType.DELETE_TEACHER, teacher.id))
