import pytest

from portal.models import Announcement, AttendanceRecord, Result, SchoolEvent, Student, User
from portal.models.user import Role
from portal.store import STORAGE_KEY, Action, ActionType, AppState, Store, reduce


def _student(sid, roll):
    return Student(id=sid, roll_number=roll, full_name=f"Student {roll}", class_name="Class 5")


def _announcement(aid, date):
    return Announcement(id=aid, title=aid, date=date)


def test_reduce_returns_new_state():
    state = AppState()
    new_state = reduce(state, Action(ActionType.ADD_STUDENT, _student("s1", "101")))
    assert state.students == []
    assert [s.id for s in new_state.students] == ["s1"]


def test_add_appends_students_but_prepends_announcements_and_events():
    state = AppState(students=[_student("s1", "101")], announcements=[_announcement("a1", "2024-01-01")])
    state = reduce(state, Action(ActionType.ADD_STUDENT, _student("s2", "102")))
    state = reduce(state, Action(ActionType.ADD_ANNOUNCEMENT, _announcement("a2", "2024-02-01")))
    state = reduce(state, Action(ActionType.ADD_EVENT, SchoolEvent(id="e1", title="Fair")))
    state = reduce(state, Action(ActionType.ADD_EVENT, SchoolEvent(id="e2", title="Meet")))
    assert [s.id for s in state.students] == ["s1", "s2"]
    assert [a.id for a in state.announcements] == ["a2", "a1"]
    assert [e.id for e in state.events] == ["e2", "e1"]


def test_update_replaces_matching_record_only():
    state = AppState(students=[_student("s1", "101"), _student("s2", "102")])
    renamed = _student("s2", "102").model_copy(update={"full_name": "Renamed"})
    state = reduce(state, Action(ActionType.UPDATE_STUDENT, renamed))
    assert [s.full_name for s in state.students] == ["Student 101", "Renamed"]

    unchanged = reduce(state, Action(ActionType.UPDATE_STUDENT, _student("missing", "999")))
    assert unchanged.students == state.students


def test_delete_unknown_id_is_a_no_op():
    state = AppState(students=[_student("s1", "101")])
    assert reduce(state, Action(ActionType.DELETE_STUDENT, "nope")).students == state.students
    assert reduce(state, Action(ActionType.DELETE_STUDENT, "s1")).students == []


def test_save_results_replaces_same_student_and_exam():
    state = AppState(
        results=[
            Result(id="r1", student_id="s1", exam_id="e1", marks_obtained=40),
            Result(id="r2", student_id="s2", exam_id="e1", marks_obtained=55),
        ]
    )
    incoming = [
        Result(id="r1", student_id="s1", exam_id="e1", marks_obtained=48),
        Result(id="r3", student_id="s1", exam_id="e2", marks_obtained=70),
    ]
    state = reduce(state, Action(ActionType.SAVE_RESULTS, incoming))
    assert [(r.student_id, r.exam_id, r.marks_obtained) for r in state.results] == [
        ("s2", "e1", 55),
        ("s1", "e1", 48),
        ("s1", "e2", 70),
    ]


def test_save_attendance_overwrites_one_date():
    state = AppState(attendance={"2024-03-01": [AttendanceRecord(student_id="s1")]})
    records = [AttendanceRecord(student_id="s1", status="Absent"), AttendanceRecord(student_id="s2")]
    state = reduce(state, Action(ActionType.SAVE_ATTENDANCE, {"date": "2024-03-01", "records": records}))
    state = reduce(state, Action(ActionType.SAVE_ATTENDANCE, {"date": "2024-03-02", "records": []}))
    assert [r.status for r in state.attendance["2024-03-01"]] == ["Absent", "Present"]
    assert state.attendance["2024-03-02"] == []


def test_only_initial_data_marks_the_store_ready():
    state = reduce(AppState(), Action(ActionType.ADD_STUDENT, _student("s1", "101")))
    assert state.app_ready is False
    state = reduce(state, Action(ActionType.SET_INITIAL_DATA, {"students": [], "unknown": [1]}))
    assert state.app_ready is True
    assert state.students == []
    assert not hasattr(state, "unknown")


def test_login_and_logout_touch_only_the_user():
    user = User(id="u1", name="Principal", role=Role.ADMIN, username="principal")
    state = AppState(students=[_student("s1", "101")])
    logged_in = reduce(state, Action(ActionType.LOGIN, user))
    assert logged_in.user == user
    assert logged_in.students == state.students
    assert reduce(logged_in, Action(ActionType.LOGOUT)).user is None


def test_unsupported_action_raises():
    with pytest.raises(ValueError):
        reduce(AppState(), Action("NOT_AN_ACTION"))


def test_login_is_persisted_and_restored(storage):
    user = User(id="u1", name="Asha", role=Role.TEACHER, username="asha")
    Store(storage).dispatch(Action(ActionType.LOGIN, user))
    assert storage.get_item(STORAGE_KEY)["user"]["username"] == "asha"

    restored = Store(storage)
    assert restored.restore_user() == user
    assert restored.state.user == user

    restored.dispatch(Action(ActionType.LOGOUT))
    assert storage.get_item(STORAGE_KEY) is None
    assert Store(storage).restore_user() is None


def test_unreadable_persisted_user_is_discarded(storage):
    storage.set_item(STORAGE_KEY, {"user": {"id": "u1"}})
    store = Store(storage)
    assert store.restore_user() is None
    assert store.state.user is None
    assert storage.get_item(STORAGE_KEY) is None


def test_subscribers_are_notified_until_they_unsubscribe(store):
    seen = []
    unsubscribe = store.subscribe(lambda state, action: seen.append(action.type))
    store.dispatch(Action(ActionType.DELETE_STUDENT, "x"))
    unsubscribe()
    store.dispatch(Action(ActionType.DELETE_STUDENT, "y"))
    assert seen == [ActionType.DELETE_STUDENT]
