import pytest
from conftest import make_remote, run

from portal.errors import AuthIdentityError, TransportError, ValidationError
from portal.models import StudentCreate, StudentUpdate, TeacherCreate
from portal.models.user import Role
from portal.services.provisioning import StepStatus, provision_login
from portal.services.students import add_student, delete_student, update_student
from portal.services.teachers import add_teacher


def _teacher(**overrides):
    data = {
        "employeeId": "EMP-7",
        "fullName": "Asha Rao",
        "subject": "Mathematics",
        "email": "asha@mmps.edu.in",
        "password": "secret1",
        "username": "asha",
    }
    data.update(overrides)
    return TeacherCreate.model_validate(data)


def test_teacher_creation_links_identity_record_and_profile():
    remote = make_remote()
    teacher = run(add_teacher(remote, _teacher()))

    assert teacher.user_id == remote.admin.created[0]
    assert teacher.permissions.manage_exams is True
    assert teacher.permissions.manage_teachers is False
    row = remote.db.tables["teachers"][0]
    assert row["can_create_exams"] is True
    assert "password" not in row
    assert remote.db.tables["profiles"] == [
        {"id": teacher.user_id, "username": "asha", "full_name": "Asha Rao", "role": "teacher"}
    ]


def test_failed_record_insert_deletes_the_identity_once():
    remote = make_remote()
    remote.db.fail[("insert", "teachers")] = TransportError("insert rejected")

    with pytest.raises(TransportError, match="insert rejected"):
        run(add_teacher(remote, _teacher()))

    assert len(remote.admin.created) == 1
    assert remote.admin.deleted == remote.admin.created
    assert remote.admin.identities.by_id == {}
    assert remote.db.tables["profiles"] == []


def test_failed_compensation_still_raises_the_insert_error():
    remote = make_remote()
    remote.db.fail[("insert", "students")] = TransportError("duplicate roll number", code="conflict")
    remote.admin.fail_delete = AuthIdentityError("admin channel down")

    with pytest.raises(TransportError, match="duplicate roll number"):
        run(add_student(remote, StudentCreate(roll_number="101", full_name="Ravi", email="r@mmps.in", password="pw")))
    assert len(remote.admin.deleted) == 1


def test_failed_profile_insert_keeps_the_record():
    remote = make_remote()
    remote.db.fail[("insert", "profiles")] = TransportError("profiles locked")

    result = run(
        provision_login(
            remote,
            email="x@mmps.in",
            password="pw",
            table="students",
            build_row=lambda user_id: {"roll_number": "7", "full_name": "X", "user_id": user_id},
            username="7",
            full_name="X",
            role=Role.STUDENT,
        )
    )
    assert result.record["user_id"] == result.identity.id
    assert [(o.step, o.status) for o in result.outcomes] == [
        ("create_identity", StepStatus.DONE),
        ("insert_record", StepStatus.DONE),
        ("insert_profile", StepStatus.FAILED),
    ]
    assert remote.admin.deleted == []


@pytest.mark.parametrize("email,password", [(None, "pw"), ("r@mmps.in", None), ("", "")])
def test_missing_login_details_fail_before_any_call(email, password):
    remote = make_remote()
    with pytest.raises(ValidationError):
        run(add_student(remote, StudentCreate(roll_number="101", full_name="Ravi", email=email, password=password)))
    assert remote.admin.created == []
    assert remote.db.calls == []


def test_student_update_changes_login_only_when_needed():
    remote = make_remote()
    student = run(add_student(remote, StudentCreate(roll_number="101", full_name="Ravi", email="r@mmps.in", password="pw")))

    run(update_student(remote, student, StudentUpdate(section="B", email="r@mmps.in")))
    assert remote.admin.updated == []

    updated = run(update_student(remote, student, StudentUpdate(roll_number="102", password="new")))
    assert remote.admin.updated == [(student.user_id, None, "new")]
    assert updated.roll_number == "102"
    assert remote.db.tables["profiles"][0]["username"] == "102"
    assert "password" not in remote.db.tables["students"][0]


def test_student_delete_removes_record_and_login():
    remote = make_remote()
    student = run(add_student(remote, StudentCreate(roll_number="101", full_name="Ravi", email="r@mmps.in", password="pw")))
    run(delete_student(remote, student))
    assert remote.db.tables["students"] == []
    assert remote.admin.deleted == [student.user_id]
    assert remote.db.tables["profiles"] == []
