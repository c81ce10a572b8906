import pytest
from conftest import add_login, make_remote, run

from portal.config import settings
from portal.errors import InvalidCredentialsError
from portal.models import StudentCreate, TeacherCreate
from portal.models.user import Role
from portal.services.auth import login_user, logout_user, resolve_login_email
from portal.services.students import add_student
from portal.services.teachers import add_teacher
from portal.store import Store


@pytest.fixture
def bound():
    remote = make_remote()
    store = Store()
    store.bind_auth(remote)
    return remote, store


def test_admin_alias_resolves_to_the_configured_email():
    remote = make_remote()
    assert run(resolve_login_email(remote, settings.admin_username)) == settings.admin_email
    assert remote.db.calls == []


def test_admin_login_dispatches_admin_user(bound):
    remote, store = bound
    user_id = add_login(
        remote,
        email=settings.admin_email,
        password="principal-pass",
        username=settings.admin_username,
        full_name="Principal",
        role="admin",
    )
    session = run(login_user(remote, settings.admin_username, "principal-pass"))
    assert session.user_id == user_id
    assert store.state.user.role == Role.ADMIN
    assert store.state.user.name == "Principal"
    assert store.state.user.permissions is None


def test_teacher_login_by_username_carries_permissions(bound):
    remote, store = bound
    teacher = run(
        add_teacher(
            remote,
            TeacherCreate(
                employee_id="EMP-1", full_name="Asha Rao", username="asha", email="asha@mmps.edu.in", password="pw1"
            ),
        )
    )
    run(login_user(remote, "asha", "pw1"))
    assert remote.auth.sign_in_calls == ["asha@mmps.edu.in"]
    assert store.state.user.id == teacher.user_id
    assert store.state.user.role == Role.TEACHER
    assert store.state.user.permissions.manage_attendance is True


def test_student_login_by_roll_number(bound):
    remote, store = bound
    run(add_student(remote, StudentCreate(roll_number="501", full_name="Ravi", email="ravi@mmps.in", password="pw")))
    run(login_user(remote, " 501 ", "pw"))
    assert store.state.user.role == Role.STUDENT
    assert store.state.user.username == "501"


def test_unknown_username_never_reaches_the_auth_service(bound):
    remote, store = bound
    with pytest.raises(InvalidCredentialsError):
        run(login_user(remote, "ghost", "whatever"))
    assert remote.auth.sign_in_calls == []
    assert store.state.user is None


def test_wrong_password_is_reported_as_invalid_credentials(bound):
    remote, store = bound
    run(add_student(remote, StudentCreate(roll_number="501", full_name="Ravi", email="ravi@mmps.in", password="pw")))
    with pytest.raises(InvalidCredentialsError, match="Invalid username or password."):
        run(login_user(remote, "501", "nope"))
    assert store.state.user is None


def test_missing_profile_leaves_store_logged_out(bound):
    remote, store = bound
    remote.admin.identities.by_id["u-x"] = {"id": "u-x", "email": settings.admin_email, "password": "pw"}
    run(login_user(remote, settings.admin_username, "pw"))
    assert store.state.user is None


def test_logout_clears_user(bound):
    remote, store = bound
    add_login(remote, email=settings.admin_email, password="pw", username="principal", full_name="P", role="admin")
    run(login_user(remote, settings.admin_username, "pw"))
    run(logout_user(remote))
    assert store.state.user is None


def test_unbound_store_ignores_auth_events(bound):
    remote, store = bound
    store.unbind_auth()
    add_login(remote, email=settings.admin_email, password="pw", username="principal", full_name="P", role="admin")
    run(login_user(remote, settings.admin_username, "pw"))
    assert store.state.user is None


def test_unreadable_profile_leaves_store_logged_out(bound):
    remote, store = bound
    add_login(remote, email=settings.admin_email, password="pw", username="principal", full_name="P", role="janitor")
    session = run(login_user(remote, settings.admin_username, "pw"))
    assert session.user_id
    assert store.state.user is None
