import pytest

from portal.services.mapping import (
    TEACHER_PERMISSION_COLUMNS,
    UNDEFINED,
    camel_to_snake,
    combine_event_datetime,
    event_from_row,
    event_to_row,
    route_from_row,
    snake_to_camel,
    split_event_datetime,
    stops_to_rows,
    teacher_from_row,
    teacher_to_row,
    to_backend_shape,
    to_client_shape,
)


def test_key_conversion():
    assert camel_to_snake("rollNumber") == "roll_number"
    assert camel_to_snake("createdByTeacherId") == "created_by_teacher_id"
    assert snake_to_camel("parent_phone") == "parentPhone"
    assert snake_to_camel("class") == "class"


def test_shapes_round_trip_nested_records():
    client = {"routeName": "North", "stops": [{"stopName": "Gate", "stopTime": "07:30"}], "meta": None}
    backend = to_backend_shape(client)
    assert backend == {"route_name": "North", "stops": [{"stop_name": "Gate", "stop_time": "07:30"}], "meta": None}
    assert to_client_shape(backend) == client


def test_undefined_values_are_dropped_but_none_is_kept():
    assert to_backend_shape({"fullName": "A", "email": UNDEFINED, "phone": None}) == {
        "full_name": "A",
        "phone": None,
    }
    assert not UNDEFINED


def test_teacher_permissions_are_always_complete():
    row = {"id": "t1", "full_name": "Asha", "can_create_exams": True, "username": "asha"}
    client = teacher_from_row(row)
    assert set(client["permissions"]) == {snake_to_camel(f) for f in TEACHER_PERMISSION_COLUMNS}
    assert client["permissions"]["manageExams"] is True
    assert client["permissions"]["manageStudents"] is False
    assert "canCreateExams" not in client


def test_teacher_to_row_flattens_permissions():
    row = teacher_to_row({"fullName": "Asha", "permissions": {"manageAttendance": True, "fullAdminAccess": False}})
    assert row["full_name"] == "Asha"
    assert "permissions" not in row
    assert row["can_manage_attendance"] is True
    assert row["full_admin_access"] is False
    assert set(TEACHER_PERMISSION_COLUMNS.values()) <= set(row)


def test_teacher_to_row_without_permissions_leaves_flags_untouched():
    assert teacher_to_row({"subject": "Maths"}) == {"subject": "Maths"}


def test_event_datetime_split_and_combine():
    assert combine_event_datetime("2024-03-15", "09:30") == "2024-03-15T09:30:00"
    assert split_event_datetime("2024-03-15T09:30:00") == ("2024-03-15", "09:30")
    assert split_event_datetime(combine_event_datetime("2024-12-31", "23:05")) == ("2024-12-31", "23:05")


def test_event_row_conversion():
    row = event_to_row({"title": "Sports Day", "date": "2024-03-15", "time": "09:30"})
    assert row == {"title": "Sports Day", "date_time": "2024-03-15T09:30:00"}
    client = event_from_row({"id": "e1", **row})
    assert client["date"] == "2024-03-15"
    assert client["time"] == "09:30"
    assert "dateTime" not in client


def test_event_row_needs_date_and_time_together():
    with pytest.raises(ValueError):
        event_to_row({"date": "2024-03-15"})
    assert event_to_row({"venue": "Hall"}) == {"venue": "Hall"}


def test_route_stops_keep_their_order():
    rows = stops_to_rows([{"name": "Gate", "time": "07:30"}, {"name": "Market", "time": "07:45"}], "r1")
    assert [r["position"] for r in rows] == [0, 1]
    assert rows[0] == {"stop_name": "Gate", "stop_time": "07:30", "route_id": "r1", "position": 0}

    route = route_from_row(
        {"id": "r1", "route_name": "North", "stops": [{"id": "s2", **rows[1]}, {"id": "s1", **rows[0]}]}
    )
    assert route["routeName"] == "North"
    assert route["stops"] == [
        {"id": "s1", "name": "Gate", "time": "07:30"},
        {"id": "s2", "name": "Market", "time": "07:45"},
    ]
