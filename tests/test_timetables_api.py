import uuid

import pytest


@pytest.fixture()
def timetable(client, auth_headers, manager):
    response = client.post(
        "/api/v1/timetables", json={"name": " Spring term "}, headers=auth_headers(manager)
    ).json()
    assert response["success"] is True
    return response["data"]


def _add_teacher(client, headers, timetable, teacher):
    return client.post(
        f"/api/v1/timetables/{timetable['id']}/teachers",
        json={"teacher_id": str(teacher.id)},
        headers=headers,
    ).json()


def _add_period(client, headers, timetable, name):
    return client.post(
        f"/api/v1/timetables/{timetable['id']}/periods", json={"name": name}, headers=headers
    ).json()


def test_create_timetable_strips_name(timetable):
    assert timetable["name"] == "Spring term"
    assert timetable["teacher_columns"] == []


def test_teachers_read_but_cannot_edit(client, auth_headers, teacher, timetable):
    listing = client.get("/api/v1/timetables", headers=auth_headers(teacher)).json()
    assert [t["name"] for t in listing["data"]] == ["Spring term"]

    response = client.post(
        f"/api/v1/timetables/{timetable['id']}/periods",
        json={"name": "1st"},
        headers=auth_headers(teacher),
    )
    assert response.status_code == 403


def test_students_cannot_view_timetables(client, auth_headers, student):
    response = client.get("/api/v1/timetables", headers=auth_headers(student))
    assert response.status_code == 403


def test_teacher_columns(client, auth_headers, manager, teacher, student, timetable):
    headers = auth_headers(manager)
    added = _add_teacher(client, headers, timetable, teacher)
    assert added["success"] is True
    assert added["data"]["teacher_name"] == "Teacher Park"
    assert added["data"]["position"] == 0

    duplicate = _add_teacher(client, headers, timetable, teacher)
    assert duplicate["message"] == "This teacher is already on the timetable"

    not_staff = _add_teacher(client, headers, timetable, student)
    assert not_staff["message"] == "Teacher not found"


def test_assign_cell_replaces_classes(client, auth_headers, manager, teacher, make_class, timetable):
    headers = auth_headers(manager)
    column = _add_teacher(client, headers, timetable, teacher)["data"]
    period = _add_period(client, headers, timetable, "1st period")["data"]
    directing = make_class("Directing A")
    writing = make_class("Writing B")

    first = client.put(
        f"/api/v1/timetables/{timetable['id']}/cells",
        json={
            "teacher_column_id": column["id"],
            "period_id": period["id"],
            "class_ids": [str(directing.id), str(directing.id), str(writing.id)],
        },
        headers=headers,
    ).json()
    assert first["success"] is True
    assert sorted(a["class_name"] for a in first["data"]) == ["Directing A", "Writing B"]

    second = client.put(
        f"/api/v1/timetables/{timetable['id']}/cells",
        json={"teacher_column_id": column["id"], "period_id": period["id"], "class_ids": [str(writing.id)]},
        headers=headers,
    ).json()
    assert [a["class_name"] for a in second["data"]] == ["Writing B"]

    detail = client.get(f"/api/v1/timetables/{timetable['id']}", headers=headers).json()
    assert [a["class_name"] for a in detail["data"]["assignments"]] == ["Writing B"]

    cleared = client.delete(
        f"/api/v1/timetables/{timetable['id']}/cells"
        f"?teacher_column_id={column['id']}&period_id={period['id']}",
        headers=headers,
    ).json()
    assert cleared["success"] is True
    detail = client.get(f"/api/v1/timetables/{timetable['id']}", headers=headers).json()
    assert detail["data"]["assignments"] == []


def test_cell_must_belong_to_timetable(client, auth_headers, manager, teacher, make_class, timetable):
    headers = auth_headers(manager)
    other = client.post("/api/v1/timetables", json={"name": "Summer"}, headers=headers).json()["data"]
    column = _add_teacher(client, headers, timetable, teacher)["data"]
    foreign_period = _add_period(client, headers, other, "1st period")["data"]
    classroom = make_class("Directing A")

    response = client.put(
        f"/api/v1/timetables/{timetable['id']}/cells",
        json={
            "teacher_column_id": column["id"],
            "period_id": foreign_period["id"],
            "class_ids": [str(classroom.id)],
        },
        headers=headers,
    ).json()
    assert response["success"] is False
    assert response["message"] == "That period is not on this timetable"


def test_unknown_class_is_rejected(client, auth_headers, manager, teacher, timetable):
    headers = auth_headers(manager)
    column = _add_teacher(client, headers, timetable, teacher)["data"]
    period = _add_period(client, headers, timetable, "1st period")["data"]
    response = client.put(
        f"/api/v1/timetables/{timetable['id']}/cells",
        json={"teacher_column_id": column["id"], "period_id": period["id"], "class_ids": [str(uuid.uuid4())]},
        headers=headers,
    ).json()
    assert response["message"] == "Some classes were not found"


def test_cell_holds_at_most_ten_classes(client, auth_headers, manager, timetable):
    response = client.put(
        f"/api/v1/timetables/{timetable['id']}/cells",
        json={
            "teacher_column_id": str(uuid.uuid4()),
            "period_id": str(uuid.uuid4()),
            "class_ids": [str(uuid.uuid4()) for _ in range(11)],
        },
        headers=auth_headers(manager),
    )
    assert response.status_code == 422


def test_deleting_period_drops_its_cells(client, auth_headers, manager, teacher, make_class, timetable):
    headers = auth_headers(manager)
    column = _add_teacher(client, headers, timetable, teacher)["data"]
    period = _add_period(client, headers, timetable, "1st period")["data"]
    classroom = make_class("Directing A")
    client.put(
        f"/api/v1/timetables/{timetable['id']}/cells",
        json={"teacher_column_id": column["id"], "period_id": period["id"], "class_ids": [str(classroom.id)]},
        headers=headers,
    )

    deleted = client.delete(f"/api/v1/timetables/periods/{period['id']}", headers=headers).json()
    assert deleted["success"] is True
    detail = client.get(f"/api/v1/timetables/{timetable['id']}", headers=headers).json()
    assert detail["data"]["periods"] == []
    assert detail["data"]["assignments"] == []
