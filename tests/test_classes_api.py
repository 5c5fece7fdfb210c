from academy.models import ClassTeacher

API = "/api/v1/classes"


def test_create_class_adds_homeroom_as_teacher(client, db, manager, teacher, student, auth_headers):
    response = client.post(
        API,
        json={
            "name": " Weekday A ",
            "homeroom_teacher_id": str(teacher.id),
            "student_ids": [str(student.id), str(student.id)],
        },
        headers=auth_headers(manager),
    )

    body = response.json()
    assert body["success"] is True
    assert body["data"]["name"] == "Weekday A"
    assert body["data"]["teachers"] == [{"teacher_id": str(teacher.id), "is_homeroom": True}]
    assert len(body["data"]["students"]) == 1


def test_create_rejects_students_listed_as_teachers(client, manager, student, auth_headers):
    response = client.post(
        API,
        json={"name": "B", "teacher_ids": [str(student.id)]},
        headers=auth_headers(manager),
    )
    assert response.json()["success"] is False


def test_teachers_only_see_their_classes(client, teacher, make_class, auth_headers):
    make_class(name="Mine", teachers=[teacher])
    make_class(name="Other")

    response = client.get(API, headers=auth_headers(teacher))

    assert [c["name"] for c in response.json()["data"]] == ["Mine"]


def test_managers_see_all_classes(client, manager, make_class, auth_headers):
    make_class(name="A")
    make_class(name="B")
    response = client.get(API, headers=auth_headers(manager))
    assert [c["name"] for c in response.json()["data"]] == ["A", "B"]


def test_students_cannot_list_classes(client, student, auth_headers):
    assert client.get(API, headers=auth_headers(student)).status_code == 403


def test_changing_homeroom_keeps_previous_teacher_as_regular(
    client, db, manager, teacher, make_profile, make_class, auth_headers
):
    other = make_profile("teacher", name="Teacher Jung")
    class_ = make_class(homeroom=teacher)

    response = client.patch(
        f"{API}/{class_.id}",
        json={"homeroom_teacher_id": str(other.id), "teacher_ids": [str(teacher.id)]},
        headers=auth_headers(manager),
    )

    assert response.json()["success"] is True
    rows = {row.teacher_id: row.is_homeroom for row in db.query(ClassTeacher).all()}
    assert rows == {teacher.id: False, other.id: True}


def test_delete_class(client, manager, make_class, auth_headers):
    class_ = make_class()
    assert client.delete(f"{API}/{class_.id}", headers=auth_headers(manager)).json()["success"] is True
    assert client.delete(f"{API}/{class_.id}", headers=auth_headers(manager)).json()["success"] is False
