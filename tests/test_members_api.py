from academy.models import ClassStudent, Profile, ProfileStatus

API = "/api/v1/members"


def test_requires_authentication(client):
    response = client.get(API)
    assert response.status_code == 401


def test_pending_profiles_cannot_use_the_api(client, make_profile, auth_headers):
    pending_manager = make_profile("manager", status=ProfileStatus.pending)
    response = client.get(API, headers=auth_headers(pending_manager))
    assert response.status_code == 403


def test_students_and_teachers_cannot_list_members(client, student, teacher, auth_headers):
    assert client.get(API, headers=auth_headers(student)).status_code == 403
    assert client.get(API, headers=auth_headers(teacher)).status_code == 403


def test_principal_passes_manager_checks(client, principal, auth_headers):
    response = client.get(API, headers=auth_headers(principal))
    assert response.status_code == 200
    assert response.json()["success"] is True


def test_list_filters_by_status(client, manager, make_profile, auth_headers):
    make_profile("student", status=ProfileStatus.pending)
    response = client.get(API, params={"status": "pending"}, headers=auth_headers(manager))

    data = response.json()["data"]
    assert len(data) == 1
    assert data[0]["status"] == "pending"


def test_approve_places_student_in_classes(client, db, manager, make_profile, make_class, auth_headers):
    applicant = make_profile("student", status=ProfileStatus.pending)
    class_ = make_class()

    response = client.post(
        f"{API}/{applicant.id}/approve",
        json={"class_ids": [str(class_.id)]},
        headers=auth_headers(manager),
    )

    body = response.json()
    assert body["success"] is True
    assert body["data"]["status"] == "approved"
    assert db.query(ClassStudent).filter(ClassStudent.student_id == applicant.id).count() == 1

    again = client.post(f"{API}/{applicant.id}/approve", json={}, headers=auth_headers(manager))
    assert again.json()["success"] is False


def test_remove_pending_member(client, db, manager, make_profile, student, auth_headers):
    applicant = make_profile("student", status=ProfileStatus.pending)

    assert client.delete(f"{API}/{student.id}/pending", headers=auth_headers(manager)).json()["success"] is False
    assert client.delete(f"{API}/{applicant.id}/pending", headers=auth_headers(manager)).json()["success"] is True
    assert db.query(Profile).filter(Profile.id == applicant.id).first() is None


def test_update_normalizes_phones_and_guards_roles(client, manager, principal, student, auth_headers):
    response = client.patch(
        f"{API}/{student.id}",
        json={"parent_phone": "010-1234-5678"},
        headers=auth_headers(manager),
    )
    assert response.json()["data"]["parent_phone"] == "01012345678"

    denied = client.patch(f"{API}/{student.id}", json={"role": "teacher"}, headers=auth_headers(manager))
    assert denied.json()["success"] is False

    allowed = client.patch(f"{API}/{student.id}", json={"role": "teacher"}, headers=auth_headers(principal))
    assert allowed.json()["data"]["role"] == "teacher"


def test_teacher_cannot_leave_homeroom_class(client, manager, teacher, make_class, auth_headers):
    make_class(homeroom=teacher)

    response = client.put(f"{API}/{teacher.id}/classes", json={"class_ids": []}, headers=auth_headers(manager))

    assert response.json()["success"] is False
    assert "homeroom" in response.json()["message"]


def test_withdraw_and_reactivate(client, manager, principal, student, auth_headers):
    assert client.post(f"{API}/{student.id}/withdraw", headers=auth_headers(manager)).json()["success"] is True

    forbidden = client.post(f"{API}/{student.id}/reactivate", headers=auth_headers(manager))
    assert forbidden.status_code == 403

    response = client.post(f"{API}/{student.id}/reactivate", headers=auth_headers(principal))
    assert response.json()["data"]["status"] == "approved"


def test_delete_member_rules(client, manager, principal, student, auth_headers):
    assert client.delete(f"{API}/{manager.id}", headers=auth_headers(manager)).json()["success"] is False
    assert client.delete(f"{API}/{principal.id}", headers=auth_headers(manager)).json()["success"] is False
    assert client.delete(f"{API}/{student.id}", headers=auth_headers(manager)).json()["success"] is True
