import pytest


def _post_payload(**fields):
    payload = {
        "subject": "directing",
        "title": " Week 3 blocking ",
        "week_label": "Week 3",
        "class_material_path": "class-materials/week3/slides.pdf",
        "class_material_name": "slides.pdf",
        "student_handout_path": None,
    }
    payload.update(fields)
    return payload


@pytest.fixture()
def post(client, auth_headers, teacher):
    response = client.post(
        "/api/v1/class-materials", json=_post_payload(), headers=auth_headers(teacher)
    ).json()
    assert response["success"] is True
    return response["data"]


def _request_print(client, headers, post, **fields):
    payload = {"assets": ["class_material"], "copies": 12, "color_mode": "bw"}
    payload.update(fields)
    return client.post(
        f"/api/v1/class-materials/{post['id']}/print-requests", json=payload, headers=headers
    ).json()


def test_create_and_list_posts(client, auth_headers, teacher, post):
    assert post["title"] == "Week 3 blocking"
    listing = client.get(
        "/api/v1/class-materials?subject=directing", headers=auth_headers(teacher)
    ).json()
    assert listing["data"][0]["author_name"] == "Teacher Park"

    other_subject = client.get(
        "/api/v1/class-materials?subject=screenwriting", headers=auth_headers(teacher)
    ).json()
    assert other_subject["data"] == []


def test_students_cannot_see_class_materials(client, auth_headers, student):
    response = client.get("/api/v1/class-materials", headers=auth_headers(student))
    assert response.status_code == 403


def test_only_author_or_manager_edits(client, auth_headers, make_profile, manager, post):
    colleague = make_profile("teacher", name="Teacher Yoon")
    denied = client.put(
        f"/api/v1/class-materials/{post['id']}",
        json=_post_payload(title="Changed"),
        headers=auth_headers(colleague),
    ).json()
    assert denied["success"] is False

    updated = client.put(
        f"/api/v1/class-materials/{post['id']}",
        json=_post_payload(title="Changed", class_material_path=None),
        headers=auth_headers(manager),
    ).json()
    assert updated["success"] is True
    assert updated["data"]["class_material_path"] is None
    assert updated["data"]["class_material_name"] is None


def test_subject_cannot_change(client, auth_headers, teacher, post):
    response = client.put(
        f"/api/v1/class-materials/{post['id']}",
        json=_post_payload(subject="screenwriting"),
        headers=auth_headers(teacher),
    ).json()
    assert response["message"] == "The subject does not match this post"


def test_print_request_needs_the_file(client, auth_headers, teacher, post):
    response = _request_print(client, auth_headers(teacher), post, assets=["student_handout"])
    assert response["success"] is False
    assert response["message"] == "This post has no student handout file"


def test_print_request_lifecycle(client, auth_headers, teacher, manager, post):
    requested = _request_print(client, auth_headers(teacher), post, copies=500)
    assert requested["success"] is True
    request = requested["data"]
    assert request["copies"] == 100
    assert request["status"] == "requested"
    assert request["items"][0]["asset_filename"] == "slides.pdf"

    queue = client.get("/api/v1/class-materials/print-requests", headers=auth_headers(manager)).json()
    assert queue["data"][0]["post_title"] == "Week 3 blocking"
    assert queue["data"][0]["requester_name"] == "Teacher Park"

    started = client.patch(
        f"/api/v1/class-materials/print-requests/{request['id']}",
        json={"status": "in_progress"},
        headers=auth_headers(manager),
    ).json()
    assert started["data"]["handled_by"] == str(manager.id)

    too_late = client.post(
        f"/api/v1/class-materials/print-requests/{request['id']}/cancel", headers=auth_headers(teacher)
    ).json()
    assert too_late["success"] is False


def test_teachers_only_see_their_own_requests(client, auth_headers, make_profile, teacher, post):
    colleague = make_profile("teacher", name="Teacher Yoon")
    _request_print(client, auth_headers(teacher), post)
    _request_print(client, auth_headers(colleague), post)

    mine = client.get("/api/v1/class-materials/print-requests", headers=auth_headers(colleague)).json()
    assert len(mine["data"]) == 1
    assert mine["data"][0]["requester_name"] == "Teacher Yoon"

    detail = client.get(f"/api/v1/class-materials/{post['id']}", headers=auth_headers(colleague)).json()
    assert len(detail["data"]["print_requests"]) == 1


def test_cancel_print_request(client, auth_headers, make_profile, teacher, post):
    request = _request_print(client, auth_headers(teacher), post)["data"]
    colleague = make_profile("teacher", name="Teacher Yoon")

    denied = client.post(
        f"/api/v1/class-materials/print-requests/{request['id']}/cancel", headers=auth_headers(colleague)
    ).json()
    assert denied["message"] == "You cannot cancel this print request"

    canceled = client.post(
        f"/api/v1/class-materials/print-requests/{request['id']}/cancel", headers=auth_headers(teacher)
    ).json()
    assert canceled["data"]["status"] == "canceled"


def test_status_update_cannot_cancel(client, auth_headers, teacher, manager, post):
    request = _request_print(client, auth_headers(teacher), post)["data"]
    response = client.patch(
        f"/api/v1/class-materials/print-requests/{request['id']}",
        json={"status": "canceled"},
        headers=auth_headers(manager),
    )
    assert response.status_code == 422
