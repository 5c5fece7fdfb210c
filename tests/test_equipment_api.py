import pytest


@pytest.fixture()
def classroom(make_class, teacher, student):
    return make_class("Directing A", teachers=[teacher], students=[student])


@pytest.fixture()
def slot(client, auth_headers, teacher):
    response = client.post(
        "/api/v1/equipment/slots",
        json={"slot_date": "2025-03-08", "set_type": "set_a"},
        headers=auth_headers(teacher),
    )
    return response.json()["data"]


def _reserve(client, headers, slot, classroom):
    return client.post(
        "/api/v1/equipment/rentals",
        json={"slot_id": slot["id"], "class_id": str(classroom.id), "memo": "Short film shoot"},
        headers=headers,
    ).json()


def test_open_slot_rejects_duplicates(client, auth_headers, teacher, slot):
    assert slot["status"] == "open"
    duplicate = client.post(
        "/api/v1/equipment/slots",
        json={"slot_date": "2025-03-08", "set_type": "set_a"},
        headers=auth_headers(teacher),
    ).json()
    assert duplicate["success"] is False


def test_students_cannot_open_slots(client, auth_headers, student):
    response = client.post(
        "/api/v1/equipment/slots",
        json={"slot_date": "2025-03-08", "set_type": "set_a"},
        headers=auth_headers(student),
    )
    assert response.status_code == 403


def test_batch_skips_existing(client, auth_headers, teacher, slot):
    batch = client.post(
        "/api/v1/equipment/slots/batch",
        json={"dates": ["2025-03-08", "2025-03-09"], "set_types": ["set_a", "set_b"]},
        headers=auth_headers(teacher),
    ).json()
    assert batch["success"] is True
    assert len(batch["data"]["created"]) == 3
    assert batch["data"]["skipped_count"] == 1

    listing = client.get(
        "/api/v1/equipment/slots?start=2025-03-09&end=2025-03-09", headers=auth_headers(teacher)
    ).json()
    assert [s["set_type"] for s in listing["data"]] == ["set_a", "set_b"]


def test_rental_lifecycle(client, auth_headers, teacher, student, classroom, slot):
    headers = auth_headers(student)
    reserved = _reserve(client, headers, slot, classroom)
    assert reserved["success"] is True
    assert reserved["data"]["status"] == "pending"
    rental_id = reserved["data"]["id"]

    slots = client.get("/api/v1/equipment/slots", headers=auth_headers(teacher)).json()
    assert slots["data"][0]["status"] == "reserved"
    assert slots["data"][0]["rentals"][0]["id"] == rental_id

    early_return = client.post(
        f"/api/v1/equipment/rentals/{rental_id}/return", json={"photo_path": "returns/1.jpg"}, headers=headers
    ).json()
    assert early_return["success"] is False

    checked_out = client.post(
        f"/api/v1/equipment/rentals/{rental_id}/checkout", json={"photo_path": "checkouts/1.jpg"}, headers=headers
    ).json()
    assert checked_out["data"]["status"] == "rented"
    assert checked_out["data"]["checkout_photo_path"] == "checkouts/1.jpg"

    cancel = client.post(f"/api/v1/equipment/rentals/{rental_id}/cancel", headers=headers).json()
    assert cancel["success"] is False

    returned = client.post(
        f"/api/v1/equipment/rentals/{rental_id}/return", json={"photo_path": "returns/1.jpg"}, headers=headers
    ).json()
    assert returned["data"]["status"] == "returned"
    assert returned["data"]["returned_at"] is not None

    student_slots = client.get("/api/v1/equipment/slots", headers=headers).json()
    assert student_slots["data"][0]["status"] == "open"
    assert "rentals" not in student_slots["data"][0]

    mine = client.get("/api/v1/equipment/rentals/mine", headers=headers).json()
    assert [r["status"] for r in mine["data"]] == ["returned"]


def test_reserved_slot_is_unavailable(client, auth_headers, make_profile, student, classroom, slot, db):
    from academy.models import ClassStudent

    _reserve(client, auth_headers(student), slot, classroom)

    other = make_profile("student", name="Student Han")
    db.add(ClassStudent(class_id=classroom.id, student_id=other.id))
    db.commit()

    second = _reserve(client, auth_headers(other), slot, classroom)
    assert second["success"] is False
    assert second["message"] == "This slot is not available"


def test_cancel_reopens_slot(client, auth_headers, teacher, student, classroom, slot):
    headers = auth_headers(student)
    rental_id = _reserve(client, headers, slot, classroom)["data"]["id"]

    cancelled = client.post(f"/api/v1/equipment/rentals/{rental_id}/cancel", headers=headers).json()
    assert cancelled["data"]["status"] == "cancelled"

    slots = client.get("/api/v1/equipment/slots", headers=auth_headers(teacher)).json()
    assert slots["data"][0]["status"] == "open"


def test_reserve_requires_class_membership(client, auth_headers, make_class, student, slot):
    foreign = make_class("Screenwriting B")
    response = _reserve(client, auth_headers(student), slot, foreign)
    assert response["success"] is False
    assert response["message"] == "You do not belong to this class"


def test_other_students_cannot_touch_a_rental(client, auth_headers, make_profile, student, classroom, slot):
    rental_id = _reserve(client, auth_headers(student), slot, classroom)["data"]["id"]
    other = make_profile("student", name="Student Han")

    response = client.post(
        f"/api/v1/equipment/rentals/{rental_id}/checkout",
        json={"photo_path": "checkouts/1.jpg"},
        headers=auth_headers(other),
    ).json()
    assert response["success"] is False
    assert response["message"] == "Rental not found"


def test_checkout_requires_photo(client, auth_headers, student, classroom, slot):
    headers = auth_headers(student)
    rental_id = _reserve(client, headers, slot, classroom)["data"]["id"]

    response = client.post(
        f"/api/v1/equipment/rentals/{rental_id}/checkout", json={"photo_path": "   "}, headers=headers
    )
    assert response.status_code == 422


def test_slot_status_rules(client, auth_headers, teacher, student, classroom, slot):
    headers = auth_headers(teacher)
    url = f"/api/v1/equipment/slots/{slot['id']}"

    reserved = client.patch(url, json={"status": "reserved"}, headers=headers).json()
    assert reserved["success"] is False

    closed = client.patch(url, json={"status": "closed", "notes": "Camera in repair"}, headers=headers).json()
    assert closed["data"]["status"] == "closed"
    assert closed["data"]["notes"] == "Camera in repair"

    unavailable = _reserve(client, auth_headers(student), slot, classroom)
    assert unavailable["success"] is False

    client.patch(url, json={"status": "open"}, headers=headers)
    _reserve(client, auth_headers(student), slot, classroom)
    busy = client.patch(url, json={"status": "closed"}, headers=headers).json()
    assert busy["success"] is False

    blocked_delete = client.delete(url, headers=headers).json()
    assert blocked_delete["success"] is False


def test_delete_free_slot(client, auth_headers, teacher, slot):
    deleted = client.delete(f"/api/v1/equipment/slots/{slot['id']}", headers=auth_headers(teacher)).json()
    assert deleted["success"] is True
    assert client.get("/api/v1/equipment/slots", headers=auth_headers(teacher)).json()["data"] == []
