import pytest

from academy.models import LearningJournalEntry


@pytest.fixture()
def classroom(make_class, teacher, student):
    return make_class("Directing A", students=[student], homeroom=teacher)


@pytest.fixture()
def period(client, auth_headers, manager, classroom):
    response = client.post(
        "/api/v1/learning-journal/periods",
        json={"class_ids": [str(classroom.id)], "start_date": "2025-03-03"},
        headers=auth_headers(manager),
    )
    return response.json()["data"][0]


def _entry_id(client, headers, period_id):
    entries = client.get(f"/api/v1/learning-journal/periods/{period_id}/entries", headers=headers).json()
    return entries["data"][0]["entry"]["id"]


def test_create_periods_seeds_entries(client, auth_headers, teacher, period, student):
    assert period["end_date"] == "2025-03-30"
    assert period["status"] == "in_progress"
    assert period["label"] == "2025-03-03 ~ 2025-03-30"

    listing = client.get("/api/v1/learning-journal/periods", headers=auth_headers(teacher)).json()
    assert listing["data"][0]["class_name"] == "Directing A"
    assert listing["data"][0]["stats"] == {"total": 1, "submitted": 0, "published": 0}

    entries = client.get(
        f"/api/v1/learning-journal/periods/{period['id']}/entries", headers=auth_headers(teacher)
    ).json()
    assert entries["data"][0]["student_name"] == "Student Choi"
    assert entries["data"][0]["entry"]["status"] == "draft"


def test_only_managers_open_periods(client, auth_headers, teacher, classroom):
    response = client.post(
        "/api/v1/learning-journal/periods",
        json={"class_ids": [str(classroom.id)], "start_date": "2025-03-03"},
        headers=auth_headers(teacher),
    )
    assert response.status_code == 403


def test_teacher_outside_class_sees_no_periods(client, auth_headers, make_profile, period):
    outsider = make_profile("teacher", name="Teacher Jung")
    listing = client.get("/api/v1/learning-journal/periods", headers=auth_headers(outsider)).json()
    assert listing["data"] == []

    entries = client.get(
        f"/api/v1/learning-journal/periods/{period['id']}/entries", headers=auth_headers(outsider)
    ).json()
    assert entries["success"] is False


def test_teacher_submits_but_cannot_publish(client, auth_headers, teacher, period):
    headers = auth_headers(teacher)
    entry_id = _entry_id(client, headers, period["id"])

    submitted = client.post(
        f"/api/v1/learning-journal/entries/{entry_id}/status",
        json={"status": "submitted", "note": "ready for review"},
        headers=headers,
    ).json()
    assert submitted["success"] is True
    assert submitted["data"]["status"] == "submitted"
    assert submitted["data"]["submitted_at"] is not None

    published = client.post(
        f"/api/v1/learning-journal/entries/{entry_id}/status",
        json={"status": "published"},
        headers=headers,
    ).json()
    assert published["success"] is False
    assert published["message"] == "Only managers can publish learning journals"


def test_invalid_and_repeated_transitions(client, auth_headers, manager, period):
    headers = auth_headers(manager)
    entry_id = _entry_id(client, headers, period["id"])

    archived = client.post(
        f"/api/v1/learning-journal/entries/{entry_id}/status", json={"status": "archived"}, headers=headers
    ).json()
    assert archived["success"] is False
    assert archived["message"] == "Cannot move an entry from draft to archived"

    same = client.post(
        f"/api/v1/learning-journal/entries/{entry_id}/status", json={"status": "draft"}, headers=headers
    ).json()
    assert same["success"] is False
    assert same["message"] == "Entry is already draft"


def test_publish_shares_with_student_and_parent(
    client, auth_headers, manager, student, period, monkeypatch
):
    sent = []
    monkeypatch.setattr(
        "academy.api.v1.learning_journal.send_learning_journal_share_email",
        lambda email_to, name, url: sent.append((email_to, name, url)),
    )
    headers = auth_headers(manager)
    entry_id = _entry_id(client, headers, period["id"])

    student_view = client.get(f"/api/v1/learning-journal/entries/{entry_id}", headers=auth_headers(student)).json()
    assert student_view["success"] is False

    published = client.post(
        f"/api/v1/learning-journal/entries/{entry_id}/status", json={"status": "published"}, headers=headers
    ).json()
    assert published["success"] is True
    token = published["data"]["share_token"]
    assert token
    assert published["data"]["published_at"] is not None

    assert len(sent) == 1
    assert sent[0][0] == "parent@example.com"
    assert sent[0][1] == "Student Choi"
    assert sent[0][2].endswith(f"/learning-journal/share/{token}")

    mine = client.get("/api/v1/learning-journal/entries/mine", headers=auth_headers(student)).json()
    assert [e["id"] for e in mine["data"]] == [entry_id]

    detail = client.get(f"/api/v1/learning-journal/entries/{entry_id}", headers=auth_headers(student)).json()
    assert detail["success"] is True
    assert [log["next_status"] for log in detail["data"]["logs"]] == ["published"]

    shared = client.get(f"/api/v1/learning-journal/share/{token}").json()
    assert shared["success"] is True
    assert shared["data"]["student_name"] == "Student Choi"
    assert shared["data"]["class_name"] == "Directing A"
    assert shared["data"]["entry"]["logs"] == []


def test_share_link_stops_working_after_archive(client, auth_headers, manager, period, db):
    headers = auth_headers(manager)
    entry_id = _entry_id(client, headers, period["id"])
    token = client.post(
        f"/api/v1/learning-journal/entries/{entry_id}/status", json={"status": "published"}, headers=headers
    ).json()["data"]["share_token"]

    client.post(
        f"/api/v1/learning-journal/entries/{entry_id}/status", json={"status": "archived"}, headers=headers
    )

    assert client.get(f"/api/v1/learning-journal/share/{token}").json()["success"] is False
    assert client.get("/api/v1/learning-journal/share/not-a-token").json()["success"] is False
    assert db.query(LearningJournalEntry).one().archived_at is not None


def test_regenerate_period_and_entry(client, auth_headers, teacher, period):
    headers = auth_headers(teacher)
    regenerated = client.post(
        f"/api/v1/learning-journal/periods/{period['id']}/regenerate", headers=headers
    ).json()
    assert regenerated["success"] is True
    assert regenerated["data"]["entry_count"] == 1

    entry_id = _entry_id(client, headers, period["id"])
    entry = client.post(f"/api/v1/learning-journal/entries/{entry_id}/regenerate", headers=headers).json()
    assert entry["success"] is True
    assert entry["data"]["last_generated_at"] is not None
    assert len(entry["data"]["weekly"]["weeks"]) == 4


def test_regenerate_picks_up_new_students(client, auth_headers, manager, make_profile, classroom, period, db):
    from academy.models import ClassStudent

    newcomer = make_profile("student", name="Student Han")
    db.add(ClassStudent(class_id=classroom.id, student_id=newcomer.id))
    db.commit()

    regenerated = client.post(
        f"/api/v1/learning-journal/periods/{period['id']}/regenerate", headers=auth_headers(manager)
    ).json()
    assert regenerated["data"]["entry_count"] == 2


def test_comments_upsert_per_scope(client, auth_headers, teacher, period):
    headers = auth_headers(teacher)
    entry_id = _entry_id(client, headers, period["id"])
    url = f"/api/v1/learning-journal/entries/{entry_id}/comments"

    first = client.put(url, json={"role_scope": "homeroom", "body": "Great month"}, headers=headers).json()
    second = client.put(url, json={"role_scope": "homeroom", "body": "Great month overall"}, headers=headers).json()
    assert first["data"]["id"] == second["data"]["id"]
    assert second["data"]["body"] == "Great month overall"

    subject = client.put(
        url, json={"role_scope": "subject", "subject": "directing", "body": "Sharp shot lists"}, headers=headers
    ).json()
    assert subject["data"]["id"] != first["data"]["id"]

    detail = client.get(f"/api/v1/learning-journal/entries/{entry_id}", headers=headers).json()
    assert len(detail["data"]["comments"]) == 2


def test_comment_scope_validation(client, auth_headers, teacher, period):
    headers = auth_headers(teacher)
    entry_id = _entry_id(client, headers, period["id"])
    url = f"/api/v1/learning-journal/entries/{entry_id}/comments"

    assert client.put(
        url, json={"role_scope": "homeroom", "subject": "directing", "body": "x"}, headers=headers
    ).status_code == 422
    assert client.put(url, json={"role_scope": "subject", "body": "x"}, headers=headers).status_code == 422


def test_week_templates(client, auth_headers, teacher, classroom, period):
    headers = auth_headers(teacher)
    payload = {
        "class_id": str(classroom.id),
        "period_id": period["id"],
        "week_index": 2,
        "subject": "screenwriting",
        "material_titles": ["Act structure"],
        "material_notes": "Read chapter 3",
    }
    first = client.put("/api/v1/learning-journal/weeks", json=payload, headers=headers).json()
    payload["material_titles"] = ["Act structure", "Beat sheets"]
    second = client.put("/api/v1/learning-journal/weeks", json=payload, headers=headers).json()
    assert first["data"]["id"] == second["data"]["id"]

    weeks = client.get(f"/api/v1/learning-journal/periods/{period['id']}/weeks", headers=headers).json()
    assert weeks["data"][0]["material_titles"] == ["Act structure", "Beat sheets"]

    payload["week_index"] = 5
    assert client.put("/api/v1/learning-journal/weeks", json=payload, headers=headers).status_code == 422

    deleted = client.delete(f"/api/v1/learning-journal/weeks/{first['data']['id']}", headers=headers).json()
    assert deleted["success"] is True


def test_greetings_are_principal_only(client, auth_headers, principal, manager):
    payload = {"month_token": "2025-03", "message": "Welcome to the spring term!"}
    assert client.put("/api/v1/learning-journal/greetings", json=payload, headers=auth_headers(manager)).status_code == 403

    first = client.put("/api/v1/learning-journal/greetings", json=payload, headers=auth_headers(principal)).json()
    payload["message"] = "Welcome to the spring term, everyone!"
    second = client.put("/api/v1/learning-journal/greetings", json=payload, headers=auth_headers(principal)).json()
    assert first["data"]["id"] == second["data"]["id"]
    assert second["data"]["published_at"] is not None

    listing = client.get("/api/v1/learning-journal/greetings", headers=auth_headers(manager)).json()
    assert len(listing["data"]) == 1

    bad_token = {"month_token": "2025-3", "message": "Welcome to the spring term!"}
    assert client.put(
        "/api/v1/learning-journal/greetings", json=bad_token, headers=auth_headers(principal)
    ).status_code == 422

    deleted = client.delete("/api/v1/learning-journal/greetings/2025-03", headers=auth_headers(principal)).json()
    assert deleted["success"] is True


def test_academic_events(client, auth_headers, manager):
    headers = auth_headers(manager)
    created = client.post(
        "/api/v1/learning-journal/events",
        json={"title": "Film festival", "start_date": "2025-03-20", "end_date": "2025-03-22"},
        headers=headers,
    ).json()
    assert created["data"]["month_token"] == "2025-03"

    event_id = created["data"]["id"]
    moved = client.patch(
        f"/api/v1/learning-journal/events/{event_id}",
        json={"start_date": "2025-04-02", "end_date": None},
        headers=headers,
    ).json()
    assert moved["data"]["month_token"] == "2025-04"
    assert moved["data"]["end_date"] is None

    backwards = client.patch(
        f"/api/v1/learning-journal/events/{event_id}", json={"end_date": "2025-04-01"}, headers=headers
    ).json()
    assert backwards["success"] is False

    april = client.get("/api/v1/learning-journal/events?month=2025-04", headers=headers).json()
    assert len(april["data"]) == 1
    assert client.get("/api/v1/learning-journal/events?month=2025-03", headers=headers).json()["data"] == []

    assert client.post(
        "/api/v1/learning-journal/events",
        json={"title": "Bad", "start_date": "2025-03-20", "end_date": "2025-03-19"},
        headers=headers,
    ).status_code == 422


def test_share_includes_greetings_and_events(client, auth_headers, principal, manager, period):
    headers = auth_headers(manager)
    client.put(
        "/api/v1/learning-journal/greetings",
        json={"month_token": "2025-03", "message": "Welcome to the spring term!"},
        headers=auth_headers(principal),
    )
    client.post(
        "/api/v1/learning-journal/events", json={"title": "Screening night", "start_date": "2025-03-28"}, headers=headers
    )
    client.post(
        "/api/v1/learning-journal/events", json={"title": "Summer camp", "start_date": "2025-07-28"}, headers=headers
    )

    entry_id = _entry_id(client, headers, period["id"])
    token = client.post(
        f"/api/v1/learning-journal/entries/{entry_id}/status", json={"status": "published"}, headers=headers
    ).json()["data"]["share_token"]

    shared = client.get(f"/api/v1/learning-journal/share/{token}").json()["data"]
    assert [g["month_token"] for g in shared["greetings"]] == ["2025-03"]
    assert [e["title"] for e in shared["academic_events"]] == ["Screening night"]


def test_annual_schedules(client, auth_headers, manager, student):
    headers = auth_headers(manager)
    created = client.post(
        "/api/v1/learning-journal/annual-schedules",
        json={
            "period_label": "Term 1",
            "start_date": "2025-03-03",
            "end_date": "2025-03-30",
            "tuition_amount": 450000,
        },
        headers=headers,
    ).json()
    assert created["data"]["category"] == "annual"

    schedule_id = created["data"]["id"]
    updated = client.patch(
        f"/api/v1/learning-journal/annual-schedules/{schedule_id}",
        json={"category": "film_production", "display_order": 2},
        headers=headers,
    ).json()
    assert updated["data"]["category"] == "film_production"

    backwards = client.patch(
        f"/api/v1/learning-journal/annual-schedules/{schedule_id}",
        json={"end_date": "2025-03-01"},
        headers=headers,
    ).json()
    assert backwards["success"] is False

    listing = client.get("/api/v1/learning-journal/annual-schedules", headers=auth_headers(student)).json()
    assert len(listing["data"]) == 1

    assert client.post(
        "/api/v1/learning-journal/annual-schedules",
        json={"period_label": "Term 2", "start_date": "2025-04-01", "end_date": "2025-04-28"},
        headers=auth_headers(student),
    ).status_code == 403


def test_period_update_and_delete(client, auth_headers, manager, period):
    headers = auth_headers(manager)
    updated = client.patch(
        f"/api/v1/learning-journal/periods/{period['id']}",
        json={"start_date": "2025-04-07", "status": "completed"},
        headers=headers,
    ).json()
    assert updated["data"]["end_date"] == "2025-05-04"
    assert updated["data"]["locked_at"] is not None

    assert client.patch(f"/api/v1/learning-journal/periods/{period['id']}", json={}, headers=headers).json()["success"] is False

    deleted = client.delete(f"/api/v1/learning-journal/periods/{period['id']}", headers=headers).json()
    assert deleted["success"] is True
    assert client.get("/api/v1/learning-journal/periods", headers=headers).json()["data"] == []


def test_week_templates_hidden_from_other_teachers(client, auth_headers, teacher, make_profile, classroom, period):
    client.put(
        "/api/v1/learning-journal/weeks",
        json={
            "class_id": str(classroom.id),
            "period_id": period["id"],
            "week_index": 1,
            "subject": "directing",
            "material_titles": ["Blocking basics"],
        },
        headers=auth_headers(teacher),
    )
    outsider = make_profile("teacher", name="Teacher Jung")

    response = client.get(
        f"/api/v1/learning-journal/periods/{period['id']}/weeks", headers=auth_headers(outsider)
    ).json()
    assert response["success"] is False
    assert response["data"] is None

    missing = client.get(
        "/api/v1/learning-journal/periods/00000000-0000-0000-0000-000000000000/weeks",
        headers=auth_headers(teacher),
    ).json()
    assert missing["message"] == "Period not found"


def test_event_title_cannot_be_blanked(client, auth_headers, manager):
    headers = auth_headers(manager)
    event = client.post(
        "/api/v1/learning-journal/events",
        json={"title": "Film festival", "start_date": "2025-03-20"},
        headers=headers,
    ).json()["data"]

    blank = client.patch(
        f"/api/v1/learning-journal/events/{event['id']}", json={"title": "    "}, headers=headers
    ).json()
    assert blank["success"] is False

    listing = client.get("/api/v1/learning-journal/events", headers=headers).json()
    assert listing["data"][0]["title"] == "Film festival"
