def _guideline(**fields):
    payload = {
        "category": "guideline",
        "title": "2026 admission guide",
        "target_level": "Chung-Ang University",
        "guide_path": "admission/guide.pdf",
        "guide_name": "guide.pdf",
        "schedules": [
            {
                "title": "Application window",
                "start_at": "2025-09-08T00:00:00Z",
                "end_at": "2025-09-12T09:00:00Z",
            },
            {"title": "Practical exam", "start_at": "2025-10-20T01:00:00Z", "location": "Main hall"},
        ],
    }
    payload.update(fields)
    return payload


def _past_exam(**fields):
    payload = {
        "category": "past_exam",
        "title": "2024 film analysis prompt",
        "past_exam_year": 2024,
        "past_exam_university": "K-ARTS",
        "past_exam_admission_types": ["early", "early"],
    }
    payload.update(fields)
    return payload


def _create(client, headers, payload):
    return client.post("/api/v1/admission-materials", json=payload, headers=headers).json()


def test_guideline_clears_exam_fields(client, auth_headers, teacher):
    created = _create(
        client, auth_headers(teacher), _guideline(past_exam_year=2024, past_exam_university="Inha")
    )
    assert created["success"] is True
    assert created["data"]["past_exam_year"] is None
    assert created["data"]["past_exam_university"] is None
    assert len(created["data"]["schedules"]) == 2


def test_guideline_needs_university(client, auth_headers, teacher):
    response = client.post(
        "/api/v1/admission-materials", json=_guideline(target_level="  "), headers=auth_headers(teacher)
    )
    assert response.status_code == 422


def test_past_exam_validation(client, auth_headers, teacher):
    headers = auth_headers(teacher)
    created = _create(client, headers, _past_exam())
    assert created["data"]["past_exam_admission_types"] == ["early"]

    for bad in (
        _past_exam(past_exam_year=1999),
        _past_exam(past_exam_university=""),
        _past_exam(past_exam_admission_types=[]),
        _past_exam(past_exam_admission_types=["rolling"]),
    ):
        response = client.post("/api/v1/admission-materials", json=bad, headers=headers)
        assert response.status_code == 422


def test_schedule_cannot_end_before_start(client, auth_headers, teacher):
    payload = _guideline(
        schedules=[
            {"title": "Interview", "start_at": "2025-10-02T05:00:00Z", "end_at": "2025-10-02T04:00:00Z"}
        ]
    )
    response = client.post("/api/v1/admission-materials", json=payload, headers=auth_headers(teacher))
    assert response.status_code == 422


def test_calendar_events(client, auth_headers, teacher):
    headers = auth_headers(teacher)
    _create(client, headers, _guideline())
    _create(
        client,
        headers,
        _past_exam(schedules=[{"title": "Exam day", "start_at": "2025-09-10T00:30:00Z"}]),
    )

    response = client.get(
        "/api/v1/admission-materials/calendar?start=2025-09-01&end=2025-09-30", headers=headers
    ).json()
    assert response["success"] is True
    events = response["data"]
    assert [e["schedule_title"] for e in events] == ["Application window", "Exam day"]
    assert events[0]["post_university"] == "Chung-Ang"
    assert events[0]["category_label"] == "University admission guidelines"
    assert events[1]["post_university"] == "K-ARTS"


def test_filter_by_university_name(client, auth_headers, teacher):
    headers = auth_headers(teacher)
    _create(client, headers, _guideline())
    _create(client, headers, _past_exam())

    response = client.get(
        "/api/v1/admission-materials?university=chung-ang", headers=headers
    ).json()
    assert [p["title"] for p in response["data"]] == ["2026 admission guide"]

    by_year = client.get("/api/v1/admission-materials?year=2024", headers=headers).json()
    assert [p["title"] for p in by_year["data"]] == ["2024 film analysis prompt"]


def test_update_replaces_schedules(client, auth_headers, teacher, make_profile):
    headers = auth_headers(teacher)
    post = _create(client, headers, _guideline())["data"]

    colleague = make_profile("teacher", name="Teacher Yoon")
    denied = client.put(
        f"/api/v1/admission-materials/{post['id']}", json=_guideline(), headers=auth_headers(colleague)
    ).json()
    assert denied["success"] is False

    wrong_category = client.put(
        f"/api/v1/admission-materials/{post['id']}", json=_past_exam(), headers=headers
    ).json()
    assert wrong_category["message"] == "The category does not match this post"

    updated = client.put(
        f"/api/v1/admission-materials/{post['id']}",
        json=_guideline(schedules=[{"title": "Results", "start_at": "2025-11-01T00:00:00Z"}]),
        headers=headers,
    ).json()
    assert updated["success"] is True
    assert [s["title"] for s in updated["data"]["schedules"]] == ["Results"]


def test_students_cannot_read_admission_materials(client, auth_headers, student):
    response = client.get("/api/v1/admission-materials", headers=auth_headers(student))
    assert response.status_code == 403
