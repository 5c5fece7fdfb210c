from academy.models.payroll import WorkLogEntry, WorkLogReviewStatus

API = "/api/v1/work-logs"


def _log(work_date="2025-03-03", status="work", **extra):
    payload = {"work_date": work_date, "status": status}
    payload.update(extra)
    return payload


def test_work_entries_need_hours(client, teacher, auth_headers):
    missing = client.put(API, json=_log(), headers=auth_headers(teacher))
    assert missing.json()["success"] is False

    too_many = client.put(API, json=_log(work_hours=25), headers=auth_headers(teacher))
    assert too_many.json()["success"] is False

    ok = client.put(API, json=_log(work_hours=4), headers=auth_headers(teacher))
    assert ok.json()["data"]["work_hours"] == 4


def test_absence_drops_hours(client, teacher, auth_headers):
    response = client.put(API, json=_log(status="absence", work_hours=4), headers=auth_headers(teacher))
    assert response.json()["data"]["work_hours"] is None


def test_internal_substitute_rules(client, teacher, make_profile, student, auth_headers):
    no_type = client.put(API, json=_log(status="substitute"), headers=auth_headers(teacher))
    assert no_type.json()["success"] is False

    self_sub = client.put(
        API,
        json=_log(status="substitute", substitute_type="internal", substitute_teacher_id=str(teacher.id)),
        headers=auth_headers(teacher),
    )
    assert self_sub.json()["message"] == "You cannot substitute for yourself"

    student_sub = client.put(
        API,
        json=_log(status="substitute", substitute_type="internal", substitute_teacher_id=str(student.id)),
        headers=auth_headers(teacher),
    )
    assert student_sub.json()["success"] is False

    colleague = make_profile("teacher")
    ok = client.put(
        API,
        json=_log(status="substitute", substitute_type="internal", substitute_teacher_id=str(colleague.id)),
        headers=auth_headers(teacher),
    )
    assert ok.json()["data"]["substitute_teacher_id"] == str(colleague.id)


def test_external_substitute_needs_name(client, teacher, auth_headers):
    missing = client.put(
        API, json=_log(status="substitute", substitute_type="external"), headers=auth_headers(teacher)
    )
    assert missing.json()["success"] is False

    ok = client.put(
        API,
        json=_log(
            status="substitute",
            substitute_type="external",
            external_teacher_name=" Yoon ",
            external_teacher_hours=3,
        ),
        headers=auth_headers(teacher),
    )
    data = ok.json()["data"]
    assert data["external_teacher_name"] == "Yoon"
    assert data["external_teacher_pay_status"] == "pending"


def test_list_by_month(client, teacher, auth_headers):
    client.put(API, json=_log("2025-03-03", work_hours=4), headers=auth_headers(teacher))
    client.put(API, json=_log("2025-04-01", work_hours=4), headers=auth_headers(teacher))

    response = client.get(API, params={"month": "2025-03"}, headers=auth_headers(teacher))

    assert [e["work_date"] for e in response.json()["data"]] == ["2025-03-03"]


def test_saving_again_resets_review(client, db, teacher, principal, auth_headers):
    entry = client.put(API, json=_log(work_hours=4), headers=auth_headers(teacher)).json()["data"]
    client.post(
        f"{API}/{entry['id']}/review",
        json={"decision": "rejected", "note": "Wrong day"},
        headers=auth_headers(principal),
    )

    resaved = client.put(API, json=_log(work_hours=5), headers=auth_headers(teacher)).json()["data"]

    assert resaved["id"] == entry["id"]
    assert resaved["review_status"] == "pending"
    assert resaved["review_note"] is None


def test_approved_entries_are_locked(client, teacher, principal, auth_headers):
    entry = client.put(API, json=_log(work_hours=4), headers=auth_headers(teacher)).json()["data"]
    approved = client.post(
        f"{API}/{entry['id']}/review", json={"decision": "approved"}, headers=auth_headers(principal)
    )
    assert approved.json()["data"]["review_status"] == "approved"

    assert client.put(API, json=_log(work_hours=6), headers=auth_headers(teacher)).json()["success"] is False
    assert client.delete(f"{API}/2025-03-03", headers=auth_headers(teacher)).json()["success"] is False
    again = client.post(f"{API}/{entry['id']}/review", json={"decision": "approved"}, headers=auth_headers(principal))
    assert again.json()["success"] is False


def test_review_rules(client, teacher, manager, principal, auth_headers):
    entry = client.put(API, json=_log(work_hours=4), headers=auth_headers(teacher)).json()["data"]
    url = f"{API}/{entry['id']}/review"

    assert client.post(url, json={"decision": "approved"}, headers=auth_headers(manager)).status_code == 403
    assert client.post(url, json={"decision": "pending"}, headers=auth_headers(principal)).json()["success"] is False
    assert client.post(url, json={"decision": "rejected"}, headers=auth_headers(principal)).json()["success"] is False


def test_bulk_approve_month(client, db, teacher, make_profile, principal, auth_headers):
    other = make_profile("teacher")
    for day in ("2025-03-03", "2025-03-04"):
        client.put(API, json=_log(day, work_hours=4), headers=auth_headers(teacher))
    client.put(API, json=_log("2025-03-03", work_hours=4), headers=auth_headers(other))
    client.put(API, json=_log("2025-04-01", work_hours=4), headers=auth_headers(teacher))

    response = client.post(
        f"{API}/bulk-approve",
        json={"month": "2025-03", "teacher_id": str(teacher.id)},
        headers=auth_headers(principal),
    )

    assert response.json()["data"] == {"approved_count": 2}
    approved = db.query(WorkLogEntry).filter(WorkLogEntry.review_status == WorkLogReviewStatus.approved).count()
    assert approved == 2


def test_manager_records_for_teacher(client, teacher, manager, auth_headers):
    response = client.put(
        API, json=_log(work_hours=3, teacher_id=str(teacher.id)), headers=auth_headers(manager)
    )
    assert response.json()["data"]["teacher_id"] == str(teacher.id)


def test_delete_entry(client, teacher, auth_headers):
    client.put(API, json=_log(work_hours=4), headers=auth_headers(teacher))
    assert client.delete(f"{API}/2025-03-03", headers=auth_headers(teacher)).json()["success"] is True
    assert client.delete(f"{API}/2025-03-03", headers=auth_headers(teacher)).json()["success"] is False


def test_students_cannot_log_work(client, student, auth_headers):
    assert client.put(API, json=_log(work_hours=4), headers=auth_headers(student)).status_code == 403
