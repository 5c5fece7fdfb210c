import pytest

API = "/api/v1/payroll"
WORK_LOGS = "/api/v1/work-logs"


@pytest.fixture()
def approved_month(client, teacher, principal, auth_headers):
    # 2025-03-03 .. 2025-03-07, four hours a day
    for day in range(3, 8):
        client.put(
            WORK_LOGS,
            json={"work_date": f"2025-03-0{day}", "status": "work", "work_hours": 4},
            headers=auth_headers(teacher),
        )
    client.post(f"{WORK_LOGS}/bulk-approve", json={"month": "2025-03"}, headers=auth_headers(principal))


@pytest.fixture()
def payroll_profile(client, teacher, principal, auth_headers):
    response = client.put(
        f"{API}/profiles",
        json={
            "teacher_id": str(teacher.id),
            "hourly_rate": 10000,
            "contract_type": "employee",
            "effective_from": "2025-01-01",
        },
        headers=auth_headers(principal),
    )
    return response.json()["data"]


def _run_request(teacher, **extra):
    payload = {"teacher_id": str(teacher.id), "month": "2025-03"}
    payload.update(extra)
    return payload


def test_profile_upsert_updates_the_open_profile(client, teacher, principal, payroll_profile, auth_headers):
    response = client.put(
        f"{API}/profiles",
        json={
            "teacher_id": str(teacher.id),
            "hourly_rate": 12000,
            "contract_type": "freelancer",
            "effective_from": "2025-01-01",
        },
        headers=auth_headers(principal),
    )

    assert response.json()["data"]["id"] == payroll_profile["id"]
    assert response.json()["data"]["hourly_rate"] == 12000


def test_profiles_are_principal_only(client, manager, auth_headers):
    assert client.get(f"{API}/profiles", headers=auth_headers(manager)).status_code == 403


def test_archive_profile(client, principal, payroll_profile, auth_headers):
    url = f"{API}/profiles/{payroll_profile['id']}/archive"

    early = client.post(url, json={"effective_to": "2024-12-31"}, headers=auth_headers(principal))
    assert early.json()["success"] is False

    archived = client.post(url, json={"effective_to": "2025-06-30"}, headers=auth_headers(principal))
    assert archived.json()["data"]["effective_to"] == "2025-06-30"

    again = client.post(url, json={}, headers=auth_headers(principal))
    assert again.json()["success"] is False


def test_preview_without_profile_fails(client, teacher, principal, auth_headers):
    response = client.post(f"{API}/preview", json=_run_request(teacher), headers=auth_headers(principal))
    assert response.status_code == 200
    assert response.json()["success"] is False


def test_preview_uses_approved_logs_only(
    client, teacher, principal, payroll_profile, approved_month, auth_headers
):
    client.put(
        WORK_LOGS,
        json={"work_date": "2025-03-10", "status": "work", "work_hours": 8},
        headers=auth_headers(teacher),
    )

    response = client.post(
        f"{API}/preview",
        json=_run_request(teacher, incentives=[{"label": "Recruiting", "amount": 10000}]),
        headers=auth_headers(principal),
    )

    data = response.json()["data"]
    assert data["breakdown"]["total_work_hours"] == 20
    assert data["breakdown"]["weekly_holiday_allowance"] == 40000
    assert data["breakdown"]["net_pay"] == 250000
    assert "Addition (Recruiting)" in data["message"]


def test_request_acknowledge_and_pay(
    client, teacher, principal, payroll_profile, approved_month, auth_headers
):
    requested = client.post(
        f"{API}/request",
        json=_run_request(teacher, message_append="Paid on the 10th", request_note="Please check"),
        headers=auth_headers(principal),
    ).json()["data"]

    assert requested["status"] == "pending_ack"
    assert requested["acknowledgement"]["status"] == "pending"
    assert requested["message_preview"].endswith("\n\nPaid on the 10th")
    labels = [item["label"] for item in requested["items"]]
    assert labels == ["Hourly pay", "Weekly holiday allowance", "Work summary"]

    early = client.post(f"{API}/runs/{requested['id']}/complete", headers=auth_headers(principal))
    assert early.json()["success"] is False

    mine = client.get(f"{API}/runs/mine", headers=auth_headers(teacher)).json()["data"]
    assert [run["id"] for run in mine] == [requested["id"]]

    confirmed = client.post(
        f"{API}/runs/{requested['id']}/acknowledge", json={"note": "Looks right"}, headers=auth_headers(teacher)
    ).json()["data"]
    assert confirmed["status"] == "confirmed"
    assert confirmed["acknowledgement"]["note"] == "Looks right"

    paid = client.post(f"{API}/runs/{requested['id']}/complete", headers=auth_headers(principal)).json()["data"]
    assert paid["status"] == "paid"
    assert paid["paid_by"] == str(principal.id)

    locked = client.post(f"{API}/draft", json=_run_request(teacher), headers=auth_headers(principal))
    assert locked.json()["success"] is False


def test_drafts_are_hidden_from_teachers(
    client, teacher, principal, payroll_profile, approved_month, auth_headers
):
    draft = client.post(f"{API}/draft", json=_run_request(teacher), headers=auth_headers(principal)).json()["data"]
    assert draft["status"] == "draft"

    assert client.get(f"{API}/runs/mine", headers=auth_headers(teacher)).json()["data"] == []
    ack = client.post(f"{API}/runs/{draft['id']}/acknowledge", json={}, headers=auth_headers(teacher))
    assert ack.json()["success"] is False

    runs = client.get(f"{API}/runs", params={"month": "2025-03"}, headers=auth_headers(principal)).json()["data"]
    assert len(runs) == 1


def test_saving_twice_keeps_one_run(client, teacher, principal, payroll_profile, approved_month, auth_headers):
    first = client.post(f"{API}/draft", json=_run_request(teacher), headers=auth_headers(principal)).json()["data"]
    second = client.post(
        f"{API}/request", json=_run_request(teacher), headers=auth_headers(principal)
    ).json()["data"]

    assert first["id"] == second["id"]
    assert len(second["items"]) == len(first["items"])


def test_only_the_owner_acknowledges(
    client, teacher, make_profile, principal, payroll_profile, approved_month, auth_headers
):
    run = client.post(f"{API}/request", json=_run_request(teacher), headers=auth_headers(principal)).json()["data"]
    other = make_profile("teacher")

    response = client.post(f"{API}/runs/{run['id']}/acknowledge", json={}, headers=auth_headers(other))
    assert response.json()["success"] is False


def test_external_substitute_summary(client, teacher, make_profile, principal, auth_headers):
    colleague = make_profile("teacher")
    entries = [
        (teacher, "2025-03-03", "Yoon", 3),
        (teacher, "2025-03-04", " yoon ", 2),
        (colleague, "2025-03-05", "Baek", 1.5),
    ]
    for owner, day, name, hours in entries:
        client.put(
            WORK_LOGS,
            json={
                "work_date": day,
                "status": "substitute",
                "substitute_type": "external",
                "external_teacher_name": name,
                "external_teacher_hours": hours,
            },
            headers=auth_headers(owner),
        )

    data = client.get(
        f"{API}/external-substitutes", params={"month": "2025-03"}, headers=auth_headers(principal)
    ).json()["data"]

    assert data["summary"] == {"total_hours": 6.5, "teacher_count": 2, "entry_count": 3}
    assert data["entries"][0]["teacher_name"] == "Teacher Park"

    entry_id = data["entries"][0]["entry"]["id"]
    updated = client.patch(
        f"{API}/external-substitutes/{entry_id}", json={"status": "completed"}, headers=auth_headers(principal)
    )
    assert updated.json()["data"]["external_teacher_pay_status"] == "completed"


def test_substitute_count_follows_absent_teachers(client, teacher, make_profile, principal, auth_headers):
    colleague = make_profile("teacher", name="Teacher Jung")
    for owner, day in ((teacher, "2025-03-03"), (colleague, "2025-03-04")):
        client.put(
            WORK_LOGS,
            json={
                "work_date": day,
                "status": "substitute",
                "substitute_type": "external",
                "external_teacher_name": "Kim",
                "external_teacher_hours": 2,
            },
            headers=auth_headers(owner),
        )

    data = client.get(
        f"{API}/external-substitutes", params={"month": "2025-03"}, headers=auth_headers(principal)
    ).json()["data"]

    assert data["summary"] == {"total_hours": 4.0, "teacher_count": 2, "entry_count": 2}
    assert [e["teacher_name"] for e in data["entries"]] == ["Teacher Park", "Teacher Jung"]


def test_adjustment_total_counts_additions_only(
    client, teacher, principal, payroll_profile, approved_month, auth_headers
):
    run = client.post(
        f"{API}/draft",
        json=_run_request(
            teacher,
            adjustments=[
                {"label": "Material fee", "amount": 30000},
                {"label": "Advance", "amount": 5000, "is_deduction": True},
            ],
        ),
        headers=auth_headers(principal),
    ).json()["data"]

    assert run["adjustment_total"] == 30000


def test_export_month_as_pdf(client, teacher, principal, payroll_profile, approved_month, auth_headers):
    client.post(f"{API}/draft", json=_run_request(teacher), headers=auth_headers(principal))

    response = client.get(f"{API}/runs/export?month=2025-03", headers=auth_headers(principal))

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "payroll-2025-03.pdf" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_export_without_runs_fails(client, principal, auth_headers):
    body = client.get(f"{API}/runs/export?month=2025-04", headers=auth_headers(principal)).json()
    assert body["success"] is False


def test_export_is_principal_only(client, manager, auth_headers):
    response = client.get(f"{API}/runs/export?month=2025-03", headers=auth_headers(manager))
    assert response.status_code == 403
