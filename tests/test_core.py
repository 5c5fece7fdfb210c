import logging

from academy.core import database
from academy.utils import email


def test_sqlite_engine_allows_cross_thread_sessions():
    assert database.connect_args == {"check_same_thread": False}


def test_validation_errors_are_logged_as_warnings(client, caplog):
    with caplog.at_level(logging.WARNING, logger="academy.main"):
        response = client.post("/api/v1/enrollment/applications", json={"student_name": ""})

    assert response.status_code == 422
    assert any(
        record.levelno == logging.WARNING and "[validation]" in record.getMessage()
        for record in caplog.records
    )


def test_email_bodies_escape_user_text(monkeypatch):
    sent = []
    monkeypatch.setattr(email, "send_email", lambda to, subject, body: sent.append(body) or True)

    email.send_learning_journal_share_email(
        "parent@example.com", "<b>Choi</b>", 'https://academy.test/share/abc"onclick="x'
    )
    email.send_enrollment_received_email("parent@example.com", "<script>alert(1)</script>", "weekday")

    assert "&lt;b&gt;Choi&lt;/b&gt;" in sent[0]
    assert "<b>Choi</b>" not in sent[0]
    assert '"onclick="' not in sent[0]
    assert "&lt;script&gt;" in sent[1]
    assert "<script>" not in sent[1]
