import logging

import pytest
from fastapi.testclient import TestClient
from unittest.mock import AsyncMock, patch

from feedback_mailer.config import Settings
from feedback_mailer.main import create_app
from feedback_mailer.services.email_sender import EmailSendError, SendResult, SmtpEmailSender

THANKS = {"message": "Thank you for your feedback!"}
SORRY = {"error": "There was a problem submitting your feedback. Please try again later."}


def make_settings(**overrides):
    values = dict(
        client_urls=("https://drawdb.app",),
        email_user="bot@drawdb.app",
        email_pass="secret",
        email_report="reports@drawdb.app",
    )
    values.update(overrides)
    return Settings(**values)


def make_sender(result=None, error=None):
    sender = AsyncMock()
    if error is not None:
        sender.send.side_effect = error
    else:
        sender.send.return_value = result or SendResult(ok=True, response="250 OK")
    return sender


@pytest.fixture
def sender():
    return make_sender()


@pytest.fixture
def client(sender):
    return TestClient(create_app(make_settings(), sender))


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_send_email_success(client, sender):
    response = client.post("/send_email", json={"feedbackText": "great tool"})

    assert response.status_code == 200
    assert response.json() == THANKS

    sender.send.assert_awaited_once()
    email = sender.send.await_args.args[0]
    assert email.to == "reports@drawdb.app"
    assert email.sender == "bot@drawdb.app"
    assert email.subject == "DrawDB Feedback Submission"
    # no rating and no message: empty body, still wrapped and sent
    assert email.html.startswith("<html><head><style>")
    assert email.html.endswith("</head><body></body></html>")


def test_send_email_uses_message_and_subject(client, sender):
    client.post("/send_email", json={
        "subject": "Bug report",
        "message": "<p>It crashed</p>",
        "satisfaction": 10,
        "attachments": [{"filename": "log.txt", "content": "trace"}],
    })

    email = sender.send.await_args.args[0]
    assert email.subject == "Bug report"
    assert "<body><p>It crashed</p></body>" in email.html
    assert "Satisfaction Rating" not in email.html
    assert [a.filename for a in email.attachments] == ["log.txt"]


def test_send_email_builds_summary_from_form(client, sender):
    client.post("/send_email", json={
        "satisfaction": 50,
        "difficulties": False,
        "occupation": "Engineer",
    })

    html = sender.send.await_args.args[0].html
    assert "<strong>Satisfaction Rating:</strong> 50/100" in html
    assert "<strong>Encountered Difficulties:</strong> No" in html
    assert "<strong>Occupation:</strong> Engineer" in html


def test_send_email_accepts_empty_body(client, sender):
    response = client.post("/send_email")

    assert response.status_code == 200
    sender.send.assert_awaited_once()


def test_send_email_never_rejects_bad_fields(client, sender):
    response = client.post("/send_email", json={"satisfaction": "lots", "attachments": 5})

    assert response.status_code == 200
    assert response.json() == THANKS


def test_send_email_failure_when_sender_raises(caplog):
    sender = make_sender(error=ConnectionError("smtp.internal:587 refused"))
    client = TestClient(create_app(make_settings(), sender))

    with caplog.at_level(logging.ERROR):
        response = client.post("/send_email", json={"feedbackText": "great tool"})

    assert response.status_code == 500
    assert response.json() == SORRY
    assert "smtp.internal" not in response.text
    assert sender.send.await_count == 1
    assert any("Error sending feedback email" in r.getMessage() for r in caplog.records)


def test_send_email_failure_when_sender_reports_error(caplog):
    sender = make_sender(result=SendResult(ok=False, error=EmailSendError("535 auth failed")))
    client = TestClient(create_app(make_settings(), sender))

    with caplog.at_level(logging.ERROR):
        response = client.post("/send_email", json={"satisfaction": 99})

    assert response.status_code == 500
    assert response.json() == SORRY
    assert "535" not in response.text
    assert sender.send.await_count == 1
    assert any(r.exc_info and isinstance(r.exc_info[1], EmailSendError) for r in caplog.records)


# =====================================================
# CORS
# =====================================================

def test_allowed_origin_gets_cors_headers(client):
    response = client.post("/send_email", json={}, headers={"Origin": "https://drawdb.app"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "https://drawdb.app"
    assert response.headers["access-control-allow-credentials"] == "true"


def test_unknown_origin_is_rejected(client, sender):
    response = client.post("/send_email", json={}, headers={"Origin": "https://evil.example"})

    assert response.status_code == 403
    assert response.json() == {"error": "Not allowed by CORS"}
    sender.send.assert_not_awaited()


def test_unknown_origin_preflight_is_rejected(client):
    response = client.options(
        "/send_email",
        headers={"Origin": "https://evil.example", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 403


def test_development_mode_allows_any_origin(sender):
    client = TestClient(create_app(make_settings(app_env="development"), sender))

    response = client.post("/send_email", json={}, headers={"Origin": "http://localhost:5173"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


# =====================================================
# REAL SMTP SENDER (transport patched)
# =====================================================

def test_subject_with_line_break_is_still_sent():
    settings = make_settings()
    client = TestClient(create_app(settings, SmtpEmailSender(settings)))

    with patch("feedback_mailer.services.email_sender.aiosmtplib.send", new=AsyncMock()) as mock_send:
        mock_send.return_value = ({}, "250 OK")

        response = client.post("/send_email", json={"subject": "Bug\nreport", "satisfaction": 5})

    assert response.status_code == 200
    assert response.json() == THANKS
    assert mock_send.await_count == 1
    assert mock_send.await_args.args[0]["Subject"] == "Bug report"
