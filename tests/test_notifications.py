"""Tests for the email outbox and test-mode redirection."""

import uuid

from kvb_crm.config import settings
from kvb_crm.services.email_service import MockEmailService, apply_redirect, set_email_service


LEAD = {"name": "Outbox Lead", "email": "lead@example.com", "phone": "1"}


async def test_failed_side_effect_is_recorded_and_retryable(client, sales, admin, auth_headers):
    set_email_service(MockEmailService(fail=True))
    created = await client.post("/api/sales/leads", json=LEAD, headers=auth_headers(sales))
    assert created.status_code == 201

    headers = auth_headers(admin)
    failed = (await client.get("/api/admin/notifications?status=failed", headers=headers)).json()
    assert len(failed) == 1
    notification = failed[0]
    assert notification["kind"] == "lead_welcome"
    assert notification["to_email"] == "lead@example.com"
    assert notification["attempts"] == 1
    assert "mock delivery failure" in notification["last_error"]

    set_email_service(MockEmailService())
    retried = await client.post(f"/api/admin/notifications/{notification['id']}/retry", headers=headers)
    assert retried.status_code == 200
    assert retried.json()["status"] == "sent"
    assert retried.json()["attempts"] == 2
    assert retried.json()["last_error"] is None

    again = await client.post(f"/api/admin/notifications/{notification['id']}/retry", headers=headers)
    assert again.status_code == 400
    assert again.json()["detail"] == "Notification was already sent"


async def test_retry_unknown_notification(client, admin, auth_headers):
    response = await client.post(f"/api/admin/notifications/{uuid.uuid4()}/retry", headers=auth_headers(admin))
    assert response.status_code == 404


async def test_sent_notifications_are_listed(client, sales, admin, auth_headers):
    await client.post("/api/sales/leads", json=LEAD, headers=auth_headers(sales))

    sent = (await client.get("/api/admin/notifications?status=sent", headers=auth_headers(admin))).json()
    assert [n["kind"] for n in sent] == ["lead_welcome"]
    assert sent[0]["sent_at"] is not None


def test_redirect_rewrites_recipient_and_subject(monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_REDIRECT_TO", "qa@example.com")
    to, subject, html = apply_redirect("client@example.com", "Hello", "<p>Hi</p>")

    assert to == "qa@example.com"
    assert subject == "[TEST] Hello (Originally to: client@example.com)"
    assert "client@example.com" in html
    assert html.endswith("<p>Hi</p>")


def test_no_redirect_by_default(monkeypatch):
    monkeypatch.setattr(settings, "EMAIL_REDIRECT_TO", "")
    assert apply_redirect("client@example.com", "Hello", None) == ("client@example.com", "Hello", None)


async def test_mock_mailers_keep_their_own_bounded_history():
    first = MockEmailService(keep=2)
    second = MockEmailService()

    for index in range(3):
        await first.send_email(f"client{index}@example.com", "Hello", "Body")

    assert [email["to"] for email in first.sent_emails] == ["client1@example.com", "client2@example.com"]
    assert first.get_last_email()["to"] == "client2@example.com"
    assert len(second.sent_emails) == 0
