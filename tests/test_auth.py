"""Tests for per-role authentication and cookie handling."""

from datetime import datetime, timedelta

from kvb_crm.config import settings
from kvb_crm.core.security import create_access_token, hash_reset_token
from kvb_crm.services.email_service import get_email_service

TEST_PASSWORD = "secret123"


async def test_customer_signup_sets_role_cookie(client):
    response = await client.post(
        "/api/customer-auth/signup",
        json={
            "email": "new.customer@example.com",
            "password": "secret123",
            "full_name": "New Customer",
            "phone": "12345",
            "address": "1 Sun Road",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["role"] == "customer"
    assert body["email"] == "new.customer@example.com"
    assert "password_hash" not in body
    assert "jwt_customer=" in response.headers.get("set-cookie", "")


async def test_signup_duplicate_email_rejected(client, admin):
    response = await client.post(
        "/api/admin-auth/signup",
        json={"email": admin.email, "password": "secret123", "full_name": "Again"},
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Email already exists"


async def test_signup_short_password_rejected(client):
    response = await client.post(
        "/api/worker-auth/signup",
        json={
            "email": "w@example.com",
            "password": "123",
            "full_name": "Short Pw",
            "specialization": "Wiring",
        },
    )
    assert response.status_code == 400


async def test_login_success_and_failure(client, sales):
    ok = await client.post(
        "/api/sales-auth/login", json={"email": sales.email, "password": TEST_PASSWORD}
    )
    assert ok.status_code == 200
    assert ok.json()["id"] == str(sales.id)
    assert "jwt_sales=" in ok.headers.get("set-cookie", "")

    bad = await client.post(
        "/api/sales-auth/login", json={"email": sales.email, "password": "wrong-password"}
    )
    assert bad.status_code == 401
    assert bad.json()["detail"] == "Invalid email or password"


async def test_login_is_scoped_to_role_table(client, worker):
    response = await client.post(
        "/api/admin-auth/login", json={"email": worker.email, "password": TEST_PASSWORD}
    )
    assert response.status_code == 401


async def test_logout_clears_cookie(client):
    response = await client.post("/api/worker-auth/logout")
    assert response.status_code == 200
    assert "jwt_worker=" in response.headers.get("set-cookie", "")


async def test_missing_cookie_is_unauthorized(client):
    response = await client.get("/api/admin/customers")
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized - No Token Provided"


async def test_token_for_other_role_is_rejected(client, worker):
    token = create_access_token(worker.id, "worker")
    response = await client.get("/api/admin/customers", headers={"Cookie": f"jwt_admin={token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Unauthorized - Invalid Token"


async def test_role_guard_forbids_customers_on_sales_routes(client, customer, auth_headers):
    response = await client.get("/api/sales/leads", headers=auth_headers(customer))
    assert response.status_code == 403
    assert "sales, admin" in response.json()["detail"]


async def test_password_reset_flow_in_dev_mode(client, worker):
    forgot = await client.post("/api/worker-auth/forgot-password", json={"email": worker.email})
    assert forgot.status_code == 200
    token = forgot.json()["reset_token"]

    reset = await client.put(f"/api/worker-auth/reset-password/{token}", json={"password": "brand-new"})
    assert reset.status_code == 200

    login = await client.post(
        "/api/worker-auth/login", json={"email": worker.email, "password": "brand-new"}
    )
    assert login.status_code == 200

    reused = await client.put(f"/api/worker-auth/reset-password/{token}", json={"password": "again123"})
    assert reused.status_code == 400
    assert reused.json()["detail"] == "Invalid or expired token"


async def test_password_reset_emails_link_outside_dev_mode(client, admin, monkeypatch):
    monkeypatch.setattr(settings, "DEV_MODE", False)

    response = await client.post("/api/admin-auth/forgot-password", json={"email": admin.email})
    assert response.status_code == 200
    assert "reset_token" not in response.json()

    email = get_email_service().sent_emails[-1]
    assert email["to"] == admin.email
    assert "/admin/reset-password/" in email["html"]


async def test_expired_reset_token_rejected(client, session, sales):
    sales.password_reset_token = hash_reset_token("stale-token")
    sales.password_reset_expires = datetime.utcnow() - timedelta(minutes=1)
    session.add(sales)
    await session.commit()

    response = await client.put("/api/sales-auth/reset-password/stale-token", json={"password": "whatever1"})
    assert response.status_code == 400


async def test_forgot_password_unknown_email(client):
    response = await client.post("/api/sales-auth/forgot-password", json={"email": "ghost@example.com"})
    assert response.status_code == 404
    assert response.json()["detail"] == "Sales not found"


async def test_customers_have_no_password_reset(client):
    response = await client.post("/api/customer-auth/forgot-password", json={"email": "c@example.com"})
    assert response.status_code in (404, 405)
