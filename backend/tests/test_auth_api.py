"""Signup, session cookie, password reset and the dashboard role gate."""

from advocatedesk.core.config import settings
from advocatedesk.db import models
from conftest import TEST_PASSWORD, auth_headers


def _login(client, email, password=TEST_PASSWORD):
    return client.post("/api/auth/login", json={"email": email, "password": password})


def test_signup_creates_main_advocate(client, db):
    resp = client.post(
        "/api/auth/signup",
        json={"name": "Anita Rao", "email": "Anita@Chambers.test", "password": "longpassword"},
    )
    assert resp.status_code == 201
    user = resp.json()["user"]
    assert user["roles"] == ["advocate"]
    assert user["is_main_advocate"] is True
    assert user["advocate_id"] is None

    dup = client.post(
        "/api/auth/signup",
        json={"name": "Anita Rao", "email": "anita@chambers.test", "password": "longpassword"},
    )
    assert dup.status_code == 409


def test_signup_rejects_short_password(client):
    resp = client.post("/api/auth/signup", json={"name": "Anita", "email": "a@chambers.test", "password": "short"})
    assert resp.status_code == 400
    assert resp.json()["errors"]


def test_login_sets_session_cookie(client, tenant_a):
    resp = _login(client, "A@Firm-A.test")
    assert resp.status_code == 200
    assert resp.json()["user"]["id"] == "A1"
    assert settings.SESSION_COOKIE_NAME in resp.cookies

    # The cookie alone authenticates subsequent requests.
    me = client.get("/api/auth/me")
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "a@firm-a.test"


def test_login_with_wrong_password(client, tenant_a):
    assert _login(client, "a@firm-a.test", "not-the-password").status_code == 401
    assert _login(client, "nobody@firm-a.test").status_code == 401


def test_inactive_user_cannot_login(client, db, tenant_a):
    tenant_a["client"].is_active = False
    db.commit()
    assert _login(client, "c1@example.test").status_code == 403
    assert client.get("/api/auth/me", headers=auth_headers(tenant_a["client"])).status_code == 403


def test_logout_clears_cookie(client, tenant_a):
    _login(client, "a@firm-a.test")
    assert client.post("/api/auth/logout").status_code == 200
    assert client.get("/api/auth/me").status_code == 401


def test_invalid_token_is_unauthorized(client):
    resp = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_forgot_and_reset_password(client, db, notifier, tenant_a):
    assert client.post("/api/auth/forgot-password", json={"email": "unknown@example.test"}).json()["success"] is True
    assert notifier.sent == []

    client.post("/api/auth/forgot-password", json={"email": "c1@example.test"})
    [message] = notifier.sent
    token = message["html"].split("token=")[1].split('"')[0]

    assert client.post("/api/auth/reset-password", json={"token": "wrong", "password": "brand-new-pass"}).status_code == 400
    resp = client.post("/api/auth/reset-password", json={"token": token, "password": "brand-new-pass"})
    assert resp.status_code == 200

    assert _login(client, "c1@example.test").status_code == 401
    assert _login(client, "c1@example.test", "brand-new-pass").status_code == 200
    assert db.query(models.User).filter_by(id="C1").one().password_reset_token is None


def test_role_gate_redirects(client, tenant_a):
    assert client.get("/dashboard/advocates", follow_redirects=False).headers["location"] == "/auth/signin"

    _login(client, "c1@example.test")
    resp = client.get("/dashboard/advocates", follow_redirects=False)
    assert resp.status_code == 303
    assert resp.headers["location"] == "/dashboard/clients"
    assert client.get("/dashboard/clients").json()["area"] == "clients"

    _login(client, "a@firm-a.test")
    resp = client.get("/dashboard/clients/cases", follow_redirects=False)
    assert resp.headers["location"] == "/dashboard/advocates"
    assert client.get("/dashboard/advocates").json()["area"] == "advocates"


def test_team_member_is_sent_home_from_advocate_area(client, tenant_a):
    _login(client, "clerk@firm-a.test")
    resp = client.get("/dashboard/advocates", follow_redirects=False)
    assert resp.headers["location"] == "/dashboard"
