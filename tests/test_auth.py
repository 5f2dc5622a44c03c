from __future__ import annotations

from datetime import timedelta

from app.core.security import create_access_token

ADMIN_EMAIL = "admin@college.edu"
ADMIN_PASSWORD = "admin123"


def test_login_returns_token_and_admin(client, admin):
    resp = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["token"]
    assert body["admin"] == {"id": admin.id, "name": "College Administrator", "email": ADMIN_EMAIL, "role": "admin"}

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["admin"]["email"] == ADMIN_EMAIL


def test_login_email_is_case_insensitive(client, admin):
    resp = client.post("/api/auth/login", json={"email": "  Admin@College.EDU ", "password": ADMIN_PASSWORD})
    assert resp.status_code == 200


def test_login_rejects_bad_credentials(client, admin):
    for payload in (
        {"email": ADMIN_EMAIL, "password": "wrong"},
        {"email": "nobody@college.edu", "password": ADMIN_PASSWORD},
    ):
        resp = client.post("/api/auth/login", json=payload)
        assert resp.status_code == 401
        assert resp.json()["message"] == "Invalid email or password"


def test_me_requires_a_valid_token(client, admin):
    assert client.get("/api/auth/me").status_code == 401
    assert client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"}).status_code == 401

    expired = create_access_token(str(admin.id), expires_delta=timedelta(minutes=-5))
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {expired}"}).status_code == 401

    unknown = create_access_token("4242")
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {unknown}"}).status_code == 401


def test_first_admin_can_register_without_a_token(client):
    resp = client.post(
        "/api/auth/register",
        json={"name": "First Admin", "email": "first@college.edu", "password": "secret1"},
    )
    assert resp.status_code == 201
    token = resp.json()["token"]
    assert client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"}).status_code == 200


def test_later_registrations_need_an_admin(client, admin, auth_headers):
    payload = {"name": "Second", "email": "second@college.edu", "password": "secret2"}

    assert client.post("/api/auth/register", json=payload).status_code == 401

    resp = client.post("/api/auth/register", json=payload, headers=auth_headers)
    assert resp.status_code == 201
    assert resp.json()["admin"]["email"] == "second@college.edu"

    dup = client.post("/api/auth/register", json=payload, headers=auth_headers)
    assert dup.status_code == 400
    assert dup.json()["message"] == "Email already registered"


def test_register_validates_payload(client):
    resp = client.post("/api/auth/register", json={"name": "X", "email": "not-an-email", "password": "secret1"})
    assert resp.status_code == 422
    resp = client.post("/api/auth/register", json={"name": "X", "email": "x@college.edu", "password": "123"})
    assert resp.status_code == 422
