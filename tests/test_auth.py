# tests/test_auth.py

from datetime import datetime, timedelta

from jose import jwt

from techflow.auth import create_access_token
from techflow.config import JWT_ALGORITHM, SECRET_KEY


def test_login_returns_token(client, admin_user):
    response = client.post(
        "/api/auth/login",
        json={"email": "ADMIN@techflow.test", "password": "password123"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["email"] == "admin@techflow.test"
    assert body["user"]["last_login_at"] is not None

    me = client.get(
        "/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"}
    )
    assert me.status_code == 200
    assert me.json()["role"] == "admin"


def test_login_rejects_wrong_password(client, admin_user):
    response = client.post(
        "/api/auth/login",
        json={"email": "admin@techflow.test", "password": "wrong-password"},
    )
    assert response.status_code == 401


def test_protected_route_requires_token(client):
    response = client.get("/api/customers")
    assert response.status_code == 401


def test_invalid_token_is_rejected(client):
    response = client.get("/api/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_expired_token_is_flagged(client, admin_user):
    token = create_access_token(admin_user, expires_delta=timedelta(minutes=-5))
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.headers.get("X-Token-Expired") == "true"


def test_token_with_non_numeric_subject_is_rejected(client):
    token = jwt.encode(
        {"sub": "admin", "exp": datetime.utcnow() + timedelta(minutes=5)},
        SECRET_KEY,
        algorithm=JWT_ALGORITHM,
    )
    response = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token claims"


def test_admin_can_create_users(client, auth_headers):
    payload = {"email": "New.Staff@techflow.test", "password": "longenough", "role": "staff"}
    response = client.post("/api/auth/users", json=payload, headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["email"] == "new.staff@techflow.test"

    duplicate = client.post("/api/auth/users", json=payload, headers=auth_headers)
    assert duplicate.status_code == 409

    users = client.get("/api/auth/users", headers=auth_headers).json()
    assert [u["email"] for u in users] == ["admin@techflow.test", "new.staff@techflow.test"]


def test_short_password_is_rejected(client, auth_headers):
    response = client.post(
        "/api/auth/users",
        json={"email": "short@techflow.test", "password": "short"},
        headers=auth_headers,
    )
    assert response.status_code == 422


def test_staff_cannot_manage_users(client, staff_headers):
    response = client.get("/api/auth/users", headers=staff_headers)
    assert response.status_code == 403


def test_root_endpoint_sets_security_headers(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_health_endpoint(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
