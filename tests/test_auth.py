from datetime import timedelta

from krixflow.core.security import (
    TokenPayload,
    create_access_token,
    create_refresh_token,
    verify_access_token,
    verify_refresh_token,
)

from conftest import register


def test_register_returns_tokens_and_public_user(client):
    res = register(client, email="John.Doe@krixflow.com", role="INSTRUCTOR")
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    assert body["message"] == "User registered successfully"
    assert body["token"] and body["refresh_token"]
    assert body["refreshToken"] == body["refresh_token"]
    user = body["user"]
    assert user["email"] == "john.doe@krixflow.com"
    assert user["role"] == "INSTRUCTOR"
    assert user["primary_role"] == "INSTRUCTOR"
    assert user["roles"] == ["INSTRUCTOR"]
    assert "password" not in user


def test_register_defaults_to_learner(client):
    res = register(client)
    assert res.json()["user"]["roles"] == ["LEARNER"]


def test_register_duplicate_email_conflicts(client):
    register(client)
    res = register(client, email="ADMIN@krixflow.com")
    assert res.status_code == 409
    assert res.json() == {"success": False, "message": "User with this email already exists"}


def test_register_rejects_short_password(client):
    res = register(client, password="abc")
    assert res.status_code == 400
    assert res.json()["success"] is False
    assert "password" in res.json()["message"]


def test_register_rejects_unknown_role(client):
    res = register(client, role="ADMIN")
    assert res.status_code == 400


def test_login(client):
    register(client)
    res = client.post("/api/auth/login", json={"email": "admin@krixflow.com", "password": "admin123"})
    assert res.status_code == 200
    assert res.json()["message"] == "Login successful"
    assert res.json()["user"]["name"] == "Admin User"
    assert res.json()["refreshToken"] == res.json()["refresh_token"]


def test_login_wrong_password(client):
    register(client)
    res = client.post("/api/auth/login", json={"email": "admin@krixflow.com", "password": "nope123"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid email or password"


def test_login_unknown_email(client):
    res = client.post("/api/auth/login", json={"email": "ghost@krixflow.com", "password": "whatever"})
    assert res.status_code == 401


def test_refresh_issues_new_access_token(client):
    refresh_token = register(client).json()["refresh_token"]
    res = client.post("/api/auth/refresh", json={"refreshToken": refresh_token})
    assert res.status_code == 200
    token = res.json()["token"]
    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200


def test_refresh_rejects_access_token(client):
    access = register(client).json()["token"]
    res = client.post("/api/auth/refresh", json={"refresh_token": access})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid or expired refresh token"


def test_refresh_for_deleted_user(client, mock_db):
    token = create_refresh_token(TokenPayload(user_id="64b7f0c2a1b2c3d4e5f60718", email="x@krixflow.com", role="LEARNER"))
    res = client.post("/api/auth/refresh", json={"refreshToken": token})
    assert res.status_code == 404


def test_me_requires_token(client):
    res = client.get("/api/users/me")
    assert res.status_code == 401
    assert res.json()["message"] == "No token provided"


def test_me_rejects_garbage_token(client):
    res = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid or expired token"


def test_me(client, auth_headers):
    res = client.get("/api/users/me", headers=auth_headers)
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["email"] == "admin@krixflow.com"
    assert data["instructor_rating"] is None
    assert data["created_at"]


def test_instructor_rating(client):
    token = register(client, email="teach@krixflow.com", role="INSTRUCTOR").json()["token"]
    headers = {"Authorization": f"Bearer {token}"}
    res = client.put("/api/users/me/instructor-rating", json={"rating": 4.5}, headers=headers)
    assert res.status_code == 200
    assert res.json()["data"]["instructor_rating"] == 4.5


def test_instructor_rating_forbidden_for_learner(client, auth_headers):
    res = client.put("/api/users/me/instructor-rating", json={"rating": 4}, headers=auth_headers)
    assert res.status_code == 403


def test_expired_access_token():
    payload = TokenPayload(user_id="abc", email="a@krixflow.com", role="LEARNER")
    token = create_access_token(payload, expires_delta=timedelta(seconds=-5))
    assert verify_access_token(token) is None


def test_tokens_are_not_interchangeable():
    payload = TokenPayload(user_id="abc", email="a@krixflow.com", role="LEARNER")
    assert verify_refresh_token(create_access_token(payload)) is None
    assert verify_access_token(create_refresh_token(payload)) is None
    assert verify_access_token(create_access_token(payload)) == payload
