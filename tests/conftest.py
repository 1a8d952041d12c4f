import uuid

import pytest
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from krixflow.db import get_db, init_indexes
from main import app


@pytest.fixture
async def mock_db():
    database = AsyncMongoMockClient()[f"krixflow_test_{uuid.uuid4().hex[:8]}"]
    await init_indexes(database)
    return database


@pytest.fixture
def client(mock_db):
    app.dependency_overrides[get_db] = lambda: mock_db
    # no context manager: the lifespan would reach for the real Mongo
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, email="admin@krixflow.com", password="admin123", name="Admin User", role=None):
    body = {"name": name, "email": email, "password": password}
    if role:
        body["role"] = role
    return client.post("/api/auth/register", json=body)


@pytest.fixture
def auth_headers(client):
    res = register(client)
    assert res.status_code == 201, res.text
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture
def user_id(client, auth_headers):
    return client.get("/api/users/me", headers=auth_headers).json()["data"]["id"]
