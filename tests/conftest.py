from __future__ import annotations

from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient

from taskboard.config import Settings
from taskboard.main import create_app
from taskboard.models import Role

PASSWORD = "secret123"


@dataclass
class Account:
    id: str
    email: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        secret_key="test-secret",
        database_url="sqlite://",
        upload_dir=tmp_path / "uploads",
        asset_base_url="http://assets.test",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def role_ids(db) -> dict[str, str]:
    return {role.name: role.id for role in db.query(Role).all()}


def register(client: TestClient, email: str, role: str | None = None, **extra) -> dict:
    payload = {
        "first_name": "Test",
        "last_name": "User",
        "email": email,
        "password": PASSWORD,
        **extra,
    }
    if role is not None:
        payload["role"] = role
    resp = client.post("/user/register", json=payload)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def login(client: TestClient, email: str, password: str = PASSWORD) -> str:
    resp = client.post("/user/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]["token"]


def make_account(client: TestClient, email: str, role: str | None = None) -> Account:
    user = register(client, email, role=role)
    return Account(id=user["id"], email=email, token=login(client, email))


@pytest.fixture
def admin(client, role_ids) -> Account:
    return make_account(client, "admin@example.com", role=role_ids["Admin"])


@pytest.fixture
def alice(client) -> Account:
    return make_account(client, "alice@example.com")


@pytest.fixture
def bob(client) -> Account:
    return make_account(client, "bob@example.com")


@pytest.fixture
def todo_status(client, admin) -> dict:
    resp = client.post("/status/create", json={"name": "To Do", "order": 1}, headers=admin.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


@pytest.fixture
def done_status(client, admin) -> dict:
    resp = client.post("/status/create", json={"name": "Done", "order": 3}, headers=admin.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def create_task(client: TestClient, account: Account, status_id: str, **fields) -> dict:
    payload = {"title": "Write report", "status": status_id, **fields}
    resp = client.post("/task/create", json=payload, headers=account.headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]
