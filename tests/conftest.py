import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from typing import Callable

import mongomock
import pytest
from fastapi.testclient import TestClient

from refman.auth import session
from refman.infra import db

TEST_SECRET = "test-secret-key"


@pytest.fixture(autouse=True)
def test_env(monkeypatch):
    """Known secret, default cookie/perimeter settings, no real MongoDB."""
    monkeypatch.setenv("REFMAN_SECRET_KEY", TEST_SECRET)
    monkeypatch.setenv("REFMAN_ENV", "development")
    for name in ("SECRET_KEY", "REFMAN_COOKIE_SECURE", "REFMAN_PROTECTED_PATHS",
                 "REFMAN_SESSION_MAX_AGE", "REFMAN_COOKIE_NAME", "MONGODB_DATABASE"):
        monkeypatch.delenv(name, raising=False)
    session.reset_secret()
    yield
    session.reset_secret()


@pytest.fixture(autouse=True)
def mongo():
    # In-memory store shared by every request of the test.
    client = mongomock.MongoClient()
    db.set_client(client)
    yield client
    db.set_client(None)


@pytest.fixture()
def make_client() -> Callable[[], TestClient]:
    """Each TestClient has its own cookie jar, i.e. its own browser session."""
    from refman.app import app

    def _make() -> TestClient:
        return TestClient(app)

    return _make


@pytest.fixture()
def client(make_client) -> TestClient:
    return make_client()


def signup_and_login(client: TestClient, username: str, password: str = "pw12345") -> str:
    r = client.post(
        "/auth/signup",
        json={"first_name": "A", "last_name": "B", "username": username, "password": password},
    )
    assert r.status_code == 201, r.text
    r = client.post("/auth/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["id"]


def article_payload(**overrides) -> dict:
    data = {
        "title": "Quantum error correction in practice",
        "authors": ["Ada Lovelace", "Alan Turing"],
        "publication_date": "2021-05-04",
        "keywords": ["quantum", "qec"],
        "abstract": "A survey.",
        "journal": "Physical Review",
        "doi": "10.1000/qec.2021",
        "pages": ["101", "115"],
    }
    data.update(overrides)
    return data
