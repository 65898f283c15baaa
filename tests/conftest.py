import pytest
from fastapi.testclient import TestClient

from src.config import Settings
from src.db import Store
from src.main import create_app

ALLOWED_ORIGIN = "https://app.example.com"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'contacts.db'}",
        http_port=0,
        https_port=0,
        ssl_cert_path=str(tmp_path / "missing.crt"),
        ssl_key_path=str(tmp_path / "missing.pem"),
        cors_origin=ALLOWED_ORIGIN,
    )


@pytest.fixture
def store(settings):
    return Store(settings.database_url)


@pytest.fixture
def app(settings, store):
    return create_app(settings, store)


@pytest.fixture
def client(app, store):
    # Initialize through the client's portal so the engine and the requests
    # run on the same event loop.
    with TestClient(app) as client:
        client.portal.call(store.initialize)
        yield client
        client.portal.call(store.dispose)


@pytest.fixture
def csrf_headers(client):
    def _headers():
        response = client.get("/health")
        return {"X-CSRF-Token": response.headers["X-CSRF-Token"]}

    return _headers


@pytest.fixture
def create_contact(client, csrf_headers):
    def _create(**fields):
        payload = {"firstname": "Ann", "lastname": "Lee", "email": "a@x.com"}
        payload.update(fields)
        response = client.post("/contacts", json=payload, headers=csrf_headers())
        assert response.status_code == 201, response.text
        return response.json()

    return _create
