import pytest
from fastapi.testclient import TestClient

from storefront import crud, seed
from storefront.main import create_app

ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def app():
    return create_app(database_url="sqlite://", session_secret="test-secret", seed_data=False)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def session_factory(app, client):
    # tables exist once the client has run the app lifespan
    return app.state.database.session


@pytest.fixture
def admin_user(session_factory):
    with session_factory() as db:
        return seed.ensure_admin_user(db, ADMIN_USERNAME, ADMIN_PASSWORD)


@pytest.fixture
def admin_client(client, admin_user):
    resp = client.post(
        "/api/login", json={"username": ADMIN_USERNAME, "password": ADMIN_PASSWORD}
    )
    assert resp.status_code == 200
    return client


@pytest.fixture
def make_product(session_factory):
    def _make(**overrides):
        data = {
            "name": "Ketchup",
            "description": "Fresh tomato ketchup.",
            "price": 250,
            "image_url": "https://example.com/ketchup.jpg",
            "category": "Sauces",
            "available": True,
        }
        data.update(overrides)
        with session_factory() as db:
            return crud.create_product(db, data)

    return _make


@pytest.fixture
def order_payload():
    def _payload(items):
        return {
            "customerName": "Ayesha Khan",
            "customerAddress": "12 Mall Road, Lahore",
            "customerPhone": "+92 300 1234567",
            "customerEmail": "ayesha@example.com",
            "items": items,
        }

    return _payload


@pytest.fixture
def count_rows(session_factory):
    def _count(model) -> int:
        with session_factory() as db:
            return db.query(model).count()

    return _count
