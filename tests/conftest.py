import pytest
from fastapi.testclient import TestClient

from order_delivery_service.config import Settings
from order_delivery_service.main import create_app


@pytest.fixture
def app():
    return create_app(Settings(database_url="sqlite://"))


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def order_payload():
    return {
        "customer_name": "Jane Doe",
        "customer_address": "12 Harbour Street",
        "customer_phone": "555-0101",
        "customer_email": "jane@example.com",
        "notes": "Leave at the door",
        "items": [
            {"name": "Margherita", "price": 10, "quantity": 2},
            {"name": "Lemonade", "price": 5, "quantity": 1},
        ],
    }


@pytest.fixture
def create_order(client, order_payload):
    def _create(**overrides):
        payload = {**order_payload, **overrides}
        response = client.post("/api/orders", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _create
