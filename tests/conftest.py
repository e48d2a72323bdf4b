# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# Builds a fresh application per test against an in-memory SQLite database
# and provides helpers for registering users and creating resources.
# =============================================================================

import pytest

from tangent.app import create_app
from tangent.extensions import db


TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite://",
    "JWT_SECRET_KEY": "test-jwt-secret-key-with-enough-length-for-hs256",
    "BCRYPT_LOG_ROUNDS": 4,
}


# =============================================================================
# Application Fixtures
# =============================================================================

@pytest.fixture
def app():
    """Application with all tables created."""
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


# =============================================================================
# Auth Fixtures
# =============================================================================

def register(client, name="John Doe", email="doe@tangent.io", password="demo12345"):
    return client.post("/api/register", json={
        "name": name,
        "email": email,
        "password": password,
        "confirm_password": password,
    })


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(client):
    """Headers for a freshly registered user (id 1)."""
    response = register(client)
    return bearer(response.get_json()["data"]["token"])


# =============================================================================
# Resource Fixtures
# =============================================================================

@pytest.fixture
def category(client, auth_headers):
    response = client.post("/api/categories", json={"name": "News", "content": "Daily news"},
                           headers=auth_headers)
    return response.get_json()["data"]


@pytest.fixture
def post(client, auth_headers, category):
    response = client.post("/api/posts", json={
        "title": "First post",
        "description": "Hello world",
        "category_id": category["id"],
    }, headers=auth_headers)
    return response.get_json()["data"]
