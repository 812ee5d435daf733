import os

# Must be set before bookshelf.config is imported
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-testing-only")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["STORAGE_BACKEND"] = "memory"

import pytest  # noqa: E402

from bookshelf.auth.jwt_handler import JWTHandler  # noqa: E402
from bookshelf.auth.service import AuthService  # noqa: E402
from bookshelf.books.service import BookService  # noqa: E402
from bookshelf.storage import InMemoryBookStore, InMemoryCredentialStore  # noqa: E402

TEST_SECRET = "test-secret-key-for-testing-only"


@pytest.fixture
def jwt_handler():
    """JWTHandler with a fixed test secret."""
    return JWTHandler(
        secret_key=TEST_SECRET,
        algorithm="HS256",
        access_token_expire_minutes=15,
    )


@pytest.fixture
def credential_store():
    return InMemoryCredentialStore()


@pytest.fixture
def book_store():
    return InMemoryBookStore()


@pytest.fixture
def auth_service(credential_store, jwt_handler):
    return AuthService(credential_store, jwt_handler)


@pytest.fixture
def book_service(book_store):
    return BookService(book_store)


@pytest.fixture
def book_fields():
    """A valid set of book fields."""
    return {
        "title": "Dune",
        "author": "Frank Herbert",
        "description": "Spice, sand and politics on Arrakis.",
        "category": "Science-Fiction",
        "isbn": "978-0-441-17271-9",
        "published_year": 1965,
    }


@pytest.fixture
def app(auth_service, book_service):
    """Application wired to in-memory services."""
    from bookshelf.api.app import create_app

    return create_app(auth_service=auth_service, book_service=book_service, storage="memory")


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    return TestClient(app)


@pytest.fixture
def register_user(client):
    """Register through the API and return the bearer headers."""

    def _register(username="reader", email="reader@example.com", password="Password123!"):
        response = client.post(
            "/v1/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        assert response.status_code == 201, response.text
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _register


@pytest.fixture
def auth_headers(register_user):
    return register_user()
