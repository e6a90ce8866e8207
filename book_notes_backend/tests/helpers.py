"""Test helpers for authentication and common request operations."""

from fastapi.testclient import TestClient

from src.api.config import Settings

TEST_SECRET = "test-secret-for-book-notes-only"


def register(client: TestClient, email: str = "a@x.com", password: str = "secret1") -> dict:
    """Register a user and return the {token, user} body."""
    response = client.post("/api/auth/register", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def make_settings(**overrides) -> Settings:
    """Settings for an isolated in-memory database and cheap bcrypt."""
    values = {
        "JWT_SECRET": TEST_SECRET,
        "DATABASE_URL": "sqlite://",
        "BCRYPT_ROUNDS": 4,
        "LOG_JSON": False,
    }
    values.update(overrides)
    return Settings(**values)
