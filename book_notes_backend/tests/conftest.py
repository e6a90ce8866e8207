"""Pytest configuration and fixtures.

Each test gets a fresh application bound to its own in-memory SQLite
database, so no data leaks between tests. bcrypt runs at its minimum cost
to keep the suite fast.
"""

from collections.abc import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from src.api.config import Settings
from src.api.main import create_app

from helpers import make_settings, register


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings, configure_logs=False)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(app: FastAPI) -> Generator[Session, None, None]:
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def alice(client: TestClient) -> dict:
    return register(client, "a@x.com", "secret1")


@pytest.fixture
def bob(client: TestClient) -> dict:
    return register(client, "b@x.com", "secret2")
