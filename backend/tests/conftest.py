"""
Shared fixtures.

Tests run against an in-memory SQLite database with SMTP disabled. The
environment is set before anything from ``tradesmen`` is imported because
settings, the engine and logging are all configured at import time.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SMTP_USERNAME"] = ""
os.environ["SMTP_PASSWORD"] = ""
os.environ["LOG_JSON"] = "false"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from tradesmen.api.app import app  # noqa: E402
from tradesmen.lib.db import Base, SessionLocal, drop_db, engine, init_db  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def database():
    init_db()
    yield
    drop_db()


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    """TestClient with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
