"""Pytest configuration and fixtures for the quiz backend."""

import os

# Point the app at a throwaway in-memory database BEFORE anything imports it
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest


@pytest.fixture(scope="session", autouse=True)
def database():
    """Create all tables once for the test run."""
    from carnival_quiz.db.session import init_db

    init_db()
    yield


@pytest.fixture
def db():
    from carnival_quiz.db.session import SessionLocal

    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def completions():
    """Collects every snapshot handed to a completion receiver."""
    return []
