"""
Test configuration and fixtures for the FODMAP diary.

- Fresh in-memory SQLite engine per test (StaticPool keeps one connection)
- DiaryStore / DiaryService built on that session
- MockClaudeService in place of the Anthropic-backed provider
- TestClient with database and AI dependency overrides
"""

import os

# Must be set before the app modules read settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")
os.environ["DIARY_TIMEZONE"] = "UTC"

from datetime import timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from fodmap_diary.api.dependencies import get_ai_service
from fodmap_diary.database import Base, get_db
from fodmap_diary.main import app
from fodmap_diary.services.diary_service import DiaryService
from fodmap_diary.services.diary_store import DiaryStore
from tests.fixtures.mocks import MockClaudeService


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def test_engine():
    """In-memory database with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    yield engine

    engine.dispose()


@pytest.fixture
def db(test_engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(bind=test_engine)
    session = TestingSessionLocal()

    yield session

    session.close()


@pytest.fixture
def store(db: Session) -> DiaryStore:
    return DiaryStore(db)


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def mock_claude_service() -> MockClaudeService:
    """
    Deterministic stand-in for ClaudeService.

    Configure per test with set_classify_response / set_analyze_response /
    set_error.
    """
    return MockClaudeService()


@pytest.fixture
def diary(store: DiaryStore, mock_claude_service: MockClaudeService) -> DiaryService:
    return DiaryService(store, mock_claude_service, tz=timezone.utc)


# =============================================================================
# TestClient Fixtures
# =============================================================================


@pytest.fixture
def client(db: Session, mock_claude_service: MockClaudeService) -> Generator[TestClient, None, None]:
    """TestClient with the test session and the mock AI provider injected."""

    def override_get_db():
        try:
            yield db
        finally:
            pass  # Don't close - managed by db fixture

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ai_service] = lambda: mock_claude_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# pytest markers
# =============================================================================


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
