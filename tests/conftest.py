"""
Pytest configuration and fixtures for the SecureGuard control service tests.
"""
import pytest
from fastapi.testclient import TestClient

from guard.service import create_app
from guard.store import SecurityStore
from guard.system_changes import RecordingApplier

API = "/api/security"


@pytest.fixture
def store():
    """Fresh seeded store per test"""
    return SecurityStore()


@pytest.fixture
def applier():
    return RecordingApplier()


@pytest.fixture
def app(store, applier):
    return create_app(store=store, applier=applier)


@pytest.fixture
def client(app):
    """Provide FastAPI test client"""
    with TestClient(app) as test_client:
        yield test_client


def log_count(store: SecurityStore) -> int:
    return store.count_activity_logs()
