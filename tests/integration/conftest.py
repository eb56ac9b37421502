"""Fixtures for HTTP-level tests."""
import pytest
from fastapi.testclient import TestClient
from hospital_scheduler.api.dependencies import get_reset_service, get_store
from hospital_scheduler.api_server import app
from hospital_scheduler.daily_reset import DailyResetService


@pytest.fixture
def client(store, clock):
    """Create FastAPI test client bound to the in-memory store and fake clock."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_reset_service] = lambda: DailyResetService(store, clock=clock)
    yield TestClient(app)
    app.dependency_overrides.clear()
