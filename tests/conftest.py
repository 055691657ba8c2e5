from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from grinder_relay.common.exceptions import PersistenceError
from grinder_relay.config import Settings
from grinder_relay.main import create_app
from grinder_relay.services.event_store import InMemoryEventStore

GATEWAY_TOKEN = "gateway-secret-token"
ADMIN_USER = "admin"
ADMIN_PASS = "grinder-pass"


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 8, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


class FailingEventStore(InMemoryEventStore):
    """Accepts reads but rejects every append."""

    def append(self, event):  # type: ignore[no-untyped-def]
        raise PersistenceError("database unavailable", operation="append")


def make_settings(**overrides) -> Settings:  # type: ignore[no-untyped-def]
    values = {
        "jwt_secret": "test-jwt-secret",
        "admin_user": ADMIN_USER,
        "admin_pass": ADMIN_PASS,
        "gateway_token": GATEWAY_TOKEN,
        "supabase_url": "",
        "supabase_service_key": "",
        "gateway_url": "",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def client(clock: FakeClock, store: InMemoryEventStore) -> TestClient:
    app = create_app(settings=make_settings(), store=store, clock=clock)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def gateway_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {GATEWAY_TOKEN}"}


@pytest.fixture
def user_headers(client: TestClient) -> dict[str, str]:
    response = client.post("/api/login", json={"username": ADMIN_USER, "password": ADMIN_PASS})
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
