import os
import sys
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

# The app under test never talks to PostgreSQL; db calls are patched per test.
os.environ["ENABLE_DB"] = "0"

from datetime import date

import pytest
from fastapi.testclient import TestClient
import fakeredis.aioredis as fakeredis

from slotgrid.config import clear_settings_cache
import slotgrid.lifespan as lifespan
import slotgrid.main as main


class _AwaitableRedis:
    def __init__(self, client):
        self._client = client

    def __await__(self):
        async def _coro():
            return self._client

        return _coro().__await__()


@pytest.fixture
def client(monkeypatch):
    def fake_redis_constructor(*_args, **_kwargs):
        fake = fakeredis.FakeRedis(decode_responses=True)
        return _AwaitableRedis(fake)

    monkeypatch.setenv("ENABLE_DB", "0")
    clear_settings_cache()
    monkeypatch.setattr(lifespan.redis, "Redis", fake_redis_constructor)

    with TestClient(main.app) as c:
        yield c
    clear_settings_cache()


@pytest.fixture
def standard_event_row():
    """Two days, 09:00-11:00 in one-hour slots: four slots in total."""
    return {
        "id": "abc123",
        "title": "Team sync",
        "description": None,
        "timezone": "UTC",
        "start_date": date(2025, 3, 3),
        "end_date": date(2025, 3, 4),
        "scheme": {
            "kind": "standard",
            "day_start_time": "09:00",
            "day_end_time": "11:00",
            "slot_minutes": 60,
            "min_duration_minutes": 60,
        },
        "admin_token_hash": "",
        "created_at": "2025-03-01T00:00:00+00:00",
        "updated_at": "2025-03-01T00:00:00+00:00",
    }


@pytest.fixture
def response_row():
    def _make(email: str, slots: list[int], name: str | None = None) -> dict:
        return {
            "event_id": "abc123",
            "name": name or email.split("@")[0],
            "email": email,
            "availability_slots": slots,
            "created_at": "2025-03-01T00:00:00+00:00",
            "updated_at": "2025-03-01T00:00:00+00:00",
        }

    return _make
