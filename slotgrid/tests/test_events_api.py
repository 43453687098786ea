import hashlib
from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from slotgrid.controllers.events import (
    create_event,
    find_response,
    get_results,
    submit_response,
)
from slotgrid.errors import (
    ConfigurationMissingError,
    DatabaseError,
    InvalidEventConfigError,
    InvalidSlotSelectionError,
    NotFoundError,
)
from slotgrid.models.events import CreateEventRequest, SubmitResponseRequest


@pytest.fixture
def mock_db():
    with patch("slotgrid.controllers.events.db") as mock:
        yield mock


def _create_request(**overrides) -> CreateEventRequest:
    payload = {
        "title": "  Team sync  ",
        "start_date": "2025-03-03",
        "end_date": "2025-03-04",
        "mode": "timeRange",
        "time_mode": "standard",
        "day_start_time": "09:00",
        "day_end_time": "11:00",
        "slot_minutes": 60,
        "min_duration_minutes": 60,
    }
    payload.update(overrides)
    return CreateEventRequest(**payload)


def _echo_created_event(**kwargs):
    return {
        "id": "abc123",
        "created_at": "2025-03-01T00:00:00+00:00",
        "updated_at": "2025-03-01T00:00:00+00:00",
        **kwargs,
    }


class TestCreateEvent:
    @pytest.mark.asyncio
    async def test_creates_standard_event(self, mock_db):
        mock_db.create_event = AsyncMock(side_effect=_echo_created_event)

        result = await create_event(_create_request())

        assert result.id == "abc123"
        assert result.title == "Team sync"
        assert result.total_slots == 4
        assert result.slots_per_day == 2
        assert result.mode == "timeRange"
        assert result.time_mode == "standard"
        kwargs = mock_db.create_event.call_args.kwargs
        assert kwargs["scheme"]["kind"] == "standard"
        assert kwargs["admin_token_hash"] == hashlib.sha256(result.admin_token.encode()).hexdigest()

    @pytest.mark.asyncio
    async def test_period_event_has_three_slots_per_day(self, mock_db):
        mock_db.create_event = AsyncMock(side_effect=_echo_created_event)

        result = await create_event(_create_request(time_mode="period", slot_minutes=180))

        assert result.slots_per_day == 3
        assert result.total_slots == 6

    @pytest.mark.asyncio
    async def test_rejects_end_before_start(self, mock_db):
        mock_db.create_event = AsyncMock()

        with pytest.raises(InvalidEventConfigError):
            await create_event(_create_request(start_date="2025-03-05", end_date="2025-03-04"))
        mock_db.create_event.assert_not_called()

    @pytest.mark.asyncio
    async def test_rejects_overlapping_custom_slots(self, mock_db):
        mock_db.create_event = AsyncMock()
        custom = [
            {"label": "A", "start_time": "09:00", "end_time": "10:00"},
            {"label": "B", "start_time": "09:30", "end_time": "11:00"},
        ]
        with pytest.raises(InvalidEventConfigError):
            await create_event(_create_request(time_mode="custom", custom_time_slots=custom))

    @pytest.mark.asyncio
    async def test_rejects_long_time_range(self, mock_db):
        mock_db.create_event = AsyncMock()

        with pytest.raises(InvalidEventConfigError, match="14 days"):
            await create_event(_create_request(end_date="2025-03-20"))

    @pytest.mark.asyncio
    async def test_full_day_may_exceed_day_limit(self, mock_db):
        mock_db.create_event = AsyncMock(side_effect=_echo_created_event)

        result = await create_event(_create_request(mode="fullDay", end_date="2025-04-30"))

        assert result.total_slots == 59

    @pytest.mark.asyncio
    async def test_database_failure(self, mock_db):
        mock_db.create_event = AsyncMock(side_effect=RuntimeError("boom"))

        with pytest.raises(DatabaseError):
            await create_event(_create_request())


class TestSubmitResponse:
    @pytest.mark.asyncio
    async def test_normalizes_email_and_dedupes_slots(self, mock_db, standard_event_row, response_row):
        mock_db.get_event = AsyncMock(return_value=standard_event_row)
        mock_db.upsert_response = AsyncMock(
            return_value=(response_row("ann@example.com", [0, 1], name="Ann"), True)
        )
        req = SubmitResponseRequest(name=" Ann ", email="  Ann@Example.COM ", availability_slots=[1, 0, 1])

        result = await submit_response("abc123", req, None)

        mock_db.upsert_response.assert_called_once_with("abc123", "ann@example.com", "Ann", [0, 1])
        assert result.is_update is False
        assert result.response.availability_slots == [0, 1]

    @pytest.mark.asyncio
    async def test_resubmission_reports_update(self, mock_db, standard_event_row, response_row):
        mock_db.get_event = AsyncMock(return_value=standard_event_row)
        mock_db.upsert_response = AsyncMock(return_value=(response_row("ann@example.com", [3]), False))

        result = await submit_response(
            "abc123", SubmitResponseRequest(name="Ann", email="ann@example.com", availability_slots=[3]), None
        )

        assert result.is_update is True

    @pytest.mark.asyncio
    async def test_out_of_range_slots_rejected(self, mock_db, standard_event_row):
        mock_db.get_event = AsyncMock(return_value=standard_event_row)
        mock_db.upsert_response = AsyncMock()

        with pytest.raises(InvalidSlotSelectionError) as exc_info:
            await submit_response(
                "abc123", SubmitResponseRequest(name="Ann", email="a@b.co", availability_slots=[0, 4]), None
            )
        assert exc_info.value.status_code == 400
        mock_db.upsert_response.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_event(self, mock_db):
        mock_db.get_event = AsyncMock(return_value=None)

        with pytest.raises(ConfigurationMissingError):
            await submit_response("nope", SubmitResponseRequest(name="Ann", email="a@b.co"), None)

    @pytest.mark.asyncio
    async def test_publishes_update(self, mock_db, standard_event_row, response_row):
        mock_db.get_event = AsyncMock(return_value=standard_event_row)
        mock_db.upsert_response = AsyncMock(return_value=(response_row("a@b.co", [0]), True))
        bus = AsyncMock()

        await submit_response("abc123", SubmitResponseRequest(name="Ann", email="a@b.co", availability_slots=[0]), bus)

        event = bus.publish_response_updated.call_args.args[0]
        assert event["type"] == "response_updated"
        assert event["event_id"] == "abc123"
        assert event["is_update"] is False

    @pytest.mark.asyncio
    async def test_publish_failure_does_not_fail_submission(self, mock_db, standard_event_row, response_row):
        mock_db.get_event = AsyncMock(return_value=standard_event_row)
        mock_db.upsert_response = AsyncMock(return_value=(response_row("a@b.co", [0]), True))
        bus = AsyncMock()
        bus.publish_response_updated.side_effect = ConnectionError("redis down")

        result = await submit_response(
            "abc123", SubmitResponseRequest(name="Ann", email="a@b.co", availability_slots=[0]), bus
        )

        assert result.response.email == "a@b.co"


class TestFindResponse:
    @pytest.mark.asyncio
    async def test_lookup_uses_normalized_email(self, mock_db, standard_event_row, response_row):
        mock_db.get_event = AsyncMock(return_value=standard_event_row)
        mock_db.get_response = AsyncMock(return_value=response_row("ann@example.com", [1]))

        result = await find_response("abc123", email=" ANN@example.com")

        mock_db.get_response.assert_called_once_with("abc123", "ann@example.com")
        assert result.availability_slots == [1]

    @pytest.mark.asyncio
    async def test_missing_response(self, mock_db, standard_event_row):
        mock_db.get_event = AsyncMock(return_value=standard_event_row)
        mock_db.get_response = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await find_response("abc123", email="ann@example.com")


class TestGetResults:
    @pytest.mark.asyncio
    async def test_standard_scenario(self, mock_db, standard_event_row, response_row):
        mock_db.get_event = AsyncMock(return_value=standard_event_row)
        mock_db.list_responses = AsyncMock(return_value=[
            response_row("a@x.io", [0, 1]),
            response_row("b@x.io", [1, 2]),
            response_row("c@x.io", [1]),
        ])

        out = await get_results("abc123", top_n=None)

        assert out.event.start_date == date(2025, 3, 3)
        assert out.results.counts == [1, 3, 1, 0]
        assert out.results.common_slots == [1]
        assert out.results.total_participants == 3
        assert [w.slots for w in out.results.recommended_slots] == [[1], [0], [2]]

    @pytest.mark.asyncio
    async def test_unknown_event(self, mock_db):
        mock_db.get_event = AsyncMock(return_value=None)
        mock_db.list_responses = AsyncMock()

        with pytest.raises(ConfigurationMissingError):
            await get_results("nope", top_n=None)
        mock_db.list_responses.assert_not_called()


class TestHttp:
    def test_create_and_fetch_results(self, client, standard_event_row, response_row):
        with patch("slotgrid.controllers.events.db") as mock:
            mock.create_event = AsyncMock(side_effect=_echo_created_event)
            res = client.post("/events", json={
                "title": "Offsite",
                "start_date": "2025-03-03",
                "end_date": "2025-03-05",
                "mode": "fullDay",
            })
            assert res.status_code == 201
            body = res.json()
            assert body["total_slots"] == 3
            assert body["scheme"] == {"kind": "full_day"}
            assert body["admin_token"]

            mock.get_event = AsyncMock(return_value=standard_event_row)
            mock.list_responses = AsyncMock(return_value=[response_row("a@x.io", [1])])
            res = client.get("/events/abc123/results", params={"top_n": 1})
            assert res.status_code == 200
            results = res.json()["results"]
            assert results["counts"] == [0, 1, 0, 0]
            assert len(results["recommended_slots"]) == 1
            assert results["slot_availability"]["1"]["available"] == ["a"]

    def test_invalid_config_returns_422(self, client):
        with patch("slotgrid.controllers.events.db"):
            res = client.post("/events", json={
                "title": "Bad",
                "start_date": "2025-03-03",
                "end_date": "2025-03-04",
                "mode": "timeRange",
                "time_mode": "standard",
                "day_start_time": "12:00",
                "day_end_time": "09:00",
                "slot_minutes": 30,
            })
        assert res.status_code == 422
        assert res.json()["error"] == "invalid_event_config"

    def test_unknown_event_returns_404(self, client):
        with patch("slotgrid.controllers.events.db") as mock:
            mock.get_event = AsyncMock(return_value=None)
            res = client.get("/events/missing")
        assert res.status_code == 404
        assert res.json()["error"] == "configuration_missing"

    def test_slot_grid(self, client, standard_event_row):
        with patch("slotgrid.controllers.events.db") as mock:
            mock.get_event = AsyncMock(return_value=standard_event_row)
            res = client.get("/events/abc123/slots")
        assert res.status_code == 200
        slots = res.json()["slots"]
        assert [s["slot_index"] for s in slots] == [0, 1, 2, 3]
        assert slots[2]["date"] == "2025-03-04"
        assert slots[2]["start"] == "2025-03-04T09:00:00"
        assert slots[2]["label"] == "09:00-10:00"

    def test_invalid_email_returns_422(self, client):
        res = client.post("/events/abc123/responses", json={"name": "Ann", "email": "nope"})
        assert res.status_code == 422

    def test_delete_requires_admin_token(self, client, standard_event_row):
        row = {**standard_event_row, "admin_token_hash": hashlib.sha256(b"secret").hexdigest()}
        with patch("slotgrid.controllers.events.db") as mock:
            mock.get_event = AsyncMock(return_value=row)
            mock.delete_event = AsyncMock(return_value=True)

            res = client.delete("/events/abc123", headers={"X-Admin-Token": "wrong"})
            assert res.status_code == 403
            mock.delete_event.assert_not_called()

            res = client.delete("/events/abc123", headers={"X-Admin-Token": "secret"})
            assert res.status_code == 204
            mock.delete_event.assert_called_once_with("abc123")
