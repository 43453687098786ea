import hashlib
import logging
import secrets
from datetime import UTC, datetime
from typing import Any

from fastapi import APIRouter, Header, Query

from slotgrid import db
from slotgrid.config import get_settings
from slotgrid.dependencies import OptionalBus
from slotgrid.errors import (
    BadRequestError,
    ConfigurationMissingError,
    DatabaseError,
    ForbiddenError,
    InvalidEventConfigError,
    InvalidSlotSelectionError,
    NotFoundError,
)
from slotgrid.events import ResponseUpdatedEvent
from slotgrid.models.events import (
    CreatedEventOut,
    CreateEventRequest,
    EventOut,
    ResponseOut,
    ResultsOut,
    SlotGridOut,
    SubmitResponseOut,
    SubmitResponseRequest,
)
from slotgrid.scheduling import (
    CustomScheme,
    EventConfig,
    FullDayScheme,
    ParticipantResponse,
    compute_results,
    invalid_slots,
    iter_slots,
    normalize_email,
)

logger = logging.getLogger("slotgrid.events")
router = APIRouter(tags=["events"])


def _hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def _event_config(row: dict[str, Any]) -> EventConfig:
    return EventConfig(
        start_date=row["start_date"],
        end_date=row["end_date"],
        scheme=row["scheme"],
        timezone=row["timezone"],
    )


def _event_out(row: dict[str, Any], config: EventConfig) -> EventOut:
    return EventOut(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        timezone=config.timezone,
        start_date=config.start_date,
        end_date=config.end_date,
        mode=config.scheme.mode,
        time_mode=config.scheme.time_mode,
        scheme=config.scheme,
        days_in_range=config.days_in_range,
        slots_per_day=config.slots_per_day,
        total_slots=config.total_slots,
        created_at=row["created_at"],
    )


async def _load_event(event_id: str) -> tuple[dict[str, Any], EventConfig]:
    row = await db.get_event(event_id)
    if not row:
        logger.warning("Event not found: %s", event_id)
        raise ConfigurationMissingError(detail="Event not found", event_id=event_id)
    return row, _event_config(row)


def _check_limits(config: EventConfig) -> None:
    limits = get_settings().scheduling
    if not isinstance(config.scheme, FullDayScheme) and config.days_in_range > limits.max_days:
        raise InvalidEventConfigError(
            detail=f"Time-range events may span at most {limits.max_days} days",
            days_in_range=config.days_in_range,
        )
    if isinstance(config.scheme, CustomScheme) and len(config.scheme.intervals) > limits.max_custom_intervals:
        raise InvalidEventConfigError(
            detail=f"At most {limits.max_custom_intervals} custom intervals are allowed",
        )


@router.post("/events", status_code=201, response_model=CreatedEventOut)
async def create_event(req: CreateEventRequest) -> CreatedEventOut:
    logger.info("POST /events title=%s mode=%s time_mode=%s", req.title, req.mode, req.time_mode)
    config = req.to_event_config()
    _check_limits(config)
    admin_token = secrets.token_urlsafe(24)
    try:
        row = await db.create_event(
            title=req.title,
            description=req.description,
            timezone=config.timezone,
            start_date=config.start_date,
            end_date=config.end_date,
            scheme=config.scheme.model_dump(),
            admin_token_hash=_hash_token(admin_token),
        )
    except Exception as e:
        logger.exception("Failed to create event")
        raise DatabaseError(detail=str(e)) from e
    logger.info("Created event id=%s total_slots=%d", row["id"], config.total_slots)
    return CreatedEventOut(**_event_out(row, config).model_dump(), admin_token=admin_token)


@router.get("/events/{event_id}", response_model=EventOut)
async def get_event(event_id: str) -> EventOut:
    logger.info("GET /events/%s", event_id)
    row, config = await _load_event(event_id)
    return _event_out(row, config)


@router.delete("/events/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    x_admin_token: str | None = Header(default=None),
) -> None:
    logger.info("DELETE /events/%s", event_id)
    row, _ = await _load_event(event_id)
    if not x_admin_token or not secrets.compare_digest(_hash_token(x_admin_token), row["admin_token_hash"]):
        logger.warning("Rejected delete for event %s: bad admin token", event_id)
        raise ForbiddenError(detail="Invalid or missing admin token")
    await db.delete_event(event_id)
    logger.info("Deleted event %s", event_id)


@router.get("/events/{event_id}/slots", response_model=SlotGridOut)
async def get_slots(event_id: str) -> SlotGridOut:
    _, config = await _load_event(event_id)
    return SlotGridOut(
        event_id=event_id,
        slots_per_day=config.slots_per_day,
        total_slots=config.total_slots,
        slots=list(iter_slots(config)),
    )


@router.post("/events/{event_id}/responses", response_model=SubmitResponseOut)
async def submit_response(event_id: str, req: SubmitResponseRequest, bus: OptionalBus) -> SubmitResponseOut:
    logger.info("POST /events/%s/responses slots=%d", event_id, len(req.availability_slots))
    _, config = await _load_event(event_id)
    bad = invalid_slots(req.availability_slots, config.total_slots)
    if bad:
        logger.warning("Invalid slots %s for event %s", bad[:10], event_id)
        raise InvalidSlotSelectionError(
            detail=f"Slot indices out of range: {bad[:10]}",
            total_slots=config.total_slots,
        )
    try:
        saved, inserted = await db.upsert_response(
            event_id, req.email, req.name, sorted(set(req.availability_slots))
        )
    except Exception as e:
        logger.exception("Failed to upsert response")
        raise DatabaseError(detail=str(e)) from e
    logger.info("%s response on event %s", "Created" if inserted else "Updated", event_id)

    if bus is not None:
        update: ResponseUpdatedEvent = {
            "type": "response_updated",
            "event_id": event_id,
            "name": req.name,
            "is_update": not inserted,
            "timestamp": datetime.now(UTC).isoformat(),
        }
        try:
            await bus.publish_response_updated(update)
        except Exception as e:
            # live updates are best effort; the response is already stored
            logger.warning("Failed to publish update for event %s: %s", event_id, e)

    return SubmitResponseOut(response=ResponseOut(**saved), is_update=not inserted)


@router.get("/events/{event_id}/responses", response_model=ResponseOut)
async def find_response(event_id: str, email: str = Query(..., description="Participant email")) -> ResponseOut:
    try:
        identity = normalize_email(email)
    except ValueError as e:
        raise BadRequestError(detail=str(e)) from e
    await _load_event(event_id)
    saved = await db.get_response(event_id, identity)
    if not saved:
        raise NotFoundError(detail="No response for this email", event_id=event_id)
    return ResponseOut(**saved)


@router.get("/events/{event_id}/results", response_model=ResultsOut)
async def get_results(
    event_id: str,
    top_n: int | None = Query(None, ge=1, description="Number of recommended windows"),
) -> ResultsOut:
    logger.info("GET /events/%s/results", event_id)
    limits = get_settings().scheduling
    row, config = await _load_event(event_id)
    rows = await db.list_responses(event_id)
    responses = [ParticipantResponse.model_validate(r) for r in rows]
    results = compute_results(config, responses, min(top_n or limits.default_top_n, limits.max_top_n))
    logger.info(
        "Returning results for %s: participants=%d common=%d",
        event_id,
        results.total_participants,
        len(results.common_slots),
    )
    return ResultsOut(event=_event_out(row, config), results=results)
