"""Dependency injection for FastAPI endpoints.

Controllers reach the Redis client and the event bus through these
dependencies instead of reading ``slotgrid.state`` directly.

Usage in controllers:
    from slotgrid.dependencies import OptionalBus

    @router.post("/events/{event_id}/responses")
    async def submit(event_id: str, bus: OptionalBus):
        ...
"""

from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends

from slotgrid import state
from slotgrid.bus import EventBus
from slotgrid.errors import ServiceUnavailableError


def get_redis() -> redis.Redis:
    """Get the Redis client.

    Raises:
        ServiceUnavailableError: If Redis is not connected.
    """
    if state.redis_client is None:
        raise ServiceUnavailableError(detail="Redis not connected")
    return state.redis_client


def get_optional_event_bus() -> EventBus | None:
    """Get the EventBus if live updates are running, or None."""
    return state.event_bus


Redis = Annotated[redis.Redis, Depends(get_redis)]
OptionalBus = Annotated[EventBus | None, Depends(get_optional_event_bus)]
