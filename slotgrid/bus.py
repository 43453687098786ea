"""
Event bus for live result updates, backed by Redis pub/sub.
"""
import json
from typing import Final

import redis.asyncio as redis

from slotgrid.events import ResponseUpdatedEvent

CHANNEL_EVENT_PREFIX: Final[str] = "event:"


class EventBus:
    def __init__(self, redis_client: redis.Redis):
        self.redis_client = redis_client

    @staticmethod
    def event_channel(event_id: str) -> str:
        return f"{CHANNEL_EVENT_PREFIX}{event_id}"

    async def publish_response_updated(self, event: ResponseUpdatedEvent) -> None:
        await self.redis_client.publish(self.event_channel(event["event_id"]), json.dumps(event))
