from typing import Optional

import redis.asyncio as redis

from slotgrid.bus import EventBus

# Global runtime state initialized in slotgrid.lifespan
redis_client: Optional[redis.Redis] = None
event_bus: Optional[EventBus] = None
