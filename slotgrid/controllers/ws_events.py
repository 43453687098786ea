import asyncio
import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from slotgrid.bus import EventBus
from slotgrid.dependencies import Redis

logger = logging.getLogger("slotgrid.ws.events")
router = APIRouter()

HEARTBEAT_SEC = 25


@router.websocket("/ws/events/{event_id}")
async def websocket_event_updates(websocket: WebSocket, event_id: str, redis_client: Redis):
    """Forward ``response_updated`` messages for one event to the client.

    Clients refetch ``/events/{event_id}/results`` when a message arrives;
    the socket itself carries no result data.
    """
    await websocket.accept()
    channel = EventBus.event_channel(event_id)
    pubsub = redis_client.pubsub()
    await pubsub.subscribe(channel)
    logger.info("ws connected event=%s", event_id)

    async def send_updates():
        try:
            async for message in pubsub.listen():
                if message["type"] == "message":
                    await websocket.send_text(message["data"])
        except Exception as e:
            logger.debug("ws update loop ended event=%s err=%r", event_id, e)

    async def heartbeat():
        try:
            while True:
                await asyncio.sleep(HEARTBEAT_SEC)
                await websocket.send_text(json.dumps({"type": "ping"}))
        except Exception as e:
            logger.debug("ws heartbeat ended event=%s err=%r", event_id, e)

    update_task = asyncio.create_task(send_updates())
    heartbeat_task = asyncio.create_task(heartbeat())

    try:
        while True:
            # inbound messages are ignored; receiving detects disconnects
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info("ws disconnected event=%s", event_id)
    finally:
        update_task.cancel()
        heartbeat_task.cancel()
        await pubsub.unsubscribe(channel)
        if hasattr(pubsub, "aclose"):
            await pubsub.aclose()
        else:
            await pubsub.close()
