"""Persistence for events and participant responses (PostgreSQL via psycopg)."""

from slotgrid.db.core import close_pool, get_pool_stats, init_pool
from slotgrid.db.events import (
    create_event,
    delete_event,
    get_event,
    get_response,
    list_responses,
    upsert_response,
)

__all__ = [
    "close_pool",
    "create_event",
    "delete_event",
    "get_event",
    "get_pool_stats",
    "get_response",
    "init_pool",
    "list_responses",
    "upsert_response",
]
