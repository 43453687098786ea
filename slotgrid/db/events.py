import secrets
import string
from datetime import UTC, date, datetime
from typing import Any

from psycopg import errors as pg_errors
from psycopg.types.json import Json

from slotgrid.db.core import _get_connection

_EVENT_COLUMNS = "id, title, description, timezone, start_date, end_date, scheme, admin_token_hash, created_at, updated_at"
_RESPONSE_COLUMNS = "event_id, name, email, availability_slots, created_at, updated_at"


def _generate_event_id(length: int = 10) -> str:
    chars = string.ascii_lowercase + string.digits
    return "".join(secrets.choice(chars) for _ in range(length))


def _event_row(row: tuple) -> dict[str, Any]:
    return {
        "id": row[0],
        "title": row[1],
        "description": row[2],
        "timezone": row[3],
        "start_date": row[4],
        "end_date": row[5],
        "scheme": row[6],
        "admin_token_hash": row[7],
        "created_at": row[8].astimezone(UTC).isoformat(),
        "updated_at": row[9].astimezone(UTC).isoformat(),
    }


def _response_row(row: tuple) -> dict[str, Any]:
    return {
        "event_id": row[0],
        "name": row[1],
        "email": row[2],
        "availability_slots": row[3],
        "created_at": row[4].astimezone(UTC).isoformat(),
        "updated_at": row[5].astimezone(UTC).isoformat(),
    }


async def create_event(
    title: str,
    start_date: date,
    end_date: date,
    scheme: dict[str, Any],
    admin_token_hash: str,
    description: str | None = None,
    timezone: str = "UTC",
) -> dict[str, Any]:
    now = datetime.now(UTC)
    async with _get_connection() as conn:
        for _ in range(10):
            event_id = _generate_event_id()
            try:
                await conn.execute(
                    f"""INSERT INTO events ({_EVENT_COLUMNS})
                        VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s)""",
                    (
                        event_id,
                        title,
                        description,
                        timezone,
                        start_date,
                        end_date,
                        Json(scheme),
                        admin_token_hash,
                        now,
                        now,
                    ),
                )
                return {
                    "id": event_id,
                    "title": title,
                    "description": description,
                    "timezone": timezone,
                    "start_date": start_date,
                    "end_date": end_date,
                    "scheme": scheme,
                    "admin_token_hash": admin_token_hash,
                    "created_at": now.isoformat(),
                    "updated_at": now.isoformat(),
                }
            except pg_errors.UniqueViolation:
                continue
        raise RuntimeError("Failed to generate unique event ID")


async def get_event(event_id: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        rows = await conn.execute(
            f"SELECT {_EVENT_COLUMNS} FROM events WHERE id = %s",
            (event_id,),
        )
        row = await rows.fetchone()
        if not row:
            return None
        return _event_row(row)


async def delete_event(event_id: str) -> bool:
    """Delete an event; its responses go with it (ON DELETE CASCADE)."""
    async with _get_connection() as conn:
        cur = await conn.execute("DELETE FROM events WHERE id = %s", (event_id,))
        return cur.rowcount > 0


async def list_responses(event_id: str) -> list[dict[str, Any]]:
    async with _get_connection() as conn:
        rows = await conn.execute(
            f"SELECT {_RESPONSE_COLUMNS} FROM responses WHERE event_id = %s ORDER BY created_at, id",
            (event_id,),
        )
        return [_response_row(row) async for row in rows]


async def get_response(event_id: str, email: str) -> dict[str, Any] | None:
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"SELECT {_RESPONSE_COLUMNS} FROM responses WHERE event_id = %s AND email = %s",
                (event_id, email),
            )
        ).fetchone()
        if not row:
            return None
        return _response_row(row)


async def upsert_response(
    event_id: str,
    email: str,
    name: str,
    availability_slots: list[int],
) -> tuple[dict[str, Any], bool]:
    """Create or overwrite the response keyed by ``(event_id, email)``.

    Concurrent submissions for the same identity resolve to whichever write
    lands last; slot sets are replaced, never merged.

    Returns:
        The stored response and whether a new row was inserted.
    """
    now = datetime.now(UTC)
    async with _get_connection() as conn:
        row = await (
            await conn.execute(
                f"""INSERT INTO responses (event_id, name, email, availability_slots, created_at, updated_at)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    ON CONFLICT (event_id, email) DO UPDATE
                    SET name = EXCLUDED.name,
                        availability_slots = EXCLUDED.availability_slots,
                        updated_at = EXCLUDED.updated_at
                    RETURNING {_RESPONSE_COLUMNS}, (xmax = 0) AS inserted""",
                (event_id, name, email, Json(availability_slots), now, now),
            )
        ).fetchone()
        return _response_row(row), bool(row[6])
