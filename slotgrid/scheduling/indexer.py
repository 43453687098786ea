"""Flat slot index arithmetic.

Every slot of an event is addressed by one integer::

    slot_index = day_index * slots_per_day + slot_in_day

Event creation, submission validation and aggregation all go through these
helpers so the mapping is computed the same way everywhere.
"""

from collections.abc import Iterator
from datetime import timedelta

from slotgrid.scheduling.models import EventConfig, SlotInstant, SlotPosition


def days_in_range(event: EventConfig) -> int:
    return event.days_in_range


def total_slots(event: EventConfig) -> int:
    return event.days_in_range * event.scheme.slots_per_day


def compose(day_index: int, slot_in_day: int, slots_per_day: int) -> int:
    return day_index * slots_per_day + slot_in_day


def decompose(slot_index: int, event: EventConfig) -> SlotPosition:
    day_index, slot_in_day = divmod(slot_index, event.scheme.slots_per_day)
    return SlotPosition(day_index=day_index, slot_in_day=slot_in_day)


def to_calendar_instant(slot_index: int, event: EventConfig) -> SlotInstant:
    """Anchor a slot index at its civil date and minute bounds.

    Raises:
        IndexError: if the index is outside ``[0, total_slots)``.
    """
    if not 0 <= slot_index < total_slots(event):
        raise IndexError(f"slot index {slot_index} out of range")
    position = decompose(slot_index, event)
    start, end = event.scheme.slot_bounds(position.slot_in_day)
    return SlotInstant(
        slot_index=slot_index,
        slot_date=event.start_date + timedelta(days=position.day_index),
        start_minute=start,
        end_minute=end,
        label=event.scheme.slot_label(position.slot_in_day),
    )


def iter_slots(event: EventConfig) -> Iterator[SlotInstant]:
    for slot_index in range(total_slots(event)):
        yield to_calendar_instant(slot_index, event)
