"""Reduce participant selections to per-slot counts."""

import logging
from collections.abc import Iterable, Sequence

from slotgrid.scheduling.models import ParticipantResponse, SlotAvailability

logger = logging.getLogger(__name__)


def aggregate_counts(total_slots: int, responses: Iterable[ParticipantResponse]) -> list[int]:
    """Count, for every slot index, how many responses selected it.

    Indices outside ``[0, total_slots)`` are skipped rather than rejected so a
    stale submission cannot break the results of a whole event.
    """
    counts = [0] * total_slots
    ignored = 0
    for response in responses:
        for slot in response.availability_slots:
            if 0 <= slot < total_slots:
                counts[slot] += 1
            else:
                ignored += 1
    if ignored:
        logger.debug("Ignored %d out-of-range slot selections (total_slots=%d)", ignored, total_slots)
    return counts


def slot_availability(
    total_slots: int, responses: Sequence[ParticipantResponse]
) -> dict[int, SlotAvailability]:
    """Split participants into available and unavailable names per slot."""
    breakdown = {i: SlotAvailability() for i in range(total_slots)}
    for response in responses:
        name = response.display_name
        for slot_index, entry in breakdown.items():
            if slot_index in response.availability_slots:
                entry.available.append(name)
            else:
                entry.unavailable.append(name)
    return breakdown


def invalid_slots(selection: Iterable[int], total_slots: int) -> list[int]:
    """Return the sorted, de-duplicated indices outside the event's range."""
    return sorted({s for s in selection if not 0 <= s < total_slots})
