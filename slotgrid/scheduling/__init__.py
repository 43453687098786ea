"""Slot-index model and availability aggregation.

Everything in this package is pure and synchronous: no I/O, no shared state.
"""

from slotgrid.scheduling.aggregate import aggregate_counts, invalid_slots, slot_availability
from slotgrid.scheduling.common import find_common_slots, merge_continuous_slots
from slotgrid.scheduling.identity import normalize_email
from slotgrid.scheduling.indexer import compose, days_in_range, decompose, iter_slots, to_calendar_instant, total_slots
from slotgrid.scheduling.models import (
    EventConfig,
    ParticipantResponse,
    RecommendedWindow,
    Results,
    SlotAvailability,
    SlotInstant,
    SlotPosition,
    Window,
)
from slotgrid.scheduling.recommend import find_recommended_windows, window_size
from slotgrid.scheduling.results import compute_results
from slotgrid.scheduling.schemes import (
    CustomInterval,
    CustomScheme,
    FullDayScheme,
    PeriodScheme,
    SlotScheme,
    StandardScheme,
    build_scheme,
)

__all__ = [
    "CustomInterval",
    "CustomScheme",
    "EventConfig",
    "FullDayScheme",
    "ParticipantResponse",
    "PeriodScheme",
    "RecommendedWindow",
    "Results",
    "SlotAvailability",
    "SlotInstant",
    "SlotPosition",
    "SlotScheme",
    "StandardScheme",
    "Window",
    "aggregate_counts",
    "build_scheme",
    "compose",
    "compute_results",
    "days_in_range",
    "decompose",
    "find_common_slots",
    "find_recommended_windows",
    "invalid_slots",
    "iter_slots",
    "merge_continuous_slots",
    "normalize_email",
    "slot_availability",
    "to_calendar_instant",
    "total_slots",
    "window_size",
]
