"""Single entry point combining indexing, aggregation and ranking."""

import logging
from collections.abc import Sequence

from slotgrid.errors import ConfigurationMissingError
from slotgrid.scheduling.aggregate import aggregate_counts, slot_availability
from slotgrid.scheduling.common import find_common_slots, merge_continuous_slots
from slotgrid.scheduling.indexer import to_calendar_instant, total_slots
from slotgrid.scheduling.models import (
    EventConfig,
    ParticipantResponse,
    RecommendedWindow,
    Results,
    Window,
)
from slotgrid.scheduling.recommend import DEFAULT_TOP_N, find_recommended_windows

logger = logging.getLogger(__name__)


def _anchor(window: Window, event: EventConfig) -> RecommendedWindow:
    first = to_calendar_instant(window.slots[0], event)
    last = to_calendar_instant(window.slots[-1], event)
    return RecommendedWindow(
        slots=window.slots,
        min_count=window.min_count,
        avg_count=window.avg_count,
        start=first.start,
        end=last.end,
    )


def compute_results(
    event: EventConfig | None,
    responses: Sequence[ParticipantResponse],
    top_n: int = DEFAULT_TOP_N,
) -> Results:
    """Aggregate all responses of one event.

    Counts are recomputed from scratch on every call.

    Raises:
        ConfigurationMissingError: if no event configuration is given.
    """
    if event is None:
        raise ConfigurationMissingError()

    slot_count = total_slots(event)
    counts = aggregate_counts(slot_count, responses)
    participants = len(responses)
    common = find_common_slots(counts, participants)

    slot_minutes, min_duration_minutes = event.scheme.recommendation_minutes()
    windows = find_recommended_windows(counts, slot_minutes, min_duration_minutes, top_n)
    logger.debug(
        "Computed results total_slots=%d participants=%d common=%d windows=%d",
        slot_count,
        participants,
        len(common),
        len(windows),
    )
    return Results(
        total_slots=slot_count,
        total_participants=participants,
        counts=counts,
        common_slots=common,
        common_ranges=merge_continuous_slots(common),
        recommended_slots=[_anchor(w, event) for w in windows],
        slot_availability=slot_availability(slot_count, responses),
    )
