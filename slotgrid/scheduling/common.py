from collections.abc import Sequence


def find_common_slots(counts: Sequence[int], total_participants: int) -> list[int]:
    """Slots every participant selected, in ascending order.

    With no participants there is nothing in common, so the result is empty.
    """
    if total_participants <= 0:
        return []
    return [i for i, count in enumerate(counts) if count == total_participants]


def merge_continuous_slots(slot_indices: Sequence[int]) -> list[list[int]]:
    """Group ascending slot indices into runs of consecutive values."""
    ranges: list[list[int]] = []
    for slot in slot_indices:
        if ranges and slot == ranges[-1][-1] + 1:
            ranges[-1].append(slot)
        else:
            ranges.append([slot])
    return ranges
