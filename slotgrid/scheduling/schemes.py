"""Time-discretization schemes.

A scheme decides how many slots a single day holds and which minutes of the
day each slot covers. The four variants form a tagged union keyed by
``kind``; each one validates its own fields so a constructed scheme is always
usable for slot math.

Minutes are counted from local midnight of the event's civil day.
"""

import re
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from slotgrid.errors import InvalidEventConfigError

TIME_RE = re.compile(r"^(?:[01]\d|2[0-3]):[0-5]\d$")

MINUTES_PER_DAY = 24 * 60

# (label, start minute, end minute)
PERIODS: tuple[tuple[str, int, int], ...] = (
    ("Morning", 9 * 60, 12 * 60),
    ("Afternoon", 12 * 60, 18 * 60),
    ("Evening", 18 * 60, 22 * 60),
)


def parse_hhmm(value: str) -> int:
    """Convert ``HH:MM`` to minutes since midnight."""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_hhmm(minute_of_day: int) -> str:
    hours, minutes = divmod(minute_of_day, 60)
    return f"{hours:02d}:{minutes:02d}"


def _check_time(value: str) -> str:
    value = value.strip()
    if not TIME_RE.match(value):
        raise ValueError(f"invalid time format: {value}")
    return value


class StandardScheme(BaseModel):
    """Fixed-length slots between a daily start and end time.

    ``slots_per_day`` truncates: when ``slot_minutes`` does not divide the day
    span, the trailing remainder is not addressable by any slot.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["standard"] = "standard"
    day_start_time: str
    day_end_time: str
    slot_minutes: int = Field(gt=0)
    min_duration_minutes: int = Field(gt=0)

    @model_validator(mode="before")
    @classmethod
    def default_min_duration(cls, data):
        if isinstance(data, dict) and data.get("min_duration_minutes") is None:
            data = {**data, "min_duration_minutes": data.get("slot_minutes")}
        return data

    @field_validator("day_start_time", "day_end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return _check_time(v)

    @model_validator(mode="after")
    def validate_span(self) -> "StandardScheme":
        if self.day_start_minute >= self.day_end_minute:
            raise ValueError("day_start_time must be earlier than day_end_time")
        if self.slots_per_day < 1:
            raise ValueError("slot_minutes is longer than the daily time range")
        return self

    @property
    def day_start_minute(self) -> int:
        return parse_hhmm(self.day_start_time)

    @property
    def day_end_minute(self) -> int:
        return parse_hhmm(self.day_end_time)

    @property
    def slots_per_day(self) -> int:
        return (self.day_end_minute - self.day_start_minute) // self.slot_minutes

    def slot_bounds(self, slot_in_day: int) -> tuple[int, int]:
        assert 0 <= slot_in_day < self.slots_per_day
        start = self.day_start_minute + slot_in_day * self.slot_minutes
        return start, start + self.slot_minutes

    def slot_label(self, slot_in_day: int) -> str:
        start, end = self.slot_bounds(slot_in_day)
        return f"{format_hhmm(start)}-{format_hhmm(end)}"

    def recommendation_minutes(self) -> tuple[int, int]:
        return self.slot_minutes, self.min_duration_minutes

    @property
    def mode(self) -> str:
        return "timeRange"

    @property
    def time_mode(self) -> str | None:
        return "standard"


class PeriodScheme(BaseModel):
    """Three fixed slots a day: morning, afternoon and evening."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["period"] = "period"

    @property
    def slots_per_day(self) -> int:
        return len(PERIODS)

    def slot_bounds(self, slot_in_day: int) -> tuple[int, int]:
        _, start, end = PERIODS[slot_in_day]
        return start, end

    def slot_label(self, slot_in_day: int) -> str:
        return PERIODS[slot_in_day][0]

    def recommendation_minutes(self) -> tuple[int, int]:
        # each period is its own block; a window is always one slot wide
        return 180, 180

    @property
    def mode(self) -> str:
        return "timeRange"

    @property
    def time_mode(self) -> str | None:
        return "period"


class CustomInterval(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    start_time: str
    end_time: str

    @field_validator("label")
    @classmethod
    def validate_label(cls, v: str) -> str:
        v = v.strip()
        if not v or len(v) > 100:
            raise ValueError("label must be 1-100 characters")
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        return _check_time(v)

    @model_validator(mode="after")
    def validate_order(self) -> "CustomInterval":
        if self.start_minute >= self.end_minute:
            raise ValueError(f"interval '{self.label}' must start before it ends")
        return self

    @property
    def start_minute(self) -> int:
        return parse_hhmm(self.start_time)

    @property
    def end_minute(self) -> int:
        return parse_hhmm(self.end_time)

    def overlaps(self, other: "CustomInterval") -> bool:
        return self.start_minute < other.end_minute and self.end_minute > other.start_minute


class CustomScheme(BaseModel):
    """Named intervals in the order the organizer listed them.

    Intervals may leave gaps and need not be sorted, but no two may overlap.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["custom"] = "custom"
    intervals: tuple[CustomInterval, ...] = Field(min_length=1)

    @model_validator(mode="after")
    def validate_no_overlap(self) -> "CustomScheme":
        for i, current in enumerate(self.intervals):
            for earlier in self.intervals[:i]:
                if current.overlaps(earlier):
                    raise ValueError(f"interval '{current.label}' overlaps '{earlier.label}'")
        return self

    @property
    def slots_per_day(self) -> int:
        return len(self.intervals)

    def slot_bounds(self, slot_in_day: int) -> tuple[int, int]:
        interval = self.intervals[slot_in_day]
        return interval.start_minute, interval.end_minute

    def slot_label(self, slot_in_day: int) -> str:
        return self.intervals[slot_in_day].label

    def recommendation_minutes(self) -> tuple[int, int]:
        shortest = min(i.end_minute - i.start_minute for i in self.intervals)
        return shortest, shortest

    @property
    def mode(self) -> str:
        return "timeRange"

    @property
    def time_mode(self) -> str | None:
        return "custom"


class FullDayScheme(BaseModel):
    """One slot per calendar day."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["full_day"] = "full_day"

    @property
    def slots_per_day(self) -> int:
        return 1

    def slot_bounds(self, slot_in_day: int) -> tuple[int, int]:
        assert slot_in_day == 0
        return 0, MINUTES_PER_DAY

    def slot_label(self, slot_in_day: int) -> str:
        return "All day"

    def recommendation_minutes(self) -> tuple[int, int]:
        return MINUTES_PER_DAY, MINUTES_PER_DAY

    @property
    def mode(self) -> str:
        return "fullDay"

    @property
    def time_mode(self) -> str | None:
        return None


SlotScheme = Annotated[
    Union[StandardScheme, PeriodScheme, CustomScheme, FullDayScheme],
    Field(discriminator="kind"),
]


def build_scheme(
    mode: str,
    time_mode: str | None = None,
    *,
    day_start_time: str | None = None,
    day_end_time: str | None = None,
    slot_minutes: int | None = None,
    min_duration_minutes: int | None = None,
    custom_time_slots: list | None = None,
) -> StandardScheme | PeriodScheme | CustomScheme | FullDayScheme:
    """Translate the organizer's mode/time-mode choice into a scheme.

    Fields that do not belong to the selected variant are ignored, so a
    period event may still carry the legacy ``slot_minutes=180`` sentinel.

    Raises:
        InvalidEventConfigError: unknown mode, or the variant's fields are
            missing or inconsistent.
    """
    try:
        if mode == "fullDay":
            return FullDayScheme()
        if mode != "timeRange":
            raise InvalidEventConfigError(detail=f"Unknown mode: {mode}")
        if time_mode == "standard":
            return StandardScheme(
                day_start_time=day_start_time,
                day_end_time=day_end_time,
                slot_minutes=slot_minutes,
                min_duration_minutes=min_duration_minutes,
            )
        if time_mode == "period":
            return PeriodScheme()
        if time_mode == "custom":
            return CustomScheme(intervals=custom_time_slots or ())
        raise InvalidEventConfigError(detail=f"Unknown time mode: {time_mode}")
    except ValidationError as e:
        raise InvalidEventConfigError(
            detail=describe_validation_error(e),
            mode=mode,
            time_mode=time_mode,
        ) from e


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic error into one readable line."""
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)
