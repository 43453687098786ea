from datetime import date, datetime, time, timedelta

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from slotgrid.scheduling.schemes import SlotScheme


class EventConfig(BaseModel):
    """An event's date range and discretization; immutable once created."""

    model_config = ConfigDict(frozen=True)

    start_date: date
    end_date: date
    scheme: SlotScheme
    timezone: str = "UTC"

    @model_validator(mode="after")
    def validate_range(self) -> "EventConfig":
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be earlier than start_date")
        return self

    @property
    def days_in_range(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def slots_per_day(self) -> int:
        return self.scheme.slots_per_day

    @property
    def total_slots(self) -> int:
        return self.days_in_range * self.slots_per_day


class ParticipantResponse(BaseModel):
    """The slice of a stored response the aggregation needs."""

    name: str | None = None
    email: str | None = None
    availability_slots: frozenset[int] = frozenset()

    @property
    def display_name(self) -> str:
        return self.name or self.email or ""


class SlotPosition(BaseModel):
    model_config = ConfigDict(frozen=True)

    day_index: int
    slot_in_day: int


class SlotInstant(BaseModel):
    """A slot index anchored to its civil date and minutes of the day."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    slot_index: int
    slot_date: date = Field(alias="date")
    start_minute: int
    end_minute: int
    label: str

    @computed_field
    @property
    def start(self) -> datetime:
        return datetime.combine(self.slot_date, time()) + timedelta(minutes=self.start_minute)

    @computed_field
    @property
    def end(self) -> datetime:
        return datetime.combine(self.slot_date, time()) + timedelta(minutes=self.end_minute)


class Window(BaseModel):
    """A run of contiguous slot indices with its attendance statistics."""

    slots: list[int]
    min_count: int
    avg_count: float


class RecommendedWindow(Window):
    start: datetime
    end: datetime


class SlotAvailability(BaseModel):
    available: list[str] = Field(default_factory=list)
    unavailable: list[str] = Field(default_factory=list)


class Results(BaseModel):
    total_slots: int
    total_participants: int
    counts: list[int]
    common_slots: list[int]
    common_ranges: list[list[int]]
    recommended_slots: list[RecommendedWindow]
    slot_availability: dict[int, SlotAvailability]
