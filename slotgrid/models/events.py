from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from slotgrid.errors import InvalidEventConfigError
from slotgrid.scheduling import (
    CustomInterval,
    EventConfig,
    Results,
    SlotInstant,
    SlotScheme,
    build_scheme,
    normalize_email,
)
from slotgrid.scheduling.schemes import describe_validation_error


class CreateEventRequest(BaseModel):
    title: str
    description: str | None = None
    timezone: str = "UTC"
    start_date: date
    end_date: date
    mode: Literal["timeRange", "fullDay"]
    time_mode: Literal["standard", "period", "custom"] | None = None
    day_start_time: str | None = None
    day_end_time: str | None = None
    slot_minutes: int | None = None
    min_duration_minutes: int | None = None
    custom_time_slots: list[CustomInterval] | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        v = v.strip()
        if not v or len(v) > 200:
            raise ValueError("title must be 1-200 characters")
        return v

    @field_validator("description")
    @classmethod
    def validate_description(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if len(v) > 2000:
            raise ValueError("description must be at most 2000 characters")
        return v or None

    def to_event_config(self) -> EventConfig:
        """Build the validated event configuration.

        Raises:
            InvalidEventConfigError: if the mode fields or the date range are
                inconsistent.
        """
        scheme = build_scheme(
            self.mode,
            self.time_mode,
            day_start_time=self.day_start_time,
            day_end_time=self.day_end_time,
            slot_minutes=self.slot_minutes,
            min_duration_minutes=self.min_duration_minutes,
            custom_time_slots=self.custom_time_slots,
        )
        try:
            return EventConfig(
                start_date=self.start_date,
                end_date=self.end_date,
                scheme=scheme,
                timezone=self.timezone,
            )
        except ValidationError as e:
            raise InvalidEventConfigError(detail=describe_validation_error(e)) from e


class EventOut(BaseModel):
    id: str
    title: str
    description: str | None = None
    timezone: str
    start_date: date
    end_date: date
    mode: str
    time_mode: str | None = None
    scheme: SlotScheme
    days_in_range: int
    slots_per_day: int
    total_slots: int
    created_at: str


class CreatedEventOut(EventOut):
    # returned once, only at creation
    admin_token: str


class SlotGridOut(BaseModel):
    event_id: str
    slots_per_day: int
    total_slots: int
    slots: list[SlotInstant]


class SubmitResponseRequest(BaseModel):
    name: str
    email: str
    availability_slots: list[int] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v or len(v) > 100:
            raise ValueError("name must be 1-100 characters")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)


class ResponseOut(BaseModel):
    event_id: str
    name: str
    email: str
    availability_slots: list[int]
    created_at: str
    updated_at: str


class SubmitResponseOut(BaseModel):
    response: ResponseOut
    is_update: bool


class ResultsOut(BaseModel):
    event: EventOut
    results: Results
