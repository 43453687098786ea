from typing import Literal, TypedDict, Union


class ResponseUpdatedEvent(TypedDict):
    type: Literal["response_updated"]
    event_id: str
    name: str
    is_update: bool
    timestamp: str


class PingEvent(TypedDict):
    type: Literal["ping"]


# Everything a live results client may receive
LiveEvent = Union[ResponseUpdatedEvent, PingEvent]
