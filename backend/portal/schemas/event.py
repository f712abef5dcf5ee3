"""Pydantic schemas for Events and participants."""
from __future__ import annotations
from datetime import date, datetime, time, timezone
from typing import Optional
from pydantic import BaseModel, Field, HttpUrl, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from portal.utils import as_utc
from portal.models.event import EventType
from portal.models.participant import ParticipantStatus
from portal.schemas.user import UserSummary

_http_url = TypeAdapter(HttpUrl)


def _check_url(value: Optional[str]) -> Optional[str]:
    if value:
        try:
            _http_url.validate_python(value)
        except PydanticValidationError:
            raise ValueError("must be a valid http(s) URL") from None
    return value


class Recording(BaseModel):
    url: str
    thumbnail_url: Optional[str] = None
    duration_seconds: Optional[int] = Field(default=None, ge=0)

    model_config = {"from_attributes": True}

    @field_validator("url", "thumbnail_url")
    @classmethod
    def check_urls(cls, value):
        return _check_url(value)


class EventFilters(BaseModel):
    """Optional filters for listing events; an absent field means no constraint.

    A date-only ``start_date`` is the start of that UTC day and a date-only
    ``end_date`` the end of it, so both bounds stay inclusive.
    """

    event_type: Optional[EventType] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    user_id: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def expand_dates(cls, value, info):
        if isinstance(value, str) and len(value) == 10:
            value = date.fromisoformat(value)
        if isinstance(value, date) and not isinstance(value, datetime):
            bound = time.max if info.field_name == "end_date" else time.min
            return datetime.combine(value, bound, tzinfo=timezone.utc)
        return value

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_utc(cls, value):
        return as_utc(value) if value is not None else None

    def to_query_params(self) -> dict[str, str]:
        """Render as the camelCase query string used by GET /api/events."""
        params = {}
        if self.event_type is not None:
            params["eventType"] = self.event_type.value
        if self.start_date is not None:
            params["startDate"] = self.start_date.isoformat()
        if self.end_date is not None:
            params["endDate"] = self.end_date.isoformat()
        if self.user_id is not None:
            params["userId"] = self.user_id
        return params


class EventCreate(BaseModel):
    title: str
    description: Optional[str] = None
    event_type: EventType = EventType.company_event
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    is_mandatory: bool = False
    max_participants: Optional[int] = None
    recording: Optional[Recording] = None
    participant_ids: list[str] = Field(default_factory=list, alias="participantIds")

    model_config = {"populate_by_name": True}

    @field_validator("meeting_link")
    @classmethod
    def check_meeting_link(cls, value):
        return _check_url(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_utc(cls, value):
        return as_utc(value)


class EventUpdate(BaseModel):
    """Partial update: only fields present in the request body are applied."""

    title: Optional[str] = None
    description: Optional[str] = None
    event_type: Optional[EventType] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    is_mandatory: Optional[bool] = None
    max_participants: Optional[int] = None
    recording: Optional[Recording] = None

    @field_validator("meeting_link")
    @classmethod
    def check_meeting_link(cls, value):
        return _check_url(value)

    @field_validator("start_time", "end_time")
    @classmethod
    def normalize_utc(cls, value):
        return as_utc(value) if value is not None else None


class ParticipantsAdd(BaseModel):
    user_ids: list[str] = Field(alias="userIds")

    model_config = {"populate_by_name": True}


class RSVPUpdate(BaseModel):
    status: ParticipantStatus


class ParticipantOut(BaseModel):
    event_id: str
    user_id: str
    status: ParticipantStatus
    responded_at: Optional[datetime] = None
    user: Optional[UserSummary] = None

    model_config = {"from_attributes": True}


class EventOut(BaseModel):
    """Enriched event: organizer summary plus participant aggregates."""

    event_id: str
    title: str
    description: Optional[str] = None
    event_type: EventType
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    meeting_link: Optional[str] = None
    is_mandatory: bool
    max_participants: Optional[int] = None
    recording: Optional[Recording] = None
    organizer_id: str
    organizer: UserSummary
    participant_count: int = 0
    participant_status: Optional[ParticipantStatus] = None
    is_organizer: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class EventDetailOut(EventOut):
    participants: list[ParticipantOut] = []


class ParticipantsAdded(BaseModel):
    added: list[str]
    event: EventDetailOut


class EventDeleted(BaseModel):
    status: str = "deleted"
    event_id: str
