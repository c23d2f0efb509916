from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any
from datetime import date, datetime


def _not_in_past(value: Optional[date]) -> Optional[date]:
    if value is not None and value < date.today():
        raise ValueError("Event date must be in the future")
    return value


class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    event_date: date
    location: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = Field(default=None, max_length=2000)
    is_public: bool = True
    header_image_url: Optional[str] = None

    @field_validator("title", "location", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("event_date")
    @classmethod
    def event_date_not_past(cls, value: date) -> date:
        return _not_in_past(value)


class EventUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    event_date: Optional[date] = None
    location: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = Field(default=None, max_length=2000)
    is_public: Optional[bool] = None
    header_image_url: Optional[str] = None

    @field_validator("title", "location", "description", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("event_date")
    @classmethod
    def event_date_not_past(cls, value: Optional[date]) -> Optional[date]:
        return _not_in_past(value)


class EventResponse(BaseModel):
    id: str
    title: str
    event_date: date
    location: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = True
    header_image_url: Optional[str] = None
    host_user_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EventDetailResponse(EventResponse):
    role: str  # host | guest
    host: Optional[Dict[str, Any]] = None
    guest: Optional[Dict[str, Any]] = None


class EventAnalyticsResponse(BaseModel):
    event_id: str
    total_guests: int
    attending: int
    declined: int
    maybe: int
    pending: int
    response_rate: float
    message_count: int
    media_count: int
