from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal, Dict, Any
from datetime import datetime, timezone

MessageType = Literal["channel", "announcement", "direct"]


class MessageCreate(BaseModel):
    content: str = Field(min_length=1, max_length=2000)
    message_type: MessageType = "channel"
    recipient_user_id: Optional[str] = None
    recipient_tags: Optional[List[str]] = None

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, value):
        return value.strip() if isinstance(value, str) else value


class SenderProfile(BaseModel):
    id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class MessageResponse(BaseModel):
    id: str
    event_id: str
    sender_user_id: Optional[str] = None
    content: str
    message_type: Optional[str] = None
    recipient_user_id: Optional[str] = None
    recipient_tags: Optional[List[str]] = None
    created_at: Optional[datetime] = None
    sender: Optional[SenderProfile] = None

    class Config:
        from_attributes = True


class ScheduledMessageCreate(BaseModel):
    content: str = Field(min_length=1, max_length=1500)
    send_at: datetime
    send_via_sms: bool = True
    send_via_push: bool = True
    send_via_email: bool = False
    target_all_guests: bool = True
    target_guest_ids: Optional[List[str]] = None
    target_guest_tags: Optional[List[str]] = None
    target_sub_event_ids: Optional[List[str]] = None

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("send_at")
    @classmethod
    def send_at_in_future(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        if value <= datetime.now(timezone.utc):
            raise ValueError("Scheduled time must be in the future")
        return value


class ScheduledMessageResponse(BaseModel):
    id: str
    event_id: str
    sender_user_id: Optional[str] = None
    content: str
    send_at: datetime
    status: str
    send_via_sms: Optional[bool] = None
    send_via_push: Optional[bool] = None
    send_via_email: Optional[bool] = None
    target_all_guests: Optional[bool] = None
    target_guest_ids: Optional[List[str]] = None
    target_guest_tags: Optional[List[str]] = None
    target_sub_event_ids: Optional[List[str]] = None
    recipient_count: Optional[int] = 0
    success_count: Optional[int] = 0
    failure_count: Optional[int] = 0
    sent_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ProcessResult(BaseModel):
    success: bool
    message: str
    processed: int
    sent: Optional[int] = None
    failed: Optional[int] = None

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)
