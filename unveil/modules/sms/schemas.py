from pydantic import BaseModel, Field
from typing import Optional, List, Literal

SMSMessageType = Literal["rsvp_reminder", "announcement", "invitation", "welcome", "custom"]


class SMSMessage(BaseModel):
    to: str
    message: str
    event_id: Optional[str] = None
    guest_id: Optional[str] = None
    message_type: SMSMessageType = "custom"


class SMSResult(BaseModel):
    success: bool
    message_id: Optional[str] = None
    status: Optional[str] = None
    error: Optional[str] = None


class BulkSMSResult(BaseModel):
    sent: int
    failed: int
    results: List[SMSResult]


class SendCounts(BaseModel):
    sent: int
    failed: int


# Request bodies keep the camelCase keys web clients already send
class AnnouncementRequest(BaseModel):
    event_id: Optional[str] = Field(default=None, alias="eventId")
    message: Optional[str] = None
    target_guest_ids: Optional[List[str]] = Field(default=None, alias="targetGuestIds")

    class Config:
        populate_by_name = True


class ReminderRequest(BaseModel):
    event_id: Optional[str] = Field(default=None, alias="eventId")
    guest_ids: Optional[List[str]] = Field(default=None, alias="guestIds")

    class Config:
        populate_by_name = True


class InvitationRequest(BaseModel):
    event_id: Optional[str] = Field(default=None, alias="eventId")
    guest_ids: Optional[List[str]] = Field(default=None, alias="guestIds")

    class Config:
        populate_by_name = True


class SendResponse(BaseModel):
    success: bool
    sent: int
    failed: int
    message: str


class InvitationError(BaseModel):
    phone: Optional[str] = None
    error: str


class InvitationResponse(BaseModel):
    successful: int
    failed: int
    errors: List[InvitationError]
