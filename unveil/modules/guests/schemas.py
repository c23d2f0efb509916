from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Dict, Literal
from datetime import datetime
from unveil.core.validators import is_valid_phone_number, normalize_phone_number

RSVPStatus = Literal["Attending", "Declined", "Maybe", "Pending"]


def _blank_to_none(value):
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def _checked_phone(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    if not is_valid_phone_number(value):
        raise ValueError(f"Invalid phone number format: {value}")
    return normalize_phone_number(value)


class GuestCreate(BaseModel):
    guest_name: str = Field(min_length=1, max_length=100)
    phone: str
    guest_email: Optional[EmailStr] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    guest_tags: Optional[List[str]] = None
    rsvp_status: RSVPStatus = "Pending"

    @field_validator("guest_name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("guest_email", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, value: str) -> str:
        return _checked_phone(value)


class GuestUpdate(BaseModel):
    guest_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = None
    guest_email: Optional[EmailStr] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    guest_tags: Optional[List[str]] = None
    rsvp_status: Optional[RSVPStatus] = None
    sms_opt_out: Optional[bool] = None

    @field_validator("guest_email", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        return _blank_to_none(value)

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, value: Optional[str]) -> Optional[str]:
        return _checked_phone(value)


class RSVPUpdate(BaseModel):
    rsvp_status: RSVPStatus


class LinkGuestRequest(BaseModel):
    phone: str

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, value: str) -> str:
        return _checked_phone(value)


class GuestResponse(BaseModel):
    id: str
    event_id: str
    user_id: Optional[str] = None
    phone: Optional[str] = None
    guest_name: Optional[str] = None
    guest_email: Optional[str] = None
    rsvp_status: Optional[str] = None
    notes: Optional[str] = None
    guest_tags: Optional[List[str]] = None
    sms_opt_out: Optional[bool] = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GuestImportRow(BaseModel):
    phone: str
    guest_name: Optional[str] = Field(default=None, max_length=100)
    guest_email: Optional[str] = None
    notes: Optional[str] = Field(default=None, max_length=1000)
    guest_tags: Optional[List[str]] = None
    rsvp_status: Optional[RSVPStatus] = None


class InvalidImportRow(BaseModel):
    row: int
    data: Dict[str, str]
    errors: List[str]


class ImportSummary(BaseModel):
    total: int
    valid: int
    invalid: int
    duplicate_emails: int


class ImportValidationResult(BaseModel):
    valid_guests: List[GuestImportRow]
    invalid_rows: List[InvalidImportRow]
    summary: ImportSummary


class GuestImportResponse(BaseModel):
    summary: ImportSummary
    invalid_rows: List[InvalidImportRow]
    column_mapping: Dict[str, Optional[str]]
    imported: int
    dry_run: bool = False
