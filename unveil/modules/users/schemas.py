from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime
from unveil.core.validators import is_valid_phone_number, normalize_phone_number


class UserUpdate(BaseModel):
    full_name: Optional[str] = Field(default=None, max_length=100)
    avatar_url: Optional[str] = None
    phone: Optional[str] = None

    @field_validator("full_name", mode="before")
    @classmethod
    def strip_name(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("avatar_url")
    @classmethod
    def valid_avatar_url(cls, value: Optional[str]) -> Optional[str]:
        if value and not value.startswith(("http://", "https://")):
            raise ValueError("Avatar URL must be a valid http(s) URL")
        return value

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        if not is_valid_phone_number(value):
            raise ValueError("Please enter a valid phone number")
        return normalize_phone_number(value)


class UserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PublicProfileResponse(BaseModel):
    id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        from_attributes = True
