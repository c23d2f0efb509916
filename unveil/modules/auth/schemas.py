from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional
from unveil.core.validators import is_valid_phone_number, normalize_phone_number


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class MagicLinkRequest(BaseModel):
    email: EmailStr
    redirect_to: Optional[str] = None


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    full_name: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def valid_phone(cls, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        if not is_valid_phone_number(value):
            raise ValueError("Please enter a valid phone number")
        return normalize_phone_number(value)


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    message: str
