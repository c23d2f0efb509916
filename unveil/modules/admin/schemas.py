from pydantic import BaseModel, Field, field_validator
from typing import Optional, Dict, Any, List, Literal
from datetime import datetime
from unveil.core.validators import is_valid_email


class TestUserCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    # plain str: email-validator rejects the reserved .local domain test accounts use
    email: str
    role: Literal["host", "guest", "admin"]
    phone: Optional[str] = None
    avatar: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        value = value.strip().lower()
        if not is_valid_email(value):
            raise ValueError("Invalid email address")
        return value


class TestUserInfo(BaseModel):
    id: str
    email: str
    name: str
    role: str
    created_at: Optional[datetime] = None


class TestUserCredentials(BaseModel):
    email: str
    password: str


class TestUserCreateResponse(BaseModel):
    success: bool = True
    user: TestUserInfo
    credentials: TestUserCredentials
    login_url: str
    message: str = "Test user created successfully"


class TestUserListResponse(BaseModel):
    success: bool = True
    users: List[Dict[str, Any]]
    count: int


class TestUserDeleteResponse(BaseModel):
    success: bool = True
    deleted: List[str] = []
    errors: List[str] = []
    message: str
