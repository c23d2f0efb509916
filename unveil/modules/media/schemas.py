from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class UploaderProfile(BaseModel):
    id: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class MediaResponse(BaseModel):
    id: str
    event_id: str
    uploader_user_id: Optional[str] = None
    storage_path: str
    media_type: Optional[str] = None
    caption: Optional[str] = None
    created_at: Optional[datetime] = None
    uploader: Optional[UploaderProfile] = None

    class Config:
        from_attributes = True


class CaptionUpdate(BaseModel):
    caption: Optional[str] = Field(default=None, max_length=500)


class SignedUrlResponse(BaseModel):
    media_id: str
    url: str
    expires_in: int


class MediaStatsResponse(BaseModel):
    event_id: str
    total: int
    images: int
    videos: int
