from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from unveil.database.supabase_client import get_supabase
from unveil.modules.media.schemas import (
    MediaResponse, CaptionUpdate, SignedUrlResponse, MediaStatsResponse
)
from unveil.modules.media.service import MediaService
from unveil.core.dependencies import require_event_member
from supabase import Client
from typing import List, Dict, Optional

router = APIRouter(prefix="/events/{event_id}/media", tags=["media"])


def get_media_service(supabase: Client = Depends(get_supabase)) -> MediaService:
    return MediaService(supabase)


@router.get("", response_model=List[MediaResponse])
async def list_media(
    event_id: str,
    user_data: Dict = Depends(require_event_member),
    service: MediaService = Depends(get_media_service)
):
    """Photos and videos shared on the event, newest first"""
    return service.list_media(event_id)


@router.post("", response_model=MediaResponse, status_code=201)
async def upload_media(
    event_id: str,
    file: UploadFile = File(...),
    caption: Optional[str] = Form(None),
    user_data: Dict = Depends(require_event_member),
    service: MediaService = Depends(get_media_service)
):
    """Upload a photo or video (host or guest)"""
    return await service.upload_media(event_id, user_data["id"], file, caption)


@router.get("/stats", response_model=MediaStatsResponse)
async def media_stats(
    event_id: str,
    user_data: Dict = Depends(require_event_member),
    service: MediaService = Depends(get_media_service)
):
    return service.get_stats(event_id)


@router.patch("/{media_id}", response_model=MediaResponse)
async def update_caption(
    event_id: str,
    media_id: str,
    update: CaptionUpdate,
    user_data: Dict = Depends(require_event_member),
    service: MediaService = Depends(get_media_service)
):
    """Edit a caption (uploader or host)"""
    return service.update_caption(event_id, media_id, user_data["id"], user_data["event_role"], update)


@router.delete("/{media_id}", status_code=204)
async def delete_media(
    event_id: str,
    media_id: str,
    user_data: Dict = Depends(require_event_member),
    service: MediaService = Depends(get_media_service)
):
    """Delete a photo or video (uploader or host)"""
    service.delete_media(event_id, media_id, user_data["id"], user_data["event_role"])
    return None


@router.get("/{media_id}/url", response_model=SignedUrlResponse)
async def get_media_url(
    event_id: str,
    media_id: str,
    expires_in: Optional[int] = Query(None, ge=60, le=604800),
    user_data: Dict = Depends(require_event_member),
    service: MediaService = Depends(get_media_service)
):
    """Time-limited download URL"""
    return service.get_signed_url(event_id, media_id, expires_in)
