from supabase import Client
from unveil.config import settings
from unveil.core.constants import (
    ACCEPTED_IMAGE_TYPES, ACCEPTED_VIDEO_TYPES, MEDIA_TYPE_IMAGE, MEDIA_TYPE_VIDEO
)
from unveil.core.errors import is_permission_error
from unveil.core.profiles import fetch_public_profiles
from unveil.database.supabase_client import row_or_none
from unveil.modules.media.schemas import (
    MediaResponse, CaptionUpdate, SignedUrlResponse, MediaStatsResponse
)
from typing import Dict, List, Optional
from fastapi import HTTPException, UploadFile
import logging
import time

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "video/mp4": "mp4",
    "video/webm": "webm",
}


def media_type_for(content_type: Optional[str]) -> str:
    """image or video for an accepted MIME type; anything else is a 400"""
    if content_type in ACCEPTED_IMAGE_TYPES:
        return MEDIA_TYPE_IMAGE
    if content_type in ACCEPTED_VIDEO_TYPES:
        return MEDIA_TYPE_VIDEO
    raise HTTPException(
        status_code=400,
        detail="Unsupported file type. Upload a JPEG, PNG, WebP, MP4 or WebM file.",
    )


class MediaService:
    def __init__(self, supabase: Client):
        self.supabase = supabase
        self.bucket = settings.media_bucket

    def list_media(self, event_id: str) -> List[MediaResponse]:
        """Event photos and videos, newest first"""
        try:
            result = self.supabase.table("media")\
                .select("*")\
                .eq("event_id", event_id)\
                .order("created_at", desc=True)\
                .execute()
        except Exception as e:
            if is_permission_error(e):
                logger.info(f"Media for event {event_id} not readable by caller")
                return []
            raise HTTPException(status_code=500, detail=str(e))

        items = result.data or []
        profiles = fetch_public_profiles(self.supabase, (m.get("uploader_user_id") for m in items))
        return [MediaResponse(**item, uploader=profiles.get(item.get("uploader_user_id"))) for item in items]

    def get_media(self, event_id: str, media_id: str) -> Dict:
        try:
            result = self.supabase.table("media")\
                .select("*")\
                .eq("id", media_id)\
                .eq("event_id", event_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        media = row_or_none(result)
        if not media:
            raise HTTPException(status_code=404, detail="Media not found")
        return media

    async def upload_media(
        self,
        event_id: str,
        user_id: str,
        file: UploadFile,
        caption: Optional[str] = None
    ) -> MediaResponse:
        """Store the file under events/{event_id}/media/ and record it in the media table"""
        media_type = media_type_for(file.content_type)
        content = await file.read()
        if len(content) > settings.max_upload_mb * 1024 * 1024:
            raise HTTPException(status_code=400, detail=f"File size must be less than {settings.max_upload_mb}MB")
        if not content:
            raise HTTPException(status_code=400, detail="File is empty")

        storage_path = f"events/{event_id}/media/{int(time.time() * 1000)}-{user_id}.{_EXTENSIONS[file.content_type]}"
        try:
            self.supabase.storage.from_(self.bucket).upload(
                storage_path,
                content,
                file_options={"content-type": file.content_type}
            )
            logger.info(f"Uploaded {media_type} to {self.bucket}/{storage_path}")
        except Exception as e:
            logger.error(f"Supabase Storage upload failed: {str(e)}")
            raise HTTPException(status_code=500, detail=f"Failed to upload to storage: {str(e)}")

        try:
            result = self.supabase.table("media").insert({
                "event_id": event_id,
                "uploader_user_id": user_id,
                "storage_path": storage_path,
                "media_type": media_type,
                "caption": caption.strip() if caption and caption.strip() else None,
            }).execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save media")
            return MediaResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def _require_owner_or_host(self, media: Dict, user_id: str, event_role: str) -> None:
        if media.get("uploader_user_id") != user_id and event_role != "host":
            raise HTTPException(status_code=403, detail="Only the uploader or the host can change this media")

    def update_caption(self, event_id: str, media_id: str, user_id: str, event_role: str, update: CaptionUpdate) -> MediaResponse:
        media = self.get_media(event_id, media_id)
        self._require_owner_or_host(media, user_id, event_role)
        caption = update.caption.strip() if update.caption else None
        try:
            result = self.supabase.table("media")\
                .update({"caption": caption or None})\
                .eq("id", media_id)\
                .execute()
            if not result.data:
                raise HTTPException(status_code=404, detail="Media not found")
            return MediaResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_media(self, event_id: str, media_id: str, user_id: str, event_role: str) -> None:
        """Remove the storage object, then the row"""
        media = self.get_media(event_id, media_id)
        self._require_owner_or_host(media, user_id, event_role)
        try:
            self.supabase.storage.from_(self.bucket).remove([media["storage_path"]])
        except Exception as e:
            logger.warning(f"Failed to delete {media['storage_path']} from storage: {e}")
        try:
            self.supabase.table("media").delete().eq("id", media_id).execute()
            logger.info(f"Media {media_id} deleted by {user_id}")
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_signed_url(self, event_id: str, media_id: str, expires_in: Optional[int] = None) -> SignedUrlResponse:
        media = self.get_media(event_id, media_id)
        expires_in = expires_in or settings.signed_url_ttl_sec
        try:
            signed = self.supabase.storage.from_(self.bucket).create_signed_url(media["storage_path"], expires_in)
        except Exception as e:
            raise HTTPException(status_code=500, detail=f"Failed to create signed URL: {str(e)}")
        # storage3 has returned both spellings across releases
        url = signed.get("signedURL") or signed.get("signedUrl")
        if not url:
            raise HTTPException(status_code=500, detail="Failed to create signed URL")
        return SignedUrlResponse(media_id=media_id, url=url, expires_in=expires_in)

    def get_stats(self, event_id: str) -> MediaStatsResponse:
        try:
            result = self.supabase.table("media")\
                .select("media_type")\
                .eq("event_id", event_id)\
                .execute()
        except Exception as e:
            if is_permission_error(e):
                return MediaStatsResponse(event_id=event_id, total=0, images=0, videos=0)
            raise HTTPException(status_code=500, detail=str(e))
        rows = result.data or []
        images = sum(1 for row in rows if row.get("media_type") == MEDIA_TYPE_IMAGE)
        videos = sum(1 for row in rows if row.get("media_type") == MEDIA_TYPE_VIDEO)
        return MediaStatsResponse(event_id=event_id, total=len(rows), images=images, videos=videos)
