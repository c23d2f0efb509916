from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from unveil.config import settings
from unveil.core.constants import MESSAGE_TYPE_ANNOUNCEMENT, SMS_MAX_ANNOUNCEMENT_LENGTH
from unveil.core.dependencies import get_auth_service, get_hosted_event
from unveil.core.rate_limit import limiter
from unveil.database.supabase_client import get_supabase
from unveil.modules.auth.service import AuthService, extract_bearer_token
from unveil.modules.sms.client import TwilioClient, get_twilio_client
from unveil.modules.sms.schemas import (
    AnnouncementRequest, ReminderRequest, InvitationRequest, SendResponse, InvitationResponse
)
from unveil.modules.sms.service import SMSService
from supabase import Client
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sms", tags=["sms"])


def _failed_note(failed: int) -> str:
    return f" ({failed} failed)" if failed > 0 else ""


def get_sms_service(
    supabase: Client = Depends(get_supabase),
    twilio: TwilioClient = Depends(get_twilio_client)
) -> SMSService:
    return SMSService(supabase, twilio)


def _authorize_host(
    event_id: str,
    authorization: Optional[str],
    auth_service: AuthService,
    supabase: Client
) -> Dict:
    """401 without a valid bearer token, 404 unless the caller hosts the event"""
    token = extract_bearer_token(authorization)
    user = auth_service.get_current_user(token)
    get_hosted_event(event_id, user["id"], supabase)
    return user


@router.post("/send-announcement", response_model=SendResponse)
@limiter.limit(settings.sms_rate_limit)
async def send_announcement(
    request: Request,
    payload: AnnouncementRequest,
    authorization: Optional[str] = Header(None),
    auth_service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase),
    service: SMSService = Depends(get_sms_service)
):
    """
    Text an announcement to event guests (host only).

    The body is checked before the caller, so a malformed request is a 400
    even without credentials.
    """
    if not payload.event_id or not payload.message:
        raise HTTPException(status_code=400, detail="Event ID and message are required")
    if len(payload.message) > SMS_MAX_ANNOUNCEMENT_LENGTH:
        raise HTTPException(status_code=400, detail="Message too long. Please keep it under 1500 characters.")

    user = _authorize_host(payload.event_id, authorization, auth_service, supabase)

    try:
        result = await service.send_event_announcement(payload.event_id, payload.message, payload.target_guest_ids)

        try:
            supabase.table("messages").insert({
                "event_id": payload.event_id,
                "sender_user_id": user["id"],
                "content": payload.message,
                "message_type": MESSAGE_TYPE_ANNOUNCEMENT,
            }).execute()
        except Exception as e:
            logger.error(f"Failed to save announcement for event {payload.event_id}: {e}")

        logger.info(f"Announcement for event {payload.event_id}: {result.sent} sent, {result.failed} failed")
        return SendResponse(
            success=True,
            sent=result.sent,
            failed=result.failed,
            message=f"Successfully sent announcement to {result.sent} guests{_failed_note(result.failed)}",
        )
    except Exception as e:
        logger.exception(f"Announcement for event {payload.event_id} failed: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to send announcement"})


@router.post("/send-reminder", response_model=SendResponse)
@limiter.limit(settings.sms_rate_limit)
async def send_reminder(
    request: Request,
    payload: ReminderRequest,
    authorization: Optional[str] = Header(None),
    auth_service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase),
    service: SMSService = Depends(get_sms_service)
):
    """Text RSVP reminders (host only). Without guestIds only guests who have not answered are reminded."""
    if not payload.event_id:
        raise HTTPException(status_code=400, detail="Event ID is required")

    _authorize_host(payload.event_id, authorization, auth_service, supabase)

    try:
        result = await service.send_rsvp_reminder(payload.event_id, payload.guest_ids)
        return SendResponse(
            success=True,
            sent=result.sent,
            failed=result.failed,
            message=f"Successfully sent {result.sent} RSVP reminders{_failed_note(result.failed)}",
        )
    except Exception as e:
        logger.exception(f"RSVP reminders for event {payload.event_id} failed: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to send RSVP reminders"})


@router.post("/send-invitations", response_model=InvitationResponse)
@limiter.limit(settings.sms_rate_limit)
async def send_invitations(
    request: Request,
    payload: InvitationRequest,
    authorization: Optional[str] = Header(None),
    auth_service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase),
    service: SMSService = Depends(get_sms_service)
):
    """Text invitation links to selected guests, or to every guest without a linked account (host only)"""
    if not payload.event_id:
        raise HTTPException(status_code=400, detail="Event ID is required")

    _authorize_host(payload.event_id, authorization, auth_service, supabase)

    try:
        return await service.send_invitations(payload.event_id, payload.guest_ids)
    except Exception as e:
        logger.exception(f"Invitations for event {payload.event_id} failed: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to send invitations"})
