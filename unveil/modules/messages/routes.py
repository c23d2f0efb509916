from fastapi import APIRouter, Depends, Header
from fastapi.responses import JSONResponse
from unveil.database.supabase_client import get_supabase, get_service_supabase
from unveil.modules.messages.schemas import (
    MessageCreate, MessageResponse, ScheduledMessageCreate, ScheduledMessageResponse
)
from unveil.modules.messages.service import MessageService
from unveil.modules.messages.processor import ScheduledMessageProcessor
from unveil.modules.sms.client import TwilioClient, get_twilio_client
from unveil.modules.sms.service import SMSService
from unveil.core.dependencies import cron_authorized, require_event_host, require_event_member
from supabase import Client
from typing import List, Dict, Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events/{event_id}/messages", tags=["messages"])
processing_router = APIRouter(prefix="/messages", tags=["messages"])

PROCESS_SCHEDULED_PATH = "/api/messages/process-scheduled"


def get_message_service(supabase: Client = Depends(get_supabase)) -> MessageService:
    return MessageService(supabase)


def get_scheduled_processor(
    supabase: Client = Depends(get_service_supabase),
    twilio: TwilioClient = Depends(get_twilio_client)
) -> ScheduledMessageProcessor:
    return ScheduledMessageProcessor(supabase, SMSService(supabase, twilio))


@router.get("", response_model=List[MessageResponse])
async def list_messages(
    event_id: str,
    user_data: Dict = Depends(require_event_member),
    service: MessageService = Depends(get_message_service)
):
    """Event messages, oldest first"""
    return service.list_messages(event_id)


@router.post("", response_model=MessageResponse, status_code=201)
async def create_message(
    event_id: str,
    message_data: MessageCreate,
    user_data: Dict = Depends(require_event_member),
    service: MessageService = Depends(get_message_service)
):
    """Post a message to the event (host or guest)"""
    return service.create_message(event_id, user_data["id"], user_data["event_role"], message_data)


@router.post("/scheduled", response_model=ScheduledMessageResponse, status_code=201)
async def create_scheduled_message(
    event_id: str,
    data: ScheduledMessageCreate,
    user_data: Dict = Depends(require_event_host),
    service: MessageService = Depends(get_message_service)
):
    """Schedule a message for later delivery (host only)"""
    return service.create_scheduled_message(event_id, user_data["id"], data)


@router.get("/scheduled", response_model=List[ScheduledMessageResponse])
async def list_scheduled_messages(
    event_id: str,
    user_data: Dict = Depends(require_event_host),
    service: MessageService = Depends(get_message_service)
):
    return service.list_scheduled_messages(event_id)


@router.delete("/scheduled/{scheduled_id}", response_model=ScheduledMessageResponse)
async def cancel_scheduled_message(
    event_id: str,
    scheduled_id: str,
    user_data: Dict = Depends(require_event_host),
    service: MessageService = Depends(get_message_service)
):
    """Cancel a message that has not started sending (host only)"""
    return service.cancel_scheduled_message(event_id, scheduled_id)


@router.delete("/{message_id}", status_code=204)
async def delete_message(
    event_id: str,
    message_id: str,
    user_data: Dict = Depends(require_event_member),
    service: MessageService = Depends(get_message_service)
):
    """Delete a message (its sender or the host)"""
    service.delete_message(event_id, message_id, user_data["id"], user_data["event_role"])
    return None


@processing_router.post("/process-scheduled")
async def process_scheduled_messages(
    authorization: Optional[str] = Header(None),
    processor: ScheduledMessageProcessor = Depends(get_scheduled_processor)
):
    """Send every scheduled message that is due. Called by the cron relay."""
    if not cron_authorized(authorization):
        logger.warning("Scheduled message run rejected: bad or missing secret")
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    try:
        result = await processor.process_due_messages()
    except Exception as e:
        logger.error(f"Error processing scheduled messages: {e}")
        return JSONResponse(status_code=500, content={"error": "Failed to process scheduled messages"})
    return result.to_response()


@processing_router.get("/process-scheduled")
async def process_scheduled_usage():
    return {
        "message": "Use POST to process scheduled messages",
        "endpoint": PROCESS_SCHEDULED_PATH,
    }
