from fastapi import APIRouter, Depends, Request
from unveil.database.supabase_client import get_optional_service_supabase
from unveil.core.validators import mask_phone
from supabase import Client
from datetime import datetime, timezone
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


@router.post("/twilio")
async def twilio_status_callback(
    request: Request,
    supabase: Optional[Client] = Depends(get_optional_service_supabase)
):
    """
    Twilio delivery status callback.

    Always answers 200 so Twilio does not retry; {"success": false} signals
    that the update was not recorded.
    """
    try:
        form = await request.form()
        message_sid = form.get("MessageSid")
        message_status = form.get("MessageStatus")
        error_code = form.get("ErrorCode")
        error_message = form.get("ErrorMessage")

        logger.info(
            f"Twilio webhook: sid={message_sid} status={message_status} "
            f"to={mask_phone(form.get('To'))} error_code={error_code}"
        )

        if supabase is None:
            logger.error(f"Delivery status for {message_sid} not recorded: no database client")
            return {"success": False}

        if message_sid:
            supabase.table("message_deliveries")\
                .update({
                    "sms_status": message_status,
                    "error_code": error_code or None,
                    "error_message": error_message or None,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                })\
                .eq("sms_provider_id", message_sid)\
                .execute()
            logger.info(f"Updated delivery status for {message_sid}: {message_status}")

        return {"success": True}
    except Exception as e:
        logger.error(f"Error processing Twilio webhook: {e}")
        return {"success": False}
