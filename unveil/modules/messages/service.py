from supabase import Client
from unveil.core.constants import MESSAGE_TYPE_ANNOUNCEMENT, SCHEDULED, CANCELLED
from unveil.core.errors import is_permission_error
from unveil.core.profiles import fetch_public_profiles
from unveil.database.supabase_client import row_or_none
from unveil.modules.messages.schemas import (
    MessageCreate, MessageResponse, ScheduledMessageCreate, ScheduledMessageResponse
)
from typing import List
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_messages(self, event_id: str) -> List[MessageResponse]:
        """Event messages oldest first, each with its sender's public profile"""
        try:
            result = self.supabase.table("messages")\
                .select("*")\
                .eq("event_id", event_id)\
                .order("created_at")\
                .execute()
        except Exception as e:
            if is_permission_error(e):
                logger.info(f"Messages for event {event_id} not readable by caller")
                return []
            raise HTTPException(status_code=500, detail=str(e))

        messages = result.data or []
        profiles = fetch_public_profiles(self.supabase, (m.get("sender_user_id") for m in messages))

        return [
            MessageResponse(**message, sender=profiles.get(message.get("sender_user_id")))
            for message in messages
        ]

    def create_message(self, event_id: str, user_id: str, event_role: str, message_data: MessageCreate) -> MessageResponse:
        """Post to the event channel; announcements are reserved for the host"""
        if message_data.message_type == MESSAGE_TYPE_ANNOUNCEMENT and event_role != "host":
            raise HTTPException(status_code=403, detail="Only the host can send announcements")
        try:
            insert_data = message_data.model_dump(exclude_none=True)
            insert_data["event_id"] = event_id
            insert_data["sender_user_id"] = user_id
            result = self.supabase.table("messages").insert(insert_data).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to send message")

            return MessageResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_message(self, event_id: str, message_id: str, user_id: str, event_role: str) -> None:
        """Senders delete their own messages; the host may delete any"""
        try:
            result = self.supabase.table("messages")\
                .select("id, sender_user_id")\
                .eq("id", message_id)\
                .eq("event_id", event_id)\
                .maybe_single()\
                .execute()
            message = row_or_none(result)
            if not message:
                raise HTTPException(status_code=404, detail="Message not found")
            if message.get("sender_user_id") != user_id and event_role != "host":
                raise HTTPException(status_code=403, detail="You can only delete your own messages")

            self.supabase.table("messages").delete().eq("id", message_id).execute()
            logger.info(f"Message {message_id} deleted by {user_id}")
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def create_scheduled_message(self, event_id: str, user_id: str, data: ScheduledMessageCreate) -> ScheduledMessageResponse:
        if not data.target_all_guests and not (
            data.target_guest_ids or data.target_guest_tags or data.target_sub_event_ids
        ):
            raise HTTPException(status_code=400, detail="Select at least one recipient group")
        if not (data.send_via_sms or data.send_via_push or data.send_via_email):
            raise HTTPException(status_code=400, detail="Select at least one delivery channel")
        try:
            insert_data = data.model_dump(mode="json")
            insert_data.update({
                "event_id": event_id,
                "sender_user_id": user_id,
                "status": SCHEDULED,
            })
            result = self.supabase.table("scheduled_messages").insert(insert_data).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to schedule message")

            logger.info(f"Message scheduled for event {event_id} at {insert_data['send_at']}")
            return ScheduledMessageResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_scheduled_messages(self, event_id: str) -> List[ScheduledMessageResponse]:
        try:
            result = self.supabase.table("scheduled_messages")\
                .select("*")\
                .eq("event_id", event_id)\
                .order("send_at")\
                .execute()
            return [ScheduledMessageResponse(**row) for row in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def cancel_scheduled_message(self, event_id: str, scheduled_id: str) -> ScheduledMessageResponse:
        """Only messages still waiting to go out can be cancelled"""
        try:
            result = self.supabase.table("scheduled_messages")\
                .select("*")\
                .eq("id", scheduled_id)\
                .eq("event_id", event_id)\
                .maybe_single()\
                .execute()
            row = row_or_none(result)
            if not row:
                raise HTTPException(status_code=404, detail="Scheduled message not found")
            if row.get("status") != SCHEDULED:
                raise HTTPException(status_code=400, detail=f"Cannot cancel a message that is {row.get('status')}")

            updated = self.supabase.table("scheduled_messages")\
                .update({"status": CANCELLED})\
                .eq("id", scheduled_id)\
                .eq("status", SCHEDULED)\
                .execute()
            if not updated.data:
                raise HTTPException(status_code=400, detail="Message is already being sent")
            return ScheduledMessageResponse(**updated.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
