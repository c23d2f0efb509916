"""
Scheduled message processor

Picks up scheduled_messages whose send_at has passed, resolves the guests
each one targets, writes message_deliveries rows and sends the SMS leg.
Push and email legs are only recorded as pending for other workers.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from supabase import Client

from unveil.config import settings
from unveil.core.constants import (
    SCHEDULED, SENDING, SENT, FAILED, DELIVERY_PENDING, DELIVERY_NOT_APPLICABLE
)
from unveil.modules.messages.schemas import ProcessResult
from unveil.modules.sms.schemas import SMSMessage
from unveil.modules.sms.service import SMSService

logger = logging.getLogger(__name__)

_NAME_RE = re.compile(r"\{name\}", re.IGNORECASE)
_FIRST_NAME_RE = re.compile(r"\{first_name\}", re.IGNORECASE)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


def personalize(content: str, guest: Dict) -> str:
    """Fill {name} and {first_name}; guests without a name are greeted as "there"."""
    name = guest.get("guest_name") or "there"
    first_name = name.split(" ")[0] or name
    content = _NAME_RE.sub(lambda _: name, content)
    return _FIRST_NAME_RE.sub(lambda _: first_name, content)


def _channel_status(enabled: Optional[bool]) -> str:
    return DELIVERY_PENDING if enabled else DELIVERY_NOT_APPLICABLE


class ScheduledMessageProcessor:
    def __init__(self, supabase: Client, sms_service: SMSService, batch_size: Optional[int] = None):
        self.supabase = supabase
        self.sms_service = sms_service
        self.batch_size = batch_size or settings.scheduled_batch_size

    def fetch_due_messages(self) -> List[Dict]:
        result = self.supabase.table("scheduled_messages")\
            .select("*")\
            .eq("status", SCHEDULED)\
            .lte("send_at", _utcnow())\
            .limit(self.batch_size)\
            .execute()
        return result.data or []

    def get_target_guests(self, message: Dict) -> List[Dict]:
        """
        Guests a scheduled message goes to.

        target_all_guests wins over every other targeting field. Otherwise the
        id, tag and sub-event filters narrow the event's guest list together.
        Targeting sub-events nobody is invited to yields no recipients.
        """
        query = self.supabase.table("event_guests")\
            .select("*")\
            .eq("event_id", message["event_id"])

        if message.get("target_all_guests"):
            return query.execute().data or []

        guest_ids = message.get("target_guest_ids") or []

        if message.get("target_sub_event_ids"):
            assignments = self.supabase.table("guest_sub_event_assignments")\
                .select("guest_id")\
                .in_("sub_event_id", message["target_sub_event_ids"])\
                .eq("is_invited", True)\
                .execute()
            assigned = [a["guest_id"] for a in (assignments.data or [])]
            if not assigned:
                return []
            guest_ids = [g for g in guest_ids if g in assigned] if guest_ids else assigned
            if not guest_ids:
                return []

        if guest_ids:
            query = query.in_("id", guest_ids)
        if message.get("target_guest_tags"):
            query = query.overlaps("guest_tags", message["target_guest_tags"])

        return query.execute().data or []

    def _set_status(self, message_id: str, fields: Dict) -> None:
        self.supabase.table("scheduled_messages")\
            .update(fields)\
            .eq("id", message_id)\
            .execute()

    def _claim(self, message_id: str) -> bool:
        """Move a message from scheduled to sending. False when another run already took it."""
        result = self.supabase.table("scheduled_messages")\
            .update({"status": SENDING})\
            .eq("id", message_id)\
            .eq("status", SCHEDULED)\
            .execute()
        return bool(result.data)

    def _create_deliveries(self, message: Dict, guests: List[Dict]) -> None:
        records = [
            {
                "scheduled_message_id": message["id"],
                "guest_id": guest["id"],
                "phone_number": guest.get("phone"),
                "email": guest.get("guest_email"),
                "user_id": guest.get("user_id"),
                "sms_status": _channel_status(message.get("send_via_sms")),
                "push_status": _channel_status(message.get("send_via_push")),
                "email_status": _channel_status(message.get("send_via_email")),
            }
            for guest in guests
        ]
        try:
            self.supabase.table("message_deliveries").insert(records).execute()
        except Exception as e:
            logger.error(f"Failed to create delivery records for message {message['id']}: {e}")

    async def _send_sms_leg(self, message: Dict, guests: List[Dict]) -> Dict[str, int]:
        recipients = [g for g in guests if g.get("phone") and not g.get("sms_opt_out")]
        if not recipients:
            return {"sent": 0, "failed": 0}

        sms_messages = [
            SMSMessage(
                to=guest["phone"],
                message=personalize(message["content"], guest),
                event_id=message["event_id"],
                guest_id=guest["id"],
                message_type="custom",
            )
            for guest in recipients
        ]
        logger.info(f"Sending {len(sms_messages)} SMS messages for scheduled message {message['id']}")
        # Delivery rows already exist; send without the per-send log
        result = await self.sms_service.send_bulk_sms(sms_messages, log_delivery=False)

        for sms_result, guest in zip(result.results, recipients):
            if sms_result.success and sms_result.message_id:
                self.supabase.table("message_deliveries")\
                    .update({"sms_provider_id": sms_result.message_id, "sms_status": SENT})\
                    .eq("scheduled_message_id", message["id"])\
                    .eq("guest_id", guest["id"])\
                    .execute()

        return {"sent": result.sent, "failed": result.failed}

    async def process_message(self, message: Dict) -> Dict[str, int]:
        """Send one scheduled message. Returns its SMS counts; raises on unexpected failures."""
        if not self._claim(message["id"]):
            logger.info(f"Scheduled message {message['id']} already claimed, skipping")
            return {"sent": 0, "failed": 0, "processed": 0}

        guests = self.get_target_guests(message)
        if not guests:
            logger.warning(f"No target guests found for scheduled message {message['id']}")
            self._set_status(message["id"], {"status": FAILED, "failure_count": 0, "recipient_count": 0})
            return {"sent": 0, "failed": 0, "processed": 0}

        self._create_deliveries(message, guests)

        counts = {"sent": 0, "failed": 0}
        if message.get("send_via_sms"):
            counts = await self._send_sms_leg(message, guests)

        self._set_status(message["id"], {
            "status": SENT,
            "sent_at": _utcnow(),
            "recipient_count": len(guests),
            "success_count": counts["sent"],
            "failure_count": counts["failed"],
        })
        logger.info(f"Processed scheduled message {message['id']}: {len(guests)} recipients")
        return {**counts, "processed": 1}

    async def process_due_messages(self) -> ProcessResult:
        """
        Process every due message in one batch.

        A failure while fetching the batch propagates; a failure on one
        message marks it failed and moves on to the next.
        """
        messages = self.fetch_due_messages()
        if not messages:
            return ProcessResult(success=True, message="No messages to process", processed=0)

        logger.info(f"Found {len(messages)} scheduled messages to process")
        processed = 0
        sent = 0
        failed = 0

        for message in messages:
            try:
                counts = await self.process_message(message)
                processed += counts["processed"]
                sent += counts["sent"]
                failed += counts["failed"]
            except Exception as e:
                logger.error(f"Failed to process scheduled message {message['id']}: {e}")
                try:
                    self._set_status(message["id"], {
                        "status": FAILED,
                        "failure_count": (message.get("failure_count") or 0) + 1,
                    })
                except Exception as status_error:
                    logger.error(f"Could not mark scheduled message {message['id']} failed: {status_error}")

        return ProcessResult(
            success=True,
            message=f"Processed {processed} messages",
            processed=processed,
            sent=sent,
            failed=failed,
        )
