import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from supabase import Client

from unveil.config import settings
from unveil.core.constants import RSVP_PENDING
from unveil.core.profiles import fetch_public_profile
from unveil.core.validators import format_phone_for_sms, mask_phone
from unveil.database.supabase_client import row_or_none
from unveil.modules.sms import templates
from unveil.modules.sms.client import TwilioClient, TwilioError
from unveil.modules.sms.schemas import (
    SMSMessage, SMSResult, BulkSMSResult, SendCounts, InvitationError, InvitationResponse
)

logger = logging.getLogger(__name__)


class SMSService:
    def __init__(self, supabase: Client, twilio: TwilioClient):
        self.supabase = supabase
        self.twilio = twilio

    def _log_delivery(
        self,
        guest_id: Optional[str],
        phone_number: str,
        status: str,
        provider_id: Optional[str] = None,
    ) -> None:
        """Record the send in message_deliveries. guest_id is required by the table, so rows without one are skipped."""
        if not guest_id:
            return
        try:
            self.supabase.table("message_deliveries").insert({
                "guest_id": guest_id,
                "phone_number": phone_number,
                "sms_status": status,
                "sms_provider_id": provider_id,
            }).execute()
        except Exception as e:
            logger.error(f"Failed to log SMS delivery for guest {guest_id}: {e}")

    async def send_sms(self, message: SMSMessage, log_delivery: bool = True) -> SMSResult:
        """Send one SMS. Never raises: failures come back as SMSResult(success=False)."""
        try:
            formatted = format_phone_for_sms(message.to)
            if not formatted:
                raise TwilioError("Invalid phone number format")

            logger.info(f"Sending {message.message_type} SMS to {mask_phone(formatted)}")
            resource = await self.twilio.send_message(formatted, message.message)
            sid = resource.get("sid")
            logger.info(f"SMS sent to {mask_phone(formatted)} (SID: {sid})")

            if log_delivery:
                self._log_delivery(message.guest_id, formatted, "sent", sid)
            return SMSResult(success=True, message_id=sid, status=resource.get("status"))
        except Exception as e:
            logger.error(f"Failed to send SMS to {mask_phone(message.to)}: {e}")
            if log_delivery and message.event_id:
                self._log_delivery(message.guest_id, message.to, "failed")
            return SMSResult(success=False, error=str(e))

    async def send_bulk_sms(self, messages: List[SMSMessage], log_delivery: bool = True) -> BulkSMSResult:
        """Send sequentially with a short pause between messages; results keep input order"""
        results: List[SMSResult] = []
        sent = 0
        failed = 0
        delay = settings.sms_send_delay_ms / 1000

        logger.info(f"Sending bulk SMS to {len(messages)} recipients")
        for message in messages:
            result = await self.send_sms(message, log_delivery=log_delivery)
            results.append(result)
            if result.success:
                sent += 1
            else:
                failed += 1
            if delay:
                await asyncio.sleep(delay)

        logger.info(f"Bulk SMS complete: {sent} sent, {failed} failed")
        return BulkSMSResult(sent=sent, failed=failed, results=results)

    def _load_event(self, event_id: str) -> Dict:
        result = self.supabase.table("events")\
            .select("id, title, event_date, host_user_id")\
            .eq("id", event_id)\
            .maybe_single()\
            .execute()
        event = row_or_none(result)
        if not event:
            raise LookupError("Event not found")
        return event

    def _host_name(self, host_user_id: Optional[str]) -> str:
        profile = fetch_public_profile(self.supabase, host_user_id)
        return (profile or {}).get("full_name") or templates.DEFAULT_HOST_NAME

    def _textable_guests(self, event_id: str, guest_ids: Optional[List[str]] = None, pending_only: bool = False) -> List[Dict]:
        """Guests with a phone number who have not opted out of SMS"""
        query = self.supabase.table("event_guests")\
            .select("id, guest_name, phone, rsvp_status, sms_opt_out, user_id")\
            .eq("event_id", event_id)\
            .not_.is_("phone", "null")
        if guest_ids:
            query = query.in_("id", guest_ids)
        elif pending_only:
            query = query.or_(f"rsvp_status.is.null,rsvp_status.eq.{RSVP_PENDING}")
        result = query.execute()
        return [g for g in (result.data or []) if g.get("phone") and not g.get("sms_opt_out")]

    async def send_event_announcement(
        self,
        event_id: str,
        announcement: str,
        target_guest_ids: Optional[List[str]] = None,
    ) -> SendCounts:
        """Text an announcement to the event's guests (or the given subset)"""
        try:
            event = self._load_event(event_id)
            guests = self._textable_guests(event_id, target_guest_ids)
            if not guests:
                return SendCounts(sent=0, failed=0)

            host_name = self._host_name(event.get("host_user_id"))
            messages = [
                SMSMessage(
                    to=guest["phone"],
                    message=templates.announcement_message(guest.get("guest_name"), announcement, event["title"], host_name),
                    event_id=event_id,
                    guest_id=guest["id"],
                    message_type="announcement",
                )
                for guest in guests
            ]
            result = await self.send_bulk_sms(messages)
            return SendCounts(sent=result.sent, failed=result.failed)
        except Exception as e:
            logger.error(f"Failed to send announcement for event {event_id}: {e}")
            return SendCounts(sent=0, failed=1)

    async def send_rsvp_reminder(self, event_id: str, guest_ids: Optional[List[str]] = None) -> SendCounts:
        """Remind guests to RSVP. Without guest_ids only guests who have not answered are texted."""
        try:
            event = self._load_event(event_id)
            guests = self._textable_guests(event_id, guest_ids, pending_only=True)
            if not guests:
                return SendCounts(sent=0, failed=0)

            host_name = self._host_name(event.get("host_user_id"))
            event_date = templates.format_event_date(event.get("event_date"))
            messages = [
                SMSMessage(
                    to=guest["phone"],
                    message=templates.rsvp_reminder_message(guest.get("guest_name"), event["title"], event_date, host_name),
                    event_id=event_id,
                    guest_id=guest["id"],
                    message_type="rsvp_reminder",
                )
                for guest in guests
            ]
            result = await self.send_bulk_sms(messages)
            return SendCounts(sent=result.sent, failed=result.failed)
        except Exception as e:
            logger.error(f"Failed to send RSVP reminders for event {event_id}: {e}")
            return SendCounts(sent=0, failed=1)

    async def send_invitations(self, event_id: str, guest_ids: Optional[List[str]] = None) -> InvitationResponse:
        """
        Text invitation links. Without guest_ids, every guest who has not yet
        linked an account is invited. Successful sends stamp invited_at.
        """
        event = self._load_event(event_id)
        guests = self._textable_guests(event_id, guest_ids)
        if not guest_ids:
            guests = [g for g in guests if not g.get("user_id")]

        host_name = self._host_name(event.get("host_user_id"))
        event_date = templates.format_event_date(event.get("event_date"))
        successful = 0
        errors: List[InvitationError] = []

        for guest in guests:
            formatted = format_phone_for_sms(guest["phone"])
            if not formatted:
                errors.append(InvitationError(phone=guest["phone"], error="Invalid phone number format"))
                continue
            text = templates.invitation_message(
                event_id, event["title"], event_date, host_name, formatted, guest.get("guest_name")
            )
            result = await self.send_sms(SMSMessage(
                to=formatted, message=text, event_id=event_id, guest_id=guest["id"], message_type="invitation"
            ))
            if not result.success:
                errors.append(InvitationError(phone=guest["phone"], error=result.error or "Unknown error"))
                continue
            successful += 1
            try:
                self.supabase.table("event_guests")\
                    .update({"invited_at": datetime.utcnow().isoformat()})\
                    .eq("id", guest["id"])\
                    .execute()
            except Exception as e:
                logger.warning(f"Could not stamp invited_at for guest {guest['id']}: {e}")

        logger.info(f"Invitations for event {event_id}: {successful} sent, {len(errors)} failed")
        return InvitationResponse(successful=successful, failed=len(errors), errors=errors)
