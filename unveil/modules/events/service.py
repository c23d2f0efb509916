from supabase import Client
from unveil.core.constants import RSVP_ATTENDING, RSVP_DECLINED, RSVP_MAYBE, RSVP_PENDING
from unveil.core.dependencies import get_guest_record, get_hosted_event, EVENT_NOT_FOUND
from unveil.core.profiles import fetch_public_profile
from unveil.database.supabase_client import row_or_none
from unveil.modules.events.schemas import (
    EventCreate, EventUpdate, EventResponse, EventDetailResponse, EventAnalyticsResponse
)
from typing import List
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


def _count(result) -> int:
    if getattr(result, "count", None) is not None:
        return result.count
    return len(result.data or [])


class EventService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def create_event(self, event_data: EventCreate, host_user_id: str) -> EventResponse:
        """Create a new event hosted by host_user_id"""
        try:
            insert_data = event_data.model_dump(mode="json")
            insert_data["host_user_id"] = host_user_id
            result = self.supabase.table("events").insert(insert_data).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to create event")

            logger.info(f"Event {result.data[0]['id']} created by {host_user_id}")
            return EventResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_event_by_id(self, event_id: str) -> EventResponse:
        """Get event by ID"""
        try:
            result = self.supabase.table("events")\
                .select("*")\
                .eq("id", event_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.warning(f"Event lookup failed for {event_id}: {e}")
            raise HTTPException(status_code=404, detail="Event not found")
        event = row_or_none(result)
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")
        return EventResponse(**event)

    def get_event_details(self, event_id: str, user_id: str) -> EventDetailResponse:
        """Event with host profile and the caller's guest row. Only the host or a listed guest may read it."""
        event = self.get_event_by_id(event_id)
        guest = get_guest_record(event_id, user_id, self.supabase)
        if event.host_user_id == user_id:
            role = "host"
        elif guest:
            role = "guest"
        else:
            raise HTTPException(status_code=404, detail=EVENT_NOT_FOUND)

        return EventDetailResponse(
            **event.model_dump(),
            role=role,
            host=fetch_public_profile(self.supabase, event.host_user_id),
            guest=guest,
        )

    def list_hosted_events(self, host_user_id: str) -> List[EventResponse]:
        """Events the user hosts, soonest first"""
        try:
            result = self.supabase.table("events")\
                .select("*")\
                .eq("host_user_id", host_user_id)\
                .order("event_date")\
                .execute()
            return [EventResponse(**event) for event in (result.data or [])]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def list_joined_events(self, user_id: str) -> List[EventResponse]:
        """Events the user is listed on as a guest, most recently invited first"""
        try:
            guest_rows = self.supabase.table("event_guests")\
                .select("event_id, created_at")\
                .eq("user_id", user_id)\
                .order("created_at", desc=True)\
                .execute()
            event_ids = []
            for row in guest_rows.data or []:
                if row["event_id"] not in event_ids:
                    event_ids.append(row["event_id"])
            if not event_ids:
                return []
            result = self.supabase.table("events")\
                .select("*")\
                .in_("id", event_ids)\
                .execute()
            by_id = {event["id"]: event for event in (result.data or [])}
            return [EventResponse(**by_id[eid]) for eid in event_ids if eid in by_id]
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_event(self, event_id: str, event_data: EventUpdate) -> EventResponse:
        """Update event"""
        try:
            update_data = event_data.model_dump(mode="json", exclude_unset=True)
            update_data["updated_at"] = datetime.utcnow().isoformat()

            result = self.supabase.table("events")\
                .update(update_data)\
                .eq("id", event_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Event not found")

            return EventResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def delete_event(self, event_id: str) -> bool:
        """Delete event"""
        try:
            result = self.supabase.table("events")\
                .delete()\
                .eq("id", event_id)\
                .execute()
            logger.info(f"Event {event_id} deleted")
            return len(result.data or []) > 0
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_analytics(self, event_id: str, host_user_id: str) -> EventAnalyticsResponse:
        """RSVP breakdown plus message and media counts for the host dashboard"""
        get_hosted_event(event_id, host_user_id, self.supabase)
        try:
            guests = self.supabase.table("event_guests")\
                .select("rsvp_status")\
                .eq("event_id", event_id)\
                .execute()
            counts = {RSVP_ATTENDING: 0, RSVP_DECLINED: 0, RSVP_MAYBE: 0, RSVP_PENDING: 0}
            for guest in guests.data or []:
                status = guest.get("rsvp_status") or RSVP_PENDING
                counts[status if status in counts else RSVP_PENDING] += 1
            total = sum(counts.values())
            responded = total - counts[RSVP_PENDING]

            messages = self.supabase.table("messages")\
                .select("id", count="exact")\
                .eq("event_id", event_id)\
                .execute()
            media = self.supabase.table("media")\
                .select("id", count="exact")\
                .eq("event_id", event_id)\
                .execute()

            return EventAnalyticsResponse(
                event_id=event_id,
                total_guests=total,
                attending=counts[RSVP_ATTENDING],
                declined=counts[RSVP_DECLINED],
                maybe=counts[RSVP_MAYBE],
                pending=counts[RSVP_PENDING],
                response_rate=round(responded / total, 4) if total else 0.0,
                message_count=_count(messages),
                media_count=_count(media),
            )
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
