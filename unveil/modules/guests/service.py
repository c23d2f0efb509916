from supabase import Client
from unveil.core.errors import is_permission_error
from unveil.core.validators import mask_phone
from unveil.database.supabase_client import row_or_none
from unveil.modules.guests import importer
from unveil.modules.guests.schemas import (
    GuestCreate, GuestUpdate, GuestResponse, GuestImportResponse
)
from typing import List, Dict, Optional
from fastapi import HTTPException
from datetime import datetime
import logging

logger = logging.getLogger(__name__)


class GuestService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def list_guests(self, event_id: str) -> List[GuestResponse]:
        """Guest list for an event, ordered by name. RLS rejections yield an empty list."""
        try:
            result = self.supabase.table("event_guests")\
                .select("*")\
                .eq("event_id", event_id)\
                .order("guest_name")\
                .execute()
            return [GuestResponse(**guest) for guest in (result.data or [])]
        except Exception as e:
            if is_permission_error(e):
                logger.info(f"Guest list for event {event_id} not readable by caller")
                return []
            raise HTTPException(status_code=500, detail=str(e))

    def get_guest(self, event_id: str, guest_id: str) -> GuestResponse:
        try:
            result = self.supabase.table("event_guests")\
                .select("*")\
                .eq("id", guest_id)\
                .eq("event_id", event_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        guest = row_or_none(result)
        if not guest:
            raise HTTPException(status_code=404, detail="Guest not found")
        return GuestResponse(**guest)

    def _phone_taken(self, event_id: str, phone: str, exclude_guest_id: Optional[str] = None) -> bool:
        query = self.supabase.table("event_guests")\
            .select("id")\
            .eq("event_id", event_id)\
            .eq("phone", phone)
        if exclude_guest_id:
            query = query.neq("id", exclude_guest_id)
        result = query.execute()
        return bool(result.data)

    def add_guest(self, event_id: str, guest_data: GuestCreate) -> GuestResponse:
        """Add one guest; phone must be unique within the event"""
        try:
            if self._phone_taken(event_id, guest_data.phone):
                raise HTTPException(status_code=400, detail="A guest with this phone number already exists")

            insert_data = guest_data.model_dump(mode="json")
            insert_data["event_id"] = event_id
            result = self.supabase.table("event_guests").insert(insert_data).execute()

            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to add guest")

            logger.info(f"Guest {mask_phone(guest_data.phone)} added to event {event_id}")
            return GuestResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def update_guest(self, event_id: str, guest_id: str, guest_data: GuestUpdate) -> GuestResponse:
        try:
            update_data = guest_data.model_dump(mode="json", exclude_unset=True)
            if update_data.get("phone") and self._phone_taken(event_id, update_data["phone"], guest_id):
                raise HTTPException(status_code=400, detail="A guest with this phone number already exists")
            update_data["updated_at"] = datetime.utcnow().isoformat()

            result = self.supabase.table("event_guests")\
                .update(update_data)\
                .eq("id", guest_id)\
                .eq("event_id", event_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Guest not found")

            return GuestResponse(**result.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def remove_guest(self, event_id: str, guest_id: str) -> None:
        try:
            result = self.supabase.table("event_guests")\
                .delete()\
                .eq("id", guest_id)\
                .eq("event_id", event_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="Guest not found")
        logger.info(f"Guest {guest_id} removed from event {event_id}")

    def update_own_rsvp(self, event_id: str, user_id: str, rsvp_status: str) -> GuestResponse:
        """Guests change their own RSVP; a caller not on the list gets 404"""
        try:
            result = self.supabase.table("event_guests")\
                .update({"rsvp_status": rsvp_status, "updated_at": datetime.utcnow().isoformat()})\
                .eq("event_id", event_id)\
                .eq("user_id", user_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        if not result.data:
            raise HTTPException(status_code=404, detail="You are not on the guest list for this event")
        logger.info(f"User {user_id} RSVP {rsvp_status} for event {event_id}")
        return GuestResponse(**result.data[0])

    def link_guest(self, event_id: str, user_id: str, phone: str) -> GuestResponse:
        """Attach the caller's account to the guest row carrying their phone number"""
        try:
            result = self.supabase.table("event_guests")\
                .select("*")\
                .eq("event_id", event_id)\
                .eq("phone", phone)\
                .limit(1)\
                .execute()
            guest = row_or_none(result)
            if not guest:
                raise HTTPException(status_code=404, detail="No invitation found for this phone number")
            if guest.get("user_id") and guest["user_id"] != user_id:
                raise HTTPException(status_code=400, detail="This invitation is already linked to another account")
            if guest.get("user_id") == user_id:
                return GuestResponse(**guest)

            updated = self.supabase.table("event_guests")\
                .update({"user_id": user_id, "updated_at": datetime.utcnow().isoformat()})\
                .eq("id", guest["id"])\
                .execute()
            if not updated.data:
                raise HTTPException(status_code=500, detail="Failed to link guest")
            logger.info(f"User {user_id} linked to guest {guest['id']} on event {event_id}")
            return GuestResponse(**updated.data[0])
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def import_guests(
        self,
        event_id: str,
        filename: Optional[str],
        content: bytes,
        column_mapping: Optional[Dict[str, Optional[str]]] = None,
        dry_run: bool = False,
    ) -> GuestImportResponse:
        """Parse and validate an uploaded guest list, then insert the valid rows unless dry_run"""
        try:
            parsed = importer.parse_guest_file(filename, content)
        except importer.ImportFileError as e:
            raise HTTPException(status_code=400, detail=str(e))

        if column_mapping:
            mapping = {header.lower().strip(): field for header, field in column_mapping.items()}
        else:
            mapping = importer.auto_detect_column_mapping(parsed.headers)
        if "phone" not in mapping.values():
            raise HTTPException(status_code=400, detail="Could not find a phone number column")

        validation = importer.validate_imported_guests(parsed.rows, mapping)
        imported = 0

        if not dry_run and validation.valid_guests:
            rows = importer.convert_to_event_guests(validation.valid_guests, event_id)
            try:
                result = self.supabase.table("event_guests").insert(rows).execute()
                imported = len(result.data or [])
            except Exception as e:
                logger.error(f"Guest import insert failed for event {event_id}: {e}")
                raise HTTPException(status_code=500, detail=f"Failed to import guests: {e}")

        logger.info(
            f"Guest import for event {event_id}: {validation.summary.valid} valid, "
            f"{validation.summary.invalid} invalid, {imported} inserted (dry_run={dry_run})"
        )
        return GuestImportResponse(
            summary=validation.summary,
            invalid_rows=validation.invalid_rows,
            column_mapping=mapping,
            imported=imported,
            dry_run=dry_run,
        )
