from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from fastapi.responses import Response
from unveil.database.supabase_client import get_supabase
from unveil.modules.guests import importer
from unveil.modules.guests.schemas import (
    GuestCreate, GuestUpdate, GuestResponse, RSVPUpdate, LinkGuestRequest, GuestImportResponse
)
from unveil.modules.guests.service import GuestService
from unveil.core.dependencies import get_current_user, require_event_host, require_event_member
from supabase import Client
from typing import List, Dict, Optional
import json

router = APIRouter(prefix="/events/{event_id}/guests", tags=["guests"])


def get_guest_service(supabase: Client = Depends(get_supabase)) -> GuestService:
    return GuestService(supabase)


@router.get("", response_model=List[GuestResponse])
async def list_guests(
    event_id: str,
    user_data: Dict = Depends(require_event_member),
    service: GuestService = Depends(get_guest_service)
):
    """List guests (host or guest of the event)"""
    return service.list_guests(event_id)


@router.post("", response_model=GuestResponse, status_code=201)
async def add_guest(
    event_id: str,
    guest_data: GuestCreate,
    user_data: Dict = Depends(require_event_host),
    service: GuestService = Depends(get_guest_service)
):
    """Add a guest (host only)"""
    return service.add_guest(event_id, guest_data)


@router.put("/me/rsvp", response_model=GuestResponse)
async def update_my_rsvp(
    event_id: str,
    rsvp: RSVPUpdate,
    user_data: Dict = Depends(get_current_user),
    service: GuestService = Depends(get_guest_service)
):
    """Update the caller's own RSVP"""
    return service.update_own_rsvp(event_id, user_data["id"], rsvp.rsvp_status)


@router.post("/link", response_model=GuestResponse)
async def link_guest(
    event_id: str,
    link: LinkGuestRequest,
    user_data: Dict = Depends(get_current_user),
    service: GuestService = Depends(get_guest_service)
):
    """Claim the guest row invited under the caller's phone number"""
    return service.link_guest(event_id, user_data["id"], link.phone)


@router.get("/import/template")
async def download_import_template(
    event_id: str,
    user_data: Dict = Depends(get_current_user)
):
    """Sample CSV with the recognised column headers"""
    return Response(
        content=importer.generate_sample_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="guest-import-template.csv"'},
    )


@router.post("/import", response_model=GuestImportResponse)
async def import_guests(
    event_id: str,
    file: UploadFile = File(...),
    column_mapping: Optional[str] = Form(None),
    dry_run: bool = Form(False),
    user_data: Dict = Depends(require_event_host),
    service: GuestService = Depends(get_guest_service)
):
    """
    Bulk import guests from CSV or Excel (host only).

    column_mapping is an optional JSON object of header -> field; when omitted
    the headers are matched automatically.
    """
    content = await file.read()
    try:
        importer.validate_import_file(file.filename, file.content_type, len(content))
    except importer.ImportFileError as e:
        raise HTTPException(status_code=400, detail=str(e))

    mapping = None
    if column_mapping:
        try:
            mapping = json.loads(column_mapping)
        except ValueError:
            raise HTTPException(status_code=400, detail="column_mapping must be a JSON object")
        if not isinstance(mapping, dict):
            raise HTTPException(status_code=400, detail="column_mapping must be a JSON object")

    return service.import_guests(event_id, file.filename, content, mapping, dry_run)


@router.put("/{guest_id}", response_model=GuestResponse)
async def update_guest(
    event_id: str,
    guest_id: str,
    guest_data: GuestUpdate,
    user_data: Dict = Depends(require_event_host),
    service: GuestService = Depends(get_guest_service)
):
    """Update a guest (host only)"""
    return service.update_guest(event_id, guest_id, guest_data)


@router.delete("/{guest_id}", status_code=204)
async def remove_guest(
    event_id: str,
    guest_id: str,
    user_data: Dict = Depends(require_event_host),
    service: GuestService = Depends(get_guest_service)
):
    """Remove a guest (host only)"""
    service.remove_guest(event_id, guest_id)
    return None
