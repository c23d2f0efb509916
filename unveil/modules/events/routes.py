from fastapi import APIRouter, Depends
from unveil.database.supabase_client import get_supabase
from unveil.modules.events.schemas import (
    EventCreate, EventUpdate, EventResponse, EventDetailResponse, EventAnalyticsResponse
)
from unveil.modules.events.service import EventService
from unveil.core.dependencies import get_current_user, require_event_host
from supabase import Client
from typing import List, Dict

router = APIRouter(prefix="/events", tags=["events"])


def get_event_service(supabase: Client = Depends(get_supabase)) -> EventService:
    return EventService(supabase)


@router.post("", response_model=EventResponse, status_code=201)
async def create_event(
    event_data: EventCreate,
    user_data: Dict = Depends(get_current_user),
    service: EventService = Depends(get_event_service)
):
    """Create a new event; the caller becomes its host"""
    return service.create_event(event_data, user_data["id"])


@router.get("/hosted", response_model=List[EventResponse])
async def list_hosted_events(
    user_data: Dict = Depends(get_current_user),
    service: EventService = Depends(get_event_service)
):
    """Events the caller hosts"""
    return service.list_hosted_events(user_data["id"])


@router.get("/joined", response_model=List[EventResponse])
async def list_joined_events(
    user_data: Dict = Depends(get_current_user),
    service: EventService = Depends(get_event_service)
):
    """Events the caller is a guest of"""
    return service.list_joined_events(user_data["id"])


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(
    event_id: str,
    user_data: Dict = Depends(get_current_user),
    service: EventService = Depends(get_event_service)
):
    """Event details with host profile and the caller's RSVP"""
    return service.get_event_details(event_id, user_data["id"])


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    event_data: EventUpdate,
    user_data: Dict = Depends(require_event_host),
    service: EventService = Depends(get_event_service)
):
    """Update event (host only)"""
    return service.update_event(event_id, event_data)


@router.delete("/{event_id}", status_code=204)
async def delete_event(
    event_id: str,
    user_data: Dict = Depends(require_event_host),
    service: EventService = Depends(get_event_service)
):
    """Delete event (host only)"""
    service.delete_event(event_id)
    return None


@router.get("/{event_id}/analytics", response_model=EventAnalyticsResponse)
async def get_event_analytics(
    event_id: str,
    user_data: Dict = Depends(get_current_user),
    service: EventService = Depends(get_event_service)
):
    """RSVP and engagement summary (host only)"""
    return service.get_analytics(event_id, user_data["id"])
