"""Outbound SMS texts. Every message ends with the opt-out line carriers require."""

from datetime import date, datetime
from typing import Optional, Union
from urllib.parse import quote

from unveil.config import settings
from unveil.core.constants import RSVP_ATTENDING, RSVP_DECLINED

OPT_OUT_FOOTER = "Reply STOP to opt out."
DEFAULT_HOST_NAME = "Your host"
DEFAULT_GUEST_NAME = "there"


def format_event_date(value: Union[str, date, datetime, None]) -> str:
    """'Saturday, June 6' style date"""
    if not value:
        return ""
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return value
    return f"{value:%A}, {value:%B} {value.day}"


def rsvp_reminder_message(guest_name: Optional[str], event_title: str, event_date: str, host_name: str) -> str:
    name = guest_name or DEFAULT_GUEST_NAME
    return (
        f"Hi {name}! {host_name} here. We're excited for {event_title} on {event_date} "
        f"and would love to know if you can join us! Please RSVP when you have a moment. "
        f"Can't wait to celebrate! \U0001F495\n\n{OPT_OUT_FOOTER}"
    )


def announcement_message(guest_name: Optional[str], announcement: str, event_title: str, host_name: str) -> str:
    name = guest_name or DEFAULT_GUEST_NAME
    return f"Hi {name}! {host_name} here with an update about {event_title}:\n\n{announcement}\n\n{OPT_OUT_FOOTER}"


def guest_access_link(event_id: str, guest_phone: str) -> str:
    return f"{settings.app_base_url.rstrip('/')}/guest/events/{event_id}?phone={quote(guest_phone, safe='')}"


def invitation_message(
    event_id: str,
    event_title: str,
    event_date: str,
    host_name: str,
    guest_phone: str,
    guest_name: Optional[str] = None,
) -> str:
    greeting = f"Hi {guest_name}! " if guest_name else ""
    return (
        f"{greeting}You're invited to {event_title} on {event_date}!\n\n"
        f"View details & RSVP: {guest_access_link(event_id, guest_phone)}\n\n"
        f"Hosted by {host_name} via Unveil\n\n{OPT_OUT_FOOTER}"
    )


def rsvp_confirmation_message(event_title: str, event_date: str, rsvp_status: str) -> str:
    if rsvp_status == RSVP_ATTENDING:
        status_text = "attending"
    elif rsvp_status == RSVP_DECLINED:
        status_text = "unable to attend"
    else:
        status_text = "maybe attending"
    return (
        f"Thanks for your RSVP! We've confirmed you're {status_text} {event_title} on {event_date}.\n\n"
        f"Your hosts appreciate hearing from you!\n\n{OPT_OUT_FOOTER}"
    )


def event_reminder_message(event_title: str, host_name: str, days_until: int) -> str:
    if days_until == 0:
        time_text = "today"
    elif days_until == 1:
        time_text = "tomorrow"
    else:
        time_text = f"in {days_until} days"
    return (
        f"Reminder: {event_title} is {time_text}!\n\n"
        f"Don't forget to upload photos and stay connected.\n\n"
        f"Hosted by {host_name} via Unveil\n\n{OPT_OUT_FOOTER}"
    )


def event_update_message(event_title: str, host_name: str, update_text: str) -> str:
    return f"Update for {event_title}:\n\n{update_text}\n\nHosted by {host_name} via Unveil\n\n{OPT_OUT_FOOTER}"
