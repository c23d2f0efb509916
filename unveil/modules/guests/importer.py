"""
Guest list import: parse CSV/Excel uploads, map columns, validate rows.

Phone is the primary identifier. A row without a name falls back to its
phone number as display name.
"""

import io
import re
import logging
from typing import Dict, List, Optional

import pandas as pd
from pydantic import ValidationError

from unveil.core.constants import RSVP_ATTENDING, RSVP_DECLINED, RSVP_MAYBE, RSVP_PENDING
from unveil.core.validators import is_valid_email, is_valid_phone_number, normalize_phone_number
from unveil.modules.guests.schemas import (
    GuestImportRow, InvalidImportRow, ImportSummary, ImportValidationResult
)

logger = logging.getLogger(__name__)

MAX_IMPORT_BYTES = 10 * 1024 * 1024
ALLOWED_CONTENT_TYPES = {
    "text/csv",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}
_ALLOWED_EXTENSION_RE = re.compile(r"\.(csv|xlsx|xls)$", re.IGNORECASE)

# Checked in order; the first field whose pattern occurs in the header wins
COMMON_COLUMN_MAPPINGS: Dict[str, List[str]] = {
    "phone": ["phone", "phone number", "mobile", "cell", "telephone", "contact", "cell phone", "mobile number"],
    "guest_name": ["name", "full name", "guest name", "first name", "last name", "full_name", "guest_name"],
    "guest_email": ["email", "email address", "e-mail", "guest email", "guest_email"],
    "notes": ["notes", "comments", "remarks", "special requests", "dietary restrictions"],
    "guest_tags": ["tags", "group", "category", "table", "side", "family", "friends"],
    "rsvp_status": ["rsvp", "status", "response", "attending", "rsvp_status"],
}

_RSVP_SYNONYMS = {
    RSVP_ATTENDING: {"attending", "yes", "going", "accept"},
    RSVP_DECLINED: {"declined", "no", "not going", "decline"},
    RSVP_MAYBE: {"maybe", "perhaps", "unsure"},
}

SAMPLE_CSV_ROWS = [
    ["Phone", "Name", "Email", "Notes", "Tags", "RSVP Status"],
    ["(555) 123-4567", "John Smith", "john@example.com", "Vegetarian meal", "Family,Groomsmen", "Attending"],
    ["(555) 987-6543", "Jane Doe", "jane@example.com", "Plus one: Mike Johnson", "Friends", "Pending"],
    ["(555) 555-0123", "Bob Wilson", "bob@example.com", "Wheelchair accessible seating", "Coworkers", "Maybe"],
]


class ImportFileError(ValueError):
    """Upload could not be read as a guest list"""


class ParsedFile:
    def __init__(self, headers: List[str], rows: List[Dict[str, str]]):
        self.headers = headers
        self.rows = rows


def validate_import_file(filename: Optional[str], content_type: Optional[str], size: int) -> None:
    """Raise ImportFileError if the upload is too large or not CSV/Excel"""
    if size > MAX_IMPORT_BYTES:
        raise ImportFileError("File size must be less than 10MB")
    if content_type not in ALLOWED_CONTENT_TYPES and not _ALLOWED_EXTENSION_RE.search(filename or ""):
        raise ImportFileError("File must be CSV or Excel format")


def _clean_cell(value) -> str:
    text = "" if value is None else str(value).strip()
    if text.lower() == "nan":
        return ""
    # Excel stores bare phone numbers as floats
    if re.fullmatch(r"\d+\.0", text):
        text = text[:-2]
    return text


def _frame_to_parsed(df: pd.DataFrame) -> ParsedFile:
    headers = [str(h).strip().lower() for h in df.columns]
    rows = []
    for record in df.itertuples(index=False, name=None):
        row = {header: _clean_cell(value) for header, value in zip(headers, record)}
        if any(row.values()):
            rows.append(row)
    return ParsedFile(headers=headers, rows=rows)


def parse_csv(content: bytes) -> ParsedFile:
    try:
        df = pd.read_csv(
            io.BytesIO(content),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            encoding="utf-8-sig",
        )
    except Exception as e:
        raise ImportFileError(f"CSV parsing error: {e}")
    return _frame_to_parsed(df)


def parse_excel(content: bytes) -> ParsedFile:
    try:
        df = pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=str)
    except Exception as e:
        raise ImportFileError(f"Failed to parse Excel file: {e}")
    parsed = _frame_to_parsed(df.fillna(""))
    if not parsed.rows:
        raise ImportFileError("Excel file must have at least a header row and one data row")
    return parsed


def parse_guest_file(filename: Optional[str], content: bytes) -> ParsedFile:
    """Dispatch on extension; anything that is not .xls/.xlsx is read as CSV"""
    if re.search(r"\.xlsx?$", filename or "", re.IGNORECASE):
        return parse_excel(content)
    return parse_csv(content)


def auto_detect_column_mapping(headers: List[str]) -> Dict[str, Optional[str]]:
    """Map each header to a guest field by substring match; unmatched headers are omitted"""
    mapping: Dict[str, Optional[str]] = {}
    for header in headers:
        normalized = header.lower().strip()
        for field, patterns in COMMON_COLUMN_MAPPINGS.items():
            if any(pattern in normalized for pattern in patterns):
                mapping[header] = field
                break
    return mapping


def normalize_rsvp(value: str) -> str:
    lowered = value.lower()
    for status, synonyms in _RSVP_SYNONYMS.items():
        if lowered in synonyms:
            return status
    return RSVP_PENDING


def validate_imported_guests(
    rows: List[Dict[str, str]],
    column_mapping: Dict[str, Optional[str]],
) -> ImportValidationResult:
    """Apply the column mapping to every row and collect valid guests and per-row errors"""
    valid_guests: List[GuestImportRow] = []
    invalid_rows: List[InvalidImportRow] = []
    seen_emails = set()
    seen_phones = set()
    duplicate_emails = 0

    for index, row in enumerate(rows):
        errors: List[str] = []
        guest: Dict = {}

        for column, field in column_mapping.items():
            if not field:
                continue
            value = (row.get(column) or "").strip()

            if field == "phone":
                guest["phone"] = value
                if not value:
                    errors.append("Phone number is required")
                elif not is_valid_phone_number(value):
                    errors.append(f"Invalid phone number format: {value}")
                else:
                    normalized = normalize_phone_number(value)
                    if normalized in seen_phones:
                        errors.append(f"Duplicate phone number: {value}")
                    else:
                        seen_phones.add(normalized)
            elif field == "guest_name":
                guest["guest_name"] = value
            elif field == "guest_email":
                if not value:
                    continue
                if not is_valid_email(value):
                    errors.append(f"Invalid email format: {value}")
                elif value.lower() in seen_emails:
                    duplicate_emails += 1
                    errors.append(f"Duplicate email: {value}")
                else:
                    seen_emails.add(value.lower())
                    guest["guest_email"] = value
            elif field == "notes":
                guest["notes"] = value
            elif field == "guest_tags":
                if value:
                    guest["guest_tags"] = [t.strip() for t in re.split(r"[,;|]", value) if t.strip()]
            elif field == "rsvp_status":
                if value:
                    guest["rsvp_status"] = normalize_rsvp(value)

        if not guest.get("phone") and "Phone number is required" not in errors:
            errors.append("Phone number is required")
        if not guest.get("guest_name") and guest.get("phone"):
            guest["guest_name"] = guest["phone"]

        if not errors:
            try:
                valid_guests.append(GuestImportRow(**{k: v for k, v in guest.items() if v != ""}))
                continue
            except ValidationError as e:
                for err in e.errors():
                    location = ".".join(str(part) for part in err["loc"])
                    errors.append(f"{location}: {err['msg']}")

        invalid_rows.append(InvalidImportRow(row=index + 1, data=row, errors=errors))

    return ImportValidationResult(
        valid_guests=valid_guests,
        invalid_rows=invalid_rows,
        summary=ImportSummary(
            total=len(rows),
            valid=len(valid_guests),
            invalid=len(invalid_rows),
            duplicate_emails=duplicate_emails,
        ),
    )


def convert_to_event_guests(guests: List[GuestImportRow], event_id: str) -> List[Dict]:
    """event_guests insert payloads; user_id stays empty until the guest links their account"""
    return [
        {
            "event_id": event_id,
            "phone": normalize_phone_number(guest.phone),
            "guest_name": guest.guest_name or guest.phone,
            "guest_email": guest.guest_email or None,
            "notes": guest.notes or None,
            "guest_tags": guest.guest_tags or None,
            "rsvp_status": guest.rsvp_status or RSVP_PENDING,
            "user_id": None,
        }
        for guest in guests
    ]


def generate_sample_csv() -> str:
    return "\n".join(",".join(f'"{cell}"' for cell in row) for row in SAMPLE_CSV_ROWS)
