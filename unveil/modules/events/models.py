# Supabase table: events
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- title: text (not null)
- event_date: date (not null)
- location: text (nullable)
- description: text (nullable)
- is_public: boolean (default: true)
- header_image_url: text (nullable)
- host_user_id: uuid (foreign key to users.id, not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

RLS: hosts can read/write their own events; guests can read events they are
listed on through event_guests.
"""
