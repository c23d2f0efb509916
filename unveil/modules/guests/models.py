# Supabase table: event_guests
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- event_id: uuid (foreign key to events.id, not null)
- user_id: uuid (foreign key to users.id, nullable) - set once the guest signs in and links by phone
- phone: text (not null) - E.164, e.g. +15551234567
- guest_name: text (nullable)
- guest_email: text (nullable)
- rsvp_status: text (nullable) - values: Attending, Declined, Maybe, Pending
- notes: text (nullable)
- guest_tags: text[] (nullable)
- sms_opt_out: boolean (default: false)
- role: text (default: 'guest')
- invited_at: timestamp (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

Supabase table: guest_sub_event_assignments (read by the scheduled message processor)
- guest_id: uuid (foreign key to event_guests.id)
- sub_event_id: uuid
- is_invited: boolean
"""
