# Supabase tables: messages, scheduled_messages
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

messages:
- id: uuid (primary key)
- event_id: uuid (foreign key to events.id, not null)
- sender_user_id: uuid (foreign key to users.id, nullable)
- content: text (not null)
- message_type: text - channel, announcement, direct
- recipient_user_id: uuid (nullable) - direct messages only
- recipient_tags: text[] (nullable)
- created_at: timestamp (default: now())

scheduled_messages:
- id: uuid (primary key)
- event_id: uuid (foreign key to events.id, not null)
- sender_user_id: uuid (not null)
- content: text (not null) - may contain {name} / {first_name} placeholders
- send_at: timestamp (not null)
- status: text - scheduled, sending, sent, failed, cancelled
- send_via_sms, send_via_push, send_via_email: boolean
- target_all_guests: boolean (default: true)
- target_guest_ids: uuid[] (nullable)
- target_guest_tags: text[] (nullable)
- target_sub_event_ids: uuid[] (nullable)
- recipient_count, success_count, failure_count: integer (default: 0)
- sent_at: timestamp (nullable)
- created_at: timestamp (default: now())
"""
