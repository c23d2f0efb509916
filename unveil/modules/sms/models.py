# Supabase table: message_deliveries
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- scheduled_message_id: uuid (foreign key to scheduled_messages.id, nullable)
- guest_id: uuid (foreign key to event_guests.id, not null)
- user_id: uuid (nullable)
- phone_number: text (nullable)
- email: text (nullable)
- sms_status: text - pending, sent, delivered, failed, undelivered, not_applicable
- push_status: text - pending, not_applicable
- email_status: text - pending, not_applicable
- sms_provider_id: text (nullable) - Twilio MessageSid, matched by the status webhook
- error_code: text (nullable)
- error_message: text (nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)
"""
