# Supabase table: media
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Files live in the Supabase Storage bucket configured as MEDIA_BUCKET

"""
Expected Supabase table structure:
- id: uuid (primary key)
- event_id: uuid (foreign key to events.id, not null)
- uploader_user_id: uuid (foreign key to users.id, nullable)
- storage_path: text (not null) - events/{event_id}/media/{timestamp}-{user_id}.{ext}
- media_type: text - image, video
- caption: text (nullable)
- created_at: timestamp (default: now())
"""
