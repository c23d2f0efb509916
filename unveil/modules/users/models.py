# Supabase tables: users, public_user_profiles (view), auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py
# Authentication is handled by Supabase Auth (auth.users table)

"""
Expected Supabase table structure:

users:
- id: uuid (primary key, references auth.users.id)
- email: text (nullable) - synced from auth.users
- phone: text (nullable) - E.164
- full_name: text (nullable)
- avatar_url: text (nullable)
- role: text (nullable) - host, guest or admin
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

public_user_profiles (view over users, readable by anyone signed in):
- id: uuid
- full_name: text
- avatar_url: text
"""
