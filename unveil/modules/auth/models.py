# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User registration (auth.users table)
# - Password and magic-link (email OTP) sign in
# - JWT token generation and validation

"""
Supabase Auth provides:
- auth.sign_up() - Register new users
- auth.sign_in_with_password() - Authenticate hosts with a password
- auth.sign_in_with_otp() - Email a magic link (guests and hosts)
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users

A database trigger copies new auth users into public.users; full_name, phone
and role are passed through user_metadata at sign up.
"""
