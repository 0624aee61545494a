# Supabase Auth + profiles
# This module uses Supabase's built-in authentication system.
# Supabase Auth handles:
# - User registration and email confirmation (auth.users table)
# - Login, session management and JWT validation
# - Password reset emails and OTP verification
# - Password hashing and security

"""
Supabase Auth provides:
- auth.sign_up() - Register new users (full_name kept in user_metadata)
- auth.sign_in_with_password() - Authenticate users
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users
- auth.reset_password_for_email() - Send password reset link
- auth.verify_otp() - Confirm signup / recovery / magic link tokens
- auth.admin.update_user_by_id() - Change password (service role key)

Each auth user owns one row in public.profiles (created by a database
trigger on signup); profiles.role drives permissions.
"""
