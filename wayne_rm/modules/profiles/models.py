# Supabase table: profiles + storage bucket: avatars
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key)
- user_id: uuid (unique, references auth.users.id, on delete cascade)
- full_name: text (nullable)
- role: text (not null, default 'funcionario') - funcionario | gerente | admin
- avatar_url: text (nullable) - public URL in the avatars bucket
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

A trigger on auth.users inserts the profile row on signup using
raw_user_meta_data->>'full_name'.

Storage bucket "avatars" (public): objects stored as <user_id>/<random>.<ext>
"""
