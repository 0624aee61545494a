# Supabase table: alerts
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id)
- message: text (not null)
- type: text (not null, default 'info') - info | warning | error | success
- status: text (not null, default 'unread') - read | unread
- created_at: timestamp (default: now())
- read_at: timestamp (nullable, set when marked read)

The table is part of the supabase_realtime publication so INSERT/UPDATE/
DELETE events reach postgres_changes subscribers.
"""
