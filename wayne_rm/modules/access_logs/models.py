# Supabase table: access_logs
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (foreign key to auth.users.id)
- resource_id: uuid (foreign key to resources.id, on delete cascade)
- action: text (not null) - checkout | checkin | maintenance | solicitacao
- notes: text (nullable)
- timestamp: timestamp (default: now())

Names shown next to a log come from profiles.full_name (matched on
user_id) and resources.name/type, fetched in separate queries.
"""
