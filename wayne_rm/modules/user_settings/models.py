# Supabase table: user_settings
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- user_id: uuid (unique, foreign key to auth.users.id)
- theme: text - light | dark | system
- language: text - pt | en | es
- notifications_enabled: boolean
- email_notifications: boolean
- push_notifications: boolean
- auto_export_enabled: boolean
- export_frequency: text - daily | weekly | monthly
- dashboard_layout: jsonb - {widgets: [..], layout: grid | list, columns: int}
- report_preferences: jsonb - {default_format: pdf | excel | csv, include_charts: bool,
                               date_range: int (days), auto_schedule: bool}
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Users without a row get the defaults from schemas.default_settings().
"""
