# Supabase table: resources
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:
- id: uuid (primary key)
- name: text (not null)
- type: text (not null) - equipamento | veiculo | dispositivo
- description: text (nullable)
- status: text (not null, default 'disponivel') - disponivel | em_uso | manutencao | indisponivel
- location: text (nullable)
- created_by: uuid (foreign key to auth.users.id, nullable)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

Row level security lets every authenticated user read; writes are limited
to gerente/admin and deletes to admin.
"""
