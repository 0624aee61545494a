# No table of its own
# Provisioning writes to Supabase Auth (admin API) and upserts profiles

"""
Demo accounts, one per role, all sharing settings.demo_users_password:
- funcionario@wayne.app.br -> funcionario
- gerente@wayne.app.br     -> gerente
- admin@wayne.app.br       -> admin

Users are created with the email already confirmed. The profiles upsert
uses on_conflict=user_id so running the provisioning twice is harmless.
"""
