# Supabase tables: fixtures
# The fixtures table is documented in scoreline/modules/rounds/models.py
# Actual operations are handled via Supabase SDK in service.py
