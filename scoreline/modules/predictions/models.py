# Supabase tables: predictions
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (see sql/schema.sql):

predictions:
- prediction_id: serial (primary key)
- user_id: integer (foreign key to users.user_id, cascade)
- fixture_id: integer (foreign key to fixtures.fixture_id, cascade)
- round_id: integer (foreign key to rounds.round_id, cascade)
- predicted_home_goals: integer (nullable, >= 0)
- predicted_away_goals: integer (nullable, >= 0)
- is_joker: boolean (default: false)
- points_awarded: integer (nullable) - set when the round is scored
- submitted_at: timestamptz (default: now())
- unique (user_id, fixture_id)
"""
