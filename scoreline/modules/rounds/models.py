# Supabase tables: rounds, fixtures
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (see sql/schema.sql):

rounds:
- round_id: serial (primary key)
- name: text (unique, not null)
- deadline: timestamptz (not null) - predictions close at this instant
- status: text (not null, default: 'SETUP') - values: SETUP, OPEN, CLOSED, COMPLETED
- joker_limit: integer (not null, default: 1, >= 0)
- created_by: integer (foreign key to users.user_id, nullable)
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now())

fixtures:
- fixture_id: serial (primary key)
- round_id: integer (foreign key to rounds.round_id, cascade)
- home_team: text (not null)
- away_team: text (not null)
- match_time: timestamptz (not null)
- home_score: integer (nullable)
- away_score: integer (nullable)
- status: text (default: 'SCHEDULED') - values: SCHEDULED, FINISHED
- created_at, updated_at: timestamptz
- unique (round_id, home_team, away_team, match_time)
"""

ROUND_STATUS_SETUP = "SETUP"
ROUND_STATUS_OPEN = "OPEN"
ROUND_STATUS_CLOSED = "CLOSED"
ROUND_STATUS_COMPLETED = "COMPLETED"

# COMPLETED is only reached by scoring a round
ADMIN_SETTABLE_STATUSES = (ROUND_STATUS_SETUP, ROUND_STATUS_OPEN, ROUND_STATUS_CLOSED)

FIXTURE_STATUS_SCHEDULED = "SCHEDULED"
FIXTURE_STATUS_FINISHED = "FINISHED"
