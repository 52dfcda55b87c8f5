# Supabase tables: leagues, league_memberships
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (see sql/schema.sql):

leagues:
- league_id: serial (primary key)
- name: text (not null, <= 100 chars)
- description: text (nullable, <= 500 chars)
- creator_user_id: integer (foreign key to users.user_id, cascade)
- invite_code: text (unique, not null) - 8 uppercase hex characters
- created_at, updated_at: timestamptz

league_memberships:
- membership_id: serial (primary key)
- league_id: integer (foreign key to leagues.league_id, cascade)
- user_id: integer (foreign key to users.user_id, cascade)
- role: text (default: 'MEMBER') - values: ADMIN, MEMBER
- status: text (default: 'ACCEPTED') - values: INVITED, ACCEPTED
- invited_at: timestamptz (nullable)
- joined_at: timestamptz (nullable) - set when the membership is accepted
- unique (league_id, user_id)
"""

LEAGUE_ROLE_ADMIN = "ADMIN"
LEAGUE_ROLE_MEMBER = "MEMBER"

MEMBERSHIP_INVITED = "INVITED"
MEMBERSHIP_ACCEPTED = "ACCEPTED"

INVITE_CODE_BYTES = 4
INVITE_CODE_RETRIES = 5
