# Supabase tables: friendships
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (see sql/schema.sql):

friendships:
- id: serial (primary key)
- requester_id: integer (foreign key to users.user_id, cascade)
- addressee_id: integer (foreign key to users.user_id, cascade)
- status: text (default: 'PENDING') - values: PENDING, ACCEPTED
- created_at: timestamptz (default: now())
- updated_at: timestamptz (default: now())
- unique (requester_id, addressee_id)

A rejected request is deleted rather than kept with a DECLINED status.
"""

FRIENDSHIP_PENDING = "PENDING"
FRIENDSHIP_ACCEPTED = "ACCEPTED"
