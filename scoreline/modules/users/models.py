# Supabase tables: users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (see sql/schema.sql):

users:
- user_id: serial (primary key)
- name: text (not null)
- email: text (unique, not null)
- password_hash: text (not null) - bcrypt
- role: text (not null, default: 'PLAYER') - values: ADMIN, PLAYER, VISITOR
- team_name: text (nullable)
- avatar_url: text (nullable)
- email_verified: boolean (default: false)
- email_verification_token: text (unique, nullable)
- password_reset_token: text (unique, nullable)
- password_reset_expires: timestamp (nullable)
- subscription_tier: text (default: 'FREE')
- notifies_new_round: boolean (default: true)
- notifies_deadline_reminder: boolean (default: true)
- notifies_round_results: boolean (default: true)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())
"""
