# Supabase tables: news_items
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure (see sql/schema.sql):

news_items:
- news_item_id: serial (primary key)
- content: text (not null)
- posted_by_user_id: integer (foreign key to users.user_id, set null on delete)
- created_at: timestamptz (default: now())
"""
