"""
Development Data Reset Script
Clears rounds, fixtures, predictions, leagues, friendships, news and any
unverified accounts, then creates (or refreshes) a fixed set of test users.
Never run this against production.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

from scoreline.config import settings
from scoreline.config.permissions_config import ROLE_ADMIN, ROLE_PLAYER
from scoreline.core.security import hash_password
from scoreline.database.supabase_client import SupabaseClient
from supabase import Client
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TEST_PASSWORD = "password123"

TEST_USERS = [
    {"email": "testuser1@example.com", "name": "Test User One", "team_name": "Testers FC", "role": ROLE_PLAYER},
    {"email": "testuser2@example.com", "name": "Test User Two", "team_name": "Mockingbirds", "role": ROLE_PLAYER},
    {"email": "admin@example.com", "name": "Admin User", "team_name": None, "role": ROLE_ADMIN},
]

# Children before parents; PostgREST refuses a DELETE without a filter
CLEARED_TABLES = [
    ("predictions", "prediction_id"),
    ("league_memberships", "membership_id"),
    ("friendships", "id"),
    ("news_items", "news_item_id"),
    ("fixtures", "fixture_id"),
    ("rounds", "round_id"),
    ("leagues", "league_id"),
]


def clear_game_data(supabase: Client):
    """Delete all game data and unverified users"""
    for table, key in CLEARED_TABLES:
        result = supabase.table(table).delete().neq(key, -1).execute()
        logger.info(f"Cleared {len(result.data or [])} rows from {table}")

    result = supabase.table("users").delete().eq("email_verified", False).execute()
    logger.info(f"Removed {len(result.data or [])} unverified users")


def seed_users(supabase: Client):
    """Create or refresh the test accounts"""
    password_hash = hash_password(TEST_PASSWORD)
    created_count = 0
    updated_count = 0

    for user in TEST_USERS:
        fields = {
            "name": user["name"],
            "team_name": user["team_name"],
            "role": user["role"],
            "email_verified": True,
            "password_hash": password_hash,
        }
        existing = supabase.table("users")\
            .select("user_id")\
            .eq("email", user["email"])\
            .execute()

        if existing.data:
            supabase.table("users").update(fields).eq("email", user["email"]).execute()
            updated_count += 1
            logger.debug(f"Updated user: {user['email']}")
        else:
            supabase.table("users").insert({"email": user["email"], **fields}).execute()
            created_count += 1
            logger.debug(f"Created user: {user['email']}")

    logger.info(f"Users seeded: {created_count} created, {updated_count} updated")
    return created_count + updated_count


def main():
    """Reset development data and create the test users"""
    if settings.is_production:
        logger.error("Refusing to reset data with ENVIRONMENT=production")
        sys.exit(1)

    try:
        supabase = SupabaseClient.get_service_client()

        logger.info("Resetting development data...")
        clear_game_data(supabase)
        user_count = seed_users(supabase)

        logger.info("Seeding completed successfully!")
        logger.info(f"Total: {user_count} users processed (password: {TEST_PASSWORD})")

    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
