import pytest

from scoreline.core.security import verify_password
from scoreline.database.supabase_client import SupabaseClient, SupabaseConfigError
from scoreline.scripts.seed_dev_data import clear_game_data, seed_users, TEST_PASSWORD


def test_supabase_client_requires_configuration():
    SupabaseClient.reset_client()
    with pytest.raises(SupabaseConfigError):
        SupabaseClient.get_client()
    SupabaseClient.reset_client()


def test_unknown_routes_use_message_body(client):
    response = client.get("/api/nothing-here")
    assert response.status_code == 404
    assert response.json() == {"message": "Not Found"}


def test_security_headers(client):
    response = client.get("/health")
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["X-Frame-Options"] == "DENY"


def test_seed_resets_game_data(fake_db, make_user, make_round, make_fixture, make_prediction):
    player = make_user("Alice")
    unverified = make_user("Nobody")
    fake_db.table("users").update({"email_verified": False}).eq("user_id", unverified["user_id"]).execute()
    round_row = make_round()
    make_prediction(player, make_fixture(round_row["round_id"]), 1, 0)

    clear_game_data(fake_db)
    for table in ("predictions", "fixtures", "rounds"):
        assert fake_db.rows(table) == []
    assert [u["name"] for u in fake_db.rows("users")] == ["Alice"]


def test_seed_users_is_idempotent(fake_db):
    assert seed_users(fake_db) == 3
    assert seed_users(fake_db) == 3

    users = fake_db.rows("users")
    assert len(users) == 3
    assert {u["role"] for u in users} == {"PLAYER", "ADMIN"}
    assert all(u["email_verified"] for u in users)
    assert verify_password(TEST_PASSWORD, users[0]["password_hash"])
