import os

# Settings are read at import time, so the environment has to be ready first
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BREVO_API_KEY"] = ""
os.environ["SUPABASE_URL"] = ""

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from scoreline.core.security import create_access_token, hash_password
from scoreline.database.supabase_client import get_supabase
from scoreline.main import app
from scoreline.utils.dates import utc_now
from tests.fake_supabase import FakeSupabase

DEFAULT_PASSWORD = "password123"


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def client(fake_db):
    app.dependency_overrides[get_supabase] = lambda: fake_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(fake_db):
    counter = {"n": 0}

    def _make_user(name=None, role="PLAYER", email=None, password=DEFAULT_PASSWORD, **extra):
        counter["n"] += 1
        name = name or f"User {counter['n']}"
        email = email or f"user{counter['n']}@example.com"
        return fake_db.seed(
            "users",
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
            email_verified=True,
            **extra,
        )

    return _make_user


@pytest.fixture
def auth_headers():
    def _auth_headers(user):
        return {"Authorization": f"Bearer {create_access_token(user)}"}

    return _auth_headers


@pytest.fixture
def make_round(fake_db):
    counter = {"n": 0}

    def _make_round(status="OPEN", deadline=None, joker_limit=1, name=None):
        counter["n"] += 1
        if deadline is None:
            deadline = (utc_now() + timedelta(days=counter["n"])).isoformat()
        return fake_db.seed(
            "rounds",
            name=name or f"Round {counter['n']}",
            deadline=deadline,
            status=status,
            joker_limit=joker_limit,
        )

    return _make_round


@pytest.fixture
def make_fixture(fake_db):
    counter = {"n": 0}

    def _make_fixture(round_id, home_score=None, away_score=None, home_team=None, away_team=None, match_time=None):
        counter["n"] += 1
        return fake_db.seed(
            "fixtures",
            round_id=round_id,
            home_team=home_team or f"Home {counter['n']}",
            away_team=away_team or f"Away {counter['n']}",
            match_time=match_time or f"2024-08-{counter['n']:02d}T15:00:00+00:00",
            home_score=home_score,
            away_score=away_score,
            status="FINISHED" if home_score is not None else "SCHEDULED",
        )

    return _make_fixture


@pytest.fixture
def make_prediction(fake_db):
    def _make_prediction(user, fixture, home, away, is_joker=False, points=None):
        return fake_db.seed(
            "predictions",
            user_id=user["user_id"],
            fixture_id=fixture["fixture_id"],
            round_id=fixture["round_id"],
            predicted_home_goals=home,
            predicted_away_goals=away,
            is_joker=is_joker,
            points_awarded=points,
        )

    return _make_prediction
