import pytest

from scoreline.modules.standings.service import (
    StandingsService, build_standings, rank_standings, apply_movement
)


def _entry(user_id, name, points, total_predictions=1):
    return {"user_id": user_id, "name": name, "points": points, "total_predictions": total_predictions}


def test_rank_standings_uses_competition_ranking():
    ranked = rank_standings([
        _entry(1, "Cleo", 3),
        _entry(2, "bob", 5),
        _entry(3, "Alice", 5),
        _entry(4, "Dan", 1),
    ])
    assert [(e["name"], e["rank"]) for e in ranked] == [("Alice", 1), ("bob", 1), ("Cleo", 3), ("Dan", 4)]


def test_apply_movement():
    previous = rank_standings([_entry(1, "A", 3), _entry(2, "B", 1), _entry(3, "C", 0, total_predictions=0)])
    current = rank_standings([_entry(1, "A", 3), _entry(2, "B", 7), _entry(3, "C", 0)])
    moved = {e["user_id"]: e["movement"] for e in apply_movement(current, previous)}
    assert moved == {1: -1, 2: 1, 3: None}


def test_apply_movement_without_previous_snapshot():
    current = rank_standings([_entry(1, "A", 3)])
    assert apply_movement(current, None)[0]["movement"] is None


def test_build_standings_skips_fixtures_without_result():
    players = [{"user_id": 1, "name": "A"}]
    predictions = [
        {"user_id": 1, "fixture_id": 10, "predicted_home_goals": 1, "predicted_away_goals": 0, "points_awarded": 1},
        {"user_id": 1, "fixture_id": 11, "predicted_home_goals": 2, "predicted_away_goals": 2, "points_awarded": 0},
        {"user_id": 99, "fixture_id": 10, "predicted_home_goals": 1, "predicted_away_goals": 0, "points_awarded": 1},
    ]
    results = {10: {"home_score": 3, "away_score": 1}}
    [entry] = build_standings(players, predictions, results)
    assert entry["points"] == 1
    assert entry["total_predictions"] == 1
    assert entry["correct_outcomes"] == 1
    assert entry["exact_scores"] == 0
    assert entry["accuracy"] == 100.0


@pytest.fixture
def two_round_season(make_user, make_round, make_fixture, make_prediction):
    alice = make_user("Alice")
    bob = make_user("Bob")
    cleo = make_user("Cleo")
    make_user("Admin", role="ADMIN")
    make_user("Viv", role="VISITOR")

    first = make_round(status="COMPLETED", deadline="2024-08-01T12:00:00+00:00")
    second = make_round(status="COMPLETED", deadline="2024-08-08T12:00:00+00:00")
    f1 = make_fixture(first["round_id"], home_score=2, away_score=1)
    f2 = make_fixture(second["round_id"], home_score=0, away_score=0)

    make_prediction(alice, f1, 2, 1, points=3)
    make_prediction(bob, f1, 1, 0, points=1)
    make_prediction(alice, f2, 1, 0, points=0)
    make_prediction(bob, f2, 0, 0, is_joker=True, points=6)
    return {"alice": alice, "bob": bob, "cleo": cleo, "first": first, "second": second}


def test_overall_standings_with_movement(client, auth_headers, two_round_season):
    response = client.get("/api/standings", headers=auth_headers(two_round_season["alice"]))
    assert response.status_code == 200, response.text
    rows = response.json()

    assert [(r["name"], r["rank"], r["points"], r["movement"]) for r in rows] == [
        ("Bob", 1, 7, 1),
        ("Alice", 2, 3, -1),
        ("Cleo", 3, 0, None),
    ]
    alice = rows[1]
    assert alice["total_predictions"] == 2
    assert alice["correct_outcomes"] == 1
    assert alice["exact_scores"] == 1
    assert alice["accuracy"] == 50.0
    assert rows[2]["accuracy"] is None


def test_round_standings_have_no_movement(client, auth_headers, two_round_season):
    round_id = two_round_season["second"]["round_id"]
    response = client.get(f"/api/standings?round_id={round_id}", headers=auth_headers(two_round_season["alice"]))
    assert response.status_code == 200, response.text
    rows = response.json()
    assert [(r["name"], r["rank"], r["points"]) for r in rows] == [("Bob", 1, 6), ("Alice", 2, 0), ("Cleo", 2, 0)]
    assert all(r["movement"] is None for r in rows)


def test_single_completed_round_has_no_movement(client, auth_headers, make_user, make_round, make_fixture, make_prediction):
    alice = make_user("Alice")
    completed = make_round(status="COMPLETED")
    fixture = make_fixture(completed["round_id"], home_score=1, away_score=0)
    make_prediction(alice, fixture, 1, 0, points=3)

    rows = client.get("/api/standings", headers=auth_headers(alice)).json()
    assert rows[0]["points"] == 3
    assert rows[0]["movement"] is None


def test_round_standings_require_completed_round(client, auth_headers, make_user, make_round):
    alice = make_user("Alice")
    open_round = make_round(status="OPEN")

    response = client.get(f"/api/standings?round_id={open_round['round_id']}", headers=auth_headers(alice))
    assert response.status_code == 400
    assert response.json()["message"] == (
        f"Standings are only available for rounds with status 'COMPLETED'. "
        f"Status of round {open_round['round_id']} is 'OPEN'."
    )

    response = client.get("/api/standings?round_id=999", headers=auth_headers(alice))
    assert response.status_code == 404
    assert response.json()["message"] == "Round not found."


def test_visitors_can_read_standings(client, auth_headers, make_user):
    visitor = make_user("Viv", role="VISITOR")
    response = client.get("/api/standings", headers=auth_headers(visitor))
    assert response.status_code == 200
    assert response.json() == []


def test_standings_require_token(client):
    response = client.get("/api/standings")
    assert response.status_code == 401
    assert response.json()["message"] == "Not authorized, no token"


def test_empty_user_filter_yields_empty_table(fake_db, two_round_season):
    service = StandingsService(fake_db)
    assert service.calculate_standings(user_ids=[]) == []
    assert len(service.calculate_standings()) == 3
