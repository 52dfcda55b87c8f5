import pytest

from scoreline.main import app
from scoreline.modules.rounds import football_data
from scoreline.modules.rounds.football_data import FootballDataClient, FootballDataError
from scoreline.modules.rounds.routes import get_football_data_client


class StubFootballData:
    def __init__(self, fixtures=None, error=None):
        self.fixtures = fixtures or []
        self.error = error
        self.calls = []

    def fetch_matchday(self, competition_code, matchday):
        self.calls.append((competition_code, matchday))
        if self.error:
            raise self.error
        return self.fixtures


class StubResponse:
    def __init__(self, status_code, payload):
        self.status_code = status_code
        self._payload = payload
        self.text = str(payload)

    def json(self):
        return self._payload


@pytest.fixture
def admin(make_user):
    return make_user("Admin", role="ADMIN")


@pytest.fixture
def player(make_user):
    return make_user("Alice")


@pytest.fixture
def stub_football_data():
    stub = StubFootballData()
    app.dependency_overrides[get_football_data_client] = lambda: stub
    yield stub
    app.dependency_overrides.pop(get_football_data_client, None)


def test_admin_creates_round(client, auth_headers, admin):
    response = client.post(
        "/api/rounds",
        json={"name": "  Matchday 1 ", "deadline": "2030-01-01T12:00:00Z", "joker_limit": 2},
        headers=auth_headers(admin),
    )
    assert response.status_code == 201, response.text
    body = response.json()
    assert body["name"] == "Matchday 1"
    assert body["status"] == "SETUP"
    assert body["joker_limit"] == 2
    assert body["created_by"] == admin["user_id"]

    duplicate = client.post(
        "/api/rounds",
        json={"name": "Matchday 1", "deadline": "2030-01-08T12:00:00Z"},
        headers=auth_headers(admin),
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["message"] == "A round with this name already exists."


def test_players_cannot_manage_rounds(client, auth_headers, player, make_round):
    response = client.post(
        "/api/rounds",
        json={"name": "Matchday 1", "deadline": "2030-01-01T12:00:00Z"},
        headers=auth_headers(player),
    )
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized as an admin"

    round_row = make_round()
    response = client.post(f"/api/rounds/{round_row['round_id']}/score", headers=auth_headers(player))
    assert response.status_code == 403


def test_list_rounds_newest_deadline_first(client, auth_headers, make_user, make_round):
    visitor = make_user("Viv", role="VISITOR")
    make_round(name="Early", deadline="2024-08-01T12:00:00+00:00", status="COMPLETED")
    make_round(name="Late", deadline="2024-08-15T12:00:00+00:00", status="OPEN")

    response = client.get("/api/rounds", headers=auth_headers(visitor))
    assert response.status_code == 200
    assert [r["name"] for r in response.json()] == ["Late", "Early"]

    response = client.get("/api/rounds?status=completed", headers=auth_headers(visitor))
    assert [r["name"] for r in response.json()] == ["Early"]


def test_get_round_with_fixtures(client, auth_headers, player, make_round, make_fixture):
    round_row = make_round()
    make_fixture(round_row["round_id"], home_team="Arsenal", away_team="Chelsea",
                 match_time="2030-01-02T15:00:00+00:00")
    make_fixture(round_row["round_id"], home_team="Leeds", away_team="Everton",
                 match_time="2030-01-01T15:00:00+00:00")

    response = client.get(f"/api/rounds/{round_row['round_id']}", headers=auth_headers(player))
    assert response.status_code == 200
    assert [f["home_team"] for f in response.json()["fixtures"]] == ["Leeds", "Arsenal"]

    assert client.get("/api/rounds/999", headers=auth_headers(player)).status_code == 404


def test_update_round_and_status(client, auth_headers, admin, make_round):
    round_row = make_round(status="SETUP")
    headers = auth_headers(admin)

    response = client.put(f"/api/rounds/{round_row['round_id']}", json={"joker_limit": 3}, headers=headers)
    assert response.status_code == 200
    assert response.json()["joker_limit"] == 3

    response = client.put(f"/api/rounds/{round_row['round_id']}/status", json={"status": "OPEN"}, headers=headers)
    assert response.status_code == 200
    assert response.json()["status"] == "OPEN"

    response = client.put(f"/api/rounds/{round_row['round_id']}/status", json={"status": "COMPLETED"}, headers=headers)
    assert response.status_code == 400


def test_add_fixture_rejects_duplicates(client, auth_headers, admin, make_round):
    round_row = make_round(status="SETUP")
    payload = {"home_team": "Arsenal", "away_team": "Chelsea", "match_time": "2030-01-02T15:00:00Z"}
    url = f"/api/rounds/{round_row['round_id']}/fixtures"

    response = client.post(url, json=payload, headers=auth_headers(admin))
    assert response.status_code == 201, response.text
    assert response.json()["status"] == "SCHEDULED"

    response = client.post(url, json=payload, headers=auth_headers(admin))
    assert response.status_code == 409
    assert response.json()["message"] == "This fixture already exists in the round."


def test_active_round_merges_callers_predictions(client, auth_headers, player, make_user, make_round,
                                                 make_fixture, make_prediction):
    other = make_user("Bob")
    round_row = make_round(status="OPEN")
    first = make_fixture(round_row["round_id"])
    make_fixture(round_row["round_id"])
    make_prediction(player, first, 2, 1, is_joker=True)
    make_prediction(other, first, 0, 0)

    response = client.get("/api/rounds/active", headers=auth_headers(player))
    assert response.status_code == 200, response.text
    fixtures = response.json()["fixtures"]
    assert fixtures[0]["predicted_home_goals"] == 2
    assert fixtures[0]["is_joker"] is True
    assert fixtures[1]["predicted_home_goals"] is None
    assert fixtures[1]["is_joker"] is False


def test_active_round_is_null_without_open_round(client, auth_headers, player, make_round):
    make_round(status="SETUP")
    response = client.get("/api/rounds/active", headers=auth_headers(player))
    assert response.status_code == 200
    assert response.json() is None


def test_score_round(client, fake_db, auth_headers, admin, player, make_user, make_round,
                     make_fixture, make_prediction):
    bob = make_user("Bob")
    round_row = make_round(status="CLOSED", joker_limit=1)
    f1 = make_fixture(round_row["round_id"], home_score=2, away_score=1)
    f2 = make_fixture(round_row["round_id"], home_score=0, away_score=0)
    p1 = make_prediction(player, f1, 2, 1, is_joker=True)
    p2 = make_prediction(player, f2, 1, 1)
    p3 = make_prediction(bob, f1, 0, 1)

    response = client.post(f"/api/rounds/{round_row['round_id']}/score", headers=auth_headers(admin))
    assert response.status_code == 200, response.text
    assert response.json() == {
        "message": f"Round {round_row['round_id']} scored successfully.",
        "scored_predictions": 3,
    }

    points = {p["prediction_id"]: p["points_awarded"] for p in fake_db.rows("predictions")}
    assert points == {p1["prediction_id"]: 6, p2["prediction_id"]: 1, p3["prediction_id"]: 0}
    assert fake_db.rows("rounds")[0]["status"] == "COMPLETED"


def test_score_round_requires_closed_round_with_results(client, auth_headers, admin, make_round, make_fixture):
    open_round = make_round(status="OPEN")
    response = client.post(f"/api/rounds/{open_round['round_id']}/score", headers=auth_headers(admin))
    assert response.status_code == 400

    closed = make_round(status="CLOSED")
    make_fixture(closed["round_id"], home_score=1, away_score=0)
    missing = make_fixture(closed["round_id"])
    response = client.post(f"/api/rounds/{closed['round_id']}/score", headers=auth_headers(admin))
    assert response.status_code == 400
    assert response.json()["message"] == (
        f"Cannot score round. Results missing for fixtures: {missing['fixture_id']}. "
        "Please enter all results first."
    )


def test_random_results(client, fake_db, auth_headers, admin, make_round, make_fixture):
    round_row = make_round(status="CLOSED")
    make_fixture(round_row["round_id"])
    make_fixture(round_row["round_id"])

    response = client.post(f"/api/rounds/{round_row['round_id']}/fixtures/random-results", headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["count"] == 2
    for fixture in fake_db.rows("fixtures"):
        assert 0 <= fixture["home_score"] <= 4
        assert 0 <= fixture["away_score"] <= 4
        assert fixture["status"] == "FINISHED"


def test_delete_round_removes_fixtures_and_predictions(client, fake_db, auth_headers, admin, player,
                                                       make_round, make_fixture, make_prediction):
    round_row = make_round()
    keep = make_round()
    fixture = make_fixture(round_row["round_id"])
    kept_fixture = make_fixture(keep["round_id"])
    make_prediction(player, fixture, 1, 0)
    make_prediction(player, kept_fixture, 1, 0)

    response = client.delete(f"/api/rounds/{round_row['round_id']}", headers=auth_headers(admin))
    assert response.status_code == 204
    assert [r["round_id"] for r in fake_db.rows("rounds")] == [keep["round_id"]]
    assert [f["round_id"] for f in fake_db.rows("fixtures")] == [keep["round_id"]]
    assert [p["round_id"] for p in fake_db.rows("predictions")] == [keep["round_id"]]


def test_import_fixtures_skips_existing(client, fake_db, auth_headers, admin, make_round, make_fixture,
                                        stub_football_data):
    round_row = make_round(status="SETUP")
    make_fixture(round_row["round_id"], home_team="Arsenal FC", away_team="Chelsea FC",
                 match_time="2030-01-02T15:00:00+00:00")
    stub_football_data.fixtures = [
        {"home_team": "Arsenal FC", "away_team": "Chelsea FC", "match_time": "2030-01-02T15:00:00Z"},
        {"home_team": "Leeds United FC", "away_team": "Everton FC", "match_time": "2030-01-03T17:30:00Z"},
    ]
    payload = {"round_id": round_row["round_id"], "competition_code": " pl ", "matchday": 5}

    response = client.post("/api/rounds/import/fixtures", json=payload, headers=auth_headers(admin))
    assert response.status_code == 201, response.text
    assert response.json() == {"message": "Successfully imported 1 fixtures.", "count": 1}
    assert stub_football_data.calls == [("PL", 5)]
    assert len(fake_db.rows("fixtures", round_id=round_row["round_id"])) == 2

    response = client.post("/api/rounds/import/fixtures", json=payload, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json() == {"message": "No new fixtures to import.", "count": 0}


def test_import_fixtures_errors(client, auth_headers, admin, make_round, stub_football_data):
    response = client.post(
        "/api/rounds/import/fixtures",
        json={"round_id": 999, "competition_code": "PL", "matchday": 1},
        headers=auth_headers(admin),
    )
    assert response.status_code == 404
    assert response.json()["message"] == "Round with ID 999 not found."

    round_row = make_round(status="SETUP")
    stub_football_data.error = FootballDataError(502, "External API Error (503): down")
    response = client.post(
        "/api/rounds/import/fixtures",
        json={"round_id": round_row["round_id"], "competition_code": "PL", "matchday": 1},
        headers=auth_headers(admin),
    )
    assert response.status_code == 502
    assert response.json()["message"] == "External API Error (503): down"


def test_football_data_client_maps_matches(monkeypatch):
    captured = {}

    def fake_get(url, params, headers, timeout):
        captured.update(url=url, params=params, headers=headers)
        return StubResponse(200, {"matches": [
            {"homeTeam": {"name": "Arsenal FC"}, "awayTeam": {"name": "Chelsea FC"}, "utcDate": "2030-01-02T15:00:00Z"},
            {"homeTeam": {"name": None}, "awayTeam": {"name": "TBD"}, "utcDate": "2030-01-03T15:00:00Z"},
        ]})

    monkeypatch.setattr(football_data.requests, "get", fake_get)
    client = FootballDataClient(api_key="key", base_url="https://example.test/v4/")

    fixtures = client.fetch_matchday("PL", 3)
    assert fixtures == [{"home_team": "Arsenal FC", "away_team": "Chelsea FC", "match_time": "2030-01-02T15:00:00Z"}]
    assert captured["url"] == "https://example.test/v4/competitions/PL/matches"
    assert captured["params"] == {"matchday": 3}
    assert captured["headers"] == {"X-Auth-Token": "key"}


@pytest.mark.parametrize("status, expected_status", [(403, 500), (404, 404), (429, 400), (503, 502)])
def test_football_data_client_translates_errors(monkeypatch, status, expected_status):
    monkeypatch.setattr(football_data.requests, "get",
                        lambda *args, **kwargs: StubResponse(status, {"message": "upstream"}))
    client = FootballDataClient(api_key="key")
    with pytest.raises(FootballDataError) as excinfo:
        client.fetch_matchday("PL", 1)
    assert excinfo.value.status_code == expected_status


def test_football_data_client_needs_api_key():
    with pytest.raises(FootballDataError) as excinfo:
        FootballDataClient(api_key="").fetch_matchday("PL", 1)
    assert excinfo.value.status_code == 500
    assert excinfo.value.message == "Server configuration error."
