from datetime import datetime, timedelta, timezone

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlmodel import Session

from main import app
from survivor.database import get_session
from survivor.routers import survivor as survivor_router
from survivor.service import SurvivorService
from conftest import ScriptedRandom


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def future_pool(make_pool):
    # Picks are compared against the real clock through the API
    return make_pool(
        matches=(("1", "A", "B"), ("2", "C", "D")),
        start_date=datetime.now(timezone.utc) + timedelta(days=30),
    )


def as_user(user_id):
    return {"X-User-Id": user_id}


def test_list_pools(client, future_pool):
    pool_id, teams = future_pool

    res = client.get("/api/survivor")

    assert res.status_code == 200
    (pool,) = res.json()
    assert pool["id"] == pool_id
    assert pool["finished"] is False
    assert pool["outcomes"] == {}
    (round_1,) = pool["rounds"]
    assert [m["match_id"] for m in round_1["matches"]] == ["1", "2"]
    assert round_1["matches"][0]["home"]["id"] == teams["A"]


def test_get_unknown_pool(client):
    res = client.get("/api/survivor/999")

    assert res.status_code == 404
    assert res.json() == {"detail": "Survivor not found"}


def test_join_requires_identity(client, future_pool):
    pool_id, _ = future_pool

    res = client.post(f"/api/survivor/join/{pool_id}")

    assert res.status_code == 401


def test_join_then_status(client, future_pool):
    pool_id, _ = future_pool

    res = client.post(f"/api/survivor/join/{pool_id}", headers=as_user("ana"))
    assert res.status_code == 201
    assert res.json()["lives"] == 3

    again = client.post(f"/api/survivor/join/{pool_id}", headers=as_user("ana"))
    assert again.status_code == 409

    status = client.get(f"/api/survivor/status/ana/{pool_id}")
    assert status.status_code == 200
    assert status.json()["lives"] == 3
    assert status.json()["eliminated"] is False


def test_status_not_joined(client, future_pool):
    pool_id, _ = future_pool

    res = client.get(f"/api/survivor/status/nobody/{pool_id}")

    assert res.status_code == 404


def test_predict_and_history(client, future_pool):
    pool_id, teams = future_pool
    client.post(f"/api/survivor/join/{pool_id}", headers=as_user("ana"))

    res = client.post(
        f"/api/survivor/predict/{pool_id}",
        headers=as_user("ana"),
        json={"predictions": [
            {"match_id": "1", "team_id": teams["A"]},
            {"match_id": "2", "team_id": teams["D"]},
        ]},
    )
    assert res.status_code == 200

    history = client.get(f"/api/survivor/picks/ana/{pool_id}").json()["picks"]
    assert history == [
        {"match_id": "1", "team_picked": teams["A"], "result": "pending"},
        {"match_id": "2", "team_picked": teams["D"], "result": "pending"},
    ]


def test_pick_errors(client, future_pool):
    pool_id, teams = future_pool

    not_joined = client.post(
        "/api/survivor/pick",
        headers=as_user("ana"),
        json={"pool_id": pool_id, "match_id": "1", "team_id": teams["A"]},
    )
    assert not_joined.status_code == 403

    client.post(f"/api/survivor/join/{pool_id}", headers=as_user("ana"))
    wrong_team = client.post(
        "/api/survivor/pick",
        headers=as_user("ana"),
        json={"pool_id": pool_id, "match_id": "1", "team_id": teams["C"]},
    )
    assert wrong_team.status_code == 400

    missing_match = client.post(
        "/api/survivor/pick",
        headers=as_user("ana"),
        json={"pool_id": pool_id, "match_id": "99", "team_id": teams["A"]},
    )
    assert missing_match.status_code == 404


def test_pick_after_start_is_rejected(client, make_pool):
    pool_id, teams = make_pool(start_date=datetime(2020, 1, 1, tzinfo=timezone.utc))
    client.post(f"/api/survivor/join/{pool_id}", headers=as_user("ana"))

    res = client.post(
        "/api/survivor/pick",
        headers=as_user("ana"),
        json={"pool_id": pool_id, "match_id": "1", "team_id": teams["Home"]},
    )

    assert res.status_code == 400
    assert res.json()["detail"] == "Cannot pick after the survivor has started"


def test_resolve_match_and_ranking(client, future_pool):
    pool_id, teams = future_pool
    for user, team in (("ana", "A"), ("ben", "B")):
        client.post(f"/api/survivor/join/{pool_id}", headers=as_user(user))
        client.post(
            "/api/survivor/pick",
            headers=as_user(user),
            json={"pool_id": pool_id, "match_id": "1", "team_id": teams[team]},
        )

    res = client.post(
        "/api/survivor/resolve-match",
        json={"pool_id": pool_id, "match_id": "1", "winner_team_id": teams["A"]},
    )
    assert res.status_code == 200
    body = res.json()
    assert body["results"]["1"]["result"] == "home"
    assert body["results"]["1"]["winner"]["id"] == teams["A"]

    ranking = client.get(f"/api/survivor/ranking/{pool_id}").json()["ranking"]
    assert ranking == [
        {"participant_id": "ana", "score": 1, "lives": 3, "eliminated": False},
        {"participant_id": "ben", "score": 0, "lives": 2, "eliminated": False},
    ]


def test_resolve_match_needs_an_outcome(client, future_pool):
    pool_id, _ = future_pool

    res = client.post(
        "/api/survivor/resolve-match",
        json={"pool_id": pool_id, "match_id": "1"},
    )

    assert res.status_code == 400


def test_simulate_once(client, future_pool):
    pool_id, teams = future_pool
    client.post(f"/api/survivor/join/{pool_id}", headers=as_user("ana"))
    client.post(
        "/api/survivor/pick",
        headers=as_user("ana"),
        json={"pool_id": pool_id, "match_id": "2", "team_id": teams["C"]},
    )
    rng = ScriptedRandom(0.9, 0.1)  # match 1 draws, match 2 home win

    def _scripted_service(session: Session = Depends(get_session)):
        return SurvivorService(session, rng=rng)

    app.dependency_overrides[survivor_router.get_service] = _scripted_service
    res = client.post(f"/api/survivor/simulate/{pool_id}")
    assert res.status_code == 200
    body = res.json()
    assert body["results"]["1"] == {"result": "draw", "winner": None}
    assert body["results"]["2"]["result"] == "home"
    assert body["participants"][0]["results"] == {"2": "success"}

    again = client.post(f"/api/survivor/simulate/{pool_id}")
    assert again.status_code == 409

    pool = client.get(f"/api/survivor/{pool_id}").json()
    assert pool["finished"] is True
    assert pool["outcomes"]["1"]["result"] == "draw"


def test_simulate_without_picks(client, future_pool):
    pool_id, _ = future_pool

    res = client.post(f"/api/survivor/simulate/{pool_id}")

    assert res.status_code == 409
