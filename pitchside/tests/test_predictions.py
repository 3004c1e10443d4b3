"""
@file: test_predictions.py
@description:
This module contains API tests for the prediction endpoints:
- Requesting predictions (new job, cached job, input validation)
- Polling a job by id
- Triggering a status sync
- Team performance stats

@dependencies:
- pytest: Testing framework
- fastapi.testclient: For testing FastAPI endpoints
- pitchside.main: The main FastAPI application

@notes:
- The service context is replaced with one backed by the in-memory store
- TheSportsDB is replaced with an httpx MockTransport where needed
"""

import asyncio
from unittest import mock

import httpx
import pytest

from pitchside.core.exceptions import DatabaseError
from pitchside.services.sports_db import MISSING_KEY_MESSAGE, SportsDBClient
from pitchside.services.status_sync import NOTHING_TO_SYNC_MESSAGE


def test_request_prediction_creates_job(test_client, fake_store, enqueued):
    response = test_client.post("/api/v1/predictions", json={"teamA": "Man Utd", "teamB": "Liverpool"})

    assert response.status_code == 200
    body = response.json()
    assert body["isCached"] is False
    job_id = body["data"]["jobId"]
    assert fake_store.rows[job_id]["status"] == "processing"
    assert enqueued == [(job_id, "Manchester United", "Liverpool", "men")]


def test_request_prediction_returns_cached_job(test_client, fake_store, enqueued, prediction_payload):
    row = fake_store.add("Arsenal", "Chelsea", status="pending", prediction_data=prediction_payload)

    response = test_client.post(
        "/api/v1/predictions",
        json={"teamA": "Chelsea", "teamB": "Arsenal", "category": "men"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["isCached"] is True
    assert body["data"]["id"] == row["id"]
    assert body["data"]["teamA"] == "Arsenal"
    assert body["data"]["tally"] == 2
    assert body["data"]["resultPayload"]["fromCache"] is True
    assert enqueued == []


def test_request_prediction_force_refresh(test_client, fake_store, enqueued):
    fake_store.add("Arsenal", "Chelsea", status="won")

    response = test_client.post(
        "/api/v1/predictions",
        json={"teamA": "Arsenal", "teamB": "Chelsea", "forceRefresh": True},
    )

    assert response.json()["isCached"] is False
    assert len(enqueued) == 1


@pytest.mark.parametrize("body,message", [
    ({"teamA": "Arsenal", "teamB": "arsenal"}, "Please enter two different team names."),
    ({"teamA": "Arsenal", "teamB": "C"}, "Team names must be between 2 and 50 characters long."),
    ({"teamA": "Arsenal", "teamB": "Chelsea!"}, "Team names can only include letters, numbers, spaces, and .'-&()"),
    ({"teamA": " ", "teamB": "Chelsea"}, "Please enter names for both teams."),
])
def test_request_prediction_rejects_invalid_teams(test_client, enqueued, body, message):
    response = test_client.post("/api/v1/predictions", json=body)

    assert response.status_code == 422
    assert message in str(response.json()["detail"])
    assert enqueued == []


@pytest.mark.parametrize("body", [
    {"teamA": "Arsenal"},
    {"teamA": "Arsenal", "teamB": "Chelsea", "category": "veterans"},
])
def test_request_prediction_invalid_body(test_client, body):
    assert test_client.post("/api/v1/predictions", json=body).status_code == 422


def test_request_prediction_database_error(test_client, fake_store):
    with mock.patch.object(fake_store, "find_recent", side_effect=DatabaseError("connection refused")):
        response = test_client.post("/api/v1/predictions", json={"teamA": "Arsenal", "teamB": "Chelsea"})

    assert response.status_code == 500
    assert response.json()["detail"] == "A database error occurred. Please try again later."


def test_request_prediction_without_task_queue(test_client, service_context):
    service_context.enqueue = None

    response = test_client.post("/api/v1/predictions", json={"teamA": "Arsenal", "teamB": "Chelsea"})

    assert response.status_code == 500
    assert "No task queue is configured" in response.json()["detail"]


def test_get_prediction(test_client, fake_store, prediction_payload):
    row = fake_store.add("Arsenal", "Chelsea", status="pending", prediction_data=prediction_payload)

    response = test_client.get(f"/api/v1/predictions/{row['id']}")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "pending"
    assert body["category"] == "men"
    assert body["resultPayload"]["venue"] == "Emirates Stadium, London"
    assert body["createdAt"] is not None


def test_get_prediction_after_cache_hit_is_not_marked_cached(test_client, fake_store, prediction_payload):
    row = fake_store.add("Arsenal", "Chelsea", status="pending", prediction_data=prediction_payload)
    test_client.post("/api/v1/predictions", json={"teamA": "Arsenal", "teamB": "Chelsea"})

    body = test_client.get(f"/api/v1/predictions/{row['id']}").json()

    assert body["tally"] == 2
    assert "fromCache" not in body["resultPayload"]


def test_get_failed_prediction_exposes_error(test_client, fake_store):
    row = fake_store.add("Arsenal", "Chelsea", status="failed", prediction_data={"error": "[Invalid Response] bad"})

    body = test_client.get(f"/api/v1/predictions/{row['id']}").json()

    assert body["status"] == "failed"
    assert body["resultPayload"] == {"error": "[Invalid Response] bad"}


def test_get_prediction_not_found(test_client):
    response = test_client.get("/api/v1/predictions/missing-job")

    assert response.status_code == 404
    assert response.json()["detail"] == "Prediction with ID missing-job not found."


def test_sync_predictions_nothing_pending(test_client, service_context):
    service_context.sports_client = SportsDBClient("123", transport=httpx.MockTransport(
        lambda request: httpx.Response(200, json={"event": None})
    ))

    response = test_client.post("/api/v1/predictions/sync")

    assert response.status_code == 200
    assert response.json() == {"message": NOTHING_TO_SYNC_MESSAGE}


def test_sync_predictions_keeps_event_loop_free(test_client, service_context, fake_store):
    service_context.sports_client = SportsDBClient("123", transport=httpx.MockTransport(
        lambda request: httpx.Response(200, json={"event": None})
    ))
    loop_seen = []

    def list_pending(since):
        try:
            asyncio.get_running_loop()
            loop_seen.append(True)
        except RuntimeError:
            loop_seen.append(False)
        return []

    fake_store.list_pending = list_pending

    response = test_client.post("/api/v1/predictions/sync")

    assert response.status_code == 200
    assert loop_seen == [False]


def test_sync_predictions_settles_match(test_client, service_context, fake_store):
    row = fake_store.add("Arsenal", "Chelsea", status="pending", prediction_data={"prediction": "Draw", "outcome": "draw"})
    finished = {
        "strHomeTeam": "Arsenal", "strAwayTeam": "Chelsea", "intHomeScore": "1", "intAwayScore": "1",
        "strStatus": "Match Finished", "strHomeBadge": None, "strAwayBadge": None,
    }
    service_context.sports_client = SportsDBClient("123", transport=httpx.MockTransport(
        lambda request: httpx.Response(200, json={"event": [finished]})
    ))

    response = test_client.post("/api/v1/predictions/sync")

    assert response.json() == {"message": "Sync complete. Checked 1 predictions and updated 1."}
    assert fake_store.rows[row["id"]]["status"] == "won"


def test_sync_predictions_without_api_key(test_client, service_context):
    service_context.sports_client = SportsDBClient(None)

    response = test_client.post("/api/v1/predictions/sync")

    assert response.status_code == 500
    assert response.json()["detail"] == MISSING_KEY_MESSAGE


def test_team_stats(test_client, fake_store):
    fake_store.add("Arsenal", "Chelsea", status="won", prediction_data={"outcome": "teamA_win"})
    fake_store.add("Spurs", "Arsenal", status="won", prediction_data={"prediction": "Arsenal to win"})
    fake_store.add("Arsenal", "Liverpool", status="lost", prediction_data={"outcome": "teamA_win"})
    fake_store.add("Arsenal", "Everton", status="pending", prediction_data={"outcome": "teamA_win"})

    response = test_client.get("/api/v1/teams/arsenal/stats")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 3
    assert body["wins"] == 2
    assert sorted(body["recentOutcomes"]) == ["lost", "won", "won"]
