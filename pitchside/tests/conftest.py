"""
@file: conftest.py
@description:
This module provides pytest fixtures and configuration for the Pitchside test suite.
It sets up common test fixtures that can be reused across test modules.

Fixtures include:
- Environment configuration for testing
- An in-memory prediction store with the same interface as the Supabase one
- A sample LLM prediction payload
- A service context and a TestClient wired to them

@dependencies:
- pytest: For test framework and fixtures
- fastapi.testclient: For testing FastAPI applications
- pitchside.main: The main FastAPI application

@notes:
- TESTING is set before the application is imported so Celery runs eagerly
- No test talks to Supabase, OpenAI, TheSportsDB or Redis
"""

import os

os.environ.setdefault("TESTING", "True")

import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import pytest
import pytz
from fastapi.testclient import TestClient

from pitchside.core.config import Settings
from pitchside.core.context import ServiceContext, get_context
from pitchside.core.exceptions import DuplicateJobError, JobNotFoundError
from pitchside.main import app
from pitchside.services.prediction_store import reuse_bucket
from pitchside.services.team_names import fixture_key


class FakePredictionStore:
    """
    In-memory stand-in for PredictionStore.

    Rows use the same column names as the `predictions` table.
    """

    def __init__(self, reuse_window: timedelta = timedelta(hours=24)):
        self.reuse_window = reuse_window
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.status_updates: List[Dict[str, Any]] = []

    def add(
        self,
        team_a: str,
        team_b: str,
        status: str = "pending",
        category: str = "men",
        prediction_data: Optional[Dict[str, Any]] = None,
        tally: int = 1,
        age: timedelta = timedelta(0),
    ) -> Dict[str, Any]:
        created = datetime.now(pytz.UTC) - age
        row = {
            "id": str(uuid.uuid4()),
            "team_a": team_a,
            "team_b": team_b,
            "match_category": category,
            "status": status,
            "prediction_data": dict(prediction_data or {}),
            "tally": tally,
            "fixture_key": fixture_key(team_a, team_b, category),
            "reuse_bucket": reuse_bucket(created, self.reuse_window),
            "created_at": created.isoformat(timespec="microseconds"),
            "updated_at": created.isoformat(timespec="microseconds"),
        }
        self.rows[row["id"]] = row
        return dict(row)

    def _newest_first(self, rows):
        return sorted(rows, key=lambda r: r["created_at"], reverse=True)

    def find_recent(self, team_a, team_b, category, since):
        matches = [
            r for r in self.rows.values()
            if r["team_a"] == team_a and r["team_b"] == team_b and r["match_category"] == category
            and datetime.fromisoformat(r["created_at"]) >= since
        ]
        matches = self._newest_first(matches)
        return dict(matches[0]) if matches else None

    def insert_job(self, team_a, team_b, category):
        key = fixture_key(team_a, team_b, category)
        bucket = reuse_bucket(datetime.now(pytz.UTC), self.reuse_window)
        for r in self.rows.values():
            if r["status"] == "processing" and r["fixture_key"] == key and r["reuse_bucket"] == bucket:
                raise DuplicateJobError("duplicate key value violates unique constraint")
        return self.add(team_a, team_b, status="processing", category=category)

    def increment_tally(self, row):
        stored = self.rows[row["id"]]
        stored["tally"] += 1
        return dict(stored)

    def get_job(self, job_id):
        if job_id not in self.rows:
            raise JobNotFoundError(job_id)
        return dict(self.rows[job_id])

    def update_status(self, job_id, expected_status, new_status, prediction_data=None):
        stored = self.rows.get(job_id)
        if stored is None or stored["status"] != expected_status:
            return False
        stored["status"] = new_status
        if prediction_data is not None:
            stored["prediction_data"] = prediction_data
        self.status_updates.append({"id": job_id, "from": expected_status, "to": new_status})
        return True

    def list_pending(self, since):
        return [
            dict(r) for r in self.rows.values()
            if r["status"] == "pending" and datetime.fromisoformat(r["created_at"]) >= since
        ]

    def list_resolved_for_team(self, team_name):
        rows = [
            dict(r) for r in self.rows.values()
            if r["status"] in ("won", "lost") and team_name in (r["team_a"], r["team_b"])
        ]
        return self._newest_first(rows)


@pytest.fixture
def fake_store():
    """Fixture providing an empty in-memory prediction store."""
    return FakePredictionStore()


@pytest.fixture
def enqueued():
    """Fixture collecting generation hand-offs instead of sending them to Celery."""
    return []


@pytest.fixture
def test_settings():
    """Settings with credentials filled in and no .env file."""
    return Settings(
        _env_file=None,
        APP_ENV="test",
        SUPABASE_URL="https://test.supabase.co",
        SUPABASE_SERVICE_ROLE_KEY="test-key",
        OPENAI_API_KEY="test-openai-key",
        THESPORTSDB_API_KEY="test-sportsdb-key",
    )


@pytest.fixture
def service_context(fake_store, enqueued, test_settings):
    """Fixture providing a ServiceContext backed by the in-memory store."""
    context = ServiceContext(
        test_settings,
        enqueue=lambda *args: enqueued.append(args),
    )
    context.store = fake_store
    return context


@pytest.fixture
def test_client(service_context):
    """
    Fixture that returns a TestClient instance for the FastAPI app,
    with the service context replaced by the test one.
    """
    app.dependency_overrides[get_context] = lambda: service_context
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def prediction_payload():
    """Fixture providing a valid LLM prediction payload for Arsenal vs Chelsea."""
    return {
        "prediction": "Arsenal to Win",
        "outcome": "teamA_win",
        "confidence": "High",
        "teamA_winProbability": "55%",
        "teamB_winProbability": "20%",
        "drawProbability": "25%",
        "analysis": "Arsenal are unbeaten at home this season. Chelsea have struggled away from home. "
                    "Arsenal's midfield controls games against top-six sides. Expect a home win.",
        "keyStats": {
            "teamA_form": "WWDWW",
            "teamB_form": "LWDLW",
            "head_to_head": {
                "totalMatches": 5,
                "teamA_wins": 3,
                "draws": 1,
                "teamB_wins": 1,
                "summary": "Arsenal have won three of the last five meetings.",
            },
        },
        "bestBets": [
            {"category": "Match Winner", "value": "Arsenal", "reasoning": "Home form", "confidence": "70%"},
            {"category": "Total Goals", "value": "Over 2.5", "reasoning": "Open games", "confidence": "60%",
             "overValue": "Over 2.5", "overConfidence": "60%", "underValue": "Under 2.5", "underConfidence": "40%"},
            {"category": "Both Teams to Score", "value": "Yes", "reasoning": "Both score often", "confidence": "58%"},
        ],
        "availabilityFactors": "No significant availability issues for either team.",
        "venue": "Emirates Stadium, London",
        "kickoffTime": "2026-10-24 17:30 BST",
        "referee": "To be announced",
        "leagueContext": {
            "leagueName": "Premier League",
            "teamA_position": "1st",
            "teamB_position": "6th",
            "isRivalry": True,
            "isDerby": True,
            "contextualAnalysis": "A London derby with title implications.",
        },
        "playerStats": [
            {"playerName": "Bukayo Saka", "teamName": "Arsenal", "position": "RW",
             "goals": 6, "assists": 5, "yellowCards": 1, "redCards": 0},
        ],
        "goalScorerPredictions": [
            {"playerName": "Bukayo Saka", "teamName": "Arsenal", "probability": "High", "reasoning": "In form"},
        ],
        "goalProbabilities": {"0-1": "20%", "2-3": "50%", "4+": "30%"},
        "bttsPrediction": {"yesProbability": "58%", "noProbability": "42%"},
        "overUnderPrediction": {"over25Probability": "60%", "under25Probability": "40%"},
    }


@pytest.fixture(autouse=True)
def setup_test_environment():
    """
    Fixture that sets up the test environment.
    This fixture runs automatically for each test.
    """
    # Store original environment variables
    original_env = {}
    test_env = {
        "APP_ENV": "test",
        "TESTING": "True",
        "REDIS_URL": "redis://localhost:6379/1",
    }

    # Save original values and set test values
    for key, value in test_env.items():
        if key in os.environ:
            original_env[key] = os.environ[key]
        os.environ[key] = value

    # Run the test
    yield

    # Restore original environment variables
    for key in test_env:
        if key in original_env:
            os.environ[key] = original_env[key]
        else:
            del os.environ[key]
