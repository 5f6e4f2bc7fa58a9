"""Smoke tests for API routes."""

from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from footsies.api import routes
from footsies.api.routes import router
from footsies.models.skills import DEFAULT_SKILLS
from footsies.sessions.context import SessionContextRegistry


@pytest.fixture
def mock_settings(tmp_path):
    settings = MagicMock()
    settings.storage_dir = tmp_path
    settings.app_secret = None
    settings.skills = list(DEFAULT_SKILLS)
    settings.threshold_growth = "flat"
    settings.threshold_step = 20
    settings.threshold_base = 100
    settings.initial_threshold = 100
    settings.dedup_window_seconds = 5.0
    settings.clear_session_on_failure = False
    settings.recommended_sessions_per_week = 3.0
    return settings


@pytest.fixture
def client(mock_settings, monkeypatch):
    monkeypatch.setattr(routes, "contexts", SessionContextRegistry())
    app = FastAPI()
    app.include_router(router)
    with patch("footsies.api.routes.get_settings", return_value=mock_settings):
        with TestClient(app) as c:
            yield c


@pytest.fixture
def alice(client):
    response = client.post("/api/users", json={"user_id": "alice", "username": "Alice"})
    assert response.status_code == 201
    return response.json()


class TestHealthCheck:
    def test_health_returns_ok(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestUsers:
    def test_create_user(self, alice):
        assert alice["level"] == 1
        assert alice["xp_threshold"] == 100
        assert set(alice["skills"]) == set(DEFAULT_SKILLS)

    def test_duplicate_user(self, client, alice):
        response = client.post("/api/users", json={"user_id": "alice"})
        assert response.status_code == 409

    def test_get_user(self, client, alice):
        response = client.get("/api/users/alice")
        assert response.status_code == 200
        assert response.json()["username"] == "Alice"

    def test_unknown_user(self, client):
        assert client.get("/api/users/ghost").status_code == 404

    def test_sign_in_unknown_user(self, client):
        assert client.post("/api/users/ghost/sign-in").status_code == 404


class TestTrainingFlow:
    def test_quest_completion_levels_skill(self, client, alice):
        client.post("/api/users/alice/sign-in", json={"title": "Morning", "intensity": 7})

        response = client.post(
            "/api/users/alice/quests/complete",
            json={"skill": "dribbling", "xp": 50, "skill_xp": 110, "duration_seconds": 600},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["notifications"] == ["dribbling leveled up to Level 2!"]
        assert data["profile"]["skill_levels"]["dribbling"] == 2
        assert data["profile"]["skills"]["dribbling"] == 10
        assert data["profile"]["skill_thresholds"]["dribbling"] == 120
        assert data["profile"]["xp"] == 50
        assert data["session"]["metrics"] == {"dribbling": 110}
        assert data["session"]["options"]["title"] == "Morning"

        stored = client.get("/api/users/alice").json()
        assert stored["skill_levels"]["dribbling"] == 2

    def test_quest_by_id(self, client, alice):
        response = client.post("/api/users/alice/quests/complete", json={"quest_id": 3})
        assert response.status_code == 200
        assert response.json()["session"]["metrics"] == {"shooting": 20}

    def test_unknown_quest(self, client, alice):
        response = client.post("/api/users/alice/quests/complete", json={"quest_id": 999})
        assert response.status_code == 404

    def test_unknown_skill(self, client, alice):
        response = client.post(
            "/api/users/alice/quests/complete", json={"skill": "juggling", "skill_xp": 5}
        )
        assert response.status_code == 422

    def test_negative_reward_rejected(self, client, alice):
        response = client.post(
            "/api/users/alice/quests/complete", json={"skill": "dribbling", "xp": -5}
        )
        assert response.status_code == 422

    def test_oversized_reward_rejected(self, client, alice):
        response = client.post(
            "/api/users/alice/quests/complete",
            json={"skill": "dribbling", "xp": 10**15, "skill_xp": 10},
        )
        assert response.status_code == 422
        assert client.get("/api/users/alice").json()["level"] == 1

    def test_many_level_ups_summarized(self, client, alice):
        response = client.post(
            "/api/users/alice/quests/complete",
            json={"skill": "dribbling", "xp": 10_000},
        )
        data = response.json()
        assert data["profile"]["level"] == 28
        assert data["notifications"] == ["Account leveled up to Level 28!"]
        assert data["level_ups"][0]["levels_gained"] == 27

    def test_quest_progress_keeps_session_totals(self, client, alice, tmp_path):
        client.post("/api/users/alice/quests/complete", json={"skill": "shooting", "skill_xp": 5})
        client.post("/api/users/alice/sessions/save")

        client.post("/api/users/alice/quests/complete", json={"skill": "shooting", "skill_xp": 100})

        stored = client.get("/api/users/alice").json()
        assert stored["total_sessions"] == 1
        assert stored["skill_levels"]["shooting"] == 2
        assert (tmp_path / "users" / "alice.lock").exists()

    def test_save_then_skip(self, client, alice):
        client.post("/api/users/alice/sign-in")
        client.post(
            "/api/users/alice/quests/complete", json={"skill": "shooting", "skill_xp": 15}
        )

        first = client.post("/api/users/alice/sessions/save").json()
        second = client.post("/api/users/alice/sessions/save").json()

        assert first["status"] == "saved"
        assert first["success"] is True
        assert first["session"]["metrics"] == {"shooting": 15}
        assert second["status"] == "skipped"
        assert len(client.get("/api/users/alice/sessions").json()) == 1
        assert client.get("/api/users/alice").json()["total_sessions"] == 1

    def test_save_without_session(self, client, alice):
        data = client.post("/api/users/alice/sessions/save").json()
        assert data["status"] == "nothing_to_save"
        assert data["success"] is False

    def test_sign_out_saves(self, client, alice):
        client.post("/api/users/alice/sign-in")
        client.post(
            "/api/users/alice/quests/complete", json={"skill": "passing", "skill_xp": 5}
        )

        data = client.post("/api/users/alice/sign-out").json()

        assert data["status"] == "saved"
        assert data["session_ended"] is True
        assert "alice" not in routes.contexts

    def test_sign_out_when_not_signed_in(self, client, alice):
        data = client.post("/api/users/alice/sign-out").json()
        assert data["status"] == "nothing_to_save"
        assert data["session_ended"] is True


class TestStats:
    @pytest.fixture
    def trained(self, client, alice):
        client.post("/api/users/alice/sign-in")
        client.post(
            "/api/users/alice/quests/complete",
            json={"skill": "dribbling", "xp": 30, "skill_xp": 40, "duration_seconds": 300},
        )
        client.post("/api/users/alice/sessions/save")

    def test_empty_stats(self, client, alice):
        frequency = client.get("/api/users/alice/stats/frequency").json()
        assert frequency["total_sessions"] == 0
        assert len(frequency["hourly"]) == 24
        assert client.get("/api/users/alice/sessions/last").json() is None

    def test_frequency(self, client, trained):
        frequency = client.get("/api/users/alice/stats/frequency").json()
        assert frequency["total_sessions"] == 1
        assert frequency["daily_sessions"] == 1

    def test_last_session(self, client, trained):
        data = client.get("/api/users/alice/sessions/last").json()
        assert data["metrics"] == {"dribbling": 40}
        assert data["duration_label"] == "5 min"

    def test_progress(self, client, trained):
        data = client.get("/api/users/alice/stats/progress").json()
        assert data["daily"]["dribbling"][-1]["value"] == 40
        assert len(data["last_month"]) == 4
        assert data["rolling"]["dribbling"][0]["raw"] == 40

    def test_metrics(self, client, trained):
        data = client.get("/api/users/alice/stats/metrics").json()
        assert data["daily"][0]["count"] == 1
        assert data["averages"]["avg_duration"] == 300

    def test_stagnation(self, client, trained):
        data = client.get("/api/users/alice/stats/stagnation").json()
        assert data["dribbling"] == 0
        assert data["shooting"] is None

    def test_imbalance(self, client, trained):
        data = client.get("/api/users/alice/stats/imbalance").json()
        assert data["strongest_skill"]["name"] == "dribbling"
        assert data["weakest_skill"]["name"] == "dribbling"
        assert data["imbalance_score"] == 0

    def test_corrupt_history(self, client, alice, tmp_path):
        (tmp_path / "sessions").mkdir(exist_ok=True)
        (tmp_path / "sessions" / "alice.json").write_text("nope", encoding="utf-8")
        assert client.get("/api/users/alice/stats/frequency").status_code == 503


class TestRecommendationsAndQuests:
    def test_recommendations(self, client, alice):
        data = client.get("/api/users/alice/recommendations").json()
        assert data[0]["type"] == "frequency"
        assert data[0]["priority"] == "high"

    def test_skill_recommendations(self, client, alice):
        data = client.get("/api/users/alice/recommendations", params={"skill": "Dribbling"}).json()
        assert [r["type"] for r in data] == ["drill", "drill"]
        assert all(r["skill"] == "dribbling" for r in data)

    def test_unknown_skill_recommendations(self, client, alice):
        response = client.get("/api/users/alice/recommendations", params={"skill": "juggling"})
        assert response.status_code == 422

    def test_quest_board(self, client, alice):
        data = client.get("/api/users/alice/quests").json()
        assert len(data["daily"]) == 1
        assert len(data["weekly"]) == 2
        assert set(data["modules"]) == set(DEFAULT_SKILLS)
        assert [m["unlocked"] for m in data["modules"]["speed"]] == [True, False, False]
