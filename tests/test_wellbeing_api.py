"""
Tests for the Wellbeing Check-In API routes.

The app is built around a record store wired to in-memory tiers and a
fixed clock, then driven through FastAPI's TestClient.

Usage:
    pytest tests/test_wellbeing_api.py -v
"""
import pytest
from fastapi.testclient import TestClient

from checkin_core.record_store import RecordStore

from conftest import USER_ID, make_day
from server.wellbeing_api.main import create_app


@pytest.fixture
def client(store):
    with TestClient(create_app(store)) as test_client:
        yield test_client


@pytest.fixture
def seeded_client(remote, cache, clock):
    # Three tough days ending today, plus one good day earlier in the week
    records = make_day(5, 4, 2, 4, slots=4)
    for days_ago in range(3):
        records += make_day(days_ago, 1, 5, 1, slots=2)
    remote.seed_check_ins(USER_ID, records)

    store = RecordStore(remote=remote, cache=cache, user_id=USER_ID, clock=clock)
    with TestClient(create_app(store)) as test_client:
        yield test_client


class TestHealthAndStatus:
    """Test service health and store status."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "service": "wellbeing-api"}

    def test_store_loaded_at_startup(self, client):
        data = client.get("/api/wellbeing/status").json()

        assert data["status"] == "ready"
        assert data["synced"] is True
        assert data["sync_error"] is None

    def test_sync_reports_outage(self, client, remote):
        remote.available = False
        data = client.post("/api/wellbeing/sync").json()

        assert data["synced"] is False
        assert "RemoteUnavailableError" in data["sync_error"]


class TestCheckInRoutes:
    """Test check-in endpoints."""

    def test_create_and_list(self, client):
        response = client.post(
            "/api/checkins",
            json={"slot": "morning", "mood": 4, "stress": 2, "energy": 4, "note": "ok"},
        )

        assert response.status_code == 201
        created = response.json()
        assert created["slot"] == "morning"
        assert created["timestampISO"].startswith("2025-03-14")

        today = client.get("/api/checkins/today").json()
        assert [r["id"] for r in today] == [created["id"]]

        assert client.get("/api/checkins").json() == today

    def test_out_of_range_answer_rejected(self, client, remote):
        response = client.post(
            "/api/checkins", json={"slot": "morning", "mood": 7, "stress": 2, "energy": 4}
        )

        assert response.status_code == 422
        assert "create_check_in" not in remote.calls

    def test_remote_outage_is_503(self, client, remote):
        remote.available = False
        response = client.post(
            "/api/checkins", json={"slot": "night", "mood": 3, "stress": 3, "energy": 3}
        )

        assert response.status_code == 503
        assert client.get("/api/checkins/today").json() == []

    def test_date_range(self, seeded_client):
        response = seeded_client.get(
            "/api/checkins", params={"start": "2025-03-09", "end": "2025-03-12"}
        )

        assert response.status_code == 200
        assert len(response.json()) == 6

    def test_malformed_date(self, client):
        response = client.get("/api/checkins", params={"start": "March 1st"})
        assert response.status_code == 422


class TestWellbeingRoutes:
    """Test derived score endpoints."""

    def test_daily_score(self, seeded_client):
        data = seeded_client.get("/api/wellbeing/daily-score").json()

        assert data["date"] == "2025-03-14"
        assert data["slotsFilled"] == 2
        # Worst answers on half the slots
        assert data["score"] == 0

    def test_period_score(self, seeded_client):
        data = seeded_client.get("/api/wellbeing/score", params={"period": "Week"}).json()

        assert data["startDate"] == "2025-03-08"
        assert data["endDate"] == "2025-03-14"
        assert data["emptyDayPolicy"] == "include_as_zero"
        # Only 2025-03-09 scores above zero: 75 / 7
        assert data["score"] == 11

    def test_month_bounds(self, seeded_client):
        data = seeded_client.get("/api/wellbeing/score", params={"period": "Month"}).json()
        assert data["startDate"] == "2025-03-01"

    def test_unknown_period(self, client):
        response = client.get("/api/wellbeing/score", params={"period": "Decade"})
        assert response.status_code == 422

    def test_aggregates_default_week(self, seeded_client):
        data = seeded_client.get("/api/wellbeing/aggregates").json()

        assert len(data) == 7
        assert data[0]["date"] == "2025-03-08"
        assert data[0]["moodAvg"] is None
        assert data[-1]["slotsCount"] == 2
        assert data[-1]["stressAvg"] == 5

    def test_aggregates_for_dates(self, seeded_client):
        data = seeded_client.get(
            "/api/wellbeing/aggregates", params=[("dates", "2025-03-09"), ("dates", "2025-03-01")]
        ).json()

        assert [d["date"] for d in data] == ["2025-03-09", "2025-03-01"]
        assert data[0]["score"] == 75
        assert data[1]["slotsCount"] == 0

    def test_aggregates_bad_date(self, client):
        response = client.get("/api/wellbeing/aggregates", params={"dates": "2025-02-30"})
        assert response.status_code == 422

    def test_streak(self, seeded_client):
        assert seeded_client.get("/api/wellbeing/streak").json() == {"streak": 0}


class TestHeavyCardRoutes:
    """Test heavy card decision and cool-down through the API."""

    def test_card_shown_then_suppressed(self, seeded_client, clock):
        data = seeded_client.get("/api/wellbeing/heavy-card").json()
        assert data["show"] is True
        assert data["streak"] == 3
        assert data["required"] == 3
        assert len(data["window"]) == 7

        data = seeded_client.post("/api/wellbeing/heavy-card/dismissed").json()
        assert data["show"] is False
        assert data["inCooldown"] is True
        assert data["cooldownUntil"].startswith("2025-03-21")

        settings = seeded_client.get("/api/settings").json()
        assert settings["lastHeavyCardDismissedAt"].startswith("2025-03-14")

    def test_shown_also_starts_cooldown(self, seeded_client):
        data = seeded_client.post("/api/wellbeing/heavy-card/shown").json()
        assert data["show"] is False
        assert data["inCooldown"] is True

    def test_response_carries_decision_window(self, seeded_client):
        data = seeded_client.get("/api/wellbeing/heavy-card").json()

        assert [d["date"] for d in data["window"]][-3:] == [
            "2025-03-12",
            "2025-03-13",
            "2025-03-14",
        ]
        assert data["window"][-1]["slotsCount"] == 2
        assert data["window"][-1]["moodAvg"] == 1
        assert data["inCooldown"] is False

    def test_no_card_without_streak(self, client):
        data = client.get("/api/wellbeing/heavy-card").json()

        assert data["show"] is False
        assert data["streak"] == 0
        assert data["cooldownUntil"] is None


class TestJournalRoutes:
    """Test journal endpoints."""

    ENTRY = {"type": "gratitude", "title": "Coffee", "content": "Good coffee", "mood": 4}

    def test_create_filter_count(self, client):
        response = client.post("/api/journal", json=self.ENTRY)
        assert response.status_code == 201
        client.post("/api/journal", json=dict(self.ENTRY, type="negative"))

        assert len(client.get("/api/journal").json()) == 2
        gratitude = client.get("/api/journal", params={"type": "gratitude"}).json()
        assert [e["title"] for e in gratitude] == ["Coffee"]

        counts = client.get("/api/journal/counts").json()
        assert counts["all"] == 2
        assert counts["negative"] == 1

    def test_edit_within_window(self, client):
        entry = client.post("/api/journal", json=self.ENTRY).json()

        response = client.patch(f"/api/journal/{entry['id']}", json={"title": "Tea"})

        assert response.status_code == 200
        assert response.json()["title"] == "Tea"
        assert response.json()["content"] == "Good coffee"

    def test_edit_after_window(self, client, clock):
        entry = client.post("/api/journal", json=self.ENTRY).json()
        clock.advance(hours=24, minutes=1)

        response = client.patch(f"/api/journal/{entry['id']}", json={"title": "Tea"})
        assert response.status_code == 409

    def test_edit_missing(self, client):
        response = client.patch("/api/journal/missing", json={"title": "Tea"})
        assert response.status_code == 404

    def test_delete(self, client):
        entry = client.post("/api/journal", json=self.ENTRY).json()

        assert client.delete(f"/api/journal/{entry['id']}").status_code == 204
        assert client.get("/api/journal").json() == []
        assert client.delete(f"/api/journal/{entry['id']}").status_code == 404


class TestActivityRoutes:
    """Test activity session endpoints."""

    def test_record_and_list(self, client, remote):
        response = client.post(
            "/api/activities",
            json={"type": "breathing", "duration": 180, "post_mood": 4, "post_stress": 2},
        )

        assert response.status_code == 201
        session = response.json()
        assert session["postMood"] == 4
        assert session["timestamp"].startswith("2025-03-14")

        listed = client.get("/api/activities").json()
        assert [s["id"] for s in listed] == [session["id"]]
        assert client.get("/api/activities", params={"date": "2025-03-13"}).json() == []
        assert "create_check_in" not in remote.calls

    def test_unknown_activity(self, client):
        response = client.post("/api/activities", json={"type": "yoga", "duration": 60})
        assert response.status_code == 422

    def test_counted_in_status(self, client):
        client.post("/api/activities", json={"type": "meditation", "duration": 300})
        assert client.get("/api/wellbeing/status").json()["activity_sessions"] == 1


class TestSettingsRoutes:
    """Test settings endpoints."""

    def test_defaults(self, client):
        data = client.get("/api/settings").json()

        assert data["userId"] == USER_ID
        assert data["notifMorning"] == "07:30"
        assert data["scoring"]["weights"] == {
            "moodWeight": 0.5,
            "energyWeight": 0.3,
            "stressWeight": 0.2,
        }
        assert data["thresholds"]["streakDaysRequired"] == 3

    def test_partial_update(self, seeded_client):
        data = seeded_client.patch(
            "/api/settings", json={"scoring": {"empty_day_policy": "exclude_from_average"}}
        ).json()

        assert data["scoring"]["emptyDayPolicy"] == "exclude_from_average"
        assert data["scoring"]["useCompletionMultiplier"] is True

        score = seeded_client.get("/api/wellbeing/score", params={"period": "Week"}).json()
        # 75, 0, 0, 0 over the four days with data
        assert score["score"] == 19

    def test_threshold_update_changes_card(self, seeded_client):
        seeded_client.patch("/api/settings", json={"thresholds": {"streak_days_required": 4}})

        assert seeded_client.get("/api/wellbeing/heavy-card").json()["show"] is False

    def test_invalid_update(self, client):
        response = client.patch(
            "/api/settings", json={"thresholds": {"streak_days_required": 0}}
        )
        assert response.status_code == 422

    def test_clock_is_shared(self, client, clock):
        clock.advance(days=1)
        data = client.get("/api/wellbeing/daily-score").json()
        assert data["date"] == "2025-03-15"
