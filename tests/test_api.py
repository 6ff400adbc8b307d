"""
Tests for the REST API.
"""

import pytest
from fastapi.testclient import TestClient

from models.behavior import BehaviorEvent, BehaviorType
from runtime.context import PipelineContext
from web.app import create_app


class StubLoader:
    def __init__(self, loaded=True, progress=100, error=None):
        self._status = {"loaded": loaded, "progress": progress, "error": error}

    def status(self):
        return dict(self._status)


class StubScheduler:
    is_active = True


@pytest.fixture
def ctx():
    return PipelineContext(room_name="Room 12")


@pytest.fixture
def client(ctx, clock):
    app = create_app(ctx, loader=StubLoader(), scheduler=StubScheduler(), clock=clock)
    return TestClient(app)


def add_alert(ctx, person_id="person-0", type_=BehaviorType.PHONE_DETECTED, ts=10_000.0):
    e = BehaviorEvent(person_id=person_id, type=type_, confidence=0.8, timestamp_ms=ts,
                      description=type_.description)
    ctx.alerts.merge([e], now_ms=ts)
    return e


class TestStatus:
    def test_status_before_first_frame(self, client):
        resp = client.get("/api/status")

        assert resp.status_code == 200
        data = resp.json()
        assert data["running"] is True
        assert data["model"] == {"loaded": True, "progress": 100, "error": None}
        assert data["stats"]["total_detected"] == 0
        assert data["active_alerts"] == 0
        assert data["session"] is None

    def test_not_running_while_model_loading(self, ctx, clock):
        app = create_app(ctx, loader=StubLoader(loaded=False, progress=30), scheduler=StubScheduler(), clock=clock)
        data = TestClient(app).get("/api/status").json()

        assert data["running"] is False
        assert data["model"]["progress"] == 30

    def test_status_without_loader_or_scheduler(self, ctx):
        data = TestClient(create_app(ctx)).get("/api/status").json()

        assert data["running"] is False
        assert data["model"]["loaded"] is False

    def test_status_reports_session(self, client, ctx, person, clock):
        ctx.publish_frame([person("person-0", 50, 50)], suspicious_count=0, accepted_alerts=0, now_ms=clock())
        clock.advance(2000)

        session = client.get("/api/status").json()["session"]

        assert session["room_name"] == "Room 12"
        assert session["peak_person_count"] == 1
        assert session["duration_s"] == pytest.approx(2.0)


class TestPersonsAndStats:
    def test_persons(self, client, ctx, person):
        ctx.publish_frame(
            [person("person-0", 50, 50, student_name="Ana"), person("person-1", 300, 50)],
            suspicious_count=1,
            accepted_alerts=0,
            now_ms=10_000.0,
        )

        persons = client.get("/api/persons").json()

        assert [p["id"] for p in persons] == ["person-0", "person-1"]
        assert persons[0]["student_name"] == "Ana"
        assert persons[0]["box"]["width"] == 100.0

    def test_stats(self, client, ctx, person):
        ctx.publish_frame([person("person-0", 0, 0)], suspicious_count=2, accepted_alerts=1, now_ms=10_000.0)
        ctx.update_fps(4)

        stats = client.get("/api/stats").json()

        assert stats == {"total_detected": 1, "suspicious_count": 2, "last_updated_ms": 10_000.0, "fps": 4}


class TestAlerts:
    def test_list_newest_first(self, client, ctx):
        add_alert(ctx, person_id="person-0", ts=10_000.0)
        add_alert(ctx, person_id="person-1", type_=BehaviorType.LOOKING_DOWN, ts=11_000.0)

        alerts = client.get("/api/alerts").json()["alerts"]

        assert [a["person_id"] for a in alerts] == ["person-1", "person-0"]
        assert alerts[0]["label"] == "Looking Down"
        assert alerts[1]["type"] == "phone_detected"

    def test_dismiss(self, client, ctx):
        e = add_alert(ctx)

        resp = client.delete(f"/api/alerts/{e.id}")

        assert resp.status_code == 200
        assert resp.json() == {"dismissed": e.id}
        assert len(ctx.alerts) == 0

    def test_dismiss_unknown_is_404(self, client):
        resp = client.delete("/api/alerts/does-not-exist")
        assert resp.status_code == 404

    def test_clear_all(self, client, ctx):
        add_alert(ctx, person_id="person-0")
        add_alert(ctx, person_id="person-1")

        resp = client.delete("/api/alerts")

        assert resp.json() == {"cleared": 2}
        assert len(ctx.alerts) == 0


class TestSession:
    def test_reset_starts_new_session(self, client, ctx, clock):
        first = ctx.start_session(clock())
        clock.advance(3000)

        resp = client.post("/api/session/reset")

        assert resp.status_code == 200
        data = resp.json()
        assert data["id"] != first.id
        assert data["start_ms"] == clock()
        assert data["total_alerts"] == 0
        assert first.end_ms == clock()
