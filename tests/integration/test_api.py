"""
Tests for the dispatch API: trigger auth, summary shape, schedule reads
and health probes.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from capsule.api.dispatch.main import create_app
from capsule.core.config import CapsuleSettings
from capsule.core.database import DatabaseAdapter, DatabaseBackend, DatabaseConfig

from ..conftest import AMERICAS_DAY_FIVE, FakeNotifier

SECRET = "s3cret-value"


def _settings(monkeypatch, secret=SECRET, environment="development") -> CapsuleSettings:
    monkeypatch.setenv("ENVIRONMENT", environment)
    monkeypatch.delenv("RESEND_API_KEY", raising=False)
    if secret:
        monkeypatch.setenv("CRON_SECRET", secret)
    else:
        monkeypatch.delenv("CRON_SECRET", raising=False)
    return CapsuleSettings()


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def api_notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def app(monkeypatch, db, scheduler, api_notifier):
    return create_app(
        settings=_settings(monkeypatch),
        db=db,
        notifier=api_notifier,
        scheduler=scheduler,
        clock=lambda: AMERICAS_DAY_FIVE,
    )


class TestCronAuth:

    async def test_missing_secret_rejected_before_store_access(self, monkeypatch, scheduler):
        untouched = DatabaseAdapter(DatabaseConfig(backend=DatabaseBackend.SQLITE, sqlite_path=":memory:"))
        app = create_app(
            settings=_settings(monkeypatch),
            db=untouched,
            notifier=FakeNotifier(),
            scheduler=scheduler,
            clock=lambda: AMERICAS_DAY_FIVE,
        )

        async with _client(app) as client:
            response = await client.get("/api/cron/notify")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"
        assert untouched.is_connected is False

    async def test_wrong_secret_rejected(self, app):
        async with _client(app) as client:
            response = await client.post(
                "/api/cron/notify", headers={"Authorization": "Bearer nope"}
            )
        assert response.status_code == 401

    async def test_production_without_secret_refused(self, monkeypatch, db, scheduler):
        app = create_app(
            settings=_settings(monkeypatch, secret=None, environment="production"),
            db=db,
            notifier=FakeNotifier(),
            scheduler=scheduler,
        )
        async with _client(app) as client:
            response = await client.get("/api/cron/notify")

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    async def test_development_without_secret_allowed(self, monkeypatch, db, scheduler):
        app = create_app(
            settings=_settings(monkeypatch, secret=None),
            db=db,
            notifier=FakeNotifier(),
            scheduler=scheduler,
            clock=lambda: AMERICAS_DAY_FIVE,
        )
        async with _client(app) as client:
            response = await client.get("/api/cron/notify")

        assert response.status_code == 200

    async def test_unexpected_error_is_hidden(self, monkeypatch, db, scheduler):
        def broken_clock():
            raise RuntimeError("clock source at /etc/capsule/clock unavailable")

        app = create_app(
            settings=_settings(monkeypatch),
            db=db,
            notifier=FakeNotifier(),
            scheduler=scheduler,
            clock=broken_clock,
        )
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get(
                "/api/cron/notify",
                headers={"Authorization": f"Bearer {SECRET}", "X-Trace-ID": "trace-500"},
            )

        assert response.status_code == 500
        error = response.json()["error"]
        assert error["code"] == "INTERNAL_ERROR"
        assert error["trace_id"] == "trace-500"
        assert "/etc/capsule" not in response.text


class TestCronNotify:

    async def test_runs_cycle_and_reports_summary(self, app, store, subscriber, api_notifier):
        await store.subscribe(subscriber.id, "lev")

        async with _client(app) as client:
            response = await client.get(
                "/api/cron/notify",
                headers={"Authorization": f"Bearer {SECRET}", "X-Trace-ID": "trace-123"},
            )

        assert response.status_code == 200
        body = response.json()
        assert body["data"]["unlocked_targets"] == 6
        assert body["data"]["new_targets"] == 1
        assert body["data"]["enqueued"] == 1
        assert body["data"]["sent"] == 1
        assert body["data"]["failed"] == 0
        assert body["meta"]["trace_id"] == "trace-123"
        assert body["meta"]["timestamp"].endswith("Z")
        assert response.headers["X-Trace-ID"] == "trace-123"
        assert len(api_notifier.sent) == 1

    async def test_second_call_sends_nothing(self, app, store, subscriber, api_notifier):
        await store.subscribe(subscriber.id, "lev")
        headers = {"Authorization": f"Bearer {SECRET}"}

        async with _client(app) as client:
            await client.post("/api/cron/notify", headers=headers)
            response = await client.post("/api/cron/notify", headers=headers)

        assert response.json()["data"]["sent"] == 0
        assert response.json()["data"]["message"] == "No pending notifications"
        assert len(api_notifier.sent) == 1

    async def test_security_headers(self, app):
        async with _client(app) as client:
            response = await client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"


class TestSchedule:

    async def test_list_teams_at_instant(self, app):
        async with _client(app) as client:
            response = await client.get(
                "/api/schedule/teams", params={"at": "2026-01-08T12:00:00Z"}
            )

        assert response.status_code == 200
        teams = {team["id"]: team for team in response.json()["data"]}
        assert len(teams) == 48
        assert teams["lev"]["is_unlocked"] is True
        assert teams["lev"]["unlocked_today"] is True
        assert teams["kru"]["is_unlocked"] is False
        assert teams["kru"]["days_until_unlock"] == 1

    async def test_filter_by_region(self, app):
        async with _client(app) as client:
            response = await client.get("/api/schedule/teams", params={"region": "emea"})

        data = response.json()["data"]
        assert len(data) == 12
        assert {team["region"] for team in data} == {"EMEA"}

    async def test_unknown_region(self, app):
        async with _client(app) as client:
            response = await client.get("/api/schedule/teams", params={"region": "Atlantis"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_get_team(self, app):
        async with _client(app) as client:
            response = await client.get("/api/schedule/teams/sen")

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Sentinels"

    async def test_unknown_team(self, app):
        async with _client(app) as client:
            response = await client.get("/api/schedule/teams/nope")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "TEAM_NOT_FOUND"

    async def test_regions(self, app):
        async with _client(app) as client:
            response = await client.get("/api/schedule/regions")

        regions = {r["region"]: r for r in response.json()["data"]}
        assert set(regions) == {"Americas", "EMEA", "Pacific", "China"}
        assert regions["Americas"]["unlocked_count"] == 5
        assert regions["Americas"]["total_teams"] == 12
        assert regions["Americas"]["is_locked"] is False

    async def test_invalid_instant(self, app):
        async with _client(app) as client:
            response = await client.get("/api/schedule/regions", params={"at": "yesterday"})
        assert response.status_code == 400


class TestHealth:

    async def test_health(self, app):
        async with _client(app) as client:
            response = await client.get("/health")
        assert response.json()["status"] == "healthy"

    async def test_live(self, app):
        async with _client(app) as client:
            response = await client.get("/health/live")
        assert response.json() == {"status": "alive"}

    async def test_ready_reports_outbox(self, app):
        async with _client(app) as client:
            response = await client.get("/health/ready")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "ready"
        assert body["checks"]["database"] == "healthy"
        assert body["checks"]["outbox"] == {"pending": 0, "sent": 0, "failed": 0}
