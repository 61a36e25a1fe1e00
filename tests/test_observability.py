import httpx
import pytest
from httpx import AsyncClient

from rewards_api.core.settings import settings
from rewards_api.observability.lucky_draw import LuckyDrawObservabilityStore


def test_store_tracks_spins_and_failures() -> None:
    store = LuckyDrawObservabilityStore()
    store.record_spin("Thank You")
    store.record_spin("Thank You")
    store.record_failure("INSUFFICIENT_CHANCES")
    store.record_stock_contention("Membership Monthly Card")
    store.record_fulfillment("none")
    store.record_unrouted_prize("Mystery Box")

    snapshot = store.snapshot()

    assert snapshot.spins == {"succeeded": 2, "failed": 1}
    assert snapshot.prizes == {"Thank You": 2}
    assert snapshot.failures == {"INSUFFICIENT_CHANCES": 1}
    assert snapshot.contention == {"total": 1, "prize:Membership Monthly Card": 1}
    assert snapshot.anomalies == {"unrouted_prizes": 1, "prize:Mystery Box": 1}

    store.reset()
    assert store.snapshot().as_dict()["spins"] == {}


@pytest.mark.asyncio
async def test_observability_endpoints_expose_counters(app_with_db, reset_lucky_draw_store) -> None:
    app, _ = app_with_db
    reset_lucky_draw_store.record_spin("Thank You")
    reset_lucky_draw_store.record_failure("STOCK_SELECTION_EXHAUSTED")

    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        snapshot = await client.get("/api/v1/observability/lucky-draw")
        metrics = await client.get("/api/v1/observability/prometheus")

    assert snapshot.status_code == 200
    assert snapshot.json()["spins"] == {"succeeded": 1, "failed": 1}

    body = metrics.text
    assert "rewards_lucky_draw_spins_succeeded_total 1" in body
    assert "rewards_lucky_draw_spins_failed_total 1" in body
    assert 'rewards_lucky_draw_prizes_won_total{prize="Thank You"} 1' in body
    assert 'rewards_lucky_draw_failures_total{code="STOCK_SELECTION_EXHAUSTED"} 1' in body


@pytest.mark.asyncio
async def test_observability_requires_internal_key_when_configured(app_with_db, monkeypatch) -> None:
    app, _ = app_with_db
    monkeypatch.setattr(settings, "internal_api_key", "ops-key")

    async with AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        denied = await client.get("/api/v1/observability/lucky-draw")
        allowed = await client.get("/api/v1/observability/lucky-draw", headers={"X-API-Key": "ops-key"})

    assert denied.status_code == 401
    assert allowed.status_code == 200
