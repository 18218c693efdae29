"""HTTP surface, with the CCPI service swapped for one backed by fakes."""

import pytest
from fastapi.testclient import TestClient

from ccpi.main import app
from ccpi.schemas.indicators import Pillar
from ccpi.services.engine import CCPIService, get_ccpi_service
from ccpi.services.providers.registry import ProviderRegistry
from fakes import make_definition


@pytest.fixture
def service(test_settings):
    definitions = [
        make_definition(name, pillar=pillar, baseline=40.0)
        for name, pillar in zip(("m", "r", "v", "x"), Pillar)
    ]
    return CCPIService(
        settings=test_settings, registry=ProviderRegistry(), definitions=definitions
    )


@pytest.fixture
def client(service):
    app.dependency_overrides[get_ccpi_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_cache_miss_is_404(client):
    response = client.get("/api/v1/ccpi/cache")

    assert response.status_code == 404
    assert response.json() == {"cached": False}


def test_read_endpoint_returns_composite_and_fills_cache(client):
    response = client.get("/api/v1/ccpi")

    assert response.status_code == 200
    body = response.json()
    assert body["composite_score"] == pytest.approx(40.0)
    assert body["regime"]["name"] == "Caution"
    assert body["tier_counts"] == {"live": 0, "best-effort": 0, "baseline": 4}
    assert {i["tier"] for i in body["indicators"]} == {"baseline"}
    assert set(body["pillars"]) == {"momentum", "risk_appetite", "valuation", "macro"}

    cached = client.get("/api/v1/ccpi/cache")
    assert cached.status_code == 200
    assert cached.json()["result"]["timestamp"] == body["timestamp"]


def test_reads_within_ttl_are_identical(client):
    first = client.get("/api/v1/ccpi").json()
    second = client.get("/api/v1/ccpi").json()
    refreshed = client.get("/api/v1/ccpi", params={"refresh": "true"}).json()

    assert second == first
    assert refreshed["composite_score"] == first["composite_score"]


def test_seeded_result_is_served(client, service):
    seed = client.get("/api/v1/ccpi").json()
    seed["composite_score"] = 71.5
    seed["amplified_score"] = 71.5

    response = client.post("/api/v1/ccpi/cache", json=seed)

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert service.cache.get().composite_score == 71.5
    assert client.get("/api/v1/ccpi").json()["composite_score"] == 71.5


def test_seed_rejects_invalid_result(client):
    response = client.post("/api/v1/ccpi/cache", json={"composite_score": 140})

    assert response.status_code == 422


def test_sources(client):
    response = client.get("/api/v1/ccpi/sources")

    assert response.status_code == 200
    body = response.json()
    assert [i["name"] for i in body["indicators"]] == ["m", "r", "v", "x"]
    assert body["providers"] == []


def test_executive_summary_template_fallback(client):
    response = client.post("/api/v1/ccpi/executive-summary", json={})

    assert response.status_code == 200
    body = response.json()
    assert body["provider"] == "template"
    assert "Caution" in body["summary"]
