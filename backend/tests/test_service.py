"""CCPI service: cycle, cache ownership, source status."""

import pytest

from ccpi.schemas.indicators import Pillar, ResolutionTier
from ccpi.services.engine import CCPIService, CycleRequest
from ccpi.services.indicators.tiers import StructuredApiTier
from ccpi.services.llm.client import LLMProvider
from ccpi.services.providers.registry import ProviderRegistry
from fakes import FakeLLM, FakeProvider, make_definition


def definitions():
    return [
        make_definition(
            "vix",
            pillar=Pillar.MOMENTUM,
            tiers=(StructuredApiTier(provider="fred", series="VIXCLS"),),
            baseline=18.0,
        ),
        make_definition("put_call_ratio", pillar=Pillar.RISK_APPETITE, baseline=0.95),
        make_definition("shiller_cape", pillar=Pillar.VALUATION, baseline=30.0),
        make_definition("ism_pmi", pillar=Pillar.MACRO, baseline=48.0),
    ]


@pytest.fixture
def service(test_settings):
    registry = ProviderRegistry(
        structured={"fred": FakeProvider("fred", 21.0)},
        language_models=[FakeLLM(LLMProvider.OPENAI, reply="1.05")],
    )
    return CCPIService(settings=test_settings, registry=registry, definitions=definitions())


@pytest.mark.asyncio
async def test_cycle_resolves_every_indicator(service):
    result = await service.execute(CycleRequest())

    tiers = {i.name: i.tier for i in result.indicators}
    assert tiers["vix"] == ResolutionTier.LIVE
    assert tiers["put_call_ratio"] == ResolutionTier.BEST_EFFORT
    assert result.tier_counts == {"live": 1, "best-effort": 3, "baseline": 0}
    assert 0 <= result.composite_score <= 100


@pytest.mark.asyncio
async def test_second_read_is_served_from_cache(service):
    first = await service.execute(CycleRequest())
    second = await service.execute(CycleRequest())

    assert second is first
    assert len(service.registry.structured["fred"].calls) == 1


@pytest.mark.asyncio
async def test_force_refresh_runs_a_new_cycle(service):
    first = await service.execute(CycleRequest())
    second = await service.execute(CycleRequest(force_refresh=True))

    assert second is not first
    assert service.cache.get() is second
    assert len(service.registry.structured["fred"].calls) == 2


@pytest.mark.asyncio
async def test_no_providers_means_all_baseline(test_settings):
    service = CCPIService(
        settings=test_settings, registry=ProviderRegistry(), definitions=definitions()
    )

    result = await service.execute(CycleRequest())

    assert result.tier_counts["baseline"] == 4
    assert {i.name: i.value for i in result.indicators}["ism_pmi"] == 48.0
    assert all(p.low_certainty for p in result.pillars.values())


@pytest.mark.asyncio
async def test_sources_status_reports_resolution(service):
    before = service.sources_status()
    assert before["cached"] is False
    assert before["indicators"][0]["resolved_tier"] is None

    await service.execute(CycleRequest())
    after = service.sources_status()

    vix = after["indicators"][0]
    assert vix["resolved_tier"] == "live"
    assert vix["resolved_source"] == "fred"
    assert [t["tier"] for t in vix["tiers"]] == ["live", "baseline"]
    assert {p["name"] for p in after["providers"]} == {"fred", "openai"}
