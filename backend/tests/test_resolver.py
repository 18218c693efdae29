"""Indicator Resolver: tiers in priority order, baseline at the end."""

import asyncio
import warnings
from pathlib import Path

import pytest

from ccpi.schemas.indicators import Pillar, ResolutionTier
from ccpi.services.base import ExternalAPIError
from ccpi.services.indicators import resolver as resolver_module
from ccpi.services.indicators.resolver import IndicatorResolver
from ccpi.services.indicators.tiers import LanguageModelChainTier, StructuredApiTier
from ccpi.services.llm.client import LLMProvider
from ccpi.services.providers.registry import ProviderRegistry
from fakes import FakeLLM, FakeProvider, make_definition

VIX = make_definition(
    "vix",
    pillar=Pillar.MOMENTUM,
    tiers=(
        StructuredApiTier(provider="fred", series="VIXCLS"),
        StructuredApiTier(provider="yahoo_finance", series="^VIX"),
        LanguageModelChainTier(),
    ),
    baseline=18.0,
)


def registry(fred=None, yahoo=None, llms=()):
    structured = {}
    if fred is not None:
        structured["fred"] = fred
    if yahoo is not None:
        structured["yahoo_finance"] = yahoo
    return ProviderRegistry(structured=structured, language_models=list(llms))


@pytest.mark.asyncio
async def test_llm_answer_after_structured_failures_is_best_effort():
    fred = FakeProvider("fred", ExternalAPIError("fred", "HTTP 500"))
    yahoo = FakeProvider("yahoo_finance", ExternalAPIError("yahoo_finance", "HTTP 502"))
    llm = FakeLLM(LLMProvider.OPENAI, reply="34.2")
    resolver = IndicatorResolver(registry(fred, yahoo, [llm]))

    indicator = await resolver.resolve(VIX)

    assert indicator.value == 34.2
    assert indicator.tier == ResolutionTier.BEST_EFFORT
    assert indicator.source == "openai"
    assert indicator.tier_index == 2
    assert [(a.tier_index, a.provider, a.outcome) for a in indicator.attempts] == [
        (0, "fred", "upstream_error"),
        (1, "yahoo_finance", "upstream_error"),
        (2, "openai", "ok"),
    ]


@pytest.mark.asyncio
async def test_first_structured_success_is_live_and_stops():
    fred = FakeProvider("fred", 21.7)
    yahoo = FakeProvider("yahoo_finance", 22.0)
    llm = FakeLLM(reply="23")
    resolver = IndicatorResolver(registry(fred, yahoo, [llm]))

    indicator = await resolver.resolve(VIX)

    assert indicator.value == 21.7
    assert indicator.tier == ResolutionTier.LIVE
    assert indicator.source == "fred"
    assert indicator.tier_index == 0
    assert yahoo.calls == []
    assert llm.prompts == []


@pytest.mark.asyncio
async def test_no_credentials_resolves_to_baseline():
    fred = FakeProvider("fred", 21.7, available=False)
    yahoo = FakeProvider("yahoo_finance", 22.0, available=False)
    llm = FakeLLM(reply="23", api_key=None)
    resolver = IndicatorResolver(registry(fred, yahoo, [llm]))

    indicator = await resolver.resolve(VIX)

    assert indicator.value == 18.0
    assert indicator.tier == ResolutionTier.BASELINE
    assert indicator.source == "baseline"
    assert indicator.tier_index is None
    assert [a.outcome for a in indicator.attempts] == ["missing_credential"] * 3
    assert fred.calls == [] and yahoo.calls == [] and llm.prompts == []


@pytest.mark.asyncio
async def test_unknown_provider_falls_through():
    llm = FakeLLM(reply="25.5")
    resolver = IndicatorResolver(ProviderRegistry(language_models=[llm]))

    indicator = await resolver.resolve(VIX)

    assert indicator.tier == ResolutionTier.BEST_EFFORT
    assert indicator.attempts[0].outcome == "unknown_provider"


@pytest.mark.asyncio
async def test_llm_tier_timeout_falls_back_to_baseline():
    definition = make_definition(
        "put_call_ratio",
        pillar=Pillar.RISK_APPETITE,
        tiers=(LanguageModelChainTier(timeout=0.05),),
        baseline=0.95,
    )
    llm = FakeLLM(reply="1.1", delay=1.0)
    resolver = IndicatorResolver(ProviderRegistry(language_models=[llm]))

    indicator = await resolver.resolve(definition)

    assert indicator.tier == ResolutionTier.BASELINE
    assert indicator.value == 0.95
    assert (indicator.attempts[-1].provider, indicator.attempts[-1].outcome) == (
        "llm_chain",
        "timeout",
    )


@pytest.mark.asyncio
async def test_llm_tier_timeout_keeps_providers_already_tried():
    definition = make_definition(
        "aaii_bullish",
        pillar=Pillar.RISK_APPETITE,
        tiers=(LanguageModelChainTier(timeout=0.1),),
        baseline=35.0,
    )
    garbled = FakeLLM(LLMProvider.OPENAI, reply="N/A")
    slow = FakeLLM(LLMProvider.ANTHROPIC, reply="41.3", delay=1.0)
    resolver = IndicatorResolver(ProviderRegistry(language_models=[garbled, slow]))

    indicator = await resolver.resolve(definition)

    assert indicator.tier == ResolutionTier.BASELINE
    assert [(a.provider, a.outcome) for a in indicator.attempts] == [
        ("openai", "unparseable_value"),
        ("llm_chain", "timeout"),
    ]


@pytest.mark.asyncio
async def test_provider_that_answered_is_preferred_next_time():
    definition = make_definition("aaii_bullish", pillar=Pillar.RISK_APPETITE, baseline=35.0)
    first = FakeLLM(LLMProvider.OPENAI, reply="N/A")
    second = FakeLLM(LLMProvider.ANTHROPIC, reply="41.3")
    resolver = IndicatorResolver(ProviderRegistry(language_models=[first, second]))

    await resolver.resolve(definition)
    indicator = await resolver.resolve(definition)

    assert indicator.source == "anthropic"
    assert resolver.preferred_provider("aaii_bullish") == "anthropic"
    assert len(first.prompts) == 1
    assert len(second.prompts) == 2


@pytest.mark.asyncio
async def test_resolve_all_forces_pending_indicators_to_baseline_at_deadline():
    slow = make_definition(
        "slow",
        tiers=(StructuredApiTier(provider="fred", series="SLOW"),),
        baseline=12.0,
    )
    fast = make_definition(
        "fast",
        tiers=(StructuredApiTier(provider="yahoo_finance", series="FAST"),),
        baseline=1.0,
    )
    resolver = IndicatorResolver(
        registry(
            fred=FakeProvider("fred", 99.0, delay=5.0),
            yahoo=FakeProvider("yahoo_finance", 7.0),
        )
    )

    results = await resolver.resolve_all([slow, fast], deadline=0.1)

    assert [i.name for i in results] == ["slow", "fast"]
    assert results[0].tier == ResolutionTier.BASELINE
    assert results[0].value == 12.0
    assert results[0].attempts[-1].outcome == "deadline"
    assert results[1].tier == ResolutionTier.LIVE
    assert results[1].value == 7.0


@pytest.mark.asyncio
async def test_resolve_all_every_indicator_ends_tagged():
    definitions = [
        make_definition(f"ind_{i}", tiers=(StructuredApiTier(provider="fred", series=str(i)),))
        for i in range(6)
    ]
    resolver = IndicatorResolver(registry(fred=FakeProvider("fred", "garbage")))

    results = await resolver.resolve_all(definitions)

    assert len(results) == 6
    assert all(i.tier in set(ResolutionTier) for i in results)
    assert all(i.tier == ResolutionTier.BASELINE for i in results)


@pytest.mark.asyncio
async def test_resolve_all_with_no_definitions():
    resolver = IndicatorResolver(ProviderRegistry())

    assert await resolver.resolve_all([]) == []


@pytest.mark.asyncio
async def test_cancelling_resolve_all_cancels_in_flight_resolutions():
    definitions = [
        make_definition(
            f"slow_{i}",
            tiers=(StructuredApiTier(provider="fred", series=str(i)),),
        )
        for i in range(3)
    ]
    fred = FakeProvider("fred", 99.0, delay=10.0)
    resolver = IndicatorResolver(registry(fred=fred))
    before = asyncio.all_tasks()

    cycle = asyncio.ensure_future(resolver.resolve_all(definitions, deadline=30.0))
    await asyncio.sleep(0.05)
    children = asyncio.all_tasks() - before - {cycle}
    assert len(fred.calls) == 3
    assert children

    cycle.cancel()
    with pytest.raises(asyncio.CancelledError):
        await cycle
    await asyncio.gather(*children, return_exceptions=True)

    assert all(task.cancelled() for task in children)
    assert asyncio.all_tasks() - before == set()


def test_resolver_module_compiles_without_warnings():
    path = Path(resolver_module.__file__)

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        compile(path.read_text(), str(path), "exec")
