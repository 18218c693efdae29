"""
Indicator Resolver

Drives one indicator through its source tiers in strict priority order:

    PENDING -> TRYING_TIER[0] -> ... -> RESOLVED(tier, value)
                                    |
                                    +-> EXHAUSTED -> baseline

A lower tier runs only after every higher tier failed or timed out.
resolve() never raises: exhaustion ends at the indicator's baseline.
resolve_all() fans out over every indicator under one cycle deadline.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional, Sequence

from ccpi.core.config import Settings
from ccpi.schemas.indicators import AttemptRecord, Indicator, ResolutionTier
from ccpi.services.indicators.tiers import (
    BaselineTier,
    IndicatorDefinition,
    LanguageModelChainTier,
    StructuredApiTier,
)
from ccpi.services.providers.chain import (
    AllFailed,
    ChainSuccess,
    ProviderChainRunner,
    ProviderCooldowns,
)
from ccpi.services.providers.extractor import extract
from ccpi.services.providers.interface import Failure, FailureReason, Success
from ccpi.services.providers.registry import ProviderRegistry

logger = logging.getLogger(__name__)

LLM_CHAIN = "llm_chain"
BASELINE_SOURCE = "baseline"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class IndicatorResolver:
    def __init__(
        self,
        registry: ProviderRegistry,
        structured_timeout: float = 10.0,
        llm_tier_timeout: float = 20.0,
        llm_provider_timeout: float = 8.0,
        cycle_deadline: float = 45.0,
        cooldowns: Optional[ProviderCooldowns] = None,
    ):
        self.registry = registry
        self.structured_timeout = structured_timeout
        self.llm_tier_timeout = llm_tier_timeout
        self.llm_provider_timeout = llm_provider_timeout
        self.cycle_deadline = cycle_deadline
        self.cooldowns = cooldowns
        self._chain = ProviderChainRunner(
            per_provider_timeout=llm_provider_timeout, cooldowns=cooldowns
        )
        # Indicator name -> LLM provider that last answered it
        self._preferred: dict[str, str] = {}

    @classmethod
    def from_settings(cls, settings: Settings, registry: ProviderRegistry) -> "IndicatorResolver":
        cooldowns = None
        if settings.rate_limit_cooldown_seconds > 0:
            cooldowns = ProviderCooldowns(seconds=settings.rate_limit_cooldown_seconds)
        return cls(
            registry,
            structured_timeout=settings.structured_timeout,
            llm_tier_timeout=settings.llm_tier_timeout,
            llm_provider_timeout=settings.llm_provider_timeout,
            cycle_deadline=settings.cycle_deadline,
            cooldowns=cooldowns,
        )

    def preferred_provider(self, indicator: str) -> Optional[str]:
        return self._preferred.get(indicator)

    # =========================================================================
    # SINGLE INDICATOR
    # =========================================================================

    async def resolve(self, definition: IndicatorDefinition) -> Indicator:
        attempts: list[AttemptRecord] = []

        for index, tier in enumerate(definition.tiers):
            if isinstance(tier, BaselineTier):
                break

            if isinstance(tier, StructuredApiTier):
                value, source = await self._try_structured(definition, index, tier, attempts)
                label = ResolutionTier.LIVE
            else:
                value, source = await self._try_language_models(
                    definition, index, tier, attempts
                )
                label = ResolutionTier.BEST_EFFORT

            if value is not None:
                return Indicator(
                    name=definition.name,
                    label=definition.label,
                    pillar=definition.pillar,
                    value=value,
                    tier=label,
                    source=source,
                    tier_index=index,
                    resolved_at=_now(),
                    attempts=tuple(attempts),
                )

        logger.info(f"{definition.name}: all tiers exhausted, using baseline {definition.baseline}")
        return self.baseline(definition, attempts)

    def baseline(
        self,
        definition: IndicatorDefinition,
        attempts: Sequence[AttemptRecord] = (),
    ) -> Indicator:
        return Indicator(
            name=definition.name,
            label=definition.label,
            pillar=definition.pillar,
            value=definition.baseline,
            tier=ResolutionTier.BASELINE,
            source=BASELINE_SOURCE,
            tier_index=None,
            resolved_at=_now(),
            attempts=tuple(attempts),
        )

    async def _try_structured(
        self,
        definition: IndicatorDefinition,
        index: int,
        tier: StructuredApiTier,
        attempts: list[AttemptRecord],
    ) -> tuple[Optional[float], Optional[str]]:
        provider = self.registry.structured.get(tier.provider)
        if provider is None:
            logger.error(f"{definition.name}: unknown provider {tier.provider}")
            attempts.append(AttemptRecord(tier_index=index, provider=tier.provider, outcome="unknown_provider"))
            return None, None

        if self.cooldowns is not None and self.cooldowns.is_blocked(provider.name):
            attempts.append(AttemptRecord(tier_index=index, provider=provider.name, outcome="cooling_down"))
            return None, None

        outcome = await extract(
            provider,
            definition.query_for(tier),
            timeout=tier.timeout or self.structured_timeout,
        )
        if isinstance(outcome, Success):
            attempts.append(AttemptRecord(tier_index=index, provider=provider.name, outcome="ok"))
            return outcome.value, provider.name

        attempts.append(
            AttemptRecord(tier_index=index, provider=provider.name, outcome=outcome.reason.value)
        )
        if outcome.reason == FailureReason.RATE_LIMITED and self.cooldowns is not None:
            self.cooldowns.block(provider.name)
        return None, None

    async def _try_language_models(
        self,
        definition: IndicatorDefinition,
        index: int,
        tier: LanguageModelChainTier,
        attempts: list[AttemptRecord],
    ) -> tuple[Optional[float], Optional[str]]:
        chain = self._chain
        if tier.per_provider_timeout is not None:
            chain = ProviderChainRunner(
                per_provider_timeout=tier.per_provider_timeout, cooldowns=self.cooldowns
            )

        def record(failure: Failure) -> None:
            attempts.append(
                AttemptRecord(tier_index=index, provider=failure.provider, outcome=failure.reason.value)
            )

        try:
            outcome = await asyncio.wait_for(
                chain.resolve(
                    self.registry.language_models,
                    definition.query_for(tier),
                    preferred=self._preferred.get(definition.name),
                    on_failure=record,
                ),
                timeout=tier.timeout or self.llm_tier_timeout,
            )
        except asyncio.TimeoutError:
            attempts.append(
                AttemptRecord(tier_index=index, provider=LLM_CHAIN, outcome=FailureReason.TIMEOUT.value)
            )
            return None, None

        if isinstance(outcome, ChainSuccess):
            attempts.append(AttemptRecord(tier_index=index, provider=outcome.provider_used, outcome="ok"))
            self._preferred[definition.name] = outcome.provider_used
            return outcome.value, outcome.provider_used

        if isinstance(outcome, AllFailed) and not outcome.attempts:
            attempts.append(
                AttemptRecord(
                    tier_index=index,
                    provider=LLM_CHAIN,
                    outcome=FailureReason.MISSING_CREDENTIAL.value,
                )
            )
        return None, None

    # =========================================================================
    # RESOLUTION CYCLE
    # =========================================================================

    async def resolve_all(
        self,
        definitions: Sequence[IndicatorDefinition],
        deadline: Optional[float] = None,
    ) -> list[Indicator]:
        """
        Resolve every indicator concurrently.

        Indicators still pending at the deadline are cancelled and reported
        at their baseline. Cancelling the caller cancels every resolution.
        """
        if not definitions:
            return []
        deadline = self.cycle_deadline if deadline is None else deadline

        tasks = [asyncio.ensure_future(self.resolve(d)) for d in definitions]
        try:
            _, pending = await asyncio.wait(tasks, timeout=deadline)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()

        if pending:
            logger.warning(
                f"Cycle deadline ({deadline}s) reached with {len(pending)} indicator(s) pending"
            )
            await asyncio.gather(*pending, return_exceptions=True)

        results = []
        for definition, task in zip(definitions, tasks):
            if task in pending or task.cancelled():
                results.append(
                    self.baseline(
                        definition,
                        [AttemptRecord(tier_index=None, provider="cycle", outcome="deadline")],
                    )
                )
            elif task.exception() is not None:
                logger.error(f"{definition.name}: resolution failed: {task.exception()}")
                results.append(
                    self.baseline(
                        definition,
                        [AttemptRecord(tier_index=None, provider="cycle", outcome="error")],
                    )
                )
            else:
                results.append(task.result())

        counts = {tier.value: 0 for tier in ResolutionTier}
        for indicator in results:
            counts[indicator.tier.value] += 1
        logger.info(
            f"Resolved {len(results)} indicators: "
            + ", ".join(f"{count} {tier}" for tier, count in counts.items())
        )
        return results
